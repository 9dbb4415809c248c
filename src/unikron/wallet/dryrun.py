"""Dry-run wallet for testing and demos (no real signing)."""

import logging
import secrets
from typing import Optional

from unikron.assets import Token
from unikron.errors import WalletRejectionError
from unikron.wallet.base import (
    TransactionReceipt,
    TxPayload,
    WalletCapability,
    WalletEvent,
    WalletEventType,
)

logger = logging.getLogger(__name__)

# Effectively unlimited balance for tokens without an explicit one
DEFAULT_SIMULATED_BALANCE = 10**30


class DryRunWallet(WalletCapability):
    """Simulated wallet.

    Balances are kept per token symbol in smallest units. Signatures can
    be made to fail (reject_signatures) and mined transactions can be
    made to revert (revert_transactions) to exercise failure paths.
    """

    def __init__(
        self,
        address: str = "0x000000000000000000000000000000000000dEaD",
        chain_id: int = 1,
        balances: Optional[dict[str, int]] = None,
        reject_signatures: bool = False,
        revert_transactions: bool = False,
    ):
        super().__init__()
        self.address = address
        self.chain_id = chain_id
        self.balances = {symbol.upper(): value for symbol, value in (balances or {}).items()}
        self.reject_signatures = reject_signatures
        self.revert_transactions = revert_transactions
        self.approvals: list[tuple[str, str, int]] = []
        self.sent: list[TxPayload] = []
        self._block_number = 1
        self._pending: dict[str, bool] = {}

    @property
    def name(self) -> str:
        return "dryrun"

    async def request_accounts(self) -> list[str]:
        return [self.address]

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def get_balance(self, token: Token, address: str) -> int:
        return self.balances.get(token.symbol.upper(), DEFAULT_SIMULATED_BALANCE)

    def _new_hash(self) -> str:
        tx_hash = "0x" + secrets.token_hex(32)
        self._pending[tx_hash] = not self.revert_transactions
        return tx_hash

    async def approve(self, token_address: str, spender: str, amount: int) -> str:
        if self.reject_signatures:
            raise WalletRejectionError()
        self.approvals.append((token_address, spender, amount))
        tx_hash = self._new_hash()
        logger.info(f"[DRY RUN] Approval {tx_hash[:10]}... for {amount} of {token_address}")
        return tx_hash

    async def send_transaction(self, tx: TxPayload) -> str:
        if self.reject_signatures:
            raise WalletRejectionError()
        self.sent.append(tx)
        tx_hash = self._new_hash()
        logger.info(f"[DRY RUN] Sent transaction {tx_hash[:10]}... to {tx.to}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        succeeded = self._pending.pop(tx_hash, True)
        self._block_number += 1
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=1 if succeeded else 0,
            block_number=self._block_number,
        )

    def switch_account(self, address: str) -> None:
        """Simulate the user picking another account."""
        self.address = address
        self._emit(WalletEvent(WalletEventType.ACCOUNTS_CHANGED, accounts=[address]))

    def switch_chain(self, chain_id: int) -> None:
        """Simulate the user switching networks."""
        self.chain_id = chain_id
        self._emit(WalletEvent(WalletEventType.CHAIN_CHANGED, chain_id=chain_id))

"""Wallet capability interface.

The swap core only talks to this interface. Provider specifics
(injected browser objects, connect widgets, node accounts) live in
adapters implementing it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

from unikron.assets import Token

logger = logging.getLogger(__name__)

# keccak256("Transfer(address,address,uint256)")
ERC20_TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


@dataclass(frozen=True)
class TxPayload:
    """Chain-ready transaction, forwarded to the wallet exactly as built."""

    to: str
    data: str = "0x"
    value: Union[str, int] = "0"
    gas_limit: Optional[Union[str, int]] = None


@dataclass
class TransactionReceipt:
    """On-chain confirmation record of a submitted transaction."""

    tx_hash: str
    status: int  # 1 = success, 0 = reverted
    block_number: Optional[int] = None
    logs: list[dict] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class WalletEventType(str, Enum):
    """Wallet state changes that invalidate an in-flight swap."""

    ACCOUNTS_CHANGED = "accountsChanged"
    CHAIN_CHANGED = "chainChanged"
    DISCONNECTED = "disconnect"


@dataclass
class WalletEvent:
    """Change notification emitted by a wallet adapter."""

    type: WalletEventType
    accounts: list[str] = field(default_factory=list)
    chain_id: Optional[int] = None


WalletListener = Callable[[WalletEvent], Any]


class WalletCapability(ABC):
    """Abstract wallet used by the swap core."""

    def __init__(self):
        self._listeners: list[WalletListener] = []

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter name."""
        pass

    @abstractmethod
    async def request_accounts(self) -> list[str]:
        """Ask the wallet for (and connect) its accounts."""
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Chain the wallet is currently connected to."""
        pass

    @abstractmethod
    async def get_balance(self, token: Token, address: str) -> int:
        """Balance of token at address, in smallest units."""
        pass

    @abstractmethod
    async def approve(self, token_address: str, spender: str, amount: int) -> str:
        """Submit an ERC-20 allowance approval.

        Returns:
            Approval transaction hash (await wait_for_receipt for the outcome)

        Raises:
            WalletRejectionError: user declined the approval
        """
        pass

    @abstractmethod
    async def send_transaction(self, tx: TxPayload) -> str:
        """Sign and broadcast tx exactly as given.

        Returns:
            Transaction hash

        Raises:
            WalletRejectionError: user declined the signature
        """
        pass

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Wait until tx_hash is mined and return its receipt."""
        pass

    def subscribe(self, listener: WalletListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: WalletEvent) -> None:
        """Notify listeners of a wallet state change."""
        logger.info(f"{self.name} wallet event: {event.type.value}")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Wallet listener failed on {event.type.value}: {e}")


def decode_transfer_amount(
    receipt: TransactionReceipt,
    token_address: Optional[str],
    recipient: Optional[str],
) -> Optional[int]:
    """Find the amount of token_address transferred to recipient in a receipt.

    Looks for ERC-20 Transfer logs emitted by the token contract whose
    `to` topic is the recipient. Returns the last match in smallest
    units, or None (native tokens never emit Transfer logs).
    """
    if not token_address or not recipient:
        return None

    token = token_address.lower()
    recipient_tail = recipient.lower()[-40:]
    amount = None

    for log in receipt.logs:
        topics = log.get("topics") or []
        if len(topics) < 3 or str(log.get("address", "")).lower() != token:
            continue
        if str(topics[0]).lower() != ERC20_TRANSFER_TOPIC:
            continue
        if str(topics[2]).lower()[-40:] != recipient_tail:
            continue
        try:
            amount = int(str(log.get("data") or "0x0"), 16)
        except ValueError:
            continue

    return amount

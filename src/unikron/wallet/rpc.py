"""JSON-RPC wallet adapter.

Talks to an EIP-1193 style provider exposed over HTTP JSON-RPC (a
browser bridge, a local node with unlocked accounts, ...). Provider
events are pushed in by the host through handle_provider_event().
"""

import asyncio
import itertools
import logging
import time
from typing import Any, Optional

import httpx

from unikron.assets import Token
from unikron.chains import shorten_address
from unikron.config import Settings, get_settings
from unikron.errors import WalletError, WalletRejectionError
from unikron.wallet.base import (
    TransactionReceipt,
    TxPayload,
    WalletCapability,
    WalletEvent,
    WalletEventType,
)

logger = logging.getLogger(__name__)

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001

# ERC-20 function selectors
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)


def _pad_address(address: str) -> str:
    return address.lower().replace("0x", "").zfill(64)


def _pad_uint(value: int) -> str:
    return hex(value)[2:].zfill(64)


class JsonRpcWallet(WalletCapability):
    """Wallet adapter over an HTTP JSON-RPC provider."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize RPC wallet.

        Args:
            rpc_url: Provider endpoint (defaults to settings.wallet_rpc_url)
            settings: Application settings
            http_client: Pre-built client, mainly for tests
        """
        super().__init__()
        self.settings = settings or get_settings()
        self.rpc_url = rpc_url or self.settings.wallet_rpc_url
        self._http_client = http_client
        self._ids = itertools.count(1)
        self._accounts: list[str] = []
        self._chain_id: Optional[int] = None

    @property
    def name(self) -> str:
        return "json-rpc"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            # Signing requests wait on the user, so no read timeout here
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        return self._http_client

    async def _call(self, method: str, params: Optional[list] = None) -> Any:
        """Send one JSON-RPC request and return its result."""
        client = await self._get_client()
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            response = await client.post(self.rpc_url, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise WalletError(f"Wallet provider unreachable: {e}") from e
        except ValueError as e:
            raise WalletError("Malformed wallet provider response") from e

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            code = error.get("code")
            message = error.get("message") or "wallet error"
            if code == USER_REJECTED_CODE:
                raise WalletRejectionError()
            raise WalletError(f"{method} failed: {message}")

        return data.get("result") if isinstance(data, dict) else None

    async def _sender(self) -> str:
        if not self._accounts:
            await self.request_accounts()
        if not self._accounts:
            raise WalletError("No wallet account connected")
        return self._accounts[0]

    async def request_accounts(self) -> list[str]:
        accounts = await self._call("eth_requestAccounts") or []
        if self._accounts and accounts != self._accounts:
            self._emit(WalletEvent(WalletEventType.ACCOUNTS_CHANGED, accounts=list(accounts)))
        self._accounts = list(accounts)
        return list(accounts)

    async def get_chain_id(self) -> int:
        result = await self._call("eth_chainId")
        chain_id = int(str(result), 16)
        if self._chain_id is not None and chain_id != self._chain_id:
            self._emit(WalletEvent(WalletEventType.CHAIN_CHANGED, chain_id=chain_id))
        self._chain_id = chain_id
        return chain_id

    async def get_balance(self, token: Token, address: str) -> int:
        if token.is_native:
            result = await self._call("eth_getBalance", [address, "latest"])
        else:
            data = f"{ERC20_BALANCE_OF_SELECTOR}{_pad_address(address)}"
            result = await self._call("eth_call", [{"to": token.address, "data": data}, "latest"])
        return int(str(result or "0x0"), 16)

    async def approve(self, token_address: str, spender: str, amount: int) -> str:
        sender = await self._sender()
        data = f"{ERC20_APPROVE_SELECTOR}{_pad_address(spender)}{_pad_uint(amount)}"
        logger.info(f"Requesting approval of {token_address} for {shorten_address(spender)}")
        return await self._call(
            "eth_sendTransaction",
            [{"from": sender, "to": token_address, "data": data, "value": "0x0"}],
        )

    async def send_transaction(self, tx: TxPayload) -> str:
        sender = await self._sender()
        params: dict[str, Any] = {
            "from": sender,
            "to": tx.to,
            "data": tx.data,
            "value": tx.value,
        }
        if tx.gas_limit is not None:
            params["gas"] = tx.gas_limit
        return await self._call("eth_sendTransaction", [params])

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        started = time.monotonic()
        timeout = self.settings.receipt_timeout

        while True:
            result = await self._call("eth_getTransactionReceipt", [tx_hash])
            if result:
                return TransactionReceipt(
                    tx_hash=result.get("transactionHash", tx_hash),
                    status=int(str(result.get("status", "0x0")), 16),
                    block_number=int(str(result["blockNumber"]), 16) if result.get("blockNumber") else None,
                    logs=list(result.get("logs") or []),
                )

            if timeout is not None and time.monotonic() - started >= timeout:
                raise WalletError(f"Timed out waiting for receipt of {tx_hash}")
            await asyncio.sleep(self.settings.receipt_poll_interval)

    def handle_provider_event(self, event_name: str, payload: Any = None) -> None:
        """Forward an EIP-1193 provider event (accountsChanged, chainChanged, disconnect)."""
        if event_name == WalletEventType.ACCOUNTS_CHANGED.value:
            self._accounts = list(payload or [])
            self._emit(WalletEvent(WalletEventType.ACCOUNTS_CHANGED, accounts=list(self._accounts)))
        elif event_name == WalletEventType.CHAIN_CHANGED.value:
            self._chain_id = int(str(payload), 16) if isinstance(payload, str) else payload
            self._emit(WalletEvent(WalletEventType.CHAIN_CHANGED, chain_id=self._chain_id))
        elif event_name == WalletEventType.DISCONNECTED.value:
            self._accounts = []
            self._emit(WalletEvent(WalletEventType.DISCONNECTED))
        else:
            logger.debug(f"Ignoring provider event {event_name}")

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

"""Wallet adapters.

- WalletCapability: interface the swap core signs and reads through
- JsonRpcWallet: EIP-1193 provider over HTTP JSON-RPC
- DryRunWallet: simulated wallet for tests and demos
"""

from unikron.wallet.base import (
    TransactionReceipt,
    TxPayload,
    WalletCapability,
    WalletEvent,
    WalletEventType,
    decode_transfer_amount,
)
from unikron.wallet.dryrun import DryRunWallet
from unikron.wallet.factory import create_wallet
from unikron.wallet.rpc import JsonRpcWallet

__all__ = [
    "TransactionReceipt",
    "TxPayload",
    "WalletCapability",
    "WalletEvent",
    "WalletEventType",
    "decode_transfer_amount",
    "DryRunWallet",
    "JsonRpcWallet",
    "create_wallet",
]

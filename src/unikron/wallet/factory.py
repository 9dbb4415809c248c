"""Wallet factory."""

from typing import Optional

from unikron.config import Settings, get_settings
from unikron.wallet.base import WalletCapability
from unikron.wallet.dryrun import DryRunWallet
from unikron.wallet.rpc import JsonRpcWallet


def create_wallet(settings: Optional[Settings] = None) -> WalletCapability:
    """Create a wallet adapter for one session.

    Adapter is selected by the WALLET_MODE environment variable:
    - dryrun (default): Simulated wallet
    - rpc: JSON-RPC provider at WALLET_RPC_URL

    Raises:
        ValueError: unknown wallet mode
    """
    settings = settings or get_settings()
    mode = settings.wallet_mode.lower()

    if mode == "rpc":
        return JsonRpcWallet(settings=settings)
    if mode == "dryrun":
        return DryRunWallet(address=settings.wallet_address)

    raise ValueError(f"Unknown wallet mode: {settings.wallet_mode}")

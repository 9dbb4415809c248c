"""Wallet connection contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class WalletConnectResponse(BaseModel):
    """Result of connecting the session's wallet."""

    wallet: str = Field(..., description="Wallet adapter name")
    accounts: list[str] = Field(default_factory=list, description="Accounts exposed by the wallet")
    address: Optional[str] = Field(None, description="Selected account")
    address_short: Optional[str] = Field(None, description="Shortened account for display")
    chain_id: Optional[int] = Field(None, description="Chain the wallet is connected to")
    network: Optional[str] = Field(None, description="Network id for chain_id, if known")

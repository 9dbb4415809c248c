"""Token and network contracts."""

from typing import Optional

from pydantic import BaseModel, Field

from unikron.assets import Token
from unikron.chains import Network


class TokenModel(BaseModel):
    """A token as exchanged with web clients."""

    symbol: str = Field(..., description="Token symbol (e.g., ETH, USDT)")
    name: str = Field(default="", description="Display name")
    decimals: int = Field(..., ge=0, description="Decimal precision of the token")
    network: Optional[str] = Field(None, description="Network id (ethereum, arbitrum, cardano)")
    address: Optional[str] = Field(None, description="Contract address; empty for the native asset")
    chain_id: Optional[int] = Field(None, description="Chain ID (defaults to the network's)")
    price: Optional[float] = Field(None, description="Reference USD price, may be stale")
    logo_uri: Optional[str] = Field(None, description="Logo URL")

    def to_token(self) -> Token:
        return Token(
            symbol=self.symbol,
            name=self.name or self.symbol,
            decimals=self.decimals,
            network=self.network,
            address=self.address or None,
            chain_id=self.chain_id,
            price=self.price,
            logo_uri=self.logo_uri,
        )

    @classmethod
    def from_token(cls, token: Token) -> "TokenModel":
        return cls(
            symbol=token.symbol,
            name=token.name,
            decimals=token.decimals,
            network=token.network,
            address=token.address,
            chain_id=token.resolved_chain_id,
            price=token.price,
            logo_uri=token.logo_uri,
        )


class TokenListResponse(BaseModel):
    """Tokens available on a network."""

    network: str = Field(..., description="Network id")
    is_testnet: bool = Field(default=False, description="Whether testnet data was requested")
    tokens: list[TokenModel] = Field(default_factory=list)
    slippage_options: list[float] = Field(default_factory=list, description="Slippage presets in percent")


class NetworkInfo(BaseModel):
    """Network information."""

    id: str = Field(..., description="Network id")
    name: str = Field(..., description="Display name")
    chain_id: int = Field(..., description="Chain ID")
    native_symbol: str = Field(..., description="Native asset symbol")
    explorer_url: str = Field(..., description="Block explorer base URL")
    icon: Optional[str] = Field(None, description="Icon URL")

    @classmethod
    def from_network(cls, network: Network) -> "NetworkInfo":
        return cls(
            id=network.id,
            name=network.name,
            chain_id=network.chain_id,
            native_symbol=network.native_symbol,
            explorer_url=network.explorer_url,
            icon=network.icon,
        )


class NetworkListResponse(BaseModel):
    """Built-in networks, optionally with the aggregator's network list."""

    networks: list[NetworkInfo] = Field(default_factory=list)
    aggregator_networks: Optional[list] = Field(
        None, description="Networks reported by the aggregator (when requested)"
    )

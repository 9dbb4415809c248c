"""Token definitions and built-in token lists."""

from dataclasses import dataclass
from typing import Optional, Union

from unikron.chains import get_network

# Sentinel address used by aggregators and wallets for native coins
NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

# Slippage presets offered to the user (percent)
SLIPPAGE_OPTIONS = [0.5, 1, 2, 5]


@dataclass(frozen=True)
class Token:
    """A fungible asset on a specific network.

    ``decimals`` is fixed for the lifetime of the value and is the only
    precision used to parse and render amounts of this token.
    """

    symbol: str
    name: str
    decimals: int
    network: Optional[str] = None
    address: Optional[str] = None  # None => native asset of the network
    chain_id: Optional[int] = None
    price: Optional[float] = None  # Reference fiat price, may be stale or 0
    logo_uri: Optional[str] = None

    def __post_init__(self):
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {self.decimals}")

    @property
    def resolved_chain_id(self) -> Optional[int]:
        """Explicit chain id, else the chain id of the configured network."""
        if self.chain_id:
            return self.chain_id
        network = get_network(self.network)
        return network.chain_id if network else None

    @property
    def is_native(self) -> bool:
        """Whether this is the network's native coin."""
        return not self.address or self.address.lower() == NATIVE_TOKEN_ADDRESS.lower()

    @property
    def identity(self) -> tuple[Union[int, str, None], str]:
        """Key used to decide whether two tokens are the same asset."""
        chain: Union[int, str, None] = self.resolved_chain_id or self.network
        address = "native" if self.is_native else self.address.lower()
        return chain, address

    def same_asset(self, other: "Token") -> bool:
        """Check if both tokens refer to the same asset on the same network."""
        return self.identity == other.identity

    def __str__(self) -> str:
        return f"{self.symbol} ({self.resolved_chain_id or self.network or '?'})"


# ======================
# Default Tokens
# ======================

DEFAULT_TOKENS: dict[str, list[Token]] = {
    "ethereum": [
        Token(
            symbol="ETH",
            name="Ethereum",
            decimals=18,
            network="ethereum",
            address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",  # WETH
            chain_id=1,
            price=3500,
            logo_uri="/tokens/eth.svg",
        ),
        Token(
            symbol="USDT",
            name="Tether USD",
            decimals=6,
            network="ethereum",
            address="0xdAC17F958D2ee523a2206206994597C13D831ec7",
            chain_id=1,
            price=1,
            logo_uri="/tokens/usdt.svg",
        ),
    ],
    "arbitrum": [
        Token(
            symbol="ARB",
            name="Arbitrum",
            decimals=18,
            network="arbitrum",
            address="0x912CE59144191C1204E64559FE8253a0e49E6548",
            chain_id=42161,
            price=1.2,
            logo_uri="/tokens/arb.svg",
        ),
        Token(
            symbol="ETH",
            name="Ethereum on Arbitrum",
            decimals=18,
            network="arbitrum",
            address="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",  # WETH on Arbitrum
            chain_id=42161,
            price=3500,
            logo_uri="/tokens/eth.svg",
        ),
    ],
}


def get_default_tokens(network_id: str) -> list[Token]:
    """Get the built-in token list for a network (empty if unknown)."""
    return list(DEFAULT_TOKENS.get(network_id.lower(), []))

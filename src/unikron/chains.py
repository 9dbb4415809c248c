"""Network configuration and block explorer links.

Supported networks:
- Ethereum (chain 1)
- Arbitrum One (chain 42161)
- Cardano (chain 2000, routed through the aggregator only)

The mainnet/testnet switch is not part of a Network; it is carried
alongside as a separate ``is_testnet`` flag.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Network:
    """A blockchain environment tokens live on."""

    id: str
    name: str
    chain_id: int
    native_symbol: str
    explorer_url: str
    icon: Optional[str] = None


# ======================
# Network Configurations
# ======================

NETWORKS: dict[str, Network] = {
    "ethereum": Network(
        id="ethereum",
        name="Ethereum",
        chain_id=1,
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
        icon="/logos/ethereum.svg",
    ),
    "cardano": Network(
        id="cardano",
        name="Cardano",
        chain_id=2000,
        native_symbol="ADA",
        explorer_url="https://cardanoscan.io",
        icon="/logos/cardano.svg",
    ),
    "arbitrum": Network(
        id="arbitrum",
        name="Arbitrum",
        chain_id=42161,
        native_symbol="ETH",
        explorer_url="https://arbiscan.io",
        icon="/logos/arbitrum.svg",
    ),
}


# ======================
# Block Explorers
# ======================

# Transaction URL prefixes keyed by chain id
EXPLORER_TX_URLS: dict[int, str] = {
    # Ethereum
    1: "https://etherscan.io/tx/",
    5: "https://goerli.etherscan.io/tx/",
    11155111: "https://sepolia.etherscan.io/tx/",
    # Arbitrum
    42161: "https://arbiscan.io/tx/",
    421613: "https://goerli.arbiscan.io/tx/",
    421614: "https://sepolia.arbiscan.io/tx/",
    # Cardano
    1000: "https://cardanoscan.io/transaction/",
    2000: "https://cardanoscan.io/transaction/",
    1001: "https://preprod.cardanoscan.io/transaction/",
}

# Mainnet chain id -> chain id of the testnet explorer to use instead
TESTNET_EXPLORER_FALLBACK: dict[int, int] = {
    1: 11155111,
    42161: 421614,
    1000: 1001,
    2000: 1001,
}

TESTNET_MARKERS = ("goerli", "sepolia", "preprod")

DEFAULT_EXPLORER_TX_URL = EXPLORER_TX_URLS[1]


# ======================
# Helper Functions
# ======================

def get_network(network_id: Optional[str]) -> Optional[Network]:
    """Get network configuration by id."""
    if not network_id:
        return None
    return NETWORKS.get(network_id.lower())


def get_network_by_chain_id(chain_id: Optional[int]) -> Optional[Network]:
    """Get network configuration by numeric chain id."""
    if chain_id is None:
        return None
    for network in NETWORKS.values():
        if network.chain_id == chain_id:
            return network
    return None


def get_all_networks() -> list[Network]:
    """Get all network configurations."""
    return list(NETWORKS.values())


def get_explorer_url(
    chain_id: Optional[int],
    tx_hash: Optional[str],
    is_testnet: bool = False,
) -> str:
    """Build a "view transaction" link.

    Unknown chains use the Ethereum explorer. On testnet, a mainnet
    explorer is swapped for the matching testnet one where we know it.
    Returns "#" when there is nothing to link to.
    """
    if not chain_id or not tx_hash:
        return "#"

    explorer_url = EXPLORER_TX_URLS.get(chain_id, DEFAULT_EXPLORER_TX_URL)

    if is_testnet and not any(marker in explorer_url for marker in TESTNET_MARKERS):
        fallback_chain = TESTNET_EXPLORER_FALLBACK.get(chain_id)
        if fallback_chain is not None:
            explorer_url = EXPLORER_TX_URLS[fallback_chain]

    return f"{explorer_url}{tx_hash}"


def shorten_address(address: Optional[str]) -> str:
    """Format an address for logs and display (0x1234...abcd)."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"

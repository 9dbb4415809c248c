"""Token list and price feed.

Token lists come from the aggregator's /v1/tokens and are priced with
/v1/prices. When the aggregator is unavailable the built-in default
tokens for the network are used instead.
"""

import logging
from typing import Any, Optional

from unikron.assets import Token, get_default_tokens
from unikron.chains import Network, get_network
from unikron.errors import RemoteQuoteError
from unikron.routing.symbiosis import AggregatorClient

logger = logging.getLogger(__name__)


def _extract_price(entry: Any) -> float:
    """Read a USD price from a /v1/prices entry ({"usd": 1.23} or a bare number)."""
    if isinstance(entry, dict):
        entry = entry.get("usd")
    try:
        price = float(entry)
    except (TypeError, ValueError):
        return 0.0
    return price if price > 0 else 0.0


class TokenService:
    """Fetches tradeable tokens with reference prices."""

    def __init__(self, aggregator: AggregatorClient):
        self.aggregator = aggregator

    async def fetch_tokens(self, network_id: str, is_testnet: bool = False) -> list[Token]:
        """Get tokens for a network, falling back to the built-in list.

        Args:
            network_id: Network id (ethereum, arbitrum, cardano)
            is_testnet: Use the testnet aggregator

        Returns:
            Tokens with prices (0 when the feed has none); empty for an
            unknown network
        """
        network = get_network(network_id)
        if network is None:
            logger.info(f"No chain id mapping for network: {network_id}")
            return []

        try:
            tokens = await self._fetch_remote(network, is_testnet)
        except (RemoteQuoteError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Error fetching tokens for {network.id}: {e}")
            tokens = []

        if not tokens:
            logger.info(f"Using default tokens for {network.id}")
            return get_default_tokens(network.id)
        return tokens

    async def _fetch_remote(self, network: Network, is_testnet: bool) -> list[Token]:
        items = await self.aggregator.get_tokens(network.chain_id, is_testnet)
        if not items:
            return []

        addresses = [item["address"] for item in items if item.get("address")]
        prices = await self._fetch_prices(network.chain_id, addresses, is_testnet)

        tokens = []
        for item in items:
            address: Optional[str] = item.get("address") or None
            tokens.append(
                Token(
                    symbol=item["symbol"],
                    name=item.get("name") or item["symbol"],
                    decimals=int(item["decimals"]),
                    network=network.id,
                    address=address,
                    chain_id=int(item.get("chainId") or network.chain_id),
                    price=prices.get(address.lower(), 0.0) if address else 0.0,
                    logo_uri=item.get("icon") or item.get("logoURI") or f"/tokens/{item['symbol'].lower()}.svg",
                )
            )

        logger.info(f"Fetched {len(tokens)} tokens for {network.id}")
        return tokens

    async def _fetch_prices(self, chain_id: int, addresses: list[str], is_testnet: bool) -> dict[str, float]:
        """Prices keyed by lower-cased address; empty when the feed fails."""
        try:
            data = await self.aggregator.get_prices(chain_id, addresses, is_testnet)
        except RemoteQuoteError as e:
            logger.error(f"Error fetching token prices: {e}")
            return {}
        return {str(address).lower(): _extract_price(entry) for address, entry in data.items()}

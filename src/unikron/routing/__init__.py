"""Routing module for swap quoting and pair support.

- Symbiosis aggregator client (quote, execute, routes, tokens, prices)
- Pair support resolution with layered static/remote tiers
- Price-based fallback estimates
"""

from unikron.routing.base import Quote, QuoteSource, SwapRequest
from unikron.routing.pairs import PairSupport, PairSupportResolver, SupportTier
from unikron.routing.pricing import PriceOracle, RateCalculator
from unikron.routing.symbiosis import AggregatorClient, SwapQuoteData, build_swap_payload

__all__ = [
    # Value types
    "Quote",
    "QuoteSource",
    "SwapRequest",
    # Pair support
    "PairSupport",
    "PairSupportResolver",
    "SupportTier",
    # Pricing
    "PriceOracle",
    "RateCalculator",
    # Aggregator
    "AggregatorClient",
    "SwapQuoteData",
    "build_swap_payload",
]

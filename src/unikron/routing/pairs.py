"""Token pair support resolution.

The aggregator's route endpoint has historically been incomplete (404s
for pairs it can actually route), so the remote check is the last tier.
Static knowledge is consulted first so valid swaps are not blocked when
the remote check is unavailable.

Tiers, first match wins:
1. a token without a resolvable chain          -> unsupported
2. testnet                                     -> supported
3. cross-chain (chain ids differ)              -> supported
4. both symbols in the majors allow-list       -> supported
5. pair matches a known-good majors pair       -> supported
6. remote route query has at least one route   -> supported
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from unikron.assets import Token
from unikron.errors import AggregatorTimeoutError, RemoteQuoteError
from unikron.routing.symbiosis import AggregatorClient

logger = logging.getLogger(__name__)

# Tokens the aggregator supports broadly on every chain it serves
MAJOR_TOKENS = frozenset({"ETH", "WETH", "USDT", "USDC", "DAI", "WBTC", "SIS", "BNB", "MATIC"})

# Known-good pairs; order independent
KNOWN_PAIRS: tuple[tuple[str, str], ...] = (
    ("ETH", "USDT"),
    ("ETH", "DAI"),
    ("ETH", "USDC"),
    ("BNB", "ETH"),
    ("WETH", "USDT"),
    ("WETH", "USDC"),
    ("WBTC", "ETH"),
    ("MATIC", "ETH"),
    ("SIS", "ETH"),
    ("USDC", "USDT"),
)


class SupportTier(str, Enum):
    """Which rule decided a pair's support."""

    MISSING_IDENTITY = "missing_identity"
    TESTNET = "testnet"
    CROSS_CHAIN = "cross_chain"
    MAJOR_TOKENS = "major_tokens"
    KNOWN_PAIR = "known_pair"
    REMOTE_ROUTES = "remote_routes"
    NO_ROUTES = "no_routes"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class PairSupport:
    """Decision plus the tier that produced it."""

    supported: bool
    tier: SupportTier
    detail: Optional[str] = None

    def __bool__(self) -> bool:
        return self.supported


def matches_known_pair(from_symbol: str, to_symbol: str) -> bool:
    """Check a pair against KNOWN_PAIRS in either direction.

    A symbol matches a pair member when it contains it, so bridged
    variants such as "USDC.e" count as "USDC".
    """
    from_symbol = from_symbol.upper()
    to_symbol = to_symbol.upper()
    for first, second in KNOWN_PAIRS:
        if first in from_symbol and second in to_symbol:
            return True
        if second in from_symbol and first in to_symbol:
            return True
    return False


class PairSupportResolver:
    """Decides whether the aggregator can route a swap between two tokens."""

    def __init__(self, aggregator: AggregatorClient):
        self.aggregator = aggregator

    async def is_supported(
        self,
        from_token: Optional[Token],
        to_token: Optional[Token],
        is_testnet: bool = False,
    ) -> bool:
        """Check pair support. Never raises; errors resolve to False."""
        decision = await self.resolve(from_token, to_token, is_testnet)
        return decision.supported

    async def resolve(
        self,
        from_token: Optional[Token],
        to_token: Optional[Token],
        is_testnet: bool = False,
    ) -> PairSupport:
        """Resolve pair support and report which tier decided it."""
        try:
            decision = await self._resolve(from_token, to_token, is_testnet)
        except Exception as e:
            logger.error(f"Error checking token pair support: {type(e).__name__}: {e}")
            decision = PairSupport(False, SupportTier.ERROR, str(e))

        logger.info(
            f"Pair {from_token} -> {to_token} "
            f"{'supported' if decision.supported else 'not supported'} ({decision.tier.value})"
        )
        return decision

    async def _resolve(
        self,
        from_token: Optional[Token],
        to_token: Optional[Token],
        is_testnet: bool,
    ) -> PairSupport:
        if from_token is None or to_token is None:
            return PairSupport(False, SupportTier.MISSING_IDENTITY, "token not selected")

        from_chain = from_token.resolved_chain_id
        to_chain = to_token.resolved_chain_id
        if from_chain is None or to_chain is None:
            return PairSupport(False, SupportTier.MISSING_IDENTITY, "no resolvable chain")

        # Test environments are permissive so demos are not blocked by
        # incomplete aggregator test coverage.
        if is_testnet:
            return PairSupport(True, SupportTier.TESTNET)

        if from_chain != to_chain:
            return PairSupport(True, SupportTier.CROSS_CHAIN, f"{from_chain} -> {to_chain}")

        from_symbol = (from_token.symbol or "").upper()
        to_symbol = (to_token.symbol or "").upper()

        if from_symbol in MAJOR_TOKENS and to_symbol in MAJOR_TOKENS:
            return PairSupport(True, SupportTier.MAJOR_TOKENS)

        if from_symbol and to_symbol and matches_known_pair(from_symbol, to_symbol):
            return PairSupport(True, SupportTier.KNOWN_PAIR)

        return await self._check_remote(from_chain, to_chain, is_testnet)

    async def _check_remote(self, from_chain: int, to_chain: int, is_testnet: bool) -> PairSupport:
        """Ask the aggregator whether any route exists between the chains."""
        try:
            routes = await self.aggregator.get_routes(from_chain, to_chain, is_testnet)
        except AggregatorTimeoutError as e:
            logger.info(f"Route query timed out for {from_chain} -> {to_chain}")
            return PairSupport(False, SupportTier.REMOTE_UNAVAILABLE, str(e))
        except RemoteQuoteError as e:
            return PairSupport(False, SupportTier.REMOTE_UNAVAILABLE, str(e))

        if routes:
            return PairSupport(True, SupportTier.REMOTE_ROUTES, f"{len(routes)} route(s)")
        return PairSupport(False, SupportTier.NO_ROUTES)

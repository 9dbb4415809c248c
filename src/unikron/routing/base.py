"""Core swap value types shared by the routing and service layers."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from unikron.assets import Token


class QuoteSource(str, Enum):
    """Which tier produced a quote."""

    REMOTE = "remote"  # authoritative aggregator quote
    CALCULATED = "calculated"  # price-based estimate
    UNAVAILABLE = "unavailable"  # nothing could be computed


@dataclass
class SwapRequest:
    """A prospective swap as entered by the user."""

    from_token: Token
    to_token: Token
    amount: str  # human decimal string in from_token units
    slippage: float = 0.5  # percent, 0.5 means 0.5%
    wallet_address: Optional[str] = None
    is_testnet: bool = False

    def snapshot(self) -> dict:
        """Plain dict copy for transaction records and logs."""
        return {
            "from_token": self.from_token.symbol,
            "to_token": self.to_token.symbol,
            "from_chain_id": self.from_token.resolved_chain_id,
            "to_chain_id": self.to_token.resolved_chain_id,
            "amount": self.amount,
            "slippage": self.slippage,
            "wallet_address": self.wallet_address,
            "is_testnet": self.is_testnet,
        }


@dataclass
class Quote:
    """An output-amount quote for a prospective swap.

    ``output_amount`` is a decimal string at to_token precision, or ""
    when no estimate is available (distinct from a zero output).
    """

    output_amount: str
    source: QuoteSource
    price_impact: Optional[str] = None
    fee_amount: Optional[str] = None
    fee_symbol: Optional[str] = None
    fee_usd: Optional[str] = None
    fallback_reason: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def is_estimate(self) -> bool:
        """True unless the aggregator produced the amount."""
        return self.source != QuoteSource.REMOTE

    @property
    def has_amount(self) -> bool:
        return bool(self.output_amount)

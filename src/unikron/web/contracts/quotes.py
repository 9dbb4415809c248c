"""Quote and pair support contracts."""

from typing import Optional

from pydantic import BaseModel, Field

from unikron.routing.base import Quote, QuoteSource
from unikron.web.contracts.tokens import TokenModel


class PairSupportRequest(BaseModel):
    """Request to check whether a pair can be swapped."""

    from_token: TokenModel = Field(..., description="Token being sold")
    to_token: TokenModel = Field(..., description="Token being bought")
    is_testnet: bool = Field(default=False, description="Testnet environment")


class PairSupportResponse(BaseModel):
    """Pair support decision."""

    supported: bool = Field(..., description="Whether the aggregator can route the pair")
    tier: str = Field(..., description="Rule that decided support")
    detail: Optional[str] = Field(None, description="Extra context for the decision")


class QuoteRequest(BaseModel):
    """Request for a swap quote."""

    from_token: TokenModel = Field(..., description="Token being sold")
    to_token: TokenModel = Field(..., description="Token being bought")
    amount: str = Field(..., description="Amount of from_token as a decimal string")
    wallet_address: Optional[str] = Field(None, description="Connected wallet; omit for an estimate")
    is_testnet: bool = Field(default=False, description="Testnet environment")
    slippage: Optional[float] = Field(
        None,
        ge=0,
        le=50,
        description="Slippage tolerance in percent",
    )


class QuoteResponse(BaseModel):
    """Quote for a prospective swap."""

    output_amount: str = Field(..., description="Expected output; empty when unavailable")
    source: QuoteSource = Field(..., description="remote, calculated or unavailable")
    is_estimate: bool = Field(..., description="True unless quoted by the aggregator")
    price_impact: Optional[str] = Field(None, description="Price impact in percent")
    fee_amount: Optional[str] = Field(None, description="Protocol fee amount")
    fee_symbol: Optional[str] = Field(None, description="Protocol fee token")
    fee_usd: Optional[str] = Field(None, description="Protocol fee in USD")
    fallback_reason: Optional[str] = Field(None, description="Why the aggregator was not used")
    timestamp: float = Field(..., description="Quote time (unix seconds)")

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteResponse":
        return cls(
            output_amount=quote.output_amount,
            source=quote.source,
            is_estimate=quote.is_estimate,
            price_impact=quote.price_impact,
            fee_amount=quote.fee_amount,
            fee_symbol=quote.fee_symbol,
            fee_usd=quote.fee_usd,
            fallback_reason=quote.fallback_reason,
            timestamp=quote.timestamp,
        )

    def to_quote(self) -> Quote:
        return Quote(
            output_amount=self.output_amount,
            source=self.source,
            price_impact=self.price_impact,
            fee_amount=self.fee_amount,
            fee_symbol=self.fee_symbol,
            fee_usd=self.fee_usd,
            fallback_reason=self.fallback_reason,
            timestamp=self.timestamp,
        )

"""Quote endpoint."""

from fastapi import APIRouter, Depends

from unikron.config import Settings
from unikron.routing.symbiosis import AggregatorClient
from unikron.web.contracts.quotes import QuoteRequest, QuoteResponse
from unikron.web.dependencies import get_aggregator, get_app_settings
from unikron.web.services.quote_service import QuoteService

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteResponse)
async def get_quote(
    request: QuoteRequest,
    aggregator: AggregatorClient = Depends(get_aggregator),
    settings: Settings = Depends(get_app_settings),
) -> QuoteResponse:
    """Get a swap quote.

    Uses the aggregator when a wallet address is given; otherwise, or
    when the aggregator fails, returns a price-based estimate tagged as
    such. This is a READ-ONLY operation.
    """
    quote = await QuoteService(aggregator, settings=settings).get_quote(
        request.from_token.to_token(),
        request.to_token.to_token(),
        request.amount,
        wallet_address=request.wallet_address,
        is_testnet=request.is_testnet,
        slippage=request.slippage,
    )
    return QuoteResponse.from_quote(quote)

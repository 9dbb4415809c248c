"""Pair support endpoint."""

from fastapi import APIRouter, Depends

from unikron.web.contracts.quotes import PairSupportRequest, PairSupportResponse
from unikron.web.dependencies import get_registry
from unikron.web.session import SessionRegistry

router = APIRouter(prefix="/pairs", tags=["pairs"])


@router.post("/support", response_model=PairSupportResponse)
async def check_pair_support(
    request: PairSupportRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> PairSupportResponse:
    """Check whether the aggregator can route a token pair."""
    decision = await registry.resolver.resolve(
        request.from_token.to_token(),
        request.to_token.to_token(),
        request.is_testnet,
    )
    return PairSupportResponse(
        supported=decision.supported,
        tier=decision.tier.value,
        detail=decision.detail,
    )

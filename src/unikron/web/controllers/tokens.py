"""Network and token list endpoints."""

from fastapi import APIRouter, Depends, Query

from unikron.assets import SLIPPAGE_OPTIONS
from unikron.chains import get_all_networks
from unikron.routing.symbiosis import AggregatorClient
from unikron.web.contracts.tokens import (
    NetworkInfo,
    NetworkListResponse,
    TokenListResponse,
    TokenModel,
)
from unikron.web.dependencies import get_aggregator
from unikron.web.services.token_service import TokenService

router = APIRouter(tags=["tokens"])


@router.get("/networks", response_model=NetworkListResponse)
async def list_networks(
    include_remote: bool = Query(False, description="Also query the aggregator's network list"),
    testnet: bool = Query(False, description="Use the testnet aggregator"),
    aggregator: AggregatorClient = Depends(get_aggregator),
) -> NetworkListResponse:
    """Get built-in networks."""
    networks = [NetworkInfo.from_network(network) for network in get_all_networks()]
    remote = await aggregator.get_networks(testnet) if include_remote else None
    return NetworkListResponse(networks=networks, aggregator_networks=remote)


@router.get("/tokens", response_model=TokenListResponse)
async def list_tokens(
    network: str = Query(..., description="Network id"),
    testnet: bool = Query(False, description="Use the testnet aggregator"),
    aggregator: AggregatorClient = Depends(get_aggregator),
) -> TokenListResponse:
    """Get tokens for a network with reference prices.

    Falls back to the built-in token list when the aggregator is
    unavailable.
    """
    tokens = await TokenService(aggregator).fetch_tokens(network, testnet)
    return TokenListResponse(
        network=network,
        is_testnet=testnet,
        tokens=[TokenModel.from_token(token) for token in tokens],
        slippage_options=[float(option) for option in SLIPPAGE_OPTIONS],
    )

"""Swap execution endpoints.

Execution goes through the session's wallet adapter; the aggregator
builds the transaction and the wallet signs and broadcasts it.
"""

from fastapi import APIRouter, Depends, HTTPException

from unikron.errors import SwapInProgressError
from unikron.web.contracts.swaps import (
    SwapExecuteRequest,
    SwapExecuteResponse,
    SwapStateResponse,
)
from unikron.web.dependencies import get_session
from unikron.web.services.swap_service import SwapSuccess
from unikron.web.session import Session

router = APIRouter(prefix="/swaps", tags=["swaps"])


def _state_response(session: Session) -> SwapStateResponse:
    executor = session.executor
    return SwapStateResponse(
        state=executor.state.value,
        busy=executor.is_busy,
        transitions=[state.value for state in executor.transitions],
    )


@router.post("/execute", response_model=SwapExecuteResponse)
async def execute_swap(
    request: SwapExecuteRequest,
    session: Session = Depends(get_session),
) -> SwapExecuteResponse:
    """Run a swap to a terminal state.

    Failures are reported in the body (success=false with reason and
    code), not as HTTP errors.
    """
    quote = request.quote.to_quote() if request.quote else None
    outcome = await session.executor.execute(request.to_swap_request(), quote)
    executor = session.executor
    transitions = [state.value for state in executor.transitions]

    if isinstance(outcome, SwapSuccess):
        return SwapExecuteResponse(
            success=True,
            state=executor.state.value,
            transitions=transitions,
            output_amount=outcome.output_amount,
            output_source=outcome.output_source.value,
            tx_hash=outcome.tx_hash,
            explorer_url=outcome.explorer_url,
        )

    return SwapExecuteResponse(
        success=False,
        state=executor.state.value,
        transitions=transitions,
        tx_hash=outcome.tx_hash,
        explorer_url=outcome.explorer_url,
        reason=outcome.reason,
        code=outcome.code,
    )


@router.get("/state", response_model=SwapStateResponse)
async def get_swap_state(session: Session = Depends(get_session)) -> SwapStateResponse:
    """Get the session's executor state."""
    return _state_response(session)


@router.post("/reset", response_model=SwapStateResponse)
async def reset_swap(session: Session = Depends(get_session)) -> SwapStateResponse:
    """Return a finished executor to idle and clear the current transaction."""
    try:
        session.executor.reset()
    except SwapInProgressError as e:
        raise HTTPException(status_code=409, detail=e.message)
    session.tracker.reset()
    return _state_response(session)

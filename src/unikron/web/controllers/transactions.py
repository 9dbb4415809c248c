"""Tracked transaction endpoints."""

from fastapi import APIRouter, Depends

from unikron.web.contracts.transactions import (
    CurrentTransactionResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)
from unikron.web.dependencies import get_session
from unikron.web.session import Session

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/current", response_model=CurrentTransactionResponse)
async def get_current_transaction(session: Session = Depends(get_session)) -> CurrentTransactionResponse:
    """Get the session's current transaction."""
    tx = session.tracker.current()
    return CurrentTransactionResponse(
        transaction=TransactionResponse.from_transaction(tx) if tx else None
    )


@router.get("/history", response_model=TransactionHistoryResponse)
async def get_transaction_history(session: Session = Depends(get_session)) -> TransactionHistoryResponse:
    """Get the session's tracked transactions, most recent first."""
    transactions = [TransactionResponse.from_transaction(tx) for tx in session.tracker.history()]
    return TransactionHistoryResponse(transactions=transactions, total=len(transactions))

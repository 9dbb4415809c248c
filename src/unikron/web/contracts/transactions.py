"""Tracked transaction contracts."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from unikron.web.services.transaction_tracker import Transaction


class TransactionResponse(BaseModel):
    """A tracked swap transaction."""

    id: str = Field(..., description="Transaction hash, or a local placeholder before broadcast")
    status: str = Field(..., description="Status: pending, success, error")
    timestamp: float = Field(..., description="Creation time (unix seconds)")
    request: dict[str, Any] = Field(default_factory=dict, description="Swap request snapshot")
    chain_id: Optional[int] = Field(None, description="Chain ID of the source token")
    tx_hash: Optional[str] = Field(None, description="Transaction hash")
    output_amount: Optional[str] = Field(None, description="Received amount")
    error: Optional[str] = Field(None, description="Error message if failed")
    explorer_url: Optional[str] = Field(None, description="Link to explorer")

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "TransactionResponse":
        return cls(**tx.to_dict())


class CurrentTransactionResponse(BaseModel):
    """The session's current transaction, if any."""

    transaction: Optional[TransactionResponse] = None


class TransactionHistoryResponse(BaseModel):
    """Tracked transactions, most recent first."""

    transactions: list[TransactionResponse] = Field(default_factory=list)
    total: int = Field(default=0)

"""Swap execution contracts."""

from typing import Optional

from pydantic import BaseModel, Field

from unikron.routing.base import SwapRequest
from unikron.web.contracts.quotes import QuoteResponse
from unikron.web.contracts.tokens import TokenModel


class SwapExecuteRequest(BaseModel):
    """Request to execute a swap through the session's wallet."""

    from_token: TokenModel = Field(..., description="Token being sold")
    to_token: TokenModel = Field(..., description="Token being bought")
    amount: str = Field(..., description="Amount of from_token as a decimal string")
    slippage: float = Field(default=0.5, ge=0, le=50, description="Slippage tolerance in percent")
    wallet_address: Optional[str] = Field(None, description="Connected wallet address")
    is_testnet: bool = Field(default=False, description="Testnet environment")
    quote: Optional[QuoteResponse] = Field(
        None, description="Quote shown to the user before submitting"
    )

    def to_swap_request(self) -> SwapRequest:
        return SwapRequest(
            from_token=self.from_token.to_token(),
            to_token=self.to_token.to_token(),
            amount=self.amount,
            slippage=self.slippage,
            wallet_address=self.wallet_address,
            is_testnet=self.is_testnet,
        )


class SwapExecuteResponse(BaseModel):
    """Outcome of a swap attempt."""

    success: bool = Field(..., description="Whether the swap was confirmed")
    state: str = Field(..., description="Terminal state of the attempt")
    transitions: list[str] = Field(default_factory=list, description="States visited, in order")
    output_amount: Optional[str] = Field(None, description="Received amount of to_token")
    output_source: Optional[str] = Field(None, description="Where output_amount came from")
    tx_hash: Optional[str] = Field(None, description="Transaction hash")
    explorer_url: Optional[str] = Field(None, description="Link to explorer")
    reason: Optional[str] = Field(None, description="Failure message")
    code: Optional[str] = Field(None, description="Failure code")


class SwapStateResponse(BaseModel):
    """Current executor state of a session."""

    state: str = Field(..., description="Current state")
    busy: bool = Field(..., description="Whether a swap is in flight")
    transitions: list[str] = Field(default_factory=list, description="States visited by the last attempt")

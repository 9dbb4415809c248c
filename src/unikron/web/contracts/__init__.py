"""Request and response contracts for the web layer.

These Pydantic models define the API interface for web clients.
"""

from unikron.web.contracts.quotes import (
    PairSupportRequest,
    PairSupportResponse,
    QuoteRequest,
    QuoteResponse,
)
from unikron.web.contracts.swaps import (
    SwapExecuteRequest,
    SwapExecuteResponse,
    SwapStateResponse,
)
from unikron.web.contracts.tokens import (
    NetworkInfo,
    NetworkListResponse,
    TokenListResponse,
    TokenModel,
)
from unikron.web.contracts.transactions import (
    CurrentTransactionResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)
from unikron.web.contracts.wallet import WalletConnectResponse

__all__ = [
    # Quote contracts
    "PairSupportRequest",
    "PairSupportResponse",
    "QuoteRequest",
    "QuoteResponse",
    # Swap contracts
    "SwapExecuteRequest",
    "SwapExecuteResponse",
    "SwapStateResponse",
    # Token contracts
    "NetworkInfo",
    "NetworkListResponse",
    "TokenListResponse",
    "TokenModel",
    # Transaction contracts
    "CurrentTransactionResponse",
    "TransactionHistoryResponse",
    "TransactionResponse",
    # Wallet contracts
    "WalletConnectResponse",
]

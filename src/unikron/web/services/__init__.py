"""Web services for swap quoting and execution.

These services never hold keys. Signing and broadcasting go through
the session's wallet adapter.
"""

from unikron.web.services.quote_service import QuoteService
from unikron.web.services.swap_service import (
    SwapExecutor,
    SwapFailure,
    SwapOutcome,
    SwapState,
    SwapSuccess,
)
from unikron.web.services.token_service import TokenService
from unikron.web.services.transaction_tracker import (
    Transaction,
    TransactionStatus,
    TransactionTracker,
)

__all__ = [
    "QuoteService",
    "SwapExecutor",
    "SwapFailure",
    "SwapOutcome",
    "SwapState",
    "SwapSuccess",
    "TokenService",
    "Transaction",
    "TransactionStatus",
    "TransactionTracker",
]

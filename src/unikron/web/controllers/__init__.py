"""HTTP controllers for web API endpoints."""

from unikron.web.controllers.pairs import router as pairs_router
from unikron.web.controllers.quotes import router as quotes_router
from unikron.web.controllers.swaps import router as swaps_router
from unikron.web.controllers.tokens import router as tokens_router
from unikron.web.controllers.transactions import router as transactions_router
from unikron.web.controllers.wallet import router as wallet_router

__all__ = [
    "pairs_router",
    "quotes_router",
    "swaps_router",
    "tokens_router",
    "transactions_router",
    "wallet_router",
]

"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unikron import __version__
from unikron.config import Settings, get_settings
from unikron.routing.symbiosis import AggregatorClient
from unikron.web.session import SessionRegistry, WalletFactory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield
    # Shutdown
    await app.state.sessions.close()
    await app.state.aggregator.close()
    logger.info("Aggregator client closed")


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[AggregatorClient] = None,
    wallet_factory: Optional[WalletFactory] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to cached settings)
        aggregator: Shared aggregator client
        wallet_factory: Builds one wallet adapter per session
    """
    settings = settings or get_settings()
    aggregator = aggregator or AggregatorClient(settings)

    app = FastAPI(
        title="UNIKRON API",
        description="Cross-chain token swaps through the Symbiosis aggregator",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.aggregator = aggregator
    app.state.sessions = SessionRegistry(aggregator, settings, wallet_factory)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from unikron.api.routes import health
    from unikron.web.controllers import (
        pairs_router,
        quotes_router,
        swaps_router,
        tokens_router,
        transactions_router,
        wallet_router,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(tokens_router)
    app.include_router(pairs_router)
    app.include_router(quotes_router)
    app.include_router(wallet_router)
    app.include_router(swaps_router)
    app.include_router(transactions_router)

    return app

"""Health check endpoints."""

from fastapi import APIRouter, Request

from unikron import __version__
from unikron.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "unikron"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = getattr(request.app.state, "settings", None) or get_settings()
    sessions = getattr(request.app.state, "sessions", None)
    return {
        "status": "healthy",
        "service": "unikron",
        "version": __version__,
        "sessions": len(sessions) if sessions is not None else 0,
        "config": settings.get_safe_dict(),
    }

"""FastAPI dependencies shared by the web controllers."""

from fastapi import Header, Request

from unikron.config import Settings
from unikron.routing.symbiosis import AggregatorClient
from unikron.web.session import DEFAULT_SESSION_ID, Session, SessionRegistry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_aggregator(request: Request) -> AggregatorClient:
    return request.app.state.aggregator


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


async def get_session(
    request: Request,
    x_session_id: str = Header(default=DEFAULT_SESSION_ID),
) -> Session:
    """Session selected by the X-Session-Id header."""
    return await get_registry(request).get(x_session_id or DEFAULT_SESSION_ID)

"""API dependencies."""

import logging

from fastapi import HTTPException, Request
from starlette.requests import HTTPConnection

from dockgate.auth import extract_token, verify_token
from dockgate.config import Environment, Settings
from dockgate.engine import UnauthorizedError
from dockgate.services import Services

logger = logging.getLogger("dockgate.api")


def get_services(connection: HTTPConnection) -> Services:
    """Service container of the app serving this request or WebSocket."""
    return connection.app.state.services


def authorize(connection: HTTPConnection) -> bool:
    """True when the connection presents the configured token."""
    services = get_services(connection)
    return verify_token(extract_token(connection.headers), services.settings.api_token)


async def verify_api_key(request: Request) -> None:
    """
    Verify the shared API token.

    Accepts Authorization: Bearer <token> or X-API-Key. Fails closed: with
    no token configured every request is rejected with 503.
    """
    services = get_services(request)
    if not services.settings.api_token:
        logger.error("No API token configured; rejecting request. Set DOCKGATE_API_TOKEN.")
        raise HTTPException(
            status_code=503,
            detail="Server misconfigured: authentication not properly initialized",
        )

    if not authorize(request):
        e = UnauthorizedError(
            "Missing or invalid authorization. Use Authorization: Bearer <token> or X-API-Key header"
        )
        logger.warning(f"Invalid or missing API token from {_peer(request)} on {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def _peer(connection: HTTPConnection) -> str:
    client = connection.client
    return client.host if client else "unknown"


def validate_auth_config(settings: Settings) -> None:
    """
    Validate authentication configuration at startup.

    Raises:
        RuntimeError: If no token is configured outside development.
    """
    if settings.api_token:
        logger.info(f"Authentication enabled for {settings.env.value}")
        return

    if settings.env != Environment.DEVELOPMENT:
        raise RuntimeError(
            f"SECURITY ERROR: DOCKGATE_API_TOKEN is required in {settings.env.value}."
        )

    logger.warning(
        "No DOCKGATE_API_TOKEN configured: every API request and log stream "
        "connection will be rejected until one is set."
    )

"""
Authorization guard for the HTTP API.

The session token travels in an HttpOnly cookie. Handlers that depend on
``require_identity`` never run for a caller without a valid token.
"""

from fastapi import Request, Response

from taskhub_api.store import Services
from taskhub_core.constants import TOKEN_COOKIE_NAME
from taskhub_core.security import Identity


def get_services(request: Request) -> Services:
    return request.app.state.services


async def require_identity(request: Request) -> Identity:
    """FastAPI dependency: resolves the session cookie into an Identity."""
    services: Services = request.app.state.services
    return services.accounts.authenticate(request.cookies.get(TOKEN_COOKIE_NAME))


def set_session_cookie(response: Response, token: str, services: Services) -> None:
    settings = services.settings
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=settings.token_ttl_days * 24 * 60 * 60,
        httponly=True,
        samesite="strict",
        secure=settings.secure_cookies,
    )


def clear_session_cookie(response: Response, services: Services) -> None:
    response.delete_cookie(
        key=TOKEN_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=services.settings.secure_cookies,
    )

"""
Account routes.

Endpoints:
  POST   /auth/register    Create an account and start a session
  POST   /auth/login       Start a session
  POST   /auth/logout      Drop the session cookie
  GET    /auth/me          Current user
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from taskhub_api.auth import clear_session_cookie, get_services, require_identity, set_session_cookie
from taskhub_api.store import Services
from taskhub_core.schemas import UserOut
from taskhub_core.security import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Request / Response models ───────────────────────────────────────────────

class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str


# ── Routes ──────────────────────────────────────────────────────────────────

@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    response: Response,
    body: Optional[CredentialsRequest] = None,
    services: Services = Depends(get_services),
):
    """
    Create an account. The password is stored only as a one-way hash and
    the new user is signed in straight away.
    """
    body = body or CredentialsRequest()
    user, token = await services.accounts.register(body.username, body.password)
    set_session_cookie(response, token, services)
    return UserResponse(user=user)


@router.post("/login", response_model=UserResponse)
async def login(
    response: Response,
    body: Optional[CredentialsRequest] = None,
    services: Services = Depends(get_services),
):
    """Unknown usernames and wrong passwords fail identically."""
    body = body or CredentialsRequest()
    user, token = await services.accounts.login(body.username, body.password)
    set_session_cookie(response, token, services)
    return UserResponse(user=user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, services: Services = Depends(get_services)):
    """Tokens are stateless; logging out just tells the client to drop its cookie."""
    clear_session_cookie(response, services)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    return UserResponse(user=await services.accounts.me(identity))

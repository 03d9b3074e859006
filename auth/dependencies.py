"""
auth/dependencies.py -- FastAPI Depends() helper for authentication.

Two token sources are checked in priority order:
  1. "Authorization" cookie -- set by POST /v1/auth/login.
  2. Authorization: Bearer <token> header -- API clients.

require_user_id() walks Unauthenticated -> Authenticated:
  no token            -> 401 "You need to be Authenticated"
  token fails verify  -> 401 "Invalid token"
  user id not found   -> 401 "Expired or Invalid", session cookie cleared
  otherwise           -> request.state.user_id is set and the id returned

Every failure is terminal for the request; the client must log in again.

Layer rule: may import from fastapi because this module is part of the FastAPI
dependency injection system. No imports from api/.
"""

from __future__ import annotations

from fastapi import Request

from auth.tokens import AUTH_COOKIE, AuthTokens
from core.errors import Unauthorized
from users.store import UserStore


def get_token(request: Request) -> str | None:
    """Return the raw session token from the cookie or the Bearer header, or None."""
    token = request.cookies.get(AUTH_COOKIE)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


async def require_user_id(request: Request) -> int:
    """Require authentication. Returns the authenticated user's id.

    Use as a FastAPI dependency:
        @router.patch("/user/{user_id}")
        async def route(current_user_id: int = Depends(require_user_id)): ...
    """
    token = get_token(request)
    if not token:
        raise Unauthorized("You need to be Authenticated")

    tokens: AuthTokens = request.app.state.tokens
    user_id = tokens.verify(token)

    user_store: UserStore = request.app.state.user_store
    user = await user_store.find_one({"id": user_id})
    if user is None:
        # Signed token for a user that was deleted since it was issued.
        raise Unauthorized("Expired or Invalid", clear_cookie=AUTH_COOKIE)

    request.state.user_id = user.id
    return user.id

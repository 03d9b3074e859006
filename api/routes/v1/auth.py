"""
api/routes/v1/auth.py -- Login, logout and current-user endpoints.

Routes:
  POST /v1/auth/login   -- email/password login; sets the Authorization cookie
  POST /v1/auth/logout  -- clears the cookie; 200
  GET  /v1/auth/me      -- current user (requires auth)

Security:
  POST /login is rate-limited (Settings.login_rate_limit, default 10/minute per IP).
  Wrong password and unknown email return the same "Bad credentials" 401.
  Cache-Control: no-store on login responses.
  Logout is client-side only: the token stays valid until it expires.

No `from __future__ import annotations` here: slowapi wraps login(), and
FastAPI must resolve its annotations as real objects through that wrapper.
"""

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, MessageResponse, UserResponse
from auth.dependencies import require_user_id
from auth.tokens import clear_auth_cookie, set_auth_cookie
from core.config import get_settings
from core.errors import Unauthorized
from users.service import UserService
from users.store import UserStore

# Auth policy:
# - POST /v1/auth/login:   public -- login endpoint must be unauthenticated
# - POST /v1/auth/logout:  public -- clearing a cookie needs no prior auth
# - GET  /v1/auth/me:      requires auth (require_user_id)
router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(get_settings().login_rate_limit)
async def login(request: Request, response: Response, body: LoginRequest) -> LoginResponse:
    """Authenticate with email and password; set the session cookie."""
    user_service: UserService = request.app.state.user_service
    result = await user_service.authenticate_user(body.email, body.password)

    set_auth_cookie(response, result.access_token, secure=get_settings().secure_cookies)
    response.headers["Cache-Control"] = "no-store"
    return LoginResponse(user_id=result.user_id, access_token=result.access_token)


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    clear_auth_cookie(response)
    return MessageResponse(message="Logged out.")


@router.get("/auth/me", response_model=UserResponse)
async def me(request: Request, current_user_id: int = Depends(require_user_id)) -> UserResponse:
    """Return the profile of the currently authenticated user."""
    user_store: UserStore = request.app.state.user_store
    user = await user_store.find_one({"id": current_user_id})
    if user is None:
        raise Unauthorized("Expired or Invalid")
    return UserResponse.from_user(user)

"""
api/routes/v1/users.py -- User directory CRUD endpoints.

Routes:
  POST   /v1/user        -- signup; 201 with the new user, 409 on duplicate email
  GET    /v1/user        -- list every user, newest first
  PATCH  /v1/user/{id}   -- partial profile update (requires auth)
  DELETE /v1/user/{id}   -- delete, returns the deleted record (requires auth)

Auth is "authenticated or not": any logged-in user may edit or delete any
record. There is no ownership or role check.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import UserCreate, UserResponse, UserUpdate
from auth.dependencies import require_user_id
from core.errors import BadRequest
from users.service import UserService

# Auth policy:
# - POST   /v1/user:       public -- signup
# - GET    /v1/user:       public
# - PATCH  /v1/user/{id}:  requires auth (require_user_id)
# - DELETE /v1/user/{id}:  requires auth (require_user_id)
router = APIRouter()


@router.post("/user", response_model=UserResponse, status_code=201)
async def create_user(request: Request, body: UserCreate) -> UserResponse:
    user_service: UserService = request.app.state.user_service
    user = await user_service.create_user(body.model_dump())
    return UserResponse.from_user(user)


@router.get("/user", response_model=list[UserResponse])
async def list_users(request: Request) -> list[UserResponse]:
    user_service: UserService = request.app.state.user_service
    return [UserResponse.from_user(u) for u in await user_service.get_users()]


@router.patch("/user/{user_id}", response_model=UserResponse)
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    current_user_id: int = Depends(require_user_id),
) -> UserResponse:
    """Update the given profile fields of a user.

    Changing the email does not rehash the stored password, and the hash is
    salted with the email, so the user cannot log in with the new address
    until the password is reset.
    """
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise BadRequest("No fields to update")

    user_service: UserService = request.app.state.user_service
    user = await user_service.update_user(updates, user_id)
    return UserResponse.from_user(user)


@router.delete("/user/{user_id}", response_model=UserResponse)
async def delete_user(
    request: Request,
    user_id: int,
    current_user_id: int = Depends(require_user_id),
) -> UserResponse:
    user_service: UserService = request.app.state.user_service
    return UserResponse.from_user(await user_service.delete_user(user_id))

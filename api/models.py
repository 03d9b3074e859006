"""
API request and response models for the user directory REST endpoints.

These Pydantic v2 models are the validation layer: by the time a route calls
UserService, the body has the right shape. They are intentionally separate
from the dataclasses in users/models.py, which own the internal domain
representation. Route handlers map between the two.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from users.models import User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Shape check only: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Annotated types so the same constraints apply wherever the field appears.
_Email = Annotated[str, Field(pattern=EMAIL_PATTERN, max_length=255)]
_Password = Annotated[str, Field(min_length=2, max_length=255)]
_Text = Annotated[str, Field(min_length=1, max_length=255)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login."""

    email: _Email
    password: _Password


class UserCreate(BaseModel):
    """Request body for POST /v1/user (signup). Every field is required."""

    email: _Email
    password: _Password
    first_name: _Text
    last_name: _Text
    country: _Text
    city: _Text
    phone_number: _Text
    position: _Text


class UserUpdate(BaseModel):
    """Request body for PATCH /v1/user/{id}.

    Partial: only the fields present (and not null) are written. Unknown keys,
    including password, are dropped here -- passwords cannot be changed through
    the update path.
    """

    model_config = ConfigDict(extra="ignore")

    email: Optional[_Email] = None
    first_name: Optional[_Text] = None
    last_name: Optional[_Text] = None
    country: Optional[_Text] = None
    city: Optional[_Text] = None
    phone_number: Optional[_Text] = None
    position: Optional[_Text] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Safe projection of a user. There is no password field to leak."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    phone_number: Optional[str] = None
    position: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            country=user.country,
            city=user.city,
            phone_number=user.phone_number,
            position=user.position,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class LoginResponse(BaseModel):
    """Response for POST /v1/auth/login. Serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: int = Field(alias="userId")
    access_token: str = Field(alias="accessToken")


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    stack is only populated when DEBUG=true.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = False
    status: int
    message: str
    stack: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]

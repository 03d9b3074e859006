"""
users/models.py -- Domain dataclasses for the user directory.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; api/models.py owns the HTTP representation.

User deliberately has no password attribute. The hash lives in the users
table only and is never projected into a User.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """One row of the directory, as returned by every read and write."""

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    country: str | None = None
    city: str | None = None
    phone_number: str | None = None
    position: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful password login."""

    user_id: int
    access_token: str

"""
users/service.py -- Business operations exposed to the route layer.

UserService composes UserStore (persistence) and AuthTokens (hashing and
signing). Route handlers call these methods and nothing else; input shape has
already been validated by the pydantic models in api/models.py, so only
business rules (credentials, duplicates, existence) are checked here.

Errors propagate unchanged from the store: Conflict on duplicate email,
NotFound on a missing id, InternalError on database failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from auth.tokens import AuthTokens
from core.errors import Unauthorized
from users.models import AuthResult, User
from users.store import UserStore

logger = logging.getLogger("userdir.users")


class UserService:
    def __init__(self, store: UserStore, tokens: AuthTokens) -> None:
        self.store = store
        self.tokens = tokens

    async def authenticate_user(self, email: str, password: str) -> AuthResult:
        """Log in with email and password; return the user id and a fresh token.

        Unknown email and wrong password raise the same Unauthorized("Bad
        credentials") so the response does not reveal which emails exist.
        """
        digest = self.tokens.hash_password(email, password)
        user = await self.store.find_one({"email": email, "password": digest})
        if user is None:
            logger.info("Failed login attempt")
            raise Unauthorized("Bad credentials")
        return AuthResult(user_id=user.id, access_token=self.tokens.sign(user.id))

    async def create_user(self, data: Mapping[str, Any]) -> User:
        fields = dict(data)
        fields["password"] = self.tokens.hash_password(fields["email"], fields["password"])
        user = await self.store.create(fields)
        logger.info("Created user id=%s", user.id)
        return user

    async def get_users(self) -> list[User]:
        """Return every user, newest first."""
        return await self.store.find_many()

    async def update_user(self, data: Mapping[str, Any], user_id: int) -> User:
        """Apply a partial update. A password in data is ignored by the store."""
        user = await self.store.update_by_id(data, user_id)
        logger.info("Updated user id=%s fields=%s", user_id, sorted(k for k in data if k != "password"))
        return user

    async def delete_user(self, user_id: int) -> User:
        user = await self.store.delete_by_id(user_id)
        logger.info("Deleted user id=%s", user_id)
        return user

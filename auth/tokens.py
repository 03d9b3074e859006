"""
auth/tokens.py -- Password hashing, JWT issue/verify, and the session cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id, iat and exp (1 hour by
       default). Verification raises Unauthorized("Invalid token") on any
       failure -- bad signature, malformed token, expired token, missing claim.
       There is no revocation list; logout only discards the cookie.

  Passwords: sha256(email + password + secret) as a hex digest. The hash is
       deterministic so login can look a user up by (email, hash) directly.
       Consequence: the email is part of the hash input, so changing a user's
       email without rehashing the password makes that user unable to log in.
       The update path never rehashes (password is protected in UserStore).

  Secret: passed into AuthTokens by the app lifespan from Settings. Nothing in
       this module reads configuration on its own, so tests can build an
       AuthTokens with any secret.

Layer rule: imports core/ only. No imports from api/, db/ or users/.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from starlette.responses import Response

from core.errors import Unauthorized

logger = logging.getLogger("userdir.auth")

_ALGORITHM = "HS256"

AUTH_COOKIE = "Authorization"


class AuthTokens:
    """Hashes passwords and signs/verifies session tokens with one secret.

    Usage:
        tokens = AuthTokens(settings.secret_key)
        digest = tokens.hash_password("a@x.com", "p1")
        token = tokens.sign(42)
        tokens.verify(token)  # -> 42
    """

    def __init__(self, secret_key: str, expire_seconds: int = 3600) -> None:
        self._secret = secret_key
        self.expire_seconds = expire_seconds

    def hash_password(self, email: str, password: str) -> str:
        """Return the deterministic lookup hash for an (email, password) pair."""
        return hashlib.sha256(f"{email}{password}{self._secret}".encode("utf-8")).hexdigest()

    def sign(self, user_id: int) -> str:
        """Encode a signed JWT for user_id that expires expire_seconds from now."""
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> int:
        """Decode and verify a JWT. Returns the embedded user id.

        Raises:
            Unauthorized: signature invalid, token malformed or expired, or the
                user_id claim missing.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise Unauthorized("Invalid token") from exc
        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise Unauthorized("Invalid token")
        return user_id


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response: Response, token: str, secure: bool = False) -> None:
    """Write the raw token as the httpOnly "Authorization" cookie.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POST.
    No max_age: the cookie lives for the browser session and the token's own
        exp claim decides when it stops working.
    """
    response.set_cookie(
        AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(AUTH_COOKIE)

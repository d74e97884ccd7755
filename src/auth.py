"""Bearer-token verification for write operations.

Policy lives with the caller; this module only issues and checks signed
tokens. A :class:`TokenVerifier` is the opaque ``token -> bool`` predicate
that :class:`~folio.content.service.ContentService` consults before writes.
"""

from __future__ import annotations

import logging
import time

import jwt

from folio.config import AuthSection

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_token(username: str, secret: str, ttl_days: int = 7) -> str:
    """Issue a signed token for ``username``."""
    iat = int(time.time())
    payload = {
        "username": username,
        "iat": iat,
        "exp": iat + ttl_days * 24 * 60 * 60,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


class TokenVerifier:
    """Callable that accepts a bearer token and reports whether it is valid."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("TokenVerifier requires a non-empty secret")
        self._secret = secret

    @classmethod
    def from_config(cls, config: AuthSection) -> TokenVerifier | None:
        """Build a verifier, or None when no secret is configured."""
        return cls(config.jwt_secret) if config.is_configured else None

    def decode(self, token: str | None) -> dict | None:
        """Return the token payload, or None if missing, expired or forged."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired write token")
            return None
        except jwt.InvalidTokenError as exc:
            logger.warning("Rejected write token: %s", exc)
            return None
        if not payload.get("username"):
            return None
        return payload

    def __call__(self, token: str | None) -> bool:
        return self.decode(token) is not None

"""
Cocktail Catalog Backend: Session Token Service
=================================================

What:  Mints and verifies the signed, time-limited bearer tokens handed out
       by POST /auth/signin.
How:   PyJWT, HS256 by default, secret from settings.access_token_secret.
       Claims: {"sub": "<user id>", "iat": ..., "exp": iat + 360 minutes}.
Who:   Auth routes (issue), the Auth Gate dependency (verify).

Failure policy:
    Every verification failure (bad signature, malformed token, expired,
    missing subject) surfaces as one AuthError. The specific reason is logged
    at INFO and kept in the error context for diagnostics only.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from cocktail_api.exceptions import AuthError, ConfigurationError

logger = logging.getLogger(__name__)


class TokenService:
    """Signs and verifies session tokens with a server-held secret."""

    def __init__(self, secret: str, expire_minutes: int = 360, algorithm: str = "HS256"):
        if not secret:
            raise ConfigurationError("ACCESS_TOKEN_SECRET is required to issue session tokens")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expire_minutes)

    def issue(self, claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Sign claims plus an expiry.

        Args:
            claims: Payload; must include "sub" as a string.
            expires_delta: Override of the configured lifetime.
        """
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + (expires_delta if expires_delta is not None else self.expires_delta)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Return the decoded claims of a valid token.

        Raises:
            AuthError (403) for any tampered, malformed or expired token.
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired session token")
            raise AuthError(context={"reason": "expired"}) from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected invalid session token: %s", type(e).__name__)
            raise AuthError(context={"reason": "invalid", "error_type": type(e).__name__}) from e

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token validation utilities.

Access tokens are issued by the identity service. This module validates
them with python-jose and exposes the claims the learning core needs:
the learner identifier (sub), role and email.

create_access_token mints tokens with the same shape. It is used by
development tooling and tests.

Example:
    >>> from apexlms.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="learner-1")
    >>> claims = jwt_manager.decode_token(token)
"""

import logging
import secrets
from datetime import timedelta
from typing import Literal

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError

from apexlms.core.config.settings import JWTSettings
from apexlms.utils.datetime import utc_now

logger = logging.getLogger(__name__)

Role = Literal["SUPER_ADMIN", "ADMIN", "INSTRUCTOR", "LEARNER"]

AUTHOR_ROLES: frozenset[str] = frozenset({"SUPER_ADMIN", "ADMIN", "INSTRUCTOR"})


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (learner or staff user ID).
        role: User role.
        email: User email, if present.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID, if present.
    """

    sub: str
    role: Role = "LEARNER"
    email: str | None = None
    exp: int
    iat: int | None = None
    jti: str | None = None


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        role: Role = "LEARNER",
        email: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            user_id: User identifier placed in the sub claim.
            role: User role.
            email: User email.
            expires_delta: Token lifetime. Defaults to the configured
                access token lifetime.

        Returns:
            JWT access token string.
        """
        now = utc_now()
        lifetime = expires_delta or timedelta(
            minutes=self._settings.access_token_expire_minutes
        )

        payload = {
            "sub": str(user_id),
            "role": role,
            "email": email,
            "exp": int((now + lifetime).timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature or claims are invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from e

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning("Token claims invalid: %s", str(e))
            raise InvalidTokenError("Invalid token claims") from e

    def verify_token(self, token: str) -> bool:
        """Check whether a token is valid."""
        try:
            self.decode_token(token)
            return True
        except JWTError:
            return False

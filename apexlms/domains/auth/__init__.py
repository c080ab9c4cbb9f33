# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Tokens are issued by the identity service; the learning core only
validates them.

Exports:
    JWTManager: JWT token creation and validation.
    TokenPayload: Decoded token claims.
"""

from apexlms.domains.auth.jwt import (
    AUTHOR_ROLES,
    InvalidTokenError,
    JWTError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)

__all__ = [
    "AUTHOR_ROLES",
    "InvalidTokenError",
    "JWTError",
    "JWTManager",
    "TokenExpiredError",
    "TokenPayload",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides access token creation and validation using
python-jose. A token names the admin (sub), their role and, for school
admins, the school they manage.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="admin-1", role="school_admin", school_id="s-1")
    >>> claims = jwt_manager.decode_token(token)
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal
from uuid import UUID

from jose import ExpiredSignatureError, JOSEError, jwt
from pydantic import BaseModel, ValidationError

from src.core.config.settings import JWTSettings


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (admin user ID).
        type: Token type.
        role: super_admin or school_admin.
        school_id: School managed by a school admin.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    type: Literal["access"]
    role: str
    school_id: str | None = None
    exp: int
    iat: int
    jti: str


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
    """Access token creation and validation.

    Tokens are issued by the identity provider in production; create_access_token
    exists for tooling and tests that need a token signed with the same key.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    @property
    def _key(self) -> str:
        return self._settings.secret_key.get_secret_value()

    def create_access_token(
        self,
        user_id: str | UUID,
        role: str,
        school_id: str | UUID | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            user_id: Admin user identifier.
            role: Role code.
            school_id: School the admin manages, if any.

        Returns:
            Encoded JWT.
        """
        issued = datetime.now(timezone.utc)
        expires = issued + timedelta(minutes=self._settings.access_token_expire_minutes)
        claims = TokenPayload(
            sub=str(user_id),
            type="access",
            role=role,
            school_id=str(school_id) if school_id else None,
            exp=int(expires.timestamp()),
            iat=int(issued.timestamp()),
            jti=secrets.token_urlsafe(16),
        )
        return jwt.encode(claims.model_dump(), self._key, algorithm=self._settings.algorithm)

    def decode_token(
        self,
        token: str,
        expected_type: Literal["access"] | None = None,
    ) -> TokenPayload:
        """Verify a token's signature and expiry and parse its claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, type or claims are wrong.
        """
        try:
            claims = jwt.decode(token, self._key, algorithms=[self._settings.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JOSEError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if expected_type and claims.get("type") != expected_type:
            raise InvalidTokenError(f"Expected {expected_type} token, got {claims.get('type')}")

        try:
            return TokenPayload.model_validate(claims)
        except ValidationError as e:
            raise InvalidTokenError(f"Invalid token claims: {e.error_count()} error(s)") from e

    def verify_token(self, token: str) -> bool:
        """Check whether a token decodes as a valid access token."""
        try:
            self.decode_token(token, expected_type="access")
        except JWTError:
            return False
        return True

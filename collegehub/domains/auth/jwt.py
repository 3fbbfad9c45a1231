# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

Access tokens carry the caller's role and institution scope (college and
department) so request handlers can authorize without a database lookup.
Refresh tokens only carry the subject.

Example:
    >>> from collegehub.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> tokens = jwt_manager.create_token_pair(user_id="user-123", role="HOD")
    >>> claims = jwt_manager.decode_token(tokens.access_token, "access")
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal
from uuid import UUID

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from collegehub.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        type: Token type (access or refresh).
        role: Role code of the user.
        name: Display name.
        email: Login email.
        college_id: College the user belongs to, None for platform users.
        department_id: Department of the user, if any.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID.
    """

    sub: str
    type: Literal["access", "refresh"]
    role: str | None = None
    name: str | None = None
    email: str | None = None
    college_id: str | None = None
    department_id: str | None = None
    exp: int
    iat: int
    jti: str


class TokenPair(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


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
    """JWT token creation and validation manager."""

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def _encode(self, payload: dict) -> str:
        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def create_token_pair(
        self,
        user_id: str | UUID,
        role: str | None = None,
        name: str | None = None,
        email: str | None = None,
        college_id: str | UUID | None = None,
        department_id: str | UUID | None = None,
    ) -> TokenPair:
        """Create an access and refresh token pair.

        Args:
            user_id: User identifier.
            role: Role code.
            name: Display name.
            email: Login email.
            college_id: College scope.
            department_id: Department scope.

        Returns:
            TokenPair with access and refresh tokens.
        """
        now = datetime.now(timezone.utc)
        refresh_exp = now + timedelta(days=self._settings.refresh_token_expire_days)

        access_token = self.create_access_token(
            user_id=user_id,
            role=role,
            name=name,
            email=email,
            college_id=college_id,
            department_id=department_id,
            now=now,
        )
        refresh_token = self._encode(
            {
                "sub": str(user_id),
                "type": "refresh",
                "exp": int(refresh_exp.timestamp()),
                "iat": int(now.timestamp()),
                "jti": secrets.token_urlsafe(16),
            }
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_in=self._settings.access_token_expire_minutes * 60,
            refresh_expires_in=self._settings.refresh_token_expire_days * 24 * 60 * 60,
        )

    def create_access_token(
        self,
        user_id: str | UUID,
        role: str | None = None,
        name: str | None = None,
        email: str | None = None,
        college_id: str | UUID | None = None,
        department_id: str | UUID | None = None,
        now: datetime | None = None,
    ) -> str:
        """Create an access token."""
        now = now or datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        return self._encode(
            {
                "sub": str(user_id),
                "type": "access",
                "role": role,
                "name": name,
                "email": email,
                "college_id": str(college_id) if college_id else None,
                "department_id": str(department_id) if department_id else None,
                "exp": int(exp.timestamp()),
                "iat": int(now.timestamp()),
                "jti": secrets.token_urlsafe(16),
            }
        )

    def decode_token(
        self,
        token: str,
        expected_type: Literal["access", "refresh"] | None = None,
    ) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.
            expected_type: Expected token type.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or of the wrong type.
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

        if expected_type and payload.get("type") != expected_type:
            raise InvalidTokenError(f"Expected {expected_type} token, got {payload.get('type')}")

        try:
            return TokenPayload(**payload)
        except ValueError as e:
            raise InvalidTokenError(f"Invalid token claims: {str(e)}") from e

    def verify_token(
        self,
        token: str,
        expected_type: Literal["access", "refresh"] | None = None,
    ) -> bool:
        """Check whether a token decodes and has the expected type."""
        try:
            self.decode_token(token, expected_type)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest of a token."""
        return hashlib.sha256(token.encode()).hexdigest()

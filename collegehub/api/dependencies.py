# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Dependencies are used to:
- Get database sessions
- Get authenticated users and enforce roles
- Get shared infrastructure (JWT manager, password hasher, Redis, email)

Example:
    @router.get("/students")
    async def list_students(
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(require_staff),
    ):
        ...
"""

import logging
from functools import lru_cache
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.middleware.auth import CurrentUser, get_current_user
from collegehub.core.config import Settings, get_settings
from collegehub.domains.auth.jwt import JWTManager
from collegehub.domains.auth.password import PasswordHasher
from collegehub.infrastructure.cache import RedisClient, RedisError, get_redis
from collegehub.infrastructure.database import get_session
from collegehub.infrastructure.notifications import EmailSender
from collegehub.models.common import COLLEGE_ADMIN_ROLES, STAFF_ROLES, UserRole

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession committed on success and rolled back on error.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Infrastructure Dependencies
# =========================================================================


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def get_jwt_manager() -> JWTManager:
    return JWTManager(get_settings().jwt)


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def get_email_sender() -> EmailSender:
    return EmailSender(get_settings())


def get_optional_redis() -> Optional[RedisClient]:
    """Redis client, or None when it was not initialised at startup."""
    try:
        return get_redis()
    except RedisError:
        logger.debug("Redis requested but not initialised")
        return None


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated user.

    Raises:
        HTTPException: 401 if the request carries no valid access token.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_college_user(request: Request) -> CurrentUser:
    """Require a user attached to a college.

    Raises:
        HTTPException: 403 if the token carries no college.
    """
    user = require_auth(request)
    if not user.college_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="College access required",
        )
    return user


def require_customer(request: Request) -> CurrentUser:
    """Require a shop customer."""
    user = require_auth(request)
    if not user.is_customer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.post("/batches")
        async def create_batch(
            user: CurrentUser = Depends(RequireRole("COLLEGE_SUPER_ADMIN")),
        ):
            ...
    """

    def __init__(self, *roles: str, college_scoped: bool = True) -> None:
        """Initialize role requirement.

        Args:
            roles: Accepted role codes (any of these).
            college_scoped: Also require a college in the token.
        """
        self.roles = roles
        self.college_scoped = college_scoped

    def __call__(self, request: Request) -> CurrentUser:
        """Check roles and return user.

        Raises:
            HTTPException: 403 if the role is not accepted.
        """
        user = require_college_user(request) if self.college_scoped else require_auth(request)
        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )
        return user


require_sbte_admin = RequireRole(UserRole.SBTE_ADMIN.value, college_scoped=False)
require_college_admin = RequireRole(*COLLEGE_ADMIN_ROLES)
require_staff = RequireRole(*STAFF_ROLES)
require_finance = RequireRole(*COLLEGE_ADMIN_ROLES, UserRole.FINANCE_MANAGER.value)
require_student = RequireRole(UserRole.STUDENT.value)
require_user_admin = RequireRole(
    UserRole.SBTE_ADMIN.value, *COLLEGE_ADMIN_ROLES, college_scoped=False
)


# =========================================================================
# Annotated aliases
# =========================================================================

DBSession = Annotated[AsyncSession, Depends(get_db)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
CollegeUser = Annotated[CurrentUser, Depends(require_college_user)]
CollegeAdmin = Annotated[CurrentUser, Depends(require_college_admin)]
StaffUser = Annotated[CurrentUser, Depends(require_staff)]
FinanceUser = Annotated[CurrentUser, Depends(require_finance)]
StudentUser = Annotated[CurrentUser, Depends(require_student)]
CustomerUser = Annotated[CurrentUser, Depends(require_customer)]
SBTEAdmin = Annotated[CurrentUser, Depends(require_sbte_admin)]

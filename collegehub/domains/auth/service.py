# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service.

This module provides the AuthService that orchestrates:
- Captcha protected password login with progressive account lockout
- Email OTP login with send rate limits
- Token refresh
- Password reset by emailed code
- Staff account creation

Example:
    >>> service = AuthService(db, jwt_manager, hasher, settings, redis, email_sender)
    >>> result = await service.login("hod@college.edu", "S3cret!pass", "7", hash, expires)
"""

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, NamedTuple, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.domains.auth.captcha import Captcha, generate_captcha, validate_captcha
from collegehub.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
)
from collegehub.domains.auth.otp import OneTimeCodeManager, SendLimits
from collegehub.domains.auth.password import (
    PasswordHasher,
    PasswordPolicyError,
    validate_password_strength,
)
from collegehub.infrastructure.database.models import College, Department, User
from collegehub.models.auth import LockStatusResponse, UserCreateRequest, UserResponse
from collegehub.models.common import UserRole
from collegehub.utils.datetime import utc_now

if TYPE_CHECKING:
    from collegehub.api.middleware.auth import CurrentUser
    from collegehub.core.config.settings import Settings
    from collegehub.infrastructure.cache.redis_client import RedisClient
    from collegehub.infrastructure.notifications.email import EmailResult, EmailSender

logger = logging.getLogger(__name__)

# Roles a college admin may create inside their own college
COLLEGE_CREATABLE_ROLES = frozenset(
    {
        UserRole.ADM.value,
        UserRole.HOD.value,
        UserRole.TEACHER.value,
        UserRole.FINANCE_MANAGER.value,
    }
)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCaptchaError(AuthenticationError):
    """Raised when the captcha answer is wrong or expired."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password is wrong."""

    pass


class AccountLockedError(AuthenticationError):
    """Raised when the account is locked after failed logins.

    Attributes:
        locked_until: When the lock ends.
        wait_seconds: Seconds until the lock ends.
    """

    def __init__(self, locked_until: datetime) -> None:
        self.locked_until = locked_until
        self.wait_seconds = max(1, int((locked_until - utc_now()).total_seconds()))
        super().__init__("Account locked due to too many failed attempts.")


class AccountInactiveError(AuthenticationError):
    """Raised when the account may not sign in."""

    pass


class UserNotFoundError(AuthenticationError):
    """Raised when no account exists for an email."""

    error_code = "USER_NOT_FOUND"


class TokenRefreshError(AuthenticationError):
    """Raised when a refresh token cannot be exchanged."""

    pass


class UserExistsError(AuthenticationError):
    """Raised when an email is already registered."""

    pass


class UserCreationError(AuthenticationError):
    """Raised when the creator may not create the requested account."""

    pass


class EmailDeliveryError(AuthenticationError):
    """Raised when a code was issued but the mail server refused it."""

    pass


class LoginResult(NamedTuple):
    user: User
    tokens: TokenPair


def lockout_duration(lockout_count: int, base_seconds: int, max_seconds: int) -> timedelta:
    """Lock duration for the n-th lockout: base doubled per lockout, capped."""
    exponent = max(0, lockout_count - 1)
    return timedelta(seconds=min(base_seconds * (2**exponent), max_seconds))


class AuthService:
    """Authentication service.

    Attributes:
        db: Async database session.
        settings: Application settings.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        password_hasher: PasswordHasher,
        settings: "Settings",
        redis: Optional["RedisClient"] = None,
        email_sender: Optional["EmailSender"] = None,
    ) -> None:
        self.db = db
        self.settings = settings
        self._jwt_manager = jwt_manager
        self._password_hasher = password_hasher
        self._redis = redis
        self._email_sender = email_sender

    # ------------------------------------------------------------------
    # Captcha and password login
    # ------------------------------------------------------------------

    def generate_captcha(self) -> Captcha:
        security = self.settings.security
        return generate_captcha(
            security.captcha_secret.get_secret_value(),
            ttl_seconds=security.captcha_ttl_seconds,
        )

    async def login(
        self,
        email: str,
        password: str,
        captcha_answer: str,
        captcha_hash: str,
        captcha_expires_at: int,
    ) -> LoginResult:
        """Authenticate with email, password and captcha.

        Args:
            email: Login email.
            password: Plain text password.
            captcha_answer: User's captcha answer.
            captcha_hash: Hash returned with the captcha.
            captcha_expires_at: Expiry returned with the captcha.

        Returns:
            LoginResult with the user and a token pair.

        Raises:
            InvalidCaptchaError: If the captcha does not validate.
            InvalidCredentialsError: If email or password is wrong.
            AccountLockedError: If the account is locked.
            AccountInactiveError: If the account is disabled or an
                unverified alumnus.
        """
        security = self.settings.security
        if not validate_captcha(
            captcha_answer,
            captcha_hash,
            captcha_expires_at,
            security.captcha_secret.get_secret_value(),
        ):
            raise InvalidCaptchaError("Invalid or expired captcha")

        user = await self._get_user_by_email(email)
        if not user:
            logger.warning("Login failed: user not found for email %s", email)
            raise InvalidCredentialsError("Invalid email or password")

        now = utc_now()
        if user.locked_until and user.locked_until > now:
            logger.warning("Login refused: account locked for user %s", user.id)
            raise AccountLockedError(user.locked_until)

        if not self._password_hasher.verify(password, user.password_hash):
            await self._handle_failed_login(user)
            raise InvalidCredentialsError("Invalid email or password")

        self._ensure_can_sign_in(user)

        user.failed_login_attempts = 0
        user.lockout_count = 0
        user.locked_until = None
        user.last_login_at = now
        await self.db.commit()

        logger.info("User logged in: %s (%s)", user.id, user.role)
        return LoginResult(user=user, tokens=self._issue_tokens(user))

    async def check_lock_status(self, email: str) -> LockStatusResponse:
        """Report lock state without revealing whether the email exists."""
        max_attempts = self.settings.security.max_login_attempts
        user = await self._get_user_by_email(email)
        if not user:
            return LockStatusResponse(
                is_locked=False, remaining_attempts=max_attempts, max_attempts=max_attempts
            )

        locked = bool(user.locked_until and user.locked_until > utc_now())
        return LockStatusResponse(
            is_locked=locked,
            remaining_attempts=0 if locked else max(0, max_attempts - user.failed_login_attempts),
            max_attempts=max_attempts,
            locked_until=user.locked_until if locked else None,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair.

        Raises:
            TokenRefreshError: If the token is invalid or the user may no
                longer sign in.
        """
        try:
            payload = self._jwt_manager.decode_token(refresh_token, expected_type="refresh")
        except (TokenExpiredError, InvalidTokenError) as e:
            raise TokenRefreshError(f"Invalid refresh token: {str(e)}") from e

        result = await self.db.execute(select(User).where(User.id == payload.sub))
        user = result.scalar_one_or_none()
        if not user or not user.is_active:
            raise TokenRefreshError("User not found or inactive")

        logger.info("Tokens refreshed for user: %s", user.id)
        return self._issue_tokens(user)

    # ------------------------------------------------------------------
    # OTP login
    # ------------------------------------------------------------------

    def _otp_manager(self) -> OneTimeCodeManager:
        s = self.settings.security
        return OneTimeCodeManager(
            self._require_redis(),
            "otp",
            SendLimits(
                code_ttl_seconds=s.otp_ttl_seconds,
                max_per_hour=s.otp_max_per_hour,
                max_per_day=s.otp_max_per_day,
                email_lockout_seconds=s.otp_email_lockout_seconds,
                min_interval_seconds=s.otp_min_interval_seconds,
                max_per_ip=s.otp_max_per_ip,
                ip_lockout_seconds=s.otp_ip_lockout_seconds,
            ),
        )

    async def _ensure_delivered(
        self, manager: OneTimeCodeManager, email: str, sent: "EmailResult"
    ) -> None:
        """Drop the issued code when the mail server refused the message.

        A send skipped because SMTP is not configured counts as delivered.
        """
        if sent.sent or sent.skipped:
            return
        await manager.clear(email)
        logger.error("Could not email %s code to %s: %s", manager.namespace, email, sent.error)
        raise EmailDeliveryError("Could not send the email. Please try again later.")

    async def send_otp(self, email: str, ip: Optional[str] = None) -> int:
        """Email a login OTP.

        Limits are checked before the account lookup so that probing
        unknown addresses is throttled like any other request.

        Returns:
            Lifetime of the issued code in seconds.

        Raises:
            OTPRateLimitError: If a limit refuses the send.
            UserNotFoundError: If no account exists for the email.
            EmailDeliveryError: If the mail server refused the message.
        """
        manager = self._otp_manager()
        await manager.check_send_allowed(email, ip)

        user = await self._get_user_by_email(email)
        if not user:
            await manager.record_send(email, ip)
            logger.warning("OTP requested for unknown email %s", email)
            raise UserNotFoundError("User not found")

        await manager.check_interval(email)
        code = await manager.issue(email)
        if self._email_sender is not None:
            sent = await self._email_sender.send_otp(
                user.email, user.name, code, manager.limits.code_ttl_seconds
            )
            await self._ensure_delivered(manager, email, sent)
        await manager.record_send(email, ip)

        logger.info("OTP sent to user %s", user.id)
        return manager.limits.code_ttl_seconds

    async def verify_otp(self, email: str, otp: str) -> LoginResult:
        """Sign in with an emailed OTP.

        Raises:
            InvalidOTPError: If no code is stored or it does not match.
            AccountInactiveError: If the account may not sign in.
        """
        await self._otp_manager().verify(email, otp)

        user = await self._get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError("Invalid email or password")
        self._ensure_can_sign_in(user)

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login_at = utc_now()
        await self.db.commit()

        logger.info("User logged in with OTP: %s", user.id)
        return LoginResult(user=user, tokens=self._issue_tokens(user))

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def _reset_manager(self) -> OneTimeCodeManager:
        s = self.settings.security
        return OneTimeCodeManager(
            self._require_redis(),
            "reset",
            SendLimits(
                code_ttl_seconds=s.reset_code_ttl_seconds,
                max_per_hour=s.reset_max_per_hour,
                max_per_day=s.reset_max_per_day,
                email_lockout_seconds=s.reset_lockout_seconds,
                min_interval_seconds=s.otp_min_interval_seconds,
                max_verify_attempts=s.reset_max_verify_attempts,
                verify_lockout_seconds=s.reset_verify_lockout_seconds,
            ),
        )

    async def initiate_password_reset(self, email: str) -> None:
        """Email a reset code when the account exists.

        Unknown emails are counted and silently accepted.

        Raises:
            OTPRateLimitError: If a limit refuses the request.
            EmailDeliveryError: If the mail server refused the message.
        """
        manager = self._reset_manager()
        await manager.check_send_allowed(email)
        await manager.check_interval(email)

        user = await self._get_user_by_email(email)
        if not user:
            await manager.record_send(email)
            logger.warning("Password reset requested for unknown email %s", email)
            return

        code = await manager.issue(email)
        if self._email_sender is not None:
            sent = await self._email_sender.send_password_reset(
                user.email, user.name, code, manager.limits.code_ttl_seconds
            )
            await self._ensure_delivered(manager, email, sent)
        await manager.record_send(email)
        logger.info("Password reset code sent to user %s", user.id)

    async def verify_reset_code(self, email: str, code: str) -> None:
        """Check a reset code without consuming it.

        Raises:
            InvalidOTPError: If the code is missing or wrong.
            OTPRateLimitError: If verification is locked.
        """
        await self._reset_manager().verify(email, code, consume=False)

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Set a new password using a valid reset code.

        Raises:
            PasswordPolicyError: If the password is too weak.
            InvalidOTPError: If the code is missing or wrong.
            OTPRateLimitError: If verification is locked.
        """
        errors = validate_password_strength(new_password)
        if errors:
            raise PasswordPolicyError(errors)

        manager = self._reset_manager()
        await manager.verify(email, code, consume=False)

        user = await self._get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError("Invalid email or password")

        user.password_hash = self._password_hasher.hash(new_password)
        user.failed_login_attempts = 0
        user.lockout_count = 0
        user.locked_until = None
        await self.db.commit()
        await manager.clear(email)

        logger.info("Password reset for user %s", user.id)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def create_user(
        self,
        request: UserCreateRequest,
        creator: "CurrentUser",
    ) -> UserResponse:
        """Create a staff account.

        SBTE admins may create accounts in any college; college admins only
        in their own college and only for staff roles.

        Raises:
            UserCreationError: If the creator may not create this account.
            UserExistsError: If the email is already registered.
        """
        role = request.role.value
        if creator.is_sbte_admin:
            college_id = str(request.college_id) if request.college_id else None
            if role != UserRole.SBTE_ADMIN.value and not college_id:
                raise UserCreationError("college_id is required for college accounts")
        else:
            if role not in COLLEGE_CREATABLE_ROLES:
                raise UserCreationError(f"Role {role} cannot be created by a college admin")
            college_id = creator.college_id

        if college_id:
            result = await self.db.execute(select(College).where(College.id == college_id))
            if not result.scalar_one_or_none():
                raise UserCreationError("College not found")

        if request.department_id:
            result = await self.db.execute(
                select(Department).where(
                    Department.id == str(request.department_id),
                    Department.college_id == college_id,
                )
            )
            if not result.scalar_one_or_none():
                raise UserCreationError("Department not found")

        if await self._get_user_by_email(request.email):
            raise UserExistsError("User with this email already exists")

        errors = validate_password_strength(request.password)
        if errors:
            raise PasswordPolicyError(errors)

        user = User(
            email=request.email.lower(),
            password_hash=self._password_hasher.hash(request.password),
            name=request.name,
            phone=request.phone,
            role=role,
            college_id=college_id,
            department_id=str(request.department_id) if request.department_id else None,
            is_active=True,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info("Created user: %s (%s) by %s", user.id, role, creator.id)
        return self.to_user_response(user)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    def _require_redis(self) -> "RedisClient":
        if self._redis is None:
            raise AuthenticationError("One-time codes are unavailable: Redis is not connected")
        return self._redis

    def _ensure_can_sign_in(self, user: User) -> None:
        if not user.is_active:
            logger.warning("Login refused: inactive account %s", user.id)
            raise AccountInactiveError("Account is not active")
        if user.role == UserRole.ALUMNUS.value and not user.is_verified_alumnus:
            logger.warning("Login refused: unverified alumnus %s", user.id)
            raise AccountInactiveError("Alumni account is pending verification")

    async def _handle_failed_login(self, user: User) -> None:
        security = self.settings.security
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1

        if user.failed_login_attempts >= security.max_login_attempts:
            user.lockout_count = (user.lockout_count or 0) + 1
            user.locked_until = utc_now() + lockout_duration(
                user.lockout_count,
                security.login_lockout_seconds,
                security.max_lockout_seconds,
            )
            user.failed_login_attempts = 0
            logger.warning(
                "Account locked for user %s until %s (lockout #%d)",
                user.id,
                user.locked_until.isoformat(),
                user.lockout_count,
            )
        else:
            logger.warning(
                "Login failed for user %s (%d/%d)",
                user.id,
                user.failed_login_attempts,
                security.max_login_attempts,
            )

        await self.db.commit()

    def _issue_tokens(self, user: User) -> TokenPair:
        return self._jwt_manager.create_token_pair(
            user_id=user.id,
            role=user.role,
            name=user.name,
            email=user.email,
            college_id=user.college_id,
            department_id=user.department_id,
        )

    @staticmethod
    def to_user_response(user: User) -> UserResponse:
        return UserResponse(
            id=UUID(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            phone=user.phone,
            college_id=UUID(user.college_id) if user.college_id else None,
            department_id=UUID(user.department_id) if user.department_id else None,
            is_active=user.is_active,
            last_login_at=user.last_login_at,
        )

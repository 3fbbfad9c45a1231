# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the authentication service."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from collegehub.api.middleware.auth import CurrentUser
from collegehub.core.config.settings import Settings
from collegehub.domains.auth.jwt import JWTManager, TokenPayload
from collegehub.domains.auth.otp import OTPRateLimitError
from collegehub.domains.auth.password import PasswordHasher, PasswordPolicyError
from collegehub.infrastructure.notifications.email import EmailResult
from collegehub.domains.auth.service import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    AuthService,
    EmailDeliveryError,
    InvalidCaptchaError,
    InvalidCredentialsError,
    UserCreationError,
    UserExistsError,
    UserNotFoundError,
    lockout_duration,
)
from collegehub.models.auth import UserCreateRequest
from collegehub.utils.datetime import utc_now

PASSWORD = "Str0ng!pass"
HASHER = PasswordHasher(rounds=4)
PASSWORD_HASH = HASHER.hash(PASSWORD)


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="development")


@pytest.fixture
def email_sender() -> MagicMock:
    sender = MagicMock()
    sender.send_otp = AsyncMock(return_value=EmailResult(sent=True))
    sender.send_password_reset = AsyncMock(return_value=EmailResult(sent=True))
    return sender


@pytest.fixture
def auth_service(mock_db, settings, fake_redis, email_sender) -> AuthService:
    return AuthService(
        mock_db,
        JWTManager(settings.jwt),
        HASHER,
        settings,
        redis=fake_redis,
        email_sender=email_sender,
    )


@pytest.fixture
def user(college_id) -> MagicMock:
    user = MagicMock()
    user.id = str(uuid4())
    user.email = "hod@college.edu"
    user.name = "Head Of Department"
    user.role = "HOD"
    user.phone = None
    user.password_hash = PASSWORD_HASH
    user.college_id = college_id
    user.department_id = None
    user.is_active = True
    user.is_verified_alumnus = False
    user.failed_login_attempts = 0
    user.lockout_count = 0
    user.locked_until = None
    user.last_login_at = None
    return user


def _creator(role: str, college_id: str | None) -> CurrentUser:
    return CurrentUser(
        TokenPayload(
            sub=str(uuid4()),
            type="access",
            role=role,
            college_id=college_id,
            exp=0,
            iat=0,
            jti="test",
        )
    )


async def _login(service: AuthService, password: str = PASSWORD):
    with patch("collegehub.domains.auth.service.validate_captcha", return_value=True):
        return await service.login("HOD@college.edu", password, "7", "hash", 0)


class TestLockoutDuration:
    def test_doubles_per_lockout_and_caps(self) -> None:
        assert lockout_duration(1, 1800, 86400) == timedelta(minutes=30)
        assert lockout_duration(2, 1800, 86400) == timedelta(hours=1)
        assert lockout_duration(4, 1800, 86400) == timedelta(hours=4)
        assert lockout_duration(10, 1800, 86400) == timedelta(days=1)


class TestLogin:
    @pytest.mark.asyncio
    async def test_invalid_captcha(self, auth_service, mock_db) -> None:
        with pytest.raises(InvalidCaptchaError):
            await auth_service.login("hod@college.edu", PASSWORD, "7", "bad-hash", 0)

        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_resets_counters(self, auth_service, mock_db, make_result, user) -> None:
        user.failed_login_attempts = 3
        mock_db.execute.return_value = make_result(one=user)

        result = await _login(auth_service)

        assert result.user is user
        assert user.failed_login_attempts == 0
        assert user.last_login_at is not None
        payload = auth_service._jwt_manager.decode_token(result.tokens.access_token, "access")
        assert payload.role == "HOD"
        assert payload.college_id == user.college_id

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(InvalidCredentialsError):
            await _login(auth_service)

    @pytest.mark.asyncio
    async def test_wrong_password_counts_attempt(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)

        with pytest.raises(InvalidCredentialsError):
            await _login(auth_service, "Wr0ng!pass")

        assert user.failed_login_attempts == 1
        assert user.locked_until is None
        mock_db.commit.assert_awaited()

    @pytest.mark.asyncio
    async def test_fifth_failure_locks_account(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        user.failed_login_attempts = 4
        mock_db.execute.return_value = make_result(one=user)

        with pytest.raises(InvalidCredentialsError):
            await _login(auth_service, "Wr0ng!pass")

        assert user.lockout_count == 1
        assert user.failed_login_attempts == 0
        assert user.locked_until > utc_now() + timedelta(minutes=29)

    @pytest.mark.asyncio
    async def test_locked_account_refused_even_with_right_password(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        user.locked_until = utc_now() + timedelta(minutes=10)
        mock_db.execute.return_value = make_result(one=user)

        with pytest.raises(AccountLockedError) as exc_info:
            await _login(auth_service)

        assert 0 < exc_info.value.wait_seconds <= 600

    @pytest.mark.asyncio
    async def test_unverified_alumnus_refused(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        user.role = "ALUMNUS"
        mock_db.execute.return_value = make_result(one=user)

        with pytest.raises(AccountInactiveError):
            await _login(auth_service)

    @pytest.mark.asyncio
    async def test_verified_alumnus_signs_in(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        user.role = "ALUMNUS"
        user.is_verified_alumnus = True
        mock_db.execute.return_value = make_result(one=user)

        result = await _login(auth_service)

        assert result.user is user


class TestLockStatus:
    @pytest.mark.asyncio
    async def test_unknown_email_looks_unlocked(self, auth_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(one=None)

        status = await auth_service.check_lock_status("ghost@college.edu")

        assert status.is_locked is False
        assert status.remaining_attempts == 5

    @pytest.mark.asyncio
    async def test_remaining_attempts(self, auth_service, mock_db, make_result, user) -> None:
        user.failed_login_attempts = 2
        mock_db.execute.return_value = make_result(one=user)

        status = await auth_service.check_lock_status(user.email)

        assert status.remaining_attempts == 3


class TestOTPLogin:
    @pytest.mark.asyncio
    async def test_send_to_unknown_email_is_counted(
        self, auth_service, mock_db, make_result, fake_redis, email_sender
    ) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(UserNotFoundError):
            await auth_service.send_otp("ghost@college.edu", "10.0.0.1")

        assert await fake_redis.get("otp:hour:ghost@college.edu") == 1
        email_sender.send_otp.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_then_verify(
        self, auth_service, mock_db, make_result, fake_redis, email_sender, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)

        expires_in = await auth_service.send_otp(user.email)
        code = email_sender.send_otp.await_args.args[2]
        result = await auth_service.verify_otp(user.email, code)

        assert expires_in == 300
        assert result.user is user
        assert await fake_redis.get(f"otp:code:{user.email}") is None

    @pytest.mark.asyncio
    async def test_second_send_within_interval_refused(
        self, auth_service, mock_db, make_result, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)
        await auth_service.send_otp(user.email)

        with pytest.raises(OTPRateLimitError) as exc_info:
            await auth_service.send_otp(user.email)

        assert exc_info.value.reason == "interval"

    @pytest.mark.asyncio
    async def test_smtp_failure_drops_code_and_is_not_counted(
        self, auth_service, mock_db, make_result, fake_redis, email_sender, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)
        email_sender.send_otp.return_value = EmailResult(sent=False, error="SMTP down")

        with pytest.raises(EmailDeliveryError):
            await auth_service.send_otp(user.email, "10.0.0.1")

        assert await fake_redis.get(f"otp:code:{user.email}") is None
        assert await fake_redis.get(f"otp:hour:{user.email}") is None
        assert await fake_redis.get(f"otp:last:{user.email}") is None

    @pytest.mark.asyncio
    async def test_skipped_send_still_issues_code(
        self, auth_service, mock_db, make_result, fake_redis, email_sender, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)
        email_sender.send_otp.return_value = EmailResult(sent=False, skipped=True)

        await auth_service.send_otp(user.email)

        assert await fake_redis.get(f"otp:code:{user.email}") is not None
        assert await fake_redis.get(f"otp:hour:{user.email}") == 1

    @pytest.mark.asyncio
    async def test_requires_redis(self, mock_db, settings) -> None:
        service = AuthService(mock_db, JWTManager(settings.jwt), HASHER, settings)

        with pytest.raises(AuthenticationError):
            await service.send_otp("hod@college.edu")


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_unknown_email_is_silently_accepted(
        self, auth_service, mock_db, make_result, email_sender
    ) -> None:
        mock_db.execute.return_value = make_result(one=None)

        await auth_service.initiate_password_reset("ghost@college.edu")

        email_sender.send_password_reset.assert_not_called()

    @pytest.mark.asyncio
    async def test_full_reset_flow(
        self, auth_service, mock_db, make_result, email_sender, fake_redis, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)

        await auth_service.initiate_password_reset(user.email)
        code = email_sender.send_password_reset.await_args.args[2]
        await auth_service.verify_reset_code(user.email, code)
        await auth_service.reset_password(user.email, code, "N3w!Password")

        assert HASHER.verify("N3w!Password", user.password_hash)
        assert await fake_redis.get(f"reset:code:{user.email}") is None

    @pytest.mark.asyncio
    async def test_smtp_failure_is_reported(
        self, auth_service, mock_db, make_result, email_sender, fake_redis, user
    ) -> None:
        mock_db.execute.return_value = make_result(one=user)
        email_sender.send_password_reset.return_value = EmailResult(
            sent=False, error="Connection refused"
        )

        with pytest.raises(EmailDeliveryError):
            await auth_service.initiate_password_reset(user.email)

        assert await fake_redis.get(f"reset:code:{user.email}") is None
        assert await fake_redis.get(f"reset:hour:{user.email}") is None

    @pytest.mark.asyncio
    async def test_weak_password_rejected_before_code_check(self, auth_service) -> None:
        with pytest.raises(PasswordPolicyError):
            await auth_service.reset_password("hod@college.edu", "123456", "weak")


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_college_admin_cannot_create_sbte_admin(self, auth_service, college_id) -> None:
        request = UserCreateRequest(
            email="new@college.edu", name="New User", password=PASSWORD, role="SBTE_ADMIN"
        )

        with pytest.raises(UserCreationError):
            await auth_service.create_user(request, _creator("COLLEGE_SUPER_ADMIN", college_id))

    @pytest.mark.asyncio
    async def test_sbte_admin_needs_college_for_college_roles(self, auth_service) -> None:
        request = UserCreateRequest(
            email="new@college.edu", name="New User", password=PASSWORD, role="TEACHER"
        )

        with pytest.raises(UserCreationError, match="college_id"):
            await auth_service.create_user(request, _creator("SBTE_ADMIN", None))

    @pytest.mark.asyncio
    async def test_duplicate_email(
        self, auth_service, mock_db, make_result, college_id, user
    ) -> None:
        mock_db.execute.side_effect = [make_result(one=MagicMock()), make_result(one=user)]
        request = UserCreateRequest(
            email=user.email, name="New User", password=PASSWORD, role="TEACHER"
        )

        with pytest.raises(UserExistsError):
            await auth_service.create_user(request, _creator("COLLEGE_SUPER_ADMIN", college_id))

    @pytest.mark.asyncio
    async def test_creates_in_creator_college(
        self, auth_service, mock_db, make_result, college_id
    ) -> None:
        mock_db.execute.side_effect = [make_result(one=MagicMock()), make_result(one=None)]

        async def mock_refresh(obj):
            obj.id = str(uuid4())
            obj.last_login_at = None

        mock_db.refresh.side_effect = mock_refresh
        request = UserCreateRequest(
            email="Teacher@College.edu", name="New Teacher", password=PASSWORD, role="TEACHER"
        )

        result = await auth_service.create_user(
            request, _creator("COLLEGE_SUPER_ADMIN", college_id)
        )

        created = mock_db.add.call_args.args[0]
        assert created.email == "teacher@college.edu"
        assert created.college_id == college_id
        assert str(result.college_id) == college_id
        assert result.role == "TEACHER"

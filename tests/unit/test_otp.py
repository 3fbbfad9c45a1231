# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for one-time code limits and verification."""

import pytest

from collegehub.domains.auth.otp import (
    InvalidOTPError,
    OneTimeCodeManager,
    OTPRateLimitError,
    SendLimits,
    generate_code,
)

LIMITS = SendLimits(
    code_ttl_seconds=300,
    max_per_hour=3,
    max_per_day=5,
    email_lockout_seconds=600,
    min_interval_seconds=60,
    max_per_ip=4,
    ip_lockout_seconds=300,
)

RESET_LIMITS = SendLimits(
    code_ttl_seconds=600,
    max_per_hour=3,
    max_per_day=5,
    email_lockout_seconds=1800,
    min_interval_seconds=60,
    max_verify_attempts=3,
    verify_lockout_seconds=900,
)


@pytest.fixture
def manager(fake_redis) -> OneTimeCodeManager:
    return OneTimeCodeManager(fake_redis, "otp", LIMITS)


class TestGenerateCode:
    def test_six_digits(self) -> None:
        for _ in range(20):
            code = generate_code()
            assert len(code) == 6
            assert code.isdigit()


class TestSendLimits:
    @pytest.mark.asyncio
    async def test_fresh_email_is_allowed(self, manager) -> None:
        await manager.check_send_allowed("student@college.edu", "10.0.0.1")
        await manager.check_interval("student@college.edu")

    @pytest.mark.asyncio
    async def test_interval_after_send(self, manager) -> None:
        await manager.record_send("student@college.edu")

        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.check_interval("Student@College.edu")

        assert exc_info.value.reason == "interval"
        assert exc_info.value.wait_seconds == 60

    @pytest.mark.asyncio
    async def test_hourly_limit_locks_email(self, manager, fake_redis) -> None:
        for _ in range(LIMITS.max_per_hour):
            await manager.record_send("student@college.edu")

        assert await fake_redis.ttl("otp:lock:email:student@college.edu") == 600
        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.check_send_allowed("student@college.edu")

        assert exc_info.value.reason == "account_locked"

    @pytest.mark.asyncio
    async def test_daily_limit(self, manager, fake_redis) -> None:
        await fake_redis.set("otp:day:student@college.edu", 5, expire_seconds=7200)

        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.check_send_allowed("student@college.edu")

        assert exc_info.value.reason == "daily"
        assert exc_info.value.wait_seconds == 7200
        assert "2 hours" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_ip_limit_locks_ip(self, manager) -> None:
        for i in range(LIMITS.max_per_ip):
            await manager.record_send(f"user{i}@college.edu", "10.0.0.9")

        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.check_send_allowed("other@college.edu", "10.0.0.9")

        assert exc_info.value.reason == "ip_locked"

    @pytest.mark.asyncio
    async def test_email_lock_checked_before_ip_lock(self, manager, fake_redis) -> None:
        await fake_redis.set("otp:lock:email:a@college.edu", "1", expire_seconds=100)
        await fake_redis.set("otp:lock:ip:10.0.0.1", "1", expire_seconds=100)

        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.check_send_allowed("a@college.edu", "10.0.0.1")

        assert exc_info.value.reason == "account_locked"


class TestVerify:
    @pytest.mark.asyncio
    async def test_correct_code_is_consumed(self, manager, fake_redis) -> None:
        code = await manager.issue("Student@College.edu")

        await manager.verify("student@college.edu", code)

        assert await fake_redis.get("otp:code:student@college.edu") is None
        with pytest.raises(InvalidOTPError):
            await manager.verify("student@college.edu", code)

    @pytest.mark.asyncio
    async def test_verify_without_consuming(self, manager, fake_redis) -> None:
        code = await manager.issue("student@college.edu")

        await manager.verify("student@college.edu", f" {code} ", consume=False)

        assert await fake_redis.get("otp:code:student@college.edu") == code

    @pytest.mark.asyncio
    async def test_wrong_code(self, manager) -> None:
        code = await manager.issue("student@college.edu")
        wrong = "000000" if code != "000000" else "111111"

        with pytest.raises(InvalidOTPError):
            await manager.verify("student@college.edu", wrong)

    @pytest.mark.asyncio
    async def test_missing_code(self, manager) -> None:
        with pytest.raises(InvalidOTPError, match="expired"):
            await manager.verify("nobody@college.edu", "123456")

    @pytest.mark.asyncio
    async def test_reset_verification_locks_after_attempts(self, fake_redis) -> None:
        manager = OneTimeCodeManager(fake_redis, "reset", RESET_LIMITS)
        code = await manager.issue("student@college.edu")
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(RESET_LIMITS.max_verify_attempts - 1):
            with pytest.raises(InvalidOTPError):
                await manager.verify("student@college.edu", wrong, consume=False)

        with pytest.raises(OTPRateLimitError) as exc_info:
            await manager.verify("student@college.edu", wrong, consume=False)

        assert exc_info.value.reason == "verify_locked"
        assert await fake_redis.get("reset:code:student@college.edu") is None
        with pytest.raises(OTPRateLimitError):
            await manager.verify("student@college.edu", code)

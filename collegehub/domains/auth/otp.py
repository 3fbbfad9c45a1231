# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""One-time codes with send rate limits.

Both the OTP login flow and the password reset flow send a 6-digit code by
email and have to be protected against being used as a mail cannon. The
rules are identical in shape and differ in numbers, so a single
``OneTimeCodeManager`` serves both, configured with ``SendLimits``.

Redis layout (under the manager's namespace, e.g. ``otp``)::

    {ns}:lock:email:{email}   email lockout marker, TTL = lockout
    {ns}:lock:ip:{ip}         IP lockout marker, TTL = IP lockout
    {ns}:day:{email}          sends in the last day (fixed window)
    {ns}:hour:{email}         sends in the last hour (fixed window)
    {ns}:ip:{ip}              sends from this IP in the last hour
    {ns}:last:{email}         marker, TTL = minimum interval
    {ns}:code:{email}         the code itself, TTL = code lifetime
    {ns}:verify:{email}       wrong verification attempts
    {ns}:lock:verify:{email}  verification lockout marker
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from collegehub.infrastructure.cache.redis_client import RedisClient
from collegehub.utils.datetime import format_time_remaining

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60
HOUR_SECONDS = 60 * 60

REASON_MESSAGES = {
    "account_locked": "Account temporarily locked due to too many requests.",
    "ip_locked": "Too many requests from this IP address.",
    "daily": "Daily OTP limit exceeded.",
    "hourly": "Hourly OTP limit exceeded.",
    "ip": "Too many requests from this IP address.",
    "interval": "Please wait before requesting another code.",
    "verify_locked": "Too many failed verification attempts.",
}


class OTPError(Exception):
    """Base exception for one-time code operations."""

    pass


class OTPRateLimitError(OTPError):
    """Raised when a send or verification is refused by a limit.

    Attributes:
        reason: Machine readable limit name (``daily``, ``hourly``, ...).
        wait_seconds: Time until the caller may try again.
    """

    error_code = "OTP_RATE_LIMITED"

    def __init__(self, reason: str, wait_seconds: int) -> None:
        self.reason = reason
        self.wait_seconds = max(1, int(wait_seconds))
        super().__init__(self.message)

    @property
    def formatted_wait_time(self) -> str:
        return format_time_remaining(self.wait_seconds)

    @property
    def message(self) -> str:
        base = REASON_MESSAGES.get(self.reason, "Too many requests.")
        return f"{base} Please wait {self.formatted_wait_time} before requesting a new OTP."


class InvalidOTPError(OTPError):
    """Raised when a submitted code is missing, expired or wrong."""

    pass


@dataclass(frozen=True)
class SendLimits:
    """Limits applied to one kind of code.

    Attributes:
        code_ttl_seconds: Lifetime of an issued code.
        max_per_hour: Sends per email per hour. Reaching it locks the email.
        max_per_day: Sends per email per day.
        email_lockout_seconds: Lock applied when the hourly limit is reached.
        min_interval_seconds: Minimum time between two sends to one email.
        max_per_ip: Sends per IP per hour, None to disable.
        ip_lockout_seconds: Lock applied when the IP limit is reached.
        max_verify_attempts: Wrong codes before verification locks, None to
            disable.
        verify_lockout_seconds: Verification lock duration.
    """

    code_ttl_seconds: int
    max_per_hour: int
    max_per_day: int
    email_lockout_seconds: int
    min_interval_seconds: int
    max_per_ip: Optional[int] = None
    ip_lockout_seconds: int = 0
    max_verify_attempts: Optional[int] = None
    verify_lockout_seconds: int = 0


def generate_code() -> str:
    """Six random digits, leading zeros allowed."""
    return f"{secrets.randbelow(1_000_000):06d}"


class OneTimeCodeManager:
    """Issues, rate limits and verifies one-time codes.

    Attributes:
        redis: Redis client holding all state.
        namespace: Key namespace, ``otp`` or ``reset``.
        limits: Limits for this kind of code.
    """

    def __init__(self, redis: RedisClient, namespace: str, limits: SendLimits) -> None:
        self.redis = redis
        self.namespace = namespace
        self.limits = limits

    def _key(self, *parts: str) -> str:
        return ":".join((self.namespace, *parts))

    async def _remaining(self, key: str, fallback: int) -> int:
        ttl = await self.redis.ttl(key)
        return ttl if ttl > 0 else fallback

    async def _count(self, key: str) -> int:
        value = await self.redis.get(key)
        return int(value) if value is not None else 0

    async def check_send_allowed(self, email: str, ip: Optional[str] = None) -> None:
        """Apply the lockouts and volume limits, in order.

        Order: email lockout, IP lockout, daily limit, hourly limit, IP limit.

        Raises:
            OTPRateLimitError: If any limit refuses the send.
        """
        limits = self.limits
        email = email.lower()

        ttl = await self.redis.ttl(self._key("lock", "email", email))
        if ttl > 0:
            raise OTPRateLimitError("account_locked", ttl)

        if ip and limits.max_per_ip:
            ttl = await self.redis.ttl(self._key("lock", "ip", ip))
            if ttl > 0:
                raise OTPRateLimitError("ip_locked", ttl)

        day_key = self._key("day", email)
        if await self._count(day_key) >= limits.max_per_day:
            raise OTPRateLimitError("daily", await self._remaining(day_key, DAY_SECONDS))

        hour_key = self._key("hour", email)
        if await self._count(hour_key) >= limits.max_per_hour:
            raise OTPRateLimitError("hourly", await self._remaining(hour_key, HOUR_SECONDS))

        if ip and limits.max_per_ip:
            ip_key = self._key("ip", ip)
            if await self._count(ip_key) >= limits.max_per_ip:
                raise OTPRateLimitError("ip", await self._remaining(ip_key, HOUR_SECONDS))

    async def check_interval(self, email: str) -> None:
        """Refuse a send that follows the previous one too closely.

        Raises:
            OTPRateLimitError: With reason ``interval``.
        """
        ttl = await self.redis.ttl(self._key("last", email.lower()))
        if ttl > 0:
            raise OTPRateLimitError("interval", ttl)

    async def record_send(self, email: str, ip: Optional[str] = None) -> None:
        """Count a send against every window.

        Reaching the hourly limit locks the email, reaching the IP limit
        locks the IP.
        """
        limits = self.limits
        email = email.lower()

        await self.redis.incr(self._key("day", email), expire_seconds=DAY_SECONDS)
        hourly = await self.redis.incr(self._key("hour", email), expire_seconds=HOUR_SECONDS)
        if hourly >= limits.max_per_hour:
            await self.redis.set(
                self._key("lock", "email", email),
                "1",
                expire_seconds=limits.email_lockout_seconds,
            )
            logger.warning("Code sends locked for %s after %d sends", email, hourly)

        if ip and limits.max_per_ip:
            from_ip = await self.redis.incr(self._key("ip", ip), expire_seconds=HOUR_SECONDS)
            if from_ip >= limits.max_per_ip:
                await self.redis.set(
                    self._key("lock", "ip", ip),
                    "1",
                    expire_seconds=limits.ip_lockout_seconds,
                )
                logger.warning("Code sends locked for IP %s", ip)

        await self.redis.set(
            self._key("last", email),
            "1",
            expire_seconds=limits.min_interval_seconds,
        )

    async def issue(self, email: str) -> str:
        """Store a fresh code for the email, replacing any previous one."""
        code = generate_code()
        email = email.lower()
        await self.redis.set(
            self._key("code", email), code, expire_seconds=self.limits.code_ttl_seconds
        )
        await self.redis.delete(self._key("verify", email))
        return code

    async def verify(self, email: str, code: str, consume: bool = True) -> None:
        """Check a submitted code.

        Args:
            email: Address the code was sent to.
            code: Submitted code.
            consume: Delete the code on success.

        Raises:
            OTPRateLimitError: If verification is locked.
            InvalidOTPError: If no code is stored or the code is wrong.
        """
        limits = self.limits
        email = email.lower()

        if limits.max_verify_attempts:
            ttl = await self.redis.ttl(self._key("lock", "verify", email))
            if ttl > 0:
                raise OTPRateLimitError("verify_locked", ttl)

        stored = await self.redis.get(self._key("code", email))
        if stored is None:
            raise InvalidOTPError("Invalid or expired OTP.")

        if not secrets.compare_digest(str(stored), str(code).strip()):
            if limits.max_verify_attempts:
                attempts = await self.redis.incr(
                    self._key("verify", email), expire_seconds=limits.code_ttl_seconds
                )
                if attempts >= limits.max_verify_attempts:
                    await self.redis.set(
                        self._key("lock", "verify", email),
                        "1",
                        expire_seconds=limits.verify_lockout_seconds,
                    )
                    await self.redis.delete(self._key("code", email), self._key("verify", email))
                    raise OTPRateLimitError("verify_locked", limits.verify_lockout_seconds)
            raise InvalidOTPError("Invalid OTP.")

        if consume:
            await self.clear(email)

    async def clear(self, email: str) -> None:
        """Forget the stored code and its failed attempts."""
        email = email.lower()
        await self.redis.delete(self._key("code", email), self._key("verify", email))

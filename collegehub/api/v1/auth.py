# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for user authentication:
- GET /captcha - Issue an arithmetic captcha
- POST /login - Email, password and captcha login
- POST /lock-status - Lockout state for an email
- POST /otp/send - Email a login OTP
- POST /otp/verify - Sign in with an OTP
- POST /refresh - Refresh access token
- POST /password/reset - Email a password reset code
- POST /password/reset/verify - Check a reset code
- POST /password/reset/confirm - Set a new password
- GET /me - Current user
- POST /users - Create a staff account

Example:
    POST /api/v1/auth/login
    {
        "email": "hod@college.edu",
        "password": "S3cret!pass",
        "captcha_answer": "12",
        "captcha_hash": "...",
        "captcha_expires_at": 1735689600000
    }
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import (
    AuthenticatedUser,
    DBSession,
    get_db,
    get_email_sender,
    get_jwt_manager,
    get_optional_redis,
    get_password_hasher,
    require_user_admin,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from collegehub.core.config import get_settings
from collegehub.domains.auth.jwt import JWTManager
from collegehub.domains.auth.otp import InvalidOTPError, OTPRateLimitError
from collegehub.domains.auth.password import PasswordHasher, PasswordPolicyError
from collegehub.domains.auth.service import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    AuthService,
    InvalidCaptchaError,
    InvalidCredentialsError,
    LoginResult,
    TokenRefreshError,
    UserCreationError,
    UserExistsError,
    UserNotFoundError,
)
from collegehub.infrastructure.cache import RedisClient
from collegehub.infrastructure.database.models import User
from collegehub.infrastructure.notifications import EmailSender
from collegehub.models.auth import (
    CaptchaResponse,
    LockStatusResponse,
    LoginRequest,
    LoginResponse,
    OTPSendRequest,
    OTPSentResponse,
    OTPVerifyRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    PasswordResetVerifyRequest,
    RefreshTokenRequest,
    TokenResponse,
    UserCreateRequest,
    UserResponse,
)
from collegehub.models.common import MessageResponse
from collegehub.utils.datetime import format_time_remaining

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession = Depends(get_db),
    jwt_manager: JWTManager = Depends(get_jwt_manager),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    redis: RedisClient | None = Depends(get_optional_redis),
    email_sender: EmailSender = Depends(get_email_sender),
) -> AuthService:
    return AuthService(
        db=db,
        jwt_manager=jwt_manager,
        password_hasher=password_hasher,
        settings=get_settings(),
        redis=redis,
        email_sender=email_sender,
    )


def _rate_limited(e: OTPRateLimitError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={
            "message": e.message,
            "errorCode": e.error_code,
            "reason": e.reason,
            "wait_time": e.wait_seconds,
            "formatted_wait_time": e.formatted_wait_time,
        },
        headers={"Retry-After": str(e.wait_seconds)},
    )


def _unavailable(e: AuthenticationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def _login_response(result: LoginResult) -> LoginResponse:
    return LoginResponse(
        **result.tokens.model_dump(),
        user=AuthService.to_user_response(result.user),
    )


@router.get(
    "/captcha",
    response_model=CaptchaResponse,
    summary="Get captcha",
    description="Issue an arithmetic captcha to submit with the login form.",
)
async def get_captcha(service: AuthService = Depends(_get_service)) -> CaptchaResponse:
    captcha = service.generate_captcha()
    return CaptchaResponse(
        question=captcha.question,
        hash=captcha.hash,
        expires_at=captcha.expires_at,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="Authenticate with email, password and captcha answer.",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    service: AuthService = Depends(_get_service),
) -> LoginResponse:
    try:
        result = await service.login(
            email=data.email,
            password=data.password,
            captcha_answer=data.captcha_answer,
            captcha_hash=data.captcha_hash,
            captcha_expires_at=data.captcha_expires_at,
        )
    except InvalidCaptchaError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    except AccountLockedError as e:
        raise HTTPException(
            status_code=status.HTTP_423_LOCKED,
            detail={
                "message": str(e),
                "locked_until": e.locked_until.isoformat(),
                "wait_time": e.wait_seconds,
                "formatted_wait_time": format_time_remaining(e.wait_seconds),
            },
        )
    except AccountInactiveError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return _login_response(result)


@router.post(
    "/lock-status",
    response_model=LockStatusResponse,
    summary="Account lock status",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def lock_status(
    request: Request,
    data: PasswordResetRequest,
    service: AuthService = Depends(_get_service),
) -> LockStatusResponse:
    return await service.check_lock_status(data.email)


@router.post(
    "/otp/send",
    response_model=OTPSentResponse,
    summary="Send login OTP",
    description="Email a 6-digit login code. Rate limited per email and per IP.",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def send_otp(
    request: Request,
    data: OTPSendRequest,
    service: AuthService = Depends(_get_service),
) -> OTPSentResponse:
    try:
        expires_in = await service.send_otp(data.email, ip=get_ip_only(request))
    except OTPRateLimitError as e:
        raise _rate_limited(e)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": str(e), "errorCode": e.error_code},
        )
    except AuthenticationError as e:
        raise _unavailable(e)
    return OTPSentResponse(expires_in=expires_in)


@router.post(
    "/otp/verify",
    response_model=LoginResponse,
    summary="Verify login OTP",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def verify_otp(
    request: Request,
    data: OTPVerifyRequest,
    service: AuthService = Depends(_get_service),
) -> LoginResponse:
    try:
        result = await service.verify_otp(data.email, data.otp)
    except InvalidOTPError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OTPRateLimitError as e:
        raise _rate_limited(e)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except AccountInactiveError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except AuthenticationError as e:
        raise _unavailable(e)
    return _login_response(result)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
)
async def refresh_token(
    data: RefreshTokenRequest,
    service: AuthService = Depends(_get_service),
) -> TokenResponse:
    try:
        tokens = await service.refresh(data.refresh_token)
    except TokenRefreshError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return TokenResponse(**tokens.model_dump())


@router.post(
    "/password/reset",
    response_model=MessageResponse,
    summary="Request password reset",
    description="Email a reset code. Always answers the same way for unknown emails.",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def request_password_reset(
    request: Request,
    data: PasswordResetRequest,
    service: AuthService = Depends(_get_service),
) -> MessageResponse:
    try:
        await service.initiate_password_reset(data.email)
    except OTPRateLimitError as e:
        raise _rate_limited(e)
    except AuthenticationError as e:
        raise _unavailable(e)
    return MessageResponse(message="If the account exists, a reset code has been sent.")


@router.post(
    "/password/reset/verify",
    response_model=MessageResponse,
    summary="Verify reset code",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def verify_reset_code(
    request: Request,
    data: PasswordResetVerifyRequest,
    service: AuthService = Depends(_get_service),
) -> MessageResponse:
    try:
        await service.verify_reset_code(data.email, data.code)
    except InvalidOTPError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OTPRateLimitError as e:
        raise _rate_limited(e)
    except AuthenticationError as e:
        raise _unavailable(e)
    return MessageResponse(message="Reset code is valid.")


@router.post(
    "/password/reset/confirm",
    response_model=MessageResponse,
    summary="Reset password",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def confirm_password_reset(
    request: Request,
    data: PasswordResetConfirmRequest,
    service: AuthService = Depends(_get_service),
) -> MessageResponse:
    try:
        await service.reset_password(data.email, data.code, data.new_password)
    except PasswordPolicyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Password does not meet the policy", "errors": e.errors},
        )
    except InvalidOTPError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OTPRateLimitError as e:
        raise _rate_limited(e)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AuthenticationError as e:
        raise _unavailable(e)
    return MessageResponse(message="Password has been reset.")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
)
async def get_me(
    current_user: AuthenticatedUser,
    db: DBSession,
) -> UserResponse:
    result = await db.execute(select(User).where(User.id == current_user.id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return AuthService.to_user_response(user)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create staff account",
    description="SBTE admins create accounts in any college, college admins in their own.",
)
async def create_user(
    data: UserCreateRequest,
    current_user: CurrentUser = Depends(require_user_admin),
    service: AuthService = Depends(_get_service),
) -> UserResponse:
    try:
        return await service.create_user(data, current_user)
    except UserExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PasswordPolicyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Password does not meet the policy", "errors": e.errors},
        )
    except UserCreationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

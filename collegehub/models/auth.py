# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from collegehub.models.common import UserRole


class CaptchaResponse(BaseModel):
    question: str = Field(..., description="Arithmetic question to show the user")
    hash: str = Field(..., description="Opaque answer hash to send back")
    expires_at: int = Field(..., description="Expiry in epoch milliseconds")


class CaptchaAnswer(BaseModel):
    captcha_answer: str = Field(..., min_length=1, description="User's answer")
    captcha_hash: str = Field(..., min_length=1, description="Hash from the captcha")
    captcha_expires_at: int = Field(..., description="Expiry from the captcha")


class LoginRequest(CaptchaAnswer):
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, description="Password")


class OTPSendRequest(BaseModel):
    email: EmailStr


class OTPVerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Current refresh token")


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetVerifyRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class PasswordResetConfirmRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    new_password: str = Field(..., min_length=1, max_length=256)


class UserCreateRequest(BaseModel):
    """Staff account creation."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=200)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole
    phone: str | None = Field(None, max_length=20)
    department_id: UUID | None = None
    college_id: UUID | None = Field(
        None, description="Target college, only honoured for SBTE admins"
    )


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: str
    phone: str | None = None
    college_id: UUID | None = None
    department_id: UUID | None = None
    is_active: bool
    last_login_at: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int


class LoginResponse(TokenResponse):
    user: UserResponse


class LockStatusResponse(BaseModel):
    is_locked: bool
    remaining_attempts: int
    max_attempts: int
    locked_until: datetime | None = None


class OTPSentResponse(BaseModel):
    message: str = "OTP sent successfully."
    expires_in: int = Field(..., description="Code lifetime in seconds")

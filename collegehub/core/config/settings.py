# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for collegehub.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from collegehub.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"
DEFAULT_CAPTCHA_SECRET = "change-this-captcha-secret"


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "collegehub"
    password: SecretStr = SecretStr("collegehub_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "collegehub"
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class RedisSettings(BaseSettings):
    """Redis configuration for OTP codes, counters and rate limits.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr = SecretStr("")
    database: int = 0
    max_connections: int = 50

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        pwd = self.password.get_secret_value()
        if pwd:
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token expiration time.
        refresh_token_expire_days: Refresh token expiration time.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=60,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    refresh_token_expire_days: int = Field(
        default=7,
        validation_alias="REFRESH_TOKEN_EXPIRE_DAYS",
    )


class SecuritySettings(BaseSettings):
    """Login protection configuration: captcha, OTP and lockouts.

    Attributes:
        captcha_secret: Secret mixed into captcha answer hashes.
        captcha_ttl_seconds: Captcha validity window.
        otp_ttl_seconds: OTP validity window.
        otp_max_per_hour: OTP sends allowed per email per hour.
        otp_max_per_day: OTP sends allowed per email per day.
        otp_max_per_ip: OTP sends allowed per IP per hour.
        otp_email_lockout_seconds: Email lockout after hitting the hourly limit.
        otp_ip_lockout_seconds: IP lockout after hitting the IP limit.
        otp_min_interval_seconds: Minimum time between two sends.
        max_login_attempts: Failed logins before the account locks.
        login_lockout_seconds: Base lockout duration, doubled per lockout.
        max_lockout_seconds: Upper bound for the lockout duration.
        reset_code_ttl_seconds: Password reset code validity window.
        reset_max_per_hour: Reset requests allowed per hour.
        reset_max_per_day: Reset requests allowed per day.
        reset_lockout_seconds: Lockout after hitting the hourly reset limit.
        reset_max_verify_attempts: Wrong reset codes before verification locks.
        reset_verify_lockout_seconds: Verification lockout duration.
    """

    model_config = SettingsConfigDict(
        env_prefix="SECURITY_",
        extra="ignore",
    )

    captcha_secret: SecretStr = SecretStr(DEFAULT_CAPTCHA_SECRET)
    captcha_ttl_seconds: int = 5 * 60

    otp_ttl_seconds: int = 5 * 60
    otp_max_per_hour: int = 5
    otp_max_per_day: int = 10
    otp_max_per_ip: int = 5
    otp_email_lockout_seconds: int = 10 * 60
    otp_ip_lockout_seconds: int = 5 * 60
    otp_min_interval_seconds: int = 60

    max_login_attempts: int = 5
    login_lockout_seconds: int = 30 * 60
    max_lockout_seconds: int = 24 * 60 * 60

    reset_code_ttl_seconds: int = 10 * 60
    reset_max_per_hour: int = 3
    reset_max_per_day: int = 5
    reset_lockout_seconds: int = 30 * 60
    reset_max_verify_attempts: int = 3
    reset_verify_lockout_seconds: int = 15 * 60


class SMTPSettings(BaseSettings):
    """Outbound email configuration.

    Attributes:
        host: SMTP server hostname. Email is disabled when empty.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Whether to use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str = ""
    port: int = 587
    username: str = ""
    password: SecretStr = SecretStr("")
    use_tls: bool = True
    from_email: str = "no-reply@collegehub.local"
    from_name: str = "collegehub"

    @property
    def is_configured(self) -> bool:
        """Check whether enough SMTP settings are present to send mail."""
        return bool(self.host and self.username and self.password.get_secret_value())


class GradingSettings(BaseSettings):
    """Grade card computation configuration.

    Attributes:
        internal_max_marks: Maximum internal marks accepted on import.
        external_max_marks: Scale external marks are normalised to.
        semester_exam_keyword: Keyword identifying the semester exam type.
    """

    model_config = SettingsConfigDict(
        env_prefix="GRADING_",
        extra="ignore",
    )

    internal_max_marks: int = 30
    external_max_marks: int = 70
    semester_exam_keyword: str = "semester"


class FinanceSettings(BaseSettings):
    """Exam fee automation configuration.

    Attributes:
        base_fee_reason: Reason recorded on automatically inserted fees.
        batch_size: Students processed per slice.
        max_retries: Attempts per student before it is reported as failed.
        retry_delay_seconds: Delay multiplied by the attempt number.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        extra="ignore",
    )

    base_fee_reason: str = "Base Exam Fee"
    batch_size: int = 5
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


class ShopSettings(BaseSettings):
    """Canvas shop configuration.

    Attributes:
        currency: ISO currency code for prices.
        media_base_url: Prefix joined to stored thumbnail and image paths.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOP_",
        extra="ignore",
    )

    currency: str = "INR"
    media_base_url: str = "/media"


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        requests_per_minute: Maximum requests per minute per client.
        storage_uri: slowapi storage backend. Defaults to in-memory.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    requests_per_minute: int = 120
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        db: Database settings.
        redis: Redis settings.
        jwt: JWT authentication settings.
        security: Captcha, OTP and lockout settings.
        smtp: Outbound email settings.
        grading: Grade card settings.
        finance: Exam fee automation settings.
        shop: Canvas shop settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    grading: GradingSettings = Field(default_factory=GradingSettings)
    finance: FinanceSettings = Field(default_factory=FinanceSettings)
    shop: ShopSettings = Field(default_factory=ShopSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
            if self.security.captcha_secret.get_secret_value() == DEFAULT_CAPTCHA_SECRET:
                raise ValueError(
                    "Captcha secret must be changed from default in production. "
                    "Set SECURITY_CAPTCHA_SECRET environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()

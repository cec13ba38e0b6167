"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, JWT secret, SMTP, admin seed)
- Validates configuration on startup
- Environment-specific settings
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Literal, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

from utils.time_utils import parse_duration
from utils.validation_utils import MAX_PASSWORD_BYTES, is_password_within_limit

PLACEHOLDER_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="mrcs",
        description="MongoDB database name"
    )

    # JWT
    JWT_SECRET: str = Field(
        default=PLACEHOLDER_SECRET,
        description="Shared secret used to sign every token"
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT signing algorithm")
    JWT_ACCESS_TOKEN_EXPIRES_IN: str = Field(default="1h", description="Access token TTL")
    JWT_REFRESH_TOKEN_EXPIRES_IN: str = Field(default="14d", description="Refresh token TTL")
    EMAIL_VERIFY_TOKEN_EXPIRES_IN: str = Field(
        default="1d",
        description="TTL of the token mailed for email verification"
    )
    EMAIL_RESET_TOKEN_EXPIRES_IN: str = Field(
        default="1h",
        description="TTL of the token mailed for password reset"
    )

    # Security
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor")

    # Email (SMTP)
    EMAIL_FROM: str = Field(default="no-reply@example.com", description="Sender address")
    SMTP_HOST: Optional[str] = Field(default=None, description="SMTP server host")
    SMTP_PORT: int = Field(default=587, description="SMTP server port")
    SMTP_USER: Optional[str] = Field(default=None, description="SMTP username")
    SMTP_PASS: Optional[str] = Field(default=None, description="SMTP password")
    SMTP_TIMEOUT: float = Field(default=10.0, description="SMTP timeout in seconds")

    # Admin seed
    ADMIN_EMAIL: Optional[str] = Field(default=None, description="Bootstrap admin email")
    ADMIN_PASSWORD: Optional[str] = Field(default=None, description="Bootstrap admin password")

    # Branding
    BRAND_NAME: str = Field(default="Zero To MRCS", description="Brand name used in emails")
    FRONTEND_URL: str = Field(
        default="http://localhost:5173/",
        description="Frontend base URL for links in emails"
    )

    # Application
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(default="", description="API route prefix")
    CORS_ORIGINS: list = Field(default=["*"], description="Allowed CORS origins")
    PORT: int = Field(default=3001, description="HTTP port")

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info: ValidationInfo):
        """Ensure the signing secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == PLACEHOLDER_SECRET:
            raise ValueError("JWT_SECRET must be changed in production environment")
        return v

    @field_validator(
        "JWT_ACCESS_TOKEN_EXPIRES_IN",
        "JWT_REFRESH_TOKEN_EXPIRES_IN",
        "EMAIL_VERIFY_TOKEN_EXPIRES_IN",
        "EMAIL_RESET_TOKEN_EXPIRES_IN",
    )
    @classmethod
    def validate_duration(cls, v):
        parse_duration(v)
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST)

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


@dataclass(frozen=True)
class TokenConfig:
    """
    Immutable signing configuration shared by every token the service issues.
    """
    secret: str
    algorithm: str
    access_ttl: timedelta
    refresh_ttl: timedelta
    verify_ttl: timedelta
    reset_ttl: timedelta


# Global settings instance
settings = Settings()


def token_settings(source: Optional[Settings] = None) -> TokenConfig:
    """
    Builds the token configuration from settings, parsing TTL strings once.
    """
    source = source or settings
    return TokenConfig(
        secret=source.JWT_SECRET,
        algorithm=source.JWT_ALGORITHM,
        access_ttl=parse_duration(source.JWT_ACCESS_TOKEN_EXPIRES_IN),
        refresh_ttl=parse_duration(source.JWT_REFRESH_TOKEN_EXPIRES_IN),
        verify_ttl=parse_duration(source.EMAIL_VERIFY_TOKEN_EXPIRES_IN),
        reset_ttl=parse_duration(source.EMAIL_RESET_TOKEN_EXPIRES_IN),
    )


def validate_settings(source: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    source = source or settings
    errors = []

    if not source.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not source.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    if not source.JWT_SECRET:
        errors.append("JWT_SECRET is required")

    if bool(source.ADMIN_EMAIL) != bool(source.ADMIN_PASSWORD):
        errors.append("ADMIN_EMAIL and ADMIN_PASSWORD must be set together")

    if source.ADMIN_PASSWORD and not is_password_within_limit(source.ADMIN_PASSWORD):
        errors.append(f"ADMIN_PASSWORD must be at most {MAX_PASSWORD_BYTES} bytes")

    # Production-specific validations
    if source.is_production:
        if source.JWT_SECRET == PLACEHOLDER_SECRET:
            errors.append("JWT_SECRET must be changed in production")
        if not source.SMTP_HOST:
            errors.append("SMTP_HOST is required in production")
        if source.SMTP_HOST and not (source.SMTP_USER and source.SMTP_PASS):
            errors.append("SMTP_USER and SMTP_PASS are required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True

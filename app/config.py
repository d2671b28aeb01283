# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Competition rules (prices, discount bands, judge weights) are NOT settings.
# They live in core/competition.py keyed by COMPETITION_YEAR.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret for verifying Supabase access tokens"
    )

    SAUCE_IMAGE_BUCKET: str = Field(
        default="sauce-media",
        description="Storage bucket holding sauce bottle images"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Competition
    # -------------------------------------------------------------------------
    # Update at the start of each new season.

    COMPETITION_YEAR: int = Field(
        default=2026,
        ge=2020,
        le=2100,
        description="Competition year used for participation tracking and rules lookup"
    )

    # -------------------------------------------------------------------------
    # Stripe
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret API key"
    )

    STRIPE_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret for the Stripe webhook endpoint"
    )

    JUDGE_PAYMENT_SUCCESS_URL: str = Field(default="https://heatawards.eu/payment-success")
    JUDGE_PAYMENT_CANCEL_URL: str = Field(default="https://heatawards.eu/payment-cancelled")
    SUPPLIER_PAYMENT_SUCCESS_URL: str = Field(default="https://heatawards.eu/payment-success")
    SUPPLIER_PAYMENT_CANCEL_URL: str = Field(default="https://heatawards.eu/payment-cancelled")

    # -------------------------------------------------------------------------
    # External Services
    # -------------------------------------------------------------------------

    QR_CODE_API_URL: str = Field(
        default="https://api.qrserver.com/v1/create-qr-code/",
        description="External QR rendering endpoint (data= and size= query params)"
    )

    EMAIL_API_URL: str = Field(
        default="https://heatawards.eu",
        description="Base URL of the transactional email API (/api/send-email)"
    )

    SITE_URL: str = Field(
        default="https://heatawards.eu",
        description="Public site URL used for login and magic-link redirects"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0")

    API_PORT: int = Field(default=8000, ge=1, le=65535)

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://heatawards.eu" -> ["http://localhost:3000", "https://heatawards.eu"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def login_url(self) -> str:
        return f"{self.SITE_URL.rstrip('/')}/login"

    @property
    def auth_callback_url(self) -> str:
        return f"{self.SITE_URL.rstrip('/')}/auth/callback"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()

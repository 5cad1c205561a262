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
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
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
        description="Legacy HS256 JWT secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI Configuration (filing guidance)
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for the compliance advisor"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4-turbo",
        description="Model for the compliance advisor (must support JSON mode)"
    )

    ADVISOR_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for filing guidance"
    )

    # -------------------------------------------------------------------------
    # Outbound Email (SendGrid)
    # -------------------------------------------------------------------------

    SENDGRID_API_KEY: str = Field(
        default="",
        description="SendGrid API key; reminders are not emailed without it"
    )

    MAIL_FROM: str = Field(
        default="compliance@parafort.com",
        description="Sender address for compliance emails"
    )

    MAIL_FROM_NAME: str = Field(
        default="ParaFort Compliance",
        description="Sender display name for compliance emails"
    )

    # -------------------------------------------------------------------------
    # Outbound SMS (Telnyx)
    # -------------------------------------------------------------------------

    TELNYX_API_KEY: str = Field(
        default="",
        description="Telnyx API key; SMS notifications are disabled without it"
    )

    TELNYX_PHONE_NUMBER: str = Field(
        default="",
        description="Sending phone number in E.164 format"
    )

    TELNYX_MESSAGING_PROFILE_ID: str = Field(
        default="",
        description="Telnyx messaging profile ID"
    )

    # -------------------------------------------------------------------------
    # Compliance Reminder Settings
    # -------------------------------------------------------------------------

    COMPLIANCE_TIMEZONE: str = Field(
        default="America/New_York",
        description="Timezone used for 'today' and for the reminder schedule"
    )

    REMINDER_INTERVALS: str = Field(
        default="30,14,7,1",
        description="Days before the due date to send reminders (comma-separated)"
    )

    REMINDER_HOUR: int = Field(
        default=8,
        ge=0,
        le=23,
        description="Local hour at which the daily reminder job runs"
    )

    REMINDER_SEND_DELAY_MS: int = Field(
        default=100,
        ge=0,
        le=10000,
        description="Pause between reminder emails to avoid overwhelming the mail provider"
    )

    NOTIFICATION_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Delivery attempts before a scheduled notification is marked failed"
    )

    UPCOMING_WINDOW_DAYS: int = Field(
        default=90,
        ge=1,
        le=730,
        description="Default look-ahead window for upcoming events"
    )

    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="Client URL used for links in emails"
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

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Document Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum filing document size in MB"
    )

    ALLOWED_DOCUMENT_EXTENSIONS: str = Field(
        default=".pdf,.png,.jpg,.jpeg",
        description="Allowed filing document extensions (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    @field_validator("REMINDER_INTERVALS")
    @classmethod
    def _validate_intervals(cls, value: str) -> str:
        """Reject interval lists that are empty or contain negative days."""
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts:
            raise ValueError("REMINDER_INTERVALS must contain at least one day count")
        for part in parts:
            if not part.isdigit():
                raise ValueError(f"Invalid reminder interval: {part!r}")
        return value

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def reminder_intervals_list(self) -> list[int]:
        """
        Parse REMINDER_INTERVALS into unique day counts, largest first.

        Example: "7, 30,14,7,1" -> [30, 14, 7, 1]
        """
        days = {int(p.strip()) for p in self.REMINDER_INTERVALS.split(",") if p.strip()}
        return sorted(days, reverse=True)

    @property
    def allowed_document_extensions_list(self) -> list[str]:
        """Example: ".pdf, .PNG" -> [".pdf", ".png"]"""
        return [ext.strip().lower() for ext in self.ALLOWED_DOCUMENT_EXTENSIONS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def email_enabled(self) -> bool:
        return bool(self.SENDGRID_API_KEY)

    @property
    def sms_enabled(self) -> bool:
        return bool(self.TELNYX_API_KEY and self.TELNYX_PHONE_NUMBER)

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
    not on every access. This is the recommended pattern for
    pydantic-settings.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()

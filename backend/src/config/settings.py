"""
Application settings configuration for CareLedger.

Centralized settings loaded from environment variables.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        CRON_SECRET: Bearer secret the external scheduler sends to
            POST /api/cron/check-compliance (default: "" = route disabled)
        CARELEDGER_EXPIRY_WARNING_DAYS: How far ahead PVG, registration and
            training expiries are flagged (default: 90)
        CARELEDGER_PERSONAL_PLAN_GRACE_DAYS: Days a personal plan review may
            slip before it is flagged (default: 28)
        CARELEDGER_REVIEW_INTERVAL_MONTHS: Maximum age of a client's latest
            review (default: 12)
        CARELEDGER_STALE_INCIDENT_DAYS: Days an incident may stay open before
            it is flagged (default: 14)
        CARELEDGER_DEDUP_WINDOW_HOURS: Window in which an identical alert is
            not repeated (default: 24)
        CARELEDGER_MAX_CONCURRENT_ORGANISATIONS: Organisations a sweep runs at
            once; each one holds a database connection per rule (default: 2)
        RATE_LIMIT_STORAGE_URI: Storage backend URI for rate limiting (default: "memory://")
            Use "memory://" for single-process deployments.
            Use "redis://host:6379" for multi-worker or multi-instance deployments.
    """

    cron_secret: str = Field(
        default="",
        validation_alias="CRON_SECRET",
        description="Shared secret for the scheduler-triggered compliance run. Empty disables the route.",
    )

    # Compliance check windows
    expiry_warning_days: int = Field(
        default=90,
        validation_alias="CARELEDGER_EXPIRY_WARNING_DAYS",
        ge=1,
        le=365,
    )

    personal_plan_grace_days: int = Field(
        default=28,
        validation_alias="CARELEDGER_PERSONAL_PLAN_GRACE_DAYS",
        ge=0,
        le=365,
    )

    review_interval_months: int = Field(
        default=12,
        validation_alias="CARELEDGER_REVIEW_INTERVAL_MONTHS",
        ge=1,
        le=60,
    )

    stale_incident_days: int = Field(
        default=14,
        validation_alias="CARELEDGER_STALE_INCIDENT_DAYS",
        ge=1,
        le=365,
    )

    dedup_window_hours: int = Field(
        default=24,
        validation_alias="CARELEDGER_DEDUP_WINDOW_HOURS",
        ge=1,
        le=24 * 30,
    )

    max_concurrent_organisations: int = Field(
        default=2,
        validation_alias="CARELEDGER_MAX_CONCURRENT_ORGANISATIONS",
        ge=1,
        le=16,
    )

    # Rate limiting storage backend
    # Default: "memory://" (in-process, single-worker only)
    rate_limit_storage_uri: str = Field(
        default="memory://",
        validation_alias="RATE_LIMIT_STORAGE_URI",
        description="Storage backend URI for rate limiting counters",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("cron_secret")
    @classmethod
    def validate_cron_secret(cls, v: str) -> str:
        """Validate that the cron secret is long enough to be worth having."""
        if v and len(v) < 16:
            raise ValueError("CRON_SECRET must be at least 16 characters")
        return v

    @property
    def cron_configured(self) -> bool:
        """Check if the scheduler route is enabled."""
        return bool(self.cron_secret)

    @property
    def dedup_window(self) -> timedelta:
        """Deduplication window as a timedelta."""
        return timedelta(hours=self.dedup_window_hours)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()

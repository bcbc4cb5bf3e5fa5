"""
Revenue Cycle Configuration
Pydantic Settings for environment-based configuration
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RevenueCycleSettings(BaseSettings):
    """
    Revenue cycle settings loaded from environment variables.

    All settings are prefixed with RCM_ (e.g. RCM_APPEAL_FILING_WINDOW_DAYS).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="RCM_",
    )

    # =========================================================================
    # Application Settings
    # =========================================================================
    ENVIRONMENT: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Deployment environment"
    )
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: str | None = Field(default=None, description="Optional log file path")
    JSON_LOGS: bool = Field(default=False, description="Emit JSON log lines")

    # =========================================================================
    # Claim Lifecycle Windows
    # =========================================================================
    CLAIM_RESPONSE_WINDOW_DAYS: int = Field(
        default=45,
        description="Days after submission until the payer response is due",
    )
    APPEAL_FILING_WINDOW_DAYS: int = Field(
        default=60,
        description="Days after a denial during which an appeal may be filed",
    )
    APPEAL_RESPONSE_WINDOW_DAYS: int = Field(
        default=30,
        description="Days after filing until the appeal response is due",
    )

    # =========================================================================
    # Validation
    # =========================================================================
    HIGH_VALUE_CLAIM_THRESHOLD: Decimal = Field(
        default=Decimal("50000"),
        description="Total charges above this raise an advisory warning",
    )

    # =========================================================================
    # Submission
    # =========================================================================
    DEFAULT_CLEARINGHOUSE: str = Field(
        default="Primary Clearinghouse",
        description="Clearinghouse recorded on submission events",
    )
    CURRENCY: str = Field(default="USD", max_length=3)

    # =========================================================================
    # Listing
    # =========================================================================
    DEFAULT_PAGE_LIMIT: int = Field(default=50, ge=1)
    MAX_PAGE_LIMIT: int = Field(default=500, ge=1)

    @field_validator(
        "CLAIM_RESPONSE_WINDOW_DAYS",
        "APPEAL_FILING_WINDOW_DAYS",
        "APPEAL_RESPONSE_WINDOW_DAYS",
    )
    @classmethod
    def validate_window(cls, v: int) -> int:
        """Windows must be a positive number of days."""
        if v <= 0:
            raise ValueError("window must be a positive number of days")
        return v

    @field_validator("HIGH_VALUE_CLAIM_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("HIGH_VALUE_CLAIM_THRESHOLD must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> RevenueCycleSettings:
    """Get cached settings instance."""
    return RevenueCycleSettings()

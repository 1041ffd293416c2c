"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Referral core settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = None

    # Referral codes
    referral_code_length: int = Field(
        default=8,
        description="Length of generated referral codes",
    )
    referral_code_max_attempts: int = Field(
        default=5,
        gt=0,
        description="Attempts to find a free referral code before giving up",
    )

    # Commission defaults (used until an administrator saves rules)
    default_commission_enabled: bool = True
    default_first_rate: Decimal = Field(
        default=Decimal("0.10"),
        description="Commission rate for an invitee's first recharge",
    )
    default_renewal_rate: Decimal = Field(
        default=Decimal("0.00"),
        description="Commission rate for subsequent recharges",
    )

    # Pagination
    pagination_default_limit: int = Field(default=20, gt=0)
    pagination_max_limit: int = Field(default=100, gt=0)

    # Transactions
    transient_retry_attempts: int = Field(
        default=1,
        ge=0,
        le=3,
        description="Retries of a unit of work after a transient database error",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("referral_code_length")
    @classmethod
    def validate_code_length(cls, v: int) -> int:
        """Keep codes short enough to type and long enough to avoid collisions."""
        if not 6 <= v <= 32:
            raise ValueError("REFERRAL_CODE_LENGTH must be between 6 and 32")
        return v

    @field_validator("default_first_rate", "default_renewal_rate")
    @classmethod
    def validate_rate(cls, v: Decimal) -> Decimal:
        """Rates are fractions of the order amount."""
        if v < 0 or v > 1:
            raise ValueError("Commission rates must be between 0 and 1")
        return v

    @model_validator(mode="after")
    def validate_pagination(self) -> "Settings":
        """Default page size must fit under the maximum."""
        if self.pagination_default_limit > self.pagination_max_limit:
            raise ValueError(
                "PAGINATION_DEFAULT_LIMIT cannot exceed PAGINATION_MAX_LIMIT"
            )
        return self

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Warn about settings that are unusual in production."""
        if self.environment == "production":
            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points to SQLite in production. "
                    "Row locks are not enforced; use PostgreSQL."
                )
            if self.database_echo:
                logger.warning(
                    "DATABASE_ECHO is enabled in production. "
                    "SQL statements with account data will be logged."
                )
        return self


settings = Settings()

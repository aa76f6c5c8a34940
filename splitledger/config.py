"""
Configuration for the Split Ledger application.

Values come from environment variables prefixed with SPLITLEDGER_ or from
a .env file in the working directory.
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Engine and CLI settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    tolerance: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Absolute epsilon for all money comparisons"
    )
    user_name: str = Field(
        default="You",
        description="Display name of the primary user"
    )
    unknown_name: str = Field(
        default="Unknown",
        description="Placeholder shown for ids with no known contact"
    )
    default_category: str = Field(
        default="General",
        description="Category used for uncategorised expenses in reports"
    )
    simplify_strategy: str = Field(
        default="greedy",
        description="Group debt decomposition: 'greedy' or 'largest_first'"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console text"
    )
    data_file: str = Field(
        default="splitledger.json",
        description="Path of the JSON file used by the CLI"
    )

    @field_validator('simplify_strategy')
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("greedy", "largest_first"):
            raise ValueError(f"Unknown simplify strategy '{v}'")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload after changing the environment.
    """
    return LedgerSettings()

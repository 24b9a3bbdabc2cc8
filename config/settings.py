"""Centralised configuration handling for ClearLedger."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOG_LEVEL = "WARNING"


class Settings(BaseSettings):
    """Detection thresholds and runtime options sourced from env vars.

    Every field can be overridden with a ``CLEARLEDGER_`` prefixed
    environment variable, e.g. ``CLEARLEDGER_DUPLICATE_MIN_OCCURRENCES=4``.
    """

    duplicate_min_occurrences: int = Field(default=3, ge=2)
    duplicate_interval_factor: float = Field(default=0.6, gt=0)
    duplicate_fast_interval_factor: float = Field(default=0.35, gt=0)
    duplicate_amount_factor: float = Field(default=0.3, gt=0)
    same_amount_tolerance: float = Field(default=0.01, ge=0)
    subscription_price_tolerance: float = Field(default=0.15, ge=0)
    phone_price_tolerance: float = Field(default=0.20, ge=0)
    log_level: str = DEFAULT_LOG_LEVEL

    model_config = SettingsConfigDict(env_prefix="CLEARLEDGER_", extra="ignore", frozen=True)


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()

"""Application configuration management using Pydantic Settings.

This module defines the `Settings` class, which loads configuration parameters
from environment variables and a `.env` file. It centralizes the tunables of
the batch driver and CLI: logging level, the per-operation error policy and
output serialization options. The transformation engine itself takes no
configuration; it is a pure function of its inputs.

The `get_settings` function provides a cached, singleton instance of the
configuration, ensuring consistent settings throughout the application.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict


class Settings(BaseSettings):
    """Defines all application configuration parameters.

    Values come from environment variables or a `.env` file in the working
    directory. Unknown variables are ignored.
    """

    model_config = _SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # ---------------- Batch behavior -----------------
    ON_ERROR: str = Field(
        default="raise",
        description=(
            "What to do when one operation cannot be transformed: 'raise' aborts "
            "the run, 'skip' logs a warning and omits that operation's record"
        ),
    )
    INCLUDE_FAILED_TRANSACTIONS: bool = Field(
        default=True,
        description=(
            "Transform operations of failed transactions too. Their records skip "
            "result enrichment and sponsorship lookback."
        ),
    )

    # ---------------- Output -----------------
    OUTPUT_BY_ALIAS: bool = Field(
        default=True,
        description="Serialize fields under their wire names (e.g. 'from' instead of 'from_')",
    )

    @field_validator("ON_ERROR", mode="before")
    @classmethod
    def _normalize_on_error(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("raise", "skip"):
                raise ValueError("ON_ERROR must be 'raise' or 'skip'")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover - trivial
    """Return a cached, singleton instance of the application settings."""
    return Settings()

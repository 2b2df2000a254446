from __future__ import annotations as _annotations

import math
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_TTL_MS = 600_000


class CleanupSettings(BaseSettings):
    """The capture cleanup TTL, readable without validating the other settings."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_SCREENSHOT_MAC_",
        env_file=".env",
        extra="ignore",
    )

    ttl_ms: int = Field(
        default=DEFAULT_TTL_MS,
        description="""
        Milliseconds after which a capture's temporary directory is deleted.
        0 disables deletion. Non-numeric or negative values fall back to the
        default instead of disabling deletion.""",
    )

    @field_validator("ttl_ms", mode="before")
    @classmethod
    def _fallback_to_default_ttl(cls, value: Any) -> int:
        try:
            ttl = float(value)
        except (TypeError, ValueError):
            return DEFAULT_TTL_MS
        if not math.isfinite(ttl) or ttl < 0:
            return DEFAULT_TTL_MS
        return int(ttl)


class Settings(CleanupSettings):
    """mcp-screenshot-mac settings.

    All settings can be configured via environment variables with the prefix
    MCP_SCREENSHOT_MAC_. For example, MCP_SCREENSHOT_MAC_TTL_MS=0 keeps
    captured files around indefinitely.
    """

    log_level: LOG_LEVEL = "INFO"

    tmp_dir: Path | None = Field(
        default=None,
        description="Base directory for capture directories. Defaults to the system temp dir.",
    )


settings = Settings()

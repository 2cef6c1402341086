"""
Centralized settings for stream-spine.

Manifesto:
    Declaration defaults (parallelism, which namespaces count as native engine
    components) and logging behaviour should be explicit, validated, and
    environment-driven rather than scattered constants.

All fields can be set via ``STREAMSPINE_*`` environment variables (e.g.
``STREAMSPINE_DEFAULT_BOLT_PARALLELISM=4``) or a ``.env`` file.

Tags:
    stream-spine, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StreamSpineSettings(BaseSettings):
    """stream-spine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STREAMSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    # ── Declaration defaults ─────────────────────────────────────
    default_spout_parallelism: int = Field(default=1, ge=1)
    default_bolt_parallelism: int = Field(default=1, ge=1)
    native_namespaces: list[str] = Field(
        default_factory=list,
        description="Top-level module names whose classes the engine instantiates natively",
    )

    # ── Submission ───────────────────────────────────────────────
    default_environment: str = Field(default="local")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, StreamSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> StreamSpineSettings:
    """Load, validate, and cache a :class:`StreamSpineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = StreamSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()

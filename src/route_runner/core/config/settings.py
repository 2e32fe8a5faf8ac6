"""
Process settings for route-runner.

:class:`RunnerSettings` is the single validated source of truth for
runtime options. Values come from ``ROUTE_RUNNER_*`` environment
variables or a ``.env`` file; CLI options override them via
:meth:`RunnerSettings.with_overrides`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONTEXT_URI_DEFAULT = "classpath:context.yaml"
ROUTES_PATH_DEFAULT = "../routes"


class RunnerSettings(BaseSettings):
    """Runner configuration.

    All fields can be set via ``ROUTE_RUNNER_*`` environment variables
    (e.g. ``ROUTE_RUNNER_ROUTES_PATH=/srv/routes``).
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Sources ──────────────────────────────────────────────────
    context_uri: str = Field(default=CONTEXT_URI_DEFAULT, description="Context descriptor URI (file: or classpath:)")
    routes_path: str = Field(default=ROUTES_PATH_DEFAULT, description="Routes folder path")

    # ── Compilation ──────────────────────────────────────────────
    compiler: Literal["yaml", "python"] = Field(default="yaml")
    script_suffix: str | None = Field(default=None, description="Overrides the compiler's suffix")

    # ── Process loop ─────────────────────────────────────────────
    console_enabled: bool = Field(default=True)
    idle_interval: float = Field(default=0.5, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {value}")
        return value

    @field_validator("script_suffix")
    @classmethod
    def _dotted_suffix(cls, value: str | None) -> str | None:
        if value and not value.startswith("."):
            return f".{value}"
        return value or None

    def with_overrides(self, **overrides: Any) -> RunnerSettings:
        """Return a validated copy with non-None *overrides* applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return RunnerSettings(**data)


@lru_cache(maxsize=1)
def get_settings() -> RunnerSettings:
    """Return the process-wide settings (cached)."""
    return RunnerSettings()


def clear_settings_cache() -> None:
    """Reset the settings cache (for testing)."""
    get_settings.cache_clear()

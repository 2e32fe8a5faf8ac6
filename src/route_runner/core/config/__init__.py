"""Configuration: process settings and context descriptor resolution."""

from route_runner.core.config.context import (
    ContextUri,
    EngineConfig,
    parse_context_uri,
    resolve_engine_config,
)
from route_runner.core.config.settings import (
    CONTEXT_URI_DEFAULT,
    ROUTES_PATH_DEFAULT,
    RunnerSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CONTEXT_URI_DEFAULT",
    "ROUTES_PATH_DEFAULT",
    "ContextUri",
    "EngineConfig",
    "RunnerSettings",
    "clear_settings_cache",
    "get_settings",
    "parse_context_uri",
    "resolve_engine_config",
]

"""
Shared pytest fixtures and configuration for route-runner tests.

This module provides:
- Logging / settings reset between tests
- A temporary routes folder
- Lifecycle manager wiring with a recording engine
"""

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

# Ensure route_runner package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from route_runner.core import logging as runner_logging  # noqa: E402
from route_runner.core.config import EngineConfig, clear_settings_cache  # noqa: E402
from route_runner.lifecycle import LifecycleManager  # noqa: E402
from route_runner.routes import ScriptDirectoryLoader, YamlPipelineCompiler  # noqa: E402

from tests._support import RecordingEngine  # noqa: E402


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_runner_state(monkeypatch: pytest.MonkeyPatch):
    """Reset structlog config, settings cache and ROUTE_RUNNER_* env."""
    for key in list(os.environ):
        if key.startswith("ROUTE_RUNNER_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    runner_logging._configured = False
    clear_settings_cache()


# =============================================================================
# Routes folder and manager
# =============================================================================


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    path = tmp_path / "routes"
    path.mkdir()
    return path


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(name="test", drain_poll_interval=0.001)


@pytest.fixture
def engines() -> list[RecordingEngine]:
    """Every engine the manager built, in order."""
    return []


@pytest.fixture
def make_manager(routes_dir: Path, engine_config: EngineConfig, engines: list[RecordingEngine]):
    """Build a LifecycleManager whose engine factory yields RecordingEngines."""

    def _make(
        engine_factory: Callable[[], RecordingEngine] = RecordingEngine,
        config: EngineConfig | None = None,
        context_uri: str = "classpath:context.yaml",
    ) -> LifecycleManager:
        def factory(_config: EngineConfig) -> RecordingEngine:
            engine = engine_factory()
            engines.append(engine)
            return engine

        return LifecycleManager(
            context_uri=context_uri,
            routes_path=routes_dir,
            loader=ScriptDirectoryLoader(YamlPipelineCompiler()),
            engine_factory=factory,
            config_resolver=lambda _uri: config or engine_config,
            sleep=lambda _seconds: None,
        )

    return _make

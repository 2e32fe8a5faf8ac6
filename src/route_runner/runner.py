"""Process control loop.

``RouteRunner`` wires the lifecycle manager, shutdown coordinator and
command console together and blocks until an exit is requested.

Usage (programmatic)::

    from route_runner.core.config import RunnerSettings
    from route_runner.runner import RouteRunner

    settings = RunnerSettings(routes_path="routes")
    exit_code = RouteRunner(settings).run()  # blocking

Usage (CLI)::

    route-runner run -r routes -c file:conf/context.yaml
"""

from __future__ import annotations

from typing import TextIO

from rich.console import Console

from route_runner.core.config.settings import RunnerSettings
from route_runner.core.errors import ConfigError
from route_runner.core.logging import get_logger
from route_runner.lifecycle.console import CommandConsole
from route_runner.lifecycle.manager import LifecycleManager
from route_runner.lifecycle.shutdown import ShutdownCoordinator
from route_runner.routes.compiler import get_compiler
from route_runner.routes.loader import ScriptDirectoryLoader

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_START_FAILED = 1
EXIT_CONFIG_INVALID = 2


def build_loader(settings: RunnerSettings) -> ScriptDirectoryLoader:
    """Create the script loader for the configured compiler and suffix."""
    return ScriptDirectoryLoader(get_compiler(settings.compiler), suffix=settings.script_suffix)


class RouteRunner:
    """Runs the routing engine until a stop command or termination signal.

    Args:
        settings: Resolved runner settings.
        stream: Console input (defaults to stdin).
        output: Console output for operator messages.
        install_signals: Register SIGINT/SIGTERM and exit handlers.
    """

    def __init__(
        self,
        settings: RunnerSettings,
        stream: TextIO | None = None,
        output: Console | None = None,
        install_signals: bool = True,
    ):
        self.settings = settings
        self._stream = stream
        self._output = output
        self._install_signals = install_signals
        self.manager: LifecycleManager | None = None
        self.coordinator: ShutdownCoordinator | None = None
        self.console: CommandConsole | None = None

    def build_manager(self) -> LifecycleManager:
        return LifecycleManager(
            context_uri=self.settings.context_uri,
            routes_path=self.settings.routes_path,
            loader=build_loader(self.settings),
        )

    def run(self) -> int:
        """Start, serve until exit is requested, and return an exit code."""
        logger.info(
            "runner.starting",
            context_uri=self.settings.context_uri,
            routes_path=self.settings.routes_path,
            compiler=self.settings.compiler,
        )

        try:
            manager = self.build_manager()
        except ConfigError as e:
            logger.error("runner.config_invalid", **e.to_dict())
            return EXIT_CONFIG_INVALID
        self.manager = manager

        try:
            manager.start()
        except Exception:
            logger.exception("runner.start_failed")
            return EXIT_START_FAILED

        coordinator = ShutdownCoordinator(manager)
        self.coordinator = coordinator
        if self._install_signals:
            coordinator.install()

        if self.settings.console_enabled:
            self.console = CommandConsole(manager, coordinator, stream=self._stream, output=self._output)
            self.console.start()

        try:
            while not coordinator.wait(self.settings.idle_interval):
                pass
            coordinator.complete_pending_stop()
        except KeyboardInterrupt:
            coordinator.shutdown(reason="keyboard_interrupt")
        finally:
            # No-op unless exit was requested without a stop
            manager.stop()
            coordinator.uninstall()

        logger.info("runner.exited", state=manager.state.value)
        return EXIT_OK

"""
Operator command console.

Reads line-oriented commands from an input stream on a daemon thread:

    exit | stop | quit   stop the engine, then end the process
    reload | restart     stop and start again; on failure end the process
    ? | help             print usage

Commands are trimmed and case-insensitive; anything else is ignored.
End of input closes the console without stopping the engine.
"""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from rich.console import Console

from route_runner.core.logging import LogContext, get_logger
from route_runner.lifecycle.manager import LifecycleManager
from route_runner.lifecycle.shutdown import ShutdownCoordinator

logger = get_logger(__name__)

STOP_COMMANDS = frozenset({"exit", "stop", "quit"})
RELOAD_COMMANDS = frozenset({"reload", "restart"})
HELP_COMMANDS = frozenset({"?", "help"})

USAGE = """
Usage:
exit, stop, quit - stop program
reload, restart  - reload routes from the routes folder
?, help          - show this help
"""


class CommandConsole:
    """Dispatches operator commands to the lifecycle manager."""

    def __init__(
        self,
        manager: LifecycleManager,
        coordinator: ShutdownCoordinator,
        stream: TextIO | None = None,
        output: Console | None = None,
    ):
        self._manager = manager
        self._coordinator = coordinator
        self._stream = stream if stream is not None else sys.stdin
        self._output = output or Console()
        self._thread: threading.Thread | None = None

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def start(self) -> threading.Thread:
        """Run the console loop on a daemon thread. Returns the thread."""
        self._thread = threading.Thread(target=self.run, name="Console", daemon=True)
        self._thread.start()
        return self._thread

    def run(self) -> None:
        """Read and dispatch commands until exit is requested or input ends."""
        with LogContext(component="console"):
            try:
                while not self._coordinator.exit_requested:
                    line = self._stream.readline()
                    if not line:
                        logger.info("console.eof")
                        break
                    self.handle(line)
            except (OSError, ValueError) as e:
                logger.warning("console.read_failed", error=str(e))
            finally:
                logger.info("console.closed")

    def handle(self, line: str) -> bool:
        """Dispatch one input line. Returns False for unrecognized input."""
        command = line.strip().lower()

        if command in STOP_COMMANDS:
            logger.info("console.command", command=command)
            self._coordinator.shutdown(reason=f"console:{command}")
        elif command in RELOAD_COMMANDS:
            logger.info("console.command", command=command)
            try:
                self._manager.reload()
            except Exception:
                logger.exception("console.restart_failed", command=command)
                self._coordinator.request_exit()
        elif command in HELP_COMMANDS:
            self._output.print(USAGE, highlight=False, markup=False)
        else:
            return False
        return True

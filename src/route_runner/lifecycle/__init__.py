"""Lifecycle: runtime state machine, operator console and shutdown handling."""

from route_runner.lifecycle.console import CommandConsole
from route_runner.lifecycle.manager import LifecycleManager, StartReport
from route_runner.lifecycle.shutdown import ShutdownCoordinator
from route_runner.lifecycle.state import RuntimeState, VALID_TRANSITIONS, validate_transition

__all__ = [
    "CommandConsole",
    "LifecycleManager",
    "RuntimeState",
    "ShutdownCoordinator",
    "StartReport",
    "VALID_TRANSITIONS",
    "validate_transition",
]

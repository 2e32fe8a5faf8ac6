"""Runtime state of the lifecycle manager.

Valid transition graph::

    STOPPED  → STARTING
    STARTING → RUNNING | STOPPED (start failed)
    RUNNING  → STOPPING
    STOPPING → STOPPED
"""

from __future__ import annotations

from enum import Enum

from route_runner.core.errors import InvalidTransitionError


class RuntimeState(str, Enum):
    """Lifecycle state; exactly one value at a time."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


VALID_TRANSITIONS: dict[RuntimeState, frozenset[RuntimeState]] = {
    RuntimeState.STOPPED: frozenset({RuntimeState.STARTING}),
    RuntimeState.STARTING: frozenset({RuntimeState.RUNNING, RuntimeState.STOPPED}),
    RuntimeState.RUNNING: frozenset({RuntimeState.STOPPING}),
    RuntimeState.STOPPING: frozenset({RuntimeState.STOPPED}),
}


def validate_transition(current: RuntimeState, target: RuntimeState) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal."""
    if target not in VALID_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current.value, target.value)

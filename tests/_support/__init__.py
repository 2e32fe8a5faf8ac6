"""
Test support utilities for route-runner tests.

Helpers that don't fit as pytest fixtures: script writers and a
recording fake of the routing engine handle.
"""

from __future__ import annotations

import threading
from pathlib import Path
from textwrap import dedent

from route_runner.core.errors import EngineError, RegistrationError
from route_runner.routes.models import RouteDefinition

VALID_PIPELINE = dedent(
    """\
    apiVersion: route-runner/v1
    kind: Route
    metadata:
      name: {name}
    spec:
      from: direct:{name}
      steps:
        - log: got message
        - to: mock:{name}
    """
)

ANONYMOUS_PIPELINE = dedent(
    """\
    spec:
      from: timer:tick
    """
)

INVALID_PIPELINE = "spec: [from: : broken\n"


def write_script(directory: Path, filename: str, content: str) -> Path:
    """Write a script file and return its path."""
    path = directory / filename
    path.write_text(content, encoding="utf-8")
    return path


def write_valid(directory: Path, stem: str) -> Path:
    return write_script(directory, f"{stem}.pipeline", VALID_PIPELINE.format(name=stem))


def write_invalid(directory: Path, stem: str) -> Path:
    return write_script(directory, f"{stem}.pipeline", INVALID_PIPELINE)


class RecordingEngine:
    """Fake RoutingEngineHandle that records every call.

    It deliberately has no ``wait_stopped()`` so the manager polls.

    Args:
        polls_until_stopped: ``is_stopped()`` returns False this many times
            after ``stop()`` before reporting True.
        reject: Route names whose registration raises RegistrationError.
        observe_errors: ``is_stopped()`` raises this many times after ``stop()``.
    """

    def __init__(
        self,
        polls_until_stopped: int = 0,
        reject: set[str] | None = None,
        observe_errors: int = 0,
        fail_start: bool = False,
    ):
        self.calls: list[tuple[str, str | None]] = []
        self.routes: dict[str, RouteDefinition] = {}
        self.started = False
        self.stop_requested = False
        self._polls_left = polls_until_stopped
        self._observe_errors = observe_errors
        self._reject = reject or set()
        self._fail_start = fail_start
        self._lock = threading.Lock()

    def add_route(self, definition: RouteDefinition) -> str:
        route_id = definition.name or definition.source.stem
        with self._lock:
            self.calls.append(("add_route", route_id))
            if route_id in self._reject:
                raise RegistrationError(f"rejected {route_id}", route_id=route_id)
            if route_id in self.routes:
                raise RegistrationError(f"duplicate {route_id}", route_id=route_id)
            self.routes[route_id] = definition
        definition.route_id = route_id
        return route_id

    def remove_route(self, route_id: str) -> None:
        with self._lock:
            self.calls.append(("remove_route", route_id))
            if route_id not in self.routes:
                raise EngineError(f"unknown route {route_id}")
            del self.routes[route_id]

    def start(self) -> None:
        with self._lock:
            self.calls.append(("start", None))
            if self._fail_start:
                raise EngineError("engine refused to start")
            self.started = True
            self.stop_requested = False

    def stop(self) -> None:
        with self._lock:
            self.calls.append(("stop", None))
            self.stop_requested = True

    def is_stopped(self) -> bool:
        with self._lock:
            self.calls.append(("is_stopped", None))
            if not self.stop_requested:
                return not self.started
            if self._observe_errors > 0:
                self._observe_errors -= 1
                raise RuntimeError("status probe failed")
            if self._polls_left > 0:
                self._polls_left -= 1
                return False
            self.started = False
            return True

    def list_routes(self) -> list[str]:
        with self._lock:
            return list(self.routes)

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

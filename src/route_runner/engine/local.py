"""In-process routing engine.

``LocalRoutingEngine`` implements :class:`RoutingEngineHandle` for a
single process. It keeps registered routes, tracks in-flight exchanges
and stops asynchronously: ``stop()`` moves to STOPPING and returns; a
drain thread waits for in-flight exchanges to finish, then moves to
STOPPED and sets an event that ``wait_stopped()`` blocks on.

State graph::

    STOPPED ──start()──▶ STARTED ──stop()──▶ STOPPING ──drained──▶ STOPPED
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

from route_runner.core.errors import EngineError, RegistrationError
from route_runner.core.logging import get_logger
from route_runner.routes.models import RouteDefinition

logger = get_logger(__name__)


class EngineStatus(str, Enum):
    """Status of the in-process engine."""

    STOPPED = "stopped"
    STARTED = "started"
    STOPPING = "stopping"


class LocalRoutingEngine:
    """Thread-safe in-process routing engine."""

    def __init__(self, name: str = "route-runner", properties: dict[str, Any] | None = None):
        self.name = name
        self.properties = dict(properties or {})
        self._routes: dict[str, RouteDefinition] = {}
        self._sequence = 0
        self._status = EngineStatus.STOPPED
        self._in_flight = 0
        self._lock = threading.Lock()
        self._drained = threading.Condition(self._lock)
        self._stopped = threading.Event()
        self._stopped.set()
        self._drain_thread: threading.Thread | None = None

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #

    def add_route(self, definition: RouteDefinition) -> str:
        with self._lock:
            if definition.name:
                route_id = definition.name
            else:
                self._sequence += 1
                route_id = f"route-{self._sequence}"
                while route_id in self._routes:
                    self._sequence += 1
                    route_id = f"route-{self._sequence}"

            if route_id in self._routes:
                raise RegistrationError(
                    f"Route '{route_id}' is already registered "
                    f"(from {self._routes[route_id].source})",
                    route_id=route_id,
                    source=definition.source,
                )

            definition.route_id = route_id
            self._routes[route_id] = definition

        logger.debug("engine.route_added", engine=self.name, route_id=route_id, endpoint=definition.endpoint)
        return route_id

    def remove_route(self, route_id: str) -> None:
        with self._lock:
            if route_id not in self._routes:
                raise EngineError(f"Route '{route_id}' is not registered", context={"route_id": route_id})
            if self._status is not EngineStatus.STOPPED:
                raise EngineError(
                    f"Route '{route_id}' cannot be removed while engine is {self._status.value}",
                    context={"route_id": route_id},
                )
            definition = self._routes.pop(route_id)
            definition.route_id = None
        logger.debug("engine.route_removed", engine=self.name, route_id=route_id)

    def list_routes(self) -> list[str]:
        with self._lock:
            return list(self._routes)

    def get_route(self, route_id: str) -> RouteDefinition:
        with self._lock:
            try:
                return self._routes[route_id]
            except KeyError:
                raise EngineError(f"Route '{route_id}' is not registered", context={"route_id": route_id})

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @property
    def status(self) -> EngineStatus:
        with self._lock:
            return self._status

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def start(self) -> None:
        with self._lock:
            if self._status is EngineStatus.STARTED:
                return
            if self._status is EngineStatus.STOPPING:
                raise EngineError("Engine is still stopping", context={"engine": self.name})
            self._status = EngineStatus.STARTED
            self._stopped.clear()
            routes = len(self._routes)
        logger.info("engine.started", engine=self.name, routes=routes)

    def stop(self) -> None:
        with self._lock:
            if self._status is not EngineStatus.STARTED:
                return
            self._status = EngineStatus.STOPPING
            self._drain_thread = threading.Thread(
                target=self._drain,
                name=f"{self.name}-drain",
                daemon=True,
            )
            self._drain_thread.start()
        logger.info("engine.stopping", engine=self.name)

    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    def wait_stopped(self, timeout: float | None = None) -> bool:
        return self._stopped.wait(timeout)

    def _drain(self) -> None:
        with self._drained:
            while self._in_flight > 0:
                self._drained.wait()
            self._status = EngineStatus.STOPPED
            self._stopped.set()
        logger.info("engine.stopped", engine=self.name)

    # ------------------------------------------------------------------ #
    # Exchanges
    # ------------------------------------------------------------------ #

    @contextmanager
    def exchange(self, route_id: str) -> Iterator[RouteDefinition]:
        """Track one in-flight message exchange on *route_id*.

        Stop does not complete until every open exchange has exited.
        """
        with self._lock:
            if self._status is not EngineStatus.STARTED:
                raise EngineError(
                    f"Engine is {self._status.value}; exchange rejected",
                    context={"route_id": route_id},
                )
            if route_id not in self._routes:
                raise EngineError(f"Route '{route_id}' is not registered", context={"route_id": route_id})
            definition = self._routes[route_id]
            self._in_flight += 1
        try:
            yield definition
        finally:
            with self._drained:
                self._in_flight -= 1
                self._drained.notify_all()

    def __repr__(self) -> str:
        return f"LocalRoutingEngine(name={self.name!r}, status={self._status.value}, routes={len(self._routes)})"

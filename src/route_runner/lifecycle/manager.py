"""
Lifecycle manager: the start / stop / reload state machine.

The manager owns the routing engine handle and the script loader. Every
entry point (``start``, ``stop``, ``reload``) runs under one lock, so a
console-triggered reload can never interleave with a signal-triggered
stop; once entered, a transition runs to completion before another may
begin.

    start():  STOPPED → STARTING → RUNNING        (failure → STOPPED)
              resolve config → build engine → scan scripts →
              register each route (failures skipped) → engine.start()

    stop():   RUNNING → STOPPING → STOPPED        (STOPPED: no-op)
              engine.stop() → drain-wait until stopped →
              remove every registered route

    reload(): stop() then start() as one locked operation

Drain-wait blocks on the engine's stop notification when it offers
``wait_stopped()``, otherwise it polls ``is_stopped()`` every
``drain_poll_interval`` seconds. There is no timeout unless the context
descriptor sets ``drain_timeout``; on expiry teardown is forced.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from route_runner.core.config.context import (
    ContextUri,
    EngineConfig,
    parse_context_uri,
    resolve_engine_config,
)
from route_runner.core.errors import (
    CompilationError,
    DrainTimeoutError,
    DrainWaitObservationError,
    LifecycleError,
    RegistrationError,
    RunnerError,
)
from route_runner.core.logging import get_logger, timed_block
from route_runner.core.protocols import DrainNotifier, RoutingEngineHandle
from route_runner.engine.factory import create_engine
from route_runner.lifecycle.state import RuntimeState, validate_transition
from route_runner.routes.loader import ScriptDirectoryLoader

logger = get_logger(__name__)


def _error_fields(exc: BaseException) -> dict[str, Any]:
    if isinstance(exc, RunnerError):
        return exc.to_dict()
    return {"error_type": type(exc).__name__, "error": str(exc)}


@dataclass
class StartReport:
    """What a successful ``start()`` registered and skipped."""

    route_ids: list[str] = field(default_factory=list)
    compile_failures: list[CompilationError] = field(default_factory=list)
    registration_failures: list[RegistrationError] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def routes_registered(self) -> int:
        return len(self.route_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": self.routes_registered,
            "compile_failures": len(self.compile_failures),
            "registration_failures": len(self.registration_failures),
            "duration_ms": self.duration_ms,
        }


class LifecycleManager:
    """Serialized start/stop/reload of the routing engine.

    Args:
        context_uri: Context descriptor URI. The scheme is validated here,
            so an unsupported scheme fails before any state activity.
        routes_path: Directory holding pipeline scripts.
        loader: Script loader (wraps the pipeline compiler).
        engine_factory: Builds an engine from the resolved config.
        config_resolver: Resolves the context URI into an EngineConfig.
        sleep: Used between stopped-state polls (injectable for tests).
    """

    def __init__(
        self,
        context_uri: str,
        routes_path: Path | str,
        loader: ScriptDirectoryLoader,
        engine_factory: Callable[[EngineConfig], RoutingEngineHandle] = create_engine,
        config_resolver: Callable[[ContextUri], EngineConfig] = resolve_engine_config,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._context_uri = parse_context_uri(context_uri)
        self._routes_path = Path(routes_path)
        self._loader = loader
        self._engine_factory = engine_factory
        self._config_resolver = config_resolver
        self._sleep = sleep

        self._lock = threading.Lock()
        self._state = RuntimeState.STOPPED
        self._engine: RoutingEngineHandle | None = None
        self._config: EngineConfig | None = None

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> RuntimeState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is RuntimeState.RUNNING

    @property
    def engine(self) -> RoutingEngineHandle | None:
        return self._engine

    @property
    def config(self) -> EngineConfig | None:
        return self._config

    @property
    def context_uri(self) -> str:
        return self._context_uri.raw

    @property
    def routes_path(self) -> Path:
        return self._routes_path

    @property
    def routes(self) -> list[str]:
        """Route ids currently registered with the engine."""
        engine = self._engine
        return list(engine.list_routes()) if engine is not None else []

    # ------------------------------------------------------------------ #
    # Entry points (serialized)
    # ------------------------------------------------------------------ #

    def start(self) -> StartReport:
        """Start the engine with every compilable script in the routes folder.

        Raises:
            InvalidTransitionError: manager is not stopped
            RunnerError: config resolution, engine construction, directory
                or engine start failed; the manager is back in ``stopped``
        """
        with self._lock:
            return self._start()

    def stop(self) -> bool:
        """Stop the engine and remove all routes.

        Returns False (and does nothing) when already stopped.
        """
        with self._lock:
            if self._state is RuntimeState.STOPPED:
                logger.debug("lifecycle.stop_skipped", state=self._state.value)
                return False
            self._stop()
            return True

    def reload(self) -> StartReport:
        """Stop (if running) and start again, re-scanning the routes folder."""
        with self._lock:
            logger.info("lifecycle.reloading", routes_path=str(self._routes_path))
            if self._state is RuntimeState.RUNNING:
                self._stop()
            return self._start()

    # ------------------------------------------------------------------ #
    # Transitions (caller holds the lock)
    # ------------------------------------------------------------------ #

    def _transition(self, target: RuntimeState) -> None:
        validate_transition(self._state, target)
        previous = self._state
        self._state = target
        logger.info("lifecycle.transition", from_state=previous.value, to_state=target.value)

    def _start(self) -> StartReport:
        self._transition(RuntimeState.STARTING)
        report = StartReport()

        with timed_block() as timer:
            try:
                config = self._config_resolver(self._context_uri)
                engine = self._engine_factory(config)
                scan = self._loader.scan(self._routes_path)
                report.compile_failures.extend(scan.failures)

                for definition in scan.definitions:
                    try:
                        route_id = engine.add_route(definition)
                    except RegistrationError as e:
                        report.registration_failures.append(e)
                        logger.error("lifecycle.route_registration_failed", **e.to_dict())
                        continue
                    except Exception as e:
                        error = RegistrationError(
                            f"Can't add route from '{definition.source}'",
                            route_id=definition.name,
                            source=definition.source,
                            cause=e,
                        )
                        report.registration_failures.append(error)
                        logger.error("lifecycle.route_registration_failed", **error.to_dict())
                        continue
                    report.route_ids.append(route_id)

                engine.start()
            except BaseException as e:
                self._transition(RuntimeState.STOPPED)
                logger.error(
                    "lifecycle.start_failed",
                    context_uri=self._context_uri.raw,
                    routes_path=str(self._routes_path),
                    **_error_fields(e),
                )
                raise

        self._config = config
        self._engine = engine
        report.duration_ms = timer.duration_ms
        self._transition(RuntimeState.RUNNING)
        logger.info("lifecycle.started", engine=config.name, **report.to_dict())
        return report

    def _stop(self) -> None:
        engine = self._engine
        if engine is None:
            raise LifecycleError(
                f"No engine to stop in state {self._state.value}",
                context={"state": self._state.value},
            )
        config = self._config or EngineConfig()
        self._transition(RuntimeState.STOPPING)

        with timed_block() as timer:
            try:
                engine.stop()
            except Exception as e:
                logger.error("lifecycle.engine_stop_failed", **_error_fields(e))

            drained = self._wait_stopped(engine, config)
            removed = self._remove_routes(engine)

        self._transition(RuntimeState.STOPPED)
        logger.info(
            "lifecycle.stopped",
            engine=config.name,
            routes_removed=removed,
            drained=drained,
            duration_ms=timer.duration_ms,
        )

    def _wait_stopped(self, engine: RoutingEngineHandle, config: EngineConfig) -> bool:
        """Block until the engine reports stopped. False if the timeout expired."""
        interval = config.drain_poll_interval
        deadline = None if config.drain_timeout is None else time.monotonic() + config.drain_timeout
        notifier = engine if isinstance(engine, DrainNotifier) else None

        while True:
            try:
                if engine.is_stopped():
                    return True
            except Exception as e:
                error = DrainWaitObservationError("Can't observe engine stopped state", cause=e)
                logger.error("lifecycle.drain_observation_failed", **error.to_dict())

            wait = interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    timeout_error = DrainTimeoutError(config.drain_timeout or 0.0)
                    logger.error("lifecycle.drain_timeout", forced=True, **timeout_error.to_dict())
                    return False
                wait = min(interval, remaining)

            if notifier is None:
                self._sleep(wait)
                continue
            try:
                notifier.wait_stopped(wait)
            except Exception as e:
                error = DrainWaitObservationError("Can't wait for engine stopped", cause=e)
                logger.error("lifecycle.drain_observation_failed", **error.to_dict())
                self._sleep(wait)

    def _remove_routes(self, engine: RoutingEngineHandle) -> int:
        try:
            route_ids = list(engine.list_routes())
        except Exception as e:
            logger.error("lifecycle.list_routes_failed", **_error_fields(e))
            return 0

        removed = 0
        for route_id in route_ids:
            try:
                engine.remove_route(route_id)
            except Exception as e:
                fields = _error_fields(e)
                fields.setdefault("route_id", route_id)
                logger.error("lifecycle.route_removal_failed", **fields)
                continue
            removed += 1
        return removed

    def __repr__(self) -> str:
        return f"LifecycleManager(state={self._state.value}, context_uri={self._context_uri.raw!r})"


__all__ = ["LifecycleManager", "StartReport"]

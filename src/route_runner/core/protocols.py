"""
Canonical protocol definitions for route-runner.

The lifecycle state machine depends on shape, not implementation:

    protocols.py
    ├── PipelineCompiler     : one script resource → one RouteDefinition
    ├── RoutingEngineHandle  : the external routing engine
    └── DrainNotifier        : optional event-based "fully stopped" wait

Any object matching a protocol works, which is how the tests substitute
recording fakes for the in-process engine.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from route_runner.routes.models import RouteDefinition


@runtime_checkable
class PipelineCompiler(Protocol):
    """Turns one script resource into one route definition.

    ``suffix`` is the file-name suffix identifying scripts this compiler
    understands (e.g. ``.pipeline``).
    """

    suffix: str

    def compile(self, path: Path) -> RouteDefinition:
        """Compile *path* or raise :class:`~route_runner.core.errors.CompilationError`."""
        ...


@runtime_checkable
class RoutingEngineHandle(Protocol):
    """Thin interface to the routing engine."""

    def add_route(self, definition: RouteDefinition) -> str:
        """Register a route and return its engine-assigned id."""
        ...

    def remove_route(self, route_id: str) -> None:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        """Request stop. May return before the engine is fully stopped."""
        ...

    def is_stopped(self) -> bool:
        ...

    def list_routes(self) -> Sequence[str]:
        ...


@runtime_checkable
class DrainNotifier(Protocol):
    """Engines that can signal full stop without being polled."""

    def wait_stopped(self, timeout: float | None = None) -> bool:
        """Block up to *timeout* seconds; return True once fully stopped."""
        ...


__all__ = ["PipelineCompiler", "RoutingEngineHandle", "DrainNotifier"]

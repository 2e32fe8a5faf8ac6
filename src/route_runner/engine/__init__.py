"""Routing engine implementations."""

from route_runner.engine.factory import ENGINE_BACKENDS, create_engine
from route_runner.engine.local import EngineStatus, LocalRoutingEngine

__all__ = ["ENGINE_BACKENDS", "EngineStatus", "LocalRoutingEngine", "create_engine"]

"""
route-runner: dynamic route loading and lifecycle control for a routing engine.

Discovers pipeline scripts in a routes folder, compiles them into route
definitions, registers them with a long-lived routing engine and exposes
start / stop / reload to operators through the console and process
signals.
"""

__version__ = "0.1.0"

from route_runner.lifecycle import LifecycleManager, RuntimeState, StartReport
from route_runner.routes import RouteDefinition, ScriptDirectoryLoader

__all__ = [
    "__version__",
    "LifecycleManager",
    "RouteDefinition",
    "RuntimeState",
    "ScriptDirectoryLoader",
    "StartReport",
]

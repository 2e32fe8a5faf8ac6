"""
Engine factory.

Maps ``EngineConfig.engine`` to a concrete routing engine. Backends are
imported lazily so selecting one never pulls in the others.
"""

from __future__ import annotations

from route_runner.core.config.context import EngineConfig
from route_runner.core.errors import ConfigError
from route_runner.core.protocols import RoutingEngineHandle

ENGINE_BACKENDS = ("local",)


def create_engine(config: EngineConfig) -> RoutingEngineHandle:
    """Create a routing engine from *config*.

    Raises:
        ConfigError: unknown backend key
    """
    match config.engine:
        case "local":
            from route_runner.engine.local import LocalRoutingEngine

            return LocalRoutingEngine(name=config.name, properties=config.properties)
        case _:
            raise ConfigError(
                f"Unknown engine backend '{config.engine}'. Available: {', '.join(ENGINE_BACKENDS)}",
                context={"engine": config.engine},
            )

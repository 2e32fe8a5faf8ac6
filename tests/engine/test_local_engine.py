"""
Tests for the in-process routing engine.

Exercises registration, asynchronous stop with in-flight drain, and
the stop notification used by drain-wait.
"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from route_runner.core.config import EngineConfig
from route_runner.core.errors import ConfigError, EngineError, RegistrationError
from route_runner.core.protocols import DrainNotifier, RoutingEngineHandle
from route_runner.engine import EngineStatus, LocalRoutingEngine, create_engine
from route_runner.routes.models import RouteDefinition


def _definition(name: str | None = None, endpoint: str = "direct:x") -> RouteDefinition:
    return RouteDefinition(source=Path(f"{name or 'anon'}.pipeline"), endpoint=endpoint, name=name)


@pytest.fixture
def engine() -> LocalRoutingEngine:
    return LocalRoutingEngine(name="test")


class TestRegistration:
    def test_named_route_keeps_name(self, engine: LocalRoutingEngine):
        definition = _definition("orders")
        assert engine.add_route(definition) == "orders"
        assert definition.route_id == "orders"
        assert engine.list_routes() == ["orders"]

    def test_anonymous_routes_get_sequence_ids(self, engine: LocalRoutingEngine):
        assert engine.add_route(_definition()) == "route-1"
        assert engine.add_route(_definition()) == "route-2"

    def test_anonymous_id_skips_taken_names(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("route-1"))
        assert engine.add_route(_definition()) == "route-2"

    def test_duplicate_rejected(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("orders"))
        with pytest.raises(RegistrationError) as exc:
            engine.add_route(_definition("orders"))
        assert exc.value.route_id == "orders"

    def test_remove(self, engine: LocalRoutingEngine):
        definition = _definition("orders")
        engine.add_route(definition)
        engine.remove_route("orders")
        assert engine.list_routes() == []
        assert definition.route_id is None

    def test_remove_unknown(self, engine: LocalRoutingEngine):
        with pytest.raises(EngineError):
            engine.remove_route("ghost")

    def test_remove_while_started(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("orders"))
        engine.start()
        with pytest.raises(EngineError, match="while engine is started"):
            engine.remove_route("orders")

    def test_get_route(self, engine: LocalRoutingEngine):
        definition = _definition("orders")
        engine.add_route(definition)
        assert engine.get_route("orders") is definition
        with pytest.raises(EngineError):
            engine.get_route("nope")


class TestLifecycle:
    def test_fresh_engine_is_stopped(self, engine: LocalRoutingEngine):
        assert engine.is_stopped()
        assert engine.status is EngineStatus.STOPPED

    def test_start_stop(self, engine: LocalRoutingEngine):
        engine.start()
        assert not engine.is_stopped()
        assert engine.status is EngineStatus.STARTED

        engine.stop()

        assert engine.wait_stopped(timeout=2.0)
        assert engine.status is EngineStatus.STOPPED

    def test_start_is_idempotent(self, engine: LocalRoutingEngine):
        engine.start()
        engine.start()
        assert engine.status is EngineStatus.STARTED

    def test_stop_on_stopped_engine(self, engine: LocalRoutingEngine):
        engine.stop()
        assert engine.is_stopped()

    def test_stop_waits_for_in_flight_exchange(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("orders"))
        engine.start()
        entered = threading.Event()
        release = threading.Event()

        def work() -> None:
            with engine.exchange("orders"):
                entered.set()
                release.wait(timeout=5.0)

        worker = threading.Thread(target=work)
        worker.start()
        assert entered.wait(timeout=2.0)

        engine.stop()
        assert engine.status is EngineStatus.STOPPING
        assert not engine.wait_stopped(timeout=0.05)
        assert engine.in_flight == 1

        release.set()
        worker.join(timeout=2.0)

        assert engine.wait_stopped(timeout=2.0)
        assert engine.in_flight == 0

    def test_restart_while_stopping_rejected(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("orders"))
        engine.start()
        release = threading.Event()
        entered = threading.Event()

        def work() -> None:
            with engine.exchange("orders"):
                entered.set()
                release.wait(timeout=5.0)

        worker = threading.Thread(target=work)
        worker.start()
        entered.wait(timeout=2.0)
        engine.stop()
        try:
            with pytest.raises(EngineError, match="still stopping"):
                engine.start()
        finally:
            release.set()
            worker.join(timeout=2.0)

    def test_exchange_rejected_when_not_started(self, engine: LocalRoutingEngine):
        engine.add_route(_definition("orders"))
        with pytest.raises(EngineError):
            with engine.exchange("orders"):
                pass

    def test_exchange_unknown_route(self, engine: LocalRoutingEngine):
        engine.start()
        with pytest.raises(EngineError):
            with engine.exchange("ghost"):
                pass


class TestProtocolsAndFactory:
    def test_satisfies_protocols(self, engine: LocalRoutingEngine):
        assert isinstance(engine, RoutingEngineHandle)
        assert isinstance(engine, DrainNotifier)

    def test_factory_builds_local(self):
        engine = create_engine(EngineConfig(name="edge", properties={"a": 1}))
        assert isinstance(engine, LocalRoutingEngine)
        assert engine.name == "edge"
        assert engine.properties == {"a": 1}

    def test_factory_unknown_backend(self):
        with pytest.raises(ConfigError, match="Unknown engine backend"):
            create_engine(EngineConfig(engine="remote"))

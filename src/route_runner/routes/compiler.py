"""
Pipeline compilers.

A compiler turns one script resource into one :class:`RouteDefinition`
or raises :class:`CompilationError`. Two implementations ship:

- ``YamlPipelineCompiler`` (``.pipeline``) parses a declarative YAML
  route document and validates it with pydantic.
- ``PythonScriptCompiler`` (``.py``) evaluates a Python script in a
  fresh namespace and takes its ``route`` value or the result of its
  ``build_route()`` callable.

The lifecycle state machine is agnostic to which one is used.
"""

from __future__ import annotations

import runpy
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from route_runner.core.errors import CompilationError, ConfigError
from route_runner.core.logging import get_logger
from route_runner.routes.models import RouteDefinition, RouteScriptSpec

logger = get_logger(__name__)


def _from_mapping(path: Path, data: Any) -> RouteDefinition:
    if not isinstance(data, Mapping):
        raise CompilationError(path, f"expected mapping, got {type(data).__name__}")
    try:
        spec = RouteScriptSpec.model_validate(dict(data))
    except ValidationError as e:
        raise CompilationError(path, f"{e.error_count()} validation error(s)", cause=e)
    return spec.to_definition(path)


class YamlPipelineCompiler:
    """Compiles declarative YAML route scripts."""

    suffix = ".pipeline"

    def compile(self, path: Path) -> RouteDefinition:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CompilationError(path, "unreadable script", cause=e)

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CompilationError(path, "invalid YAML", cause=e)

        definition = _from_mapping(path, data)
        logger.debug("compiler.compiled", path=str(path), endpoint=definition.endpoint)
        return definition


class PythonScriptCompiler:
    """Evaluates Python route scripts.

    The script must define either ``route`` (a ``RouteDefinition`` or a
    mapping in the YAML document shape) or a zero-argument
    ``build_route()`` returning one of those.
    """

    suffix = ".py"

    def compile(self, path: Path) -> RouteDefinition:
        path = Path(path)
        # SystemExit from a script is a failed compile, not a process exit
        try:
            namespace = runpy.run_path(str(path), run_name=f"route_script.{path.stem}")
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            raise CompilationError(path, f"script raised {type(e).__name__}: {e}", cause=e)

        if "route" in namespace:
            value = namespace["route"]
        elif callable(namespace.get("build_route")):
            try:
                value = namespace["build_route"]()
            except KeyboardInterrupt:
                raise
            except BaseException as e:
                raise CompilationError(path, f"build_route() raised {type(e).__name__}: {e}", cause=e)
        else:
            raise CompilationError(path, "script defines neither 'route' nor 'build_route()'")

        if isinstance(value, RouteDefinition):
            value.source = path
            value.route_id = None
            definition = value
        else:
            definition = _from_mapping(path, value)

        logger.debug("compiler.compiled", path=str(path), endpoint=definition.endpoint)
        return definition


_COMPILERS: dict[str, Callable[[], Any]] = {
    "yaml": YamlPipelineCompiler,
    "python": PythonScriptCompiler,
}


def get_compiler(name: str) -> YamlPipelineCompiler | PythonScriptCompiler:
    """Return a compiler instance by name (``yaml`` or ``python``)."""
    try:
        factory = _COMPILERS[name]
    except KeyError:
        available = ", ".join(sorted(_COMPILERS))
        raise ConfigError(f"Unknown compiler '{name}'. Available: {available}", context={"compiler": name})
    return factory()


def list_compilers() -> list[str]:
    """List registered compiler names."""
    return sorted(_COMPILERS)

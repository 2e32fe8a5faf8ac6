"""
Context descriptor resolution.

A context descriptor is a YAML document describing how to construct the
routing engine. It is located by URI:

    file:<path>        filesystem path, relative to the working directory
    classpath:<name>   resource bundled in ``route_runner.resources``

Any other scheme is rejected by :func:`parse_context_uri` with
:class:`ConfigSchemeUnsupportedError`. Resolution reads and validates
the document into an :class:`EngineConfig`.

File Format (YAML):
    name: default
    engine: local
    drain_poll_interval: 0.1
    drain_timeout: null
    properties:
      greeting: hello
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from route_runner.core.errors import (
    ConfigSchemeUnsupportedError,
    ContextNotFoundError,
    InvalidContextError,
)
from route_runner.core.logging import get_logger

logger = get_logger(__name__)

RESOURCE_PACKAGE = "route_runner.resources"
SUPPORTED_SCHEMES = ("file", "classpath")


class EngineConfig(BaseModel):
    """Engine configuration produced from a context descriptor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(default="route-runner", min_length=1)
    engine: str = Field(default="local", description="Engine backend key")
    drain_poll_interval: float = Field(default=0.1, gt=0, description="Seconds between stopped-state checks")
    drain_timeout: float | None = Field(
        default=None, gt=0, description="Bound on drain-wait; None waits indefinitely"
    )
    properties: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class ContextUri:
    """A parsed context descriptor URI."""

    scheme: Literal["file", "classpath"]
    location: str
    raw: str

    def __str__(self) -> str:
        return self.raw


def parse_context_uri(uri: str) -> ContextUri:
    """Split *uri* into scheme and location.

    Raises:
        ConfigSchemeUnsupportedError: scheme is not ``file:`` or ``classpath:``
    """
    for scheme in SUPPORTED_SCHEMES:
        prefix = f"{scheme}:"
        if uri.startswith(prefix):
            location = uri[len(prefix):]
            if scheme == "file" and location.startswith("//"):
                # file:///abs/path → /abs/path
                location = location[2:]
            return ContextUri(scheme=scheme, location=location, raw=uri)  # type: ignore[arg-type]
    raise ConfigSchemeUnsupportedError(uri)


def _read_descriptor(context_uri: ContextUri) -> str:
    if context_uri.scheme == "file":
        path = Path(context_uri.location)
        if not path.is_file():
            raise ContextNotFoundError(context_uri.raw, str(path.resolve()))
        return path.read_text(encoding="utf-8")

    resource = resources.files(RESOURCE_PACKAGE)
    for part in context_uri.location.lstrip("/").split("/"):
        resource = resource.joinpath(part)
    if not resource.is_file():
        raise ContextNotFoundError(context_uri.raw, f"{RESOURCE_PACKAGE}/{context_uri.location}")
    return resource.read_text(encoding="utf-8")


def resolve_engine_config(uri: str | ContextUri) -> EngineConfig:
    """Resolve a context descriptor URI into an :class:`EngineConfig`.

    Raises:
        ConfigSchemeUnsupportedError: unknown scheme
        ContextNotFoundError: resource does not exist
        InvalidContextError: YAML or schema validation failed
    """
    context_uri = uri if isinstance(uri, ContextUri) else parse_context_uri(uri)
    text = _read_descriptor(context_uri)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidContextError(context_uri.raw, "malformed YAML", cause=e)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidContextError(context_uri.raw, f"expected mapping, got {type(data).__name__}")

    try:
        config = EngineConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidContextError(context_uri.raw, str(e), cause=e)

    logger.debug("config.context_resolved", uri=context_uri.raw, name=config.name, engine=config.engine)
    return config

"""Route definition models.

``RouteDefinition`` is what a compiler produces from exactly one script.
It is owned by the loader until registration; the engine assigns
``route_id`` when the route is added.

The YAML document models mirror the envelope used by pipeline scripts::

    apiVersion: route-runner/v1
    kind: Route
    metadata:
      name: orders.inbound
      description: Pick up order files
    spec:
      from: file:inbox/orders
      steps:
        - log: "received ${header.fileName}"
        - to: direct:orders
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

API_VERSION = "route-runner/v1"


@dataclass
class RouteDefinition:
    """An executable route compiled from one script resource."""

    source: Path
    endpoint: str
    name: str | None = None
    description: str = ""
    steps: list[dict[str, Any]] = field(default_factory=list)
    route_id: str | None = None

    @property
    def registered(self) -> bool:
        return self.route_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "route_id": self.route_id,
            "name": self.name,
            "endpoint": self.endpoint,
            "source": str(self.source),
            "steps": len(self.steps),
        }


class RouteMetadataSpec(BaseModel):
    """Metadata section of a route script."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, description="Route id requested from the engine")
    description: str = Field(default="")


class RouteBodySpec(BaseModel):
    """Spec section: the consuming endpoint and processing steps."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    endpoint: str = Field(..., alias="from", min_length=1)
    steps: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("steps")
    @classmethod
    def _single_key_steps(cls, steps: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for i, step in enumerate(steps):
            if len(step) != 1:
                raise ValueError(f"steps[{i}] must have exactly one key, got {sorted(step)}")
        return steps


class RouteScriptSpec(BaseModel):
    """Top-level route script document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    api_version: Literal["route-runner/v1"] = Field(default=API_VERSION, alias="apiVersion")
    kind: Literal["Route"] = "Route"
    metadata: RouteMetadataSpec = Field(default_factory=RouteMetadataSpec)
    spec: RouteBodySpec

    def to_definition(self, source: Path) -> RouteDefinition:
        """Convert to a :class:`RouteDefinition` tied to *source*."""
        return RouteDefinition(
            source=source,
            endpoint=self.spec.endpoint,
            name=self.metadata.name,
            description=self.metadata.description,
            steps=[dict(step) for step in self.spec.steps],
        )

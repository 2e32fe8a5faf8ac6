"""
Structured error types for route-runner.

Every error raised by the runner carries a category, a context mapping
with the resource it concerns (script path, route id, URI) and the
chained underlying exception. Callers decide isolation vs. propagation
by type:

    ┌─────────────────────────────────────────────────────────────────┐
    │                          RunnerError                             │
    ├─────────────────────────────────────────────────────────────────┤
    │  ConfigError (CONFIG)           DirectoryUnavailableError        │
    │    ConfigSchemeUnsupportedError   (SOURCE, batch-fatal)          │
    │    ContextNotFoundError                                          │
    │    InvalidContextError          CompilationError (COMPILE)       │
    │                                   per-script, isolated           │
    │  EngineError (ENGINE)                                            │
    │    RegistrationError  per-route, isolated                        │
    │    DrainWaitObservationError  logged, wait continues             │
    │    DrainTimeoutError                                             │
    │                                                                  │
    │  LifecycleError (LIFECYCLE)                                      │
    │    InvalidTransitionError                                        │
    └─────────────────────────────────────────────────────────────────┘

Usage:
    try:
        definition = compiler.compile(path)
    except CompilationError as exc:
        logger.error("loader.compile_failed", **exc.to_dict())
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for log fields and exit handling."""

    CONFIG = "CONFIG"           # Context descriptor, settings
    SOURCE = "SOURCE"           # Script directory
    COMPILE = "COMPILE"         # One pipeline script
    ENGINE = "ENGINE"           # Routing engine calls
    LIFECYCLE = "LIFECYCLE"     # State machine misuse
    INTERNAL = "INTERNAL"


class RunnerError(Exception):
    """Base exception for all route-runner errors.

    Subclasses set ``default_category``; the instance carries the
    message, a free-form ``context`` dict and an optional ``cause``
    which is also chained as ``__cause__``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RunnerError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a flat dict suitable for structured logging."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "error": self.message,
            "category": self.category.value,
        }
        result.update(self.context)
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(RunnerError):
    """Configuration error. Never retried; the configuration must be fixed."""

    default_category = ErrorCategory.CONFIG


class ConfigSchemeUnsupportedError(ConfigError):
    """Context descriptor URI uses a scheme other than ``file:``/``classpath:``."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unsupported URI protocol: {uri}", context={"uri": uri})


class ContextNotFoundError(ConfigError):
    """Context descriptor resource does not exist."""

    def __init__(self, uri: str, location: str | None = None):
        self.uri = uri
        super().__init__(
            f"Context descriptor not found: {uri}",
            context={"uri": uri, "location": location or uri},
        )


class InvalidContextError(ConfigError):
    """Context descriptor exists but cannot be parsed or validated."""

    def __init__(self, uri: str, reason: str, *, cause: BaseException | None = None):
        self.uri = uri
        super().__init__(
            f"Invalid context descriptor {uri}: {reason}",
            context={"uri": uri},
            cause=cause,
        )


# =============================================================================
# SCRIPT SOURCE ERRORS
# =============================================================================


class DirectoryUnavailableError(RunnerError):
    """Script directory is missing or unreadable. Fatal to ``start()``."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, directory: Path | str, *, cause: BaseException | None = None):
        self.directory = Path(directory)
        super().__init__(
            f"Routes folder is not available: {directory}",
            context={"path": str(directory)},
            cause=cause,
        )


class CompilationError(RunnerError):
    """One pipeline script could not be turned into a route definition."""

    default_category = ErrorCategory.COMPILE

    def __init__(self, path: Path | str, reason: str, *, cause: BaseException | None = None):
        self.path = Path(path)
        self.reason = reason
        super().__init__(
            f"Can't compile route from '{path}': {reason}",
            context={"path": str(path)},
            cause=cause,
        )


# =============================================================================
# ENGINE ERRORS
# =============================================================================


class EngineError(RunnerError):
    """Routing engine rejected or failed an operation."""

    default_category = ErrorCategory.ENGINE


class RegistrationError(EngineError):
    """A route definition could not be added to the engine."""

    def __init__(
        self,
        message: str,
        *,
        route_id: str | None = None,
        source: Path | str | None = None,
        cause: BaseException | None = None,
    ):
        self.route_id = route_id
        context: dict[str, Any] = {}
        if route_id is not None:
            context["route_id"] = route_id
        if source is not None:
            context["path"] = str(source)
        super().__init__(message, context=context, cause=cause)


class DrainWaitObservationError(EngineError):
    """Observing the engine's stopped state failed during drain-wait."""


class DrainTimeoutError(EngineError):
    """Engine did not report stopped within the configured drain timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Engine did not stop within {timeout:.1f}s",
            context={"drain_timeout": timeout},
        )


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class LifecycleError(RunnerError):
    """Lifecycle operation failed and the manager returned to ``stopped``."""

    default_category = ErrorCategory.LIFECYCLE


class InvalidTransitionError(LifecycleError):
    """Raised when an illegal runtime state transition is attempted."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid RuntimeState transition: {current} → {target}",
            context={"from_state": current, "to_state": target},
        )


__all__ = [
    "ErrorCategory",
    "RunnerError",
    "ConfigError",
    "ConfigSchemeUnsupportedError",
    "ContextNotFoundError",
    "InvalidContextError",
    "DirectoryUnavailableError",
    "CompilationError",
    "EngineError",
    "RegistrationError",
    "DrainWaitObservationError",
    "DrainTimeoutError",
    "LifecycleError",
    "InvalidTransitionError",
]

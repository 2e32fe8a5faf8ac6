"""
Structured logging for route-runner.

Single entry point for configuring structlog. Configuration is read
from arguments or the environment:

- ROUTE_RUNNER_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- ROUTE_RUNNER_LOG_FORMAT: json | console (default: console)

Usage:
    from route_runner.core.logging import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("lifecycle.started", routes=3)

    with LogContext(component="console"):
        logger.info("console.command", command="reload")
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

import structlog
from structlog.types import Processor

# Track if logging has been configured
_configured = False


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | str | None = None,
    format: Literal["json", "console"] | str | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the process.

    Should be called once at startup (CLI entry). Subsequent calls are
    no-ops unless force=True.

    Args:
        level: Log level (overrides ROUTE_RUNNER_LOG_LEVEL)
        format: Output format (overrides ROUTE_RUNNER_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("ROUTE_RUNNER_LOG_LEVEL", "INFO")).upper()
    log_format = (format or os.environ.get("ROUTE_RUNNER_LOG_FORMAT", "console")).lower()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level, logging.INFO),
        force=True,
    )
    logging.getLogger("route_runner").setLevel(getattr(logging, log_level, logging.INFO))

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs of this thread/task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(component="shutdown"):
            logger.info("shutdown.requested")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


class Timer:
    """Elapsed-time holder yielded by :func:`timed_block`."""

    def __init__(self) -> None:
        self.started_at = time.perf_counter()
        self.ended_at: float | None = None

    def stop(self) -> Timer:
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return round((end - self.started_at) * 1000, 2)


@contextmanager
def timed_block() -> Iterator[Timer]:
    """
    Low-level timing context manager. Does not log by itself.

    Usage:
        with timed_block() as timer:
            do_work()
        logger.info("work.done", duration_ms=timer.duration_ms)
    """
    timer = Timer()
    try:
        yield timer
    finally:
        timer.stop()


__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
    "Timer",
    "timed_block",
]

"""
CLI utility helpers: shared consoles and settings resolution.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from route_runner.core.config.settings import RunnerSettings, get_settings

console = Console()
err_console = Console(stderr=True)


def resolve_settings(**overrides: Any) -> RunnerSettings:
    """Apply CLI *overrides* (None means "not given") on top of env settings."""
    try:
        return get_settings().with_overrides(**overrides)
    except ValidationError as e:
        err_console.print(f"[bold red]Error[/bold red] (CONFIG): {e}")
        raise typer.Exit(code=2)

"""
Root Typer application for route-runner.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from route_runner.cli.utils import console, err_console, resolve_settings
from route_runner.core.errors import ConfigError, DirectoryUnavailableError
from route_runner.core.logging import configure_logging

app = typer.Typer(
    name="route-runner",
    help="route-runner: load pipeline scripts into a routing engine and keep them running.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("route-runner")
        except PackageNotFoundError:
            from route_runner import __version__ as v
        typer.echo(f"route-runner {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """route-runner CLI: run, reload and check pipeline routes."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run(
    context_uri: str | None = typer.Option(  # noqa: UP007
        None, "--camelContextUri", "--context-uri", "-c", help="Context descriptor URI (file: or classpath:)"
    ),
    routes_path: str | None = typer.Option(  # noqa: UP007
        None, "--routesPath", "--routes-path", "-r", help="Routes folder path"
    ),
    compiler: str | None = typer.Option(None, "--compiler", help="Pipeline compiler: yaml | python"),  # noqa: UP007
    suffix: str | None = typer.Option(None, "--suffix", help="Script file suffix (default: compiler's)"),  # noqa: UP007
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG | INFO | WARNING | ERROR"),  # noqa: UP007
    log_format: str | None = typer.Option(None, "--log-format", help="console | json"),  # noqa: UP007
    no_console: bool = typer.Option(False, "--no-console", help="Do not read commands from stdin"),
) -> None:
    """Start the routing engine and serve until stopped.

    Type [bold]help[/bold] on stdin for operator commands. SIGINT / SIGTERM
    stop the engine the same way as the [bold]stop[/bold] command.

    Example::

        route-runner run -r ../routes
        route-runner run -c file:conf/context.yaml -r /srv/routes --log-format json
    """
    from route_runner.runner import RouteRunner

    settings = resolve_settings(
        context_uri=context_uri,
        routes_path=routes_path,
        compiler=compiler,
        script_suffix=suffix,
        log_level=log_level,
        log_format=log_format,
        console_enabled=False if no_console else None,
    )
    configure_logging(level=settings.log_level, format=settings.log_format)

    exit_code = RouteRunner(settings, output=console).run()
    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command("check")
def check(
    routes_path: str | None = typer.Option(  # noqa: UP007
        None, "--routesPath", "--routes-path", "-r", help="Routes folder path"
    ),
    compiler: str | None = typer.Option(None, "--compiler", help="Pipeline compiler: yaml | python"),  # noqa: UP007
    suffix: str | None = typer.Option(None, "--suffix", help="Script file suffix (default: compiler's)"),  # noqa: UP007
) -> None:
    """Compile every script in the routes folder without starting an engine."""
    from route_runner.runner import build_loader

    settings = resolve_settings(routes_path=routes_path, compiler=compiler, script_suffix=suffix)
    configure_logging(level="ERROR", format=settings.log_format)

    try:
        loader = build_loader(settings)
        scan = loader.scan(Path(settings.routes_path))
    except (ConfigError, DirectoryUnavailableError) as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1)

    if not scan.scripts_seen:
        console.print(f"[dim]No '{loader.suffix}' scripts in {scan.directory}.[/dim]")
        return

    table = Table(title=f"Scripts in {scan.directory}", show_lines=False, pad_edge=False)
    table.add_column("script", overflow="fold")
    table.add_column("status")
    table.add_column("detail", overflow="fold")
    for definition in scan.definitions:
        table.add_row(definition.source.name, "[green]ok[/green]", f"{definition.name or '-'} ← {definition.endpoint}")
    for failure in scan.failures:
        table.add_row(failure.path.name, "[red]failed[/red]", failure.reason)
    console.print(table)

    if scan.failures:
        raise typer.Exit(code=1)

"""Tests for the ``route-runner`` CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from route_runner import __version__
from route_runner.cli.app import app
from tests._support import write_invalid, write_script, write_valid

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Keep CLI invocations from configuring global logging."""
    configure = MagicMock()
    monkeypatch.setattr(sys.modules["route_runner.cli.app"], "configure_logging", configure)
    return configure


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("route-runner ")

    def test_version_falls_back_to_package(self):
        from importlib.metadata import PackageNotFoundError

        with patch("importlib.metadata.version", side_effect=PackageNotFoundError("route-runner")):
            result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestRun:
    @patch("route_runner.runner.RouteRunner")
    def test_run_defaults(self, mock_cls, quiet_logging: MagicMock):
        mock_cls.return_value.run.return_value = 0

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        settings = mock_cls.call_args.args[0]
        assert settings.context_uri == "classpath:context.yaml"
        assert settings.routes_path == "../routes"
        assert settings.console_enabled is True
        quiet_logging.assert_called_once_with(level="INFO", format="console")

    @patch("route_runner.runner.RouteRunner")
    def test_run_original_flag_names(self, mock_cls):
        mock_cls.return_value.run.return_value = 0

        result = runner.invoke(app, ["run", "--camelContextUri", "file:ctx.yaml", "--routesPath", "/srv/routes"])

        assert result.exit_code == 0
        settings = mock_cls.call_args.args[0]
        assert settings.context_uri == "file:ctx.yaml"
        assert settings.routes_path == "/srv/routes"

    @patch("route_runner.runner.RouteRunner")
    def test_run_short_flags_and_options(self, mock_cls, quiet_logging: MagicMock):
        mock_cls.return_value.run.return_value = 0

        result = runner.invoke(
            app,
            [
                "run",
                "-c", "classpath:context.yaml",
                "-r", "routes",
                "--compiler", "python",
                "--suffix", "py",
                "--log-level", "debug",
                "--log-format", "json",
                "--no-console",
            ],
        )

        assert result.exit_code == 0
        settings = mock_cls.call_args.args[0]
        assert settings.routes_path == "routes"
        assert settings.compiler == "python"
        assert settings.script_suffix == ".py"
        assert settings.console_enabled is False
        quiet_logging.assert_called_once_with(level="DEBUG", format="json")

    @patch("route_runner.runner.RouteRunner")
    def test_env_settings_used_when_flags_absent(self, mock_cls, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ROUTE_RUNNER_ROUTES_PATH", "/env/routes")
        mock_cls.return_value.run.return_value = 0

        runner.invoke(app, ["run"])

        assert mock_cls.call_args.args[0].routes_path == "/env/routes"

    @pytest.mark.parametrize("code", [1, 2])
    @patch("route_runner.runner.RouteRunner")
    def test_run_propagates_exit_code(self, mock_cls, code: int):
        mock_cls.return_value.run.return_value = code

        result = runner.invoke(app, ["run"])

        assert result.exit_code == code

    def test_invalid_option_value(self):
        result = runner.invoke(app, ["run", "--compiler", "groovy"])
        assert result.exit_code == 2


class TestCheck:
    def test_all_ok(self, routes_dir: Path):
        write_valid(routes_dir, "a")
        write_valid(routes_dir, "b")

        result = runner.invoke(app, ["check", "-r", str(routes_dir)])

        assert result.exit_code == 0
        assert "a.pipeline" in result.output
        assert "b.pipeline" in result.output
        assert "failed" not in result.output

    def test_failures_exit_nonzero(self, routes_dir: Path):
        write_valid(routes_dir, "a")
        write_invalid(routes_dir, "b")

        result = runner.invoke(app, ["check", "--routesPath", str(routes_dir)])

        assert result.exit_code == 1
        assert "failed" in result.output
        assert "invalid YAML" in result.output

    def test_empty_directory(self, routes_dir: Path):
        result = runner.invoke(app, ["check", "-r", str(routes_dir)])
        assert result.exit_code == 0
        assert "No '.pipeline' scripts" in result.output

    def test_missing_directory(self, tmp_path: Path):
        result = runner.invoke(app, ["check", "-r", str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_python_compiler(self, routes_dir: Path):
        write_script(routes_dir, "p.py", "route = {'spec': {'from': 'direct:p'}}\n")
        write_valid(routes_dir, "ignored")

        result = runner.invoke(app, ["check", "-r", str(routes_dir), "--compiler", "python"])

        assert result.exit_code == 0
        assert "p.py" in result.output
        assert "ignored.pipeline" not in result.output


def test_no_args_shows_help():
    result = runner.invoke(app, [])
    assert "run" in result.output
    assert "check" in result.output

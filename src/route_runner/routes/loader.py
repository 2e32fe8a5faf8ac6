"""
Script directory loader.

Enumerates pipeline scripts in a directory and compiles each with the
configured :class:`PipelineCompiler`. A failure for one script is
logged with the offending path and excluded from the result; it never
aborts loading of the remaining scripts. A missing or unreadable
directory raises :class:`DirectoryUnavailableError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from route_runner.core.errors import CompilationError, DirectoryUnavailableError
from route_runner.core.logging import get_logger
from route_runner.core.protocols import PipelineCompiler
from route_runner.routes.models import RouteDefinition

logger = get_logger(__name__)


@dataclass
class ScanResult:
    """Outcome of one directory scan."""

    directory: Path
    definitions: list[RouteDefinition] = field(default_factory=list)
    failures: list[CompilationError] = field(default_factory=list)

    @property
    def scripts_seen(self) -> int:
        return len(self.definitions) + len(self.failures)


class ScriptDirectoryLoader:
    """Loads every script matching the compiler's suffix from a directory."""

    def __init__(self, compiler: PipelineCompiler, suffix: str | None = None):
        self.compiler = compiler
        self.suffix = suffix or compiler.suffix

    def list_scripts(self, directory: Path | str) -> list[Path]:
        """Return matching script paths, sorted for stable log output."""
        directory = Path(directory)
        if not directory.is_dir():
            raise DirectoryUnavailableError(directory)
        try:
            entries = list(directory.iterdir())
        except OSError as e:
            raise DirectoryUnavailableError(directory, cause=e)
        return sorted(p for p in entries if p.name.endswith(self.suffix) and p.is_file())

    def scan(self, directory: Path | str) -> ScanResult:
        directory = Path(directory)
        result = ScanResult(directory=directory)

        for path in self.list_scripts(directory):
            try:
                definition = self.compiler.compile(path)
            except CompilationError as e:
                result.failures.append(e)
                logger.error("loader.compile_failed", **e.to_dict())
                continue
            except (Exception, SystemExit) as e:
                error = CompilationError(path, f"{type(e).__name__}: {e}", cause=e)
                result.failures.append(error)
                logger.error("loader.compile_failed", **error.to_dict())
                continue
            result.definitions.append(definition)

        logger.info(
            "loader.directory_loaded",
            directory=str(directory),
            suffix=self.suffix,
            loaded=len(result.definitions),
            errors=len(result.failures),
        )
        return result

    def load_all(self, directory: Path | str) -> list[RouteDefinition]:
        """Compile all scripts in *directory*; failed scripts are excluded."""
        return self.scan(directory).definitions

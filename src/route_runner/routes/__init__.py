"""Route definitions, pipeline compilers and the script directory loader."""

from route_runner.routes.compiler import (
    PythonScriptCompiler,
    YamlPipelineCompiler,
    get_compiler,
    list_compilers,
)
from route_runner.routes.loader import ScanResult, ScriptDirectoryLoader
from route_runner.routes.models import RouteDefinition, RouteScriptSpec

__all__ = [
    "PythonScriptCompiler",
    "RouteDefinition",
    "RouteScriptSpec",
    "ScanResult",
    "ScriptDirectoryLoader",
    "YamlPipelineCompiler",
    "get_compiler",
    "list_compilers",
]

"""
route-runner CLI.

Entry point::

    route-runner run -r ../routes -c classpath:context.yaml
    route-runner check -r ../routes
"""

from route_runner.cli.app import app

__all__ = ["app"]

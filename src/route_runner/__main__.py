"""Allow ``python -m route_runner``."""

from route_runner.cli.app import app

if __name__ == "__main__":
    app()

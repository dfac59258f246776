"""A module for Sitios' command-line interface."""

from sitios.cli.main import app

__all__ = ["app", "main"]


def main() -> None:
    """Entry point for the CLI."""
    app()

"""Command-line entry point for gomirror."""

from .app import create_cli_app

__all__ = ["create_cli_app", "cli"]


def cli() -> None:
    """Console script target: build the app from the environment and run it."""
    create_cli_app()(prog_name="gomirror")

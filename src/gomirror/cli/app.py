"""CLI application factory."""

from pathlib import Path
from typing import Optional

import typer

from ..config.settings import LogLevel, Settings, build_settings
from .commands.sync import sync
from .state import CLIState


def _log_level(verbose: bool, quiet: bool) -> LogLevel | None:
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    if verbose:
        return LogLevel.DEBUG
    if quiet:
        return LogLevel.WARNING
    return None


def create_cli_app(settings: Settings | None = None) -> typer.Typer:
    """Create the ``gomirror`` Typer app.

    Args:
        settings: Fixed settings to use instead of environment plus global
            options. Tests inject these; the console script passes nothing.

    Returns:
        Typer application with the ``sync`` command registered.
    """
    app = typer.Typer(
        name="gomirror",
        help="Mirror a release catalog to disk with hash-verified downloads",
        no_args_is_help=True,
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        download_dir: Optional[Path] = typer.Option(
            None,
            "--download-dir",
            "-d",
            help="Root directory for the mirror (one subdirectory per release)",
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Log at DEBUG level"
        ),
        quiet: bool = typer.Option(
            False, "--quiet", "-q", help="Only log warnings and errors"
        ),
    ) -> None:
        """Global options available to all commands."""
        level = _log_level(verbose, quiet)
        if settings is None:
            resolved = build_settings(download_dir=download_dir, log_level=level)
        else:
            resolved = settings
        ctx.obj = CLIState(resolved)

    app.command("sync")(sync)
    return app

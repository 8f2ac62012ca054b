"""Line-oriented result display for CLI runs.

Result lines go to stdout; failures go to stderr next to the log output.
"""

import typer

from ...events import (
    ArtifactDownloadedEvent,
    ArtifactFailedEvent,
    ArtifactSatisfiedEvent,
    BaseEmitter,
)
from ...mirror import ReconcileSummary


def display_artifact_satisfied(event: ArtifactSatisfiedEvent) -> None:
    """Report an artifact whose local copy already verifies."""
    typer.echo(f"{event.version}/{event.filename} already downloaded")


def display_artifact_downloaded(event: ArtifactDownloadedEvent) -> None:
    """Report a fresh download and, when written, its sidecar."""
    typer.secho(f"downloaded {event.path}", fg=typer.colors.GREEN)
    if event.sidecar_path:
        typer.echo(f"saved hash {event.sidecar_path}")


def display_artifact_failed(event: ArtifactFailedEvent) -> None:
    typer.secho(
        f"✗ failed {event.version}/{event.filename}: {event.error_message}",
        fg=typer.colors.RED,
        err=True,
    )


def display_summary(summary: ReconcileSummary) -> None:
    colour = typer.colors.RED if summary.artifacts_failed else typer.colors.GREEN
    typer.secho(f"Done: {summary}", fg=colour)


def subscribe_display(emitter: BaseEmitter) -> None:
    """Wire the display functions to reconciliation events."""
    emitter.on("artifact.satisfied", display_artifact_satisfied)
    emitter.on("artifact.downloaded", display_artifact_downloaded)
    emitter.on("artifact.failed", display_artifact_failed)

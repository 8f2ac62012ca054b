"""Events emitted by the reconciliation loop."""

from pydantic import Field

from .base_event import BaseEvent


class ReleaseSkippedEvent(BaseEvent):
    """Emitted when a whole release is left alone."""

    event_type: str = Field(default="release.skipped")
    version: str
    reason: str


class ArtifactEvent(BaseEvent):
    """Base class for per-artifact events.

    ``path`` is the artifact's local target, ``<root>/<version>/<filename>``.
    """

    event_type: str = Field(default="artifact.base")
    version: str
    filename: str
    path: str


class ArtifactSkippedEvent(ArtifactEvent):
    """Emitted when an artifact's catalog metadata is unusable."""

    event_type: str = Field(default="artifact.skipped")
    reason: str


class ArtifactSatisfiedEvent(ArtifactEvent):
    """Emitted when a verified local copy already exists."""

    event_type: str = Field(default="artifact.satisfied")


class ArtifactDownloadingEvent(ArtifactEvent):
    """Emitted right before an artifact is fetched."""

    event_type: str = Field(default="artifact.downloading")
    url: str
    expected_hash: str


class ArtifactDownloadedEvent(ArtifactEvent):
    """Emitted once the artifact bytes are on disk."""

    event_type: str = Field(default="artifact.downloaded")
    total_bytes: int = Field(ge=0)
    sidecar_path: str | None = Field(
        default=None,
        description="Sidecar written for the artifact, None if that write failed",
    )


class ArtifactFailedEvent(ArtifactEvent):
    """Emitted when fetching or persisting an artifact fails."""

    event_type: str = Field(default="artifact.failed")
    error_message: str

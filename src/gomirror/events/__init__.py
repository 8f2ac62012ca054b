"""Event infrastructure - event emitter and event types."""

from .base import BaseEmitter, EventHandler
from .base_event import BaseEvent
from .emitter import EventEmitter
from .mirror_events import (
    ArtifactDownloadedEvent,
    ArtifactDownloadingEvent,
    ArtifactEvent,
    ArtifactFailedEvent,
    ArtifactSatisfiedEvent,
    ArtifactSkippedEvent,
    ReleaseSkippedEvent,
)
from .null import NullEmitter

__all__ = [
    # Base and implementations
    "BaseEmitter",
    "EventHandler",
    "EventEmitter",
    "NullEmitter",
    # Events
    "BaseEvent",
    "ReleaseSkippedEvent",
    "ArtifactEvent",
    "ArtifactSkippedEvent",
    "ArtifactSatisfiedEvent",
    "ArtifactDownloadingEvent",
    "ArtifactDownloadedEvent",
    "ArtifactFailedEvent",
]

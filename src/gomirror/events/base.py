"""Emitter interface shared by the live and null emitters."""

import typing as t
from abc import ABC, abstractmethod

from .base_event import BaseEvent

EventHandler = t.Callable[[BaseEvent], t.Any]
"""Sync callable or coroutine function receiving an event payload."""


class BaseEmitter(ABC):
    """Publishes reconciliation events to subscribers keyed by event type."""

    @abstractmethod
    def on(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe ``handler`` to ``event_type``."""

    @abstractmethod
    def off(self, event_type: str, handler: EventHandler) -> None:
        """Remove a previously subscribed handler."""

    @abstractmethod
    async def emit(self, event_type: str, event: BaseEvent) -> None:
        """Deliver ``event`` to every handler of ``event_type``."""

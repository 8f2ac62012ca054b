"""Emitter used when nobody listens, e.g. library use without a CLI."""

from .base import BaseEmitter, EventHandler
from .base_event import BaseEvent


class NullEmitter(BaseEmitter):
    """Accepts subscriptions and drops every event."""

    def on(self, event_type: str, handler: EventHandler) -> None:
        return None

    def off(self, event_type: str, handler: EventHandler) -> None:
        return None

    async def emit(self, event_type: str, event: BaseEvent) -> None:
        return None

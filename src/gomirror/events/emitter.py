"""In-process event emitter supporting sync and async handlers."""

import asyncio
import inspect
import typing as t
from collections import defaultdict

from ..infrastructure.logging import get_logger
from .base import BaseEmitter, EventHandler
from .base_event import BaseEvent

if t.TYPE_CHECKING:
    import loguru


class EventEmitter(BaseEmitter):
    """Dispatches events to subscribed handlers.

    Handlers run in subscription order for sync callables; coroutine handlers
    are gathered together afterwards. A failing handler is logged and never
    prevents the remaining handlers from running.
    """

    def __init__(self, logger: t.Optional["loguru.Logger"] = None) -> None:
        self._logger = logger or get_logger(__name__)
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            self._logger.warning(f"Handler {handler} not found for event {event_type}")

    async def emit(self, event_type: str, event: BaseEvent) -> None:
        pending: list[t.Awaitable] = []
        for handler in list(self._handlers.get(event_type, [])):
            if inspect.iscoroutinefunction(handler):
                pending.append(handler(event))
                continue
            try:
                handler(event)
            except Exception:
                self._logger.exception(f"Handler for {event_type} raised")

        if not pending:
            return

        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                self._logger.opt(exception=result).error(
                    f"Async handler for {event_type} raised"
                )

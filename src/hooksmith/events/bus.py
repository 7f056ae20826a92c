"""Event bus for alerts and update progress."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from hooksmith.events.types import Event, EventType

logger = logging.getLogger(__name__)


class EventBus:
    """Broadcasts events to registered callbacks.

    Callbacks may be plain functions or coroutine functions. A failing
    callback is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[Event], Any]] = []

    def add_callback(self, callback: Callable[[Event], Any]) -> None:
        """Add a callback to be called for every event."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[Event], Any]) -> None:
        """Remove a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def publish(self, event: Event) -> None:
        """Publish an event to every callback."""
        logger.debug(f"Publishing event: {event.type.value}")

        for callback in list(self._callbacks):
            try:
                result = callback(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Callback error: {e}")

    async def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> Event:
        """Convenience method to create and publish an event."""
        event = Event(type=event_type, data=data or {})
        await self.publish(event)
        return event


# Global event bus instance
event_bus = EventBus()

"""Routing of inbound socket events to registered callbacks."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .errors import InvalidArgumentError

_LOGGER = logging.getLogger(__name__)

EventCallback = Callable[[Any, dict[str, Any]], Awaitable[None] | None]


class EventDispatcher:
    """Registry of one callback per event name.

    Callbacks are invoked with the owning client and the decoded event
    payload. They may be plain functions or coroutine functions.
    """

    def __init__(self) -> None:
        self._registry: dict[str, EventCallback] = {}

    def on(self, event: str, callback: EventCallback) -> None:
        """Register callback for event, replacing any previous registration."""
        if not isinstance(event, str) or not event:
            raise InvalidArgumentError("event name must be a non-empty string")
        if not callable(callback):
            raise InvalidArgumentError("callback must be callable")
        self._registry[event] = callback

    def off(self, event: str) -> None:
        """Remove the callback for event, if any."""
        self._registry.pop(event, None)

    def get(self, event: str) -> EventCallback | None:
        """Return the callback registered for event."""
        return self._registry.get(event)

    def __contains__(self, event: object) -> bool:
        return event in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    async def dispatch(self, client: Any, payload: dict[str, Any]) -> bool:
        """Invoke the callback registered for the payload's event.

        Returns:
            True if a callback ran, False if the event has no registration.
        """
        callback = self._registry.get(payload.get("event"))  # type: ignore[arg-type]
        if callback is None:
            _LOGGER.debug("No callback for event %s", payload.get("event"))
            return False

        result = callback(client, payload)
        if inspect.isawaitable(result):
            await result
        return True

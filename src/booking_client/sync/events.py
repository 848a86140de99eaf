"""
Event hub

Controllers publish state-change events; the presentation layer subscribes
and decides what to do with them (navigation, notices).
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventHub:
    def __init__(self) -> None:
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register a handler. Returns a callable that removes it again."""
        self._handlers.append(handler)
        logger.debug("Subscribed %s", getattr(handler, "__name__", handler))

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: Any) -> None:
        """
        Deliver an event to every handler.

        Errors in handlers are logged but don't stop other handlers.
        """
        logger.info("Publishing event: %s", event)
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.error(
                    "Error in event handler %s for %s",
                    getattr(handler, "__name__", handler),
                    event,
                    exc_info=True,
                )

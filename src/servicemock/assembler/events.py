"""
Partial-double notifications.

Listeners are told when a partial double is built. Nothing depends on the
notification, so a failing listener is logged and the next one still runs.
"""

import logging
from typing import Callable

from servicemock.config.models import PartialMockCreated

logger = logging.getLogger(__name__)

Listener = Callable[[PartialMockCreated], None]


class EventEmitter:
    """Fire-and-forget event fan-out."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: PartialMockCreated) -> None:
        logger.info(f"Created partial mock of {event.class_name} for {', '.join(event.methods)}")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener {listener!r} failed on {type(event).__name__}: {e}", exc_info=True)

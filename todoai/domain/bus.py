"""Simple synchronous in-process event bus."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe bus for domain events.

    A handler subscribed to a base class (e.g. ``TaskEvent``) also receives
    every subclass event. Handlers for the concrete type run first, then those
    for its bases, each group in registration order. Handler exceptions
    propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable) -> None:
        self._subscribers[event_type].append(handler)

    def handlers_for(self, event_type: type) -> list[Callable]:
        handlers: list[Callable] = []
        for cls in event_type.__mro__:
            handlers.extend(self._subscribers.get(cls, []))
        return handlers

    def publish(self, event: Any) -> None:
        handlers = self.handlers_for(type(event))
        logger.debug("publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)

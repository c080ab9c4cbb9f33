# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process event bus for learning events.

Services publish facts (a quiz was graded, a lesson was completed) and
interested components, such as the presence hub, subscribe to them.
Delivery is fire-and-forget: a failing handler is logged and never affects
the publisher or the other handlers.

Subscriptions match either an exact event type ("progress.lesson.completed")
or a shell-style pattern ("quiz.*", "*.completed").

Example:
    from apexlms.infrastructure.events import EventTypes, get_event_bus

    bus = get_event_bus()

    async def on_lesson_completed(event):
        print(event.payload["lesson_id"])

    bus.subscribe(EventTypes.Progress.LESSON_COMPLETED, on_lesson_completed)

    await bus.publish(
        EventTypes.Progress.LESSON_COMPLETED,
        {"course_id": "course-1", "lesson_id": "lesson-1"},
        learner_id="learner-1",
    )
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import uuid4

from apexlms.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

EventHandler = Callable[["EventData"], Awaitable[None]]


def _is_pattern(event_type: str) -> bool:
    return "*" in event_type or "?" in event_type


@dataclass
class EventData:
    """Published event with metadata.

    Attributes:
        event_type: The event type string.
        payload: The event payload data.
        learner_id: Learner the event concerns, if any.
        event_id: Unique event identifier.
        timestamp: When the event was published.
    """

    event_type: str
    payload: dict[str, Any]
    learner_id: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "learner_id": self.learner_id,
            "payload": self.payload,
            "timestamp": format_iso(self.timestamp),
        }


class EventBus:
    """Async publish/subscribe bus with wildcard support.

    Designed for single-process async use. Handlers for one event run
    concurrently; their errors are contained.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pattern_handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type or pattern.

        Args:
            event_type: Event type string or pattern with wildcards.
            handler: Async callable receiving the EventData.
        """
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        registry.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler.

        Returns:
            True if the handler was found and removed, False otherwise.
        """
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        handlers = registry.get(event_type)
        if not handlers or handler not in handlers:
            return False

        handlers.remove(handler)
        if not handlers:
            del registry[event_type]
        return True

    async def publish(
        self,
        event_type: str,
        payload: dict[str, Any],
        learner_id: str | None = None,
    ) -> EventData:
        """Publish an event to all matching subscribers.

        Handlers are awaited concurrently with asyncio.gather. Handler
        errors are logged and do not reach the publisher.

        Args:
            event_type: The event type string.
            payload: Event data dictionary.
            learner_id: Learner the event concerns.

        Returns:
            The published EventData.
        """
        event = EventData(event_type=event_type, payload=payload, learner_id=learner_id)
        self._event_count += 1

        handlers_to_call: list[EventHandler] = list(self._handlers.get(event_type, []))
        for pattern, pattern_handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(event_type, pattern):
                handlers_to_call.extend(pattern_handlers)

        if not handlers_to_call:
            logger.debug("No handlers for event: %s", event_type)
            return event

        logger.debug(
            "Publishing event %s to %d handlers",
            event_type,
            len(handlers_to_call),
        )

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s",
                    event_type,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(*[safe_call(handler) for handler in handlers_to_call])
        return event

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        self._pattern_handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get subscription and publication counts."""
        exact_count = sum(len(h) for h in self._handlers.values())
        pattern_count = sum(len(h) for h in self._pattern_handlers.values())

        return {
            "total_handlers": exact_count + pattern_count,
            "events_published": self._event_count,
            "event_types": sorted(self._handlers),
            "patterns": sorted(self._pattern_handlers),
        }


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Drop the process-wide event bus and its subscriptions.

    Used by tests to start from a clean state.
    """
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None

import logging
from fnmatch import fnmatchcase
from typing import Any, Awaitable, Callable, Dict, List, Tuple

log = logging.getLogger(__name__)

Handler = Callable[[str, Dict[str, Any]], Awaitable[None]]


class DeliveryError(Exception):
    """One or more subscribers failed to handle an event."""

    def __init__(self, event_type: str, failed: int, delivered: int):
        super().__init__(f"{failed} subscriber(s) failed on {event_type}; {delivered} succeeded")
        self.failed = failed
        self.delivered = delivered


class EventBus:
    """
    In-process fan-out of committed change events.

    Subscribers register against a glob pattern such as ``order.*`` and are
    awaited in registration order. A failing subscriber is logged and skipped,
    the rest still receive the event, and publish then raises DeliveryError so
    the caller can retry. Subscribers must tolerate receiving an event twice.
    """

    def __init__(self):
        self._subscribers: List[Tuple[str, Handler]] = []

    def subscribe(self, pattern: str, handler: Handler) -> None:
        self._subscribers.append((pattern, handler))

    def unsubscribe(self, pattern: str, handler: Handler) -> None:
        try:
            self._subscribers.remove((pattern, handler))
        except ValueError:
            pass

    def subscriber_count(self, event_type: str) -> int:
        return sum(1 for pattern, _ in self._subscribers if fnmatchcase(event_type, pattern))

    async def publish(self, event_type: str, event: Dict[str, Any]) -> int:
        """Delivers an event to every matching subscriber. Returns how many received it."""
        delivered = failed = 0
        # Copy so handlers may unsubscribe while being notified
        for pattern, handler in list(self._subscribers):
            if not fnmatchcase(event_type, pattern):
                continue
            try:
                await handler(event_type, event)
                delivered += 1
            except Exception:
                failed += 1
                log.exception(f"Subscriber for '{pattern}' failed on {event_type}")
        if failed:
            raise DeliveryError(event_type, failed, delivered)
        return delivered


# Shared bus used by the API process (poller publishes, websockets subscribe)
event_bus = EventBus()

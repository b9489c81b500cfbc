"""
Tracking Update Feed.

Append-only log of status, location and ETA events. Consumers pull the
suffix after their last-seen sequence number with since(); in-process
listeners can also subscribe to be called on every publish.
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.core.exceptions import ValidationError
from wastetrack.app.models.enums import TrackingEventKind
from wastetrack.app.models.tracking import TrackingEvent

logger = logging.getLogger("wastetrack.tracking")

Subscriber = Callable[[TrackingEvent], None]


def _detached(event: TrackingEvent) -> TrackingEvent:
    # Stored events are never handed out, so readers cannot edit history
    return event.model_copy(deep=True)


class TrackingFeed:

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self._events: List[TrackingEvent] = []
        self._subscribers: List[Subscriber] = []
        # Sequence assignment and append must be atomic across publishers
        self._lock = threading.Lock()

    @property
    def last_sequence(self) -> int:
        """Cursor of the newest event, 0 when the feed is empty."""
        with self._lock:
            return self._events[-1].sequence if self._events else 0

    def publish(
        self,
        kind: Union[TrackingEventKind, str],
        payload: Optional[Dict[str, Any]] = None,
        route_id: Optional[str] = None
    ) -> TrackingEvent:
        """
        Append an event with the next sequence number and the current time.

        Raises:
            ValidationError: unknown event kind
        """
        try:
            kind = TrackingEventKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown tracking event kind: {kind}", field="kind")

        with self._lock:
            event = TrackingEvent(
                sequence=len(self._events) + 1,
                timestamp=self.clock(),
                kind=kind,
                route_id=route_id,
                payload=copy.deepcopy(dict(payload or {}))
            )
            self._events.append(event)
            subscribers = list(self._subscribers)

        logger.debug(
            "Tracking event published",
            extra={"sequence": event.sequence, "kind": event.kind.value, "route_id": route_id}
        )

        for subscriber in subscribers:
            try:
                subscriber(_detached(event))
            except Exception:
                # A broken display listener must not break publishing
                logger.exception(
                    "Tracking subscriber failed",
                    extra={"sequence": event.sequence, "kind": event.kind.value}
                )
        return _detached(event)

    def since(self, cursor: int = 0) -> List[TrackingEvent]:
        """
        Events with a sequence number greater than cursor, oldest first.

        Sequence numbers are 1-based and contiguous, so the suffix starts at
        index cursor.
        """
        if isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < 0:
            raise ValidationError("Cursor must be a non-negative integer", field="cursor")

        with self._lock:
            events = self._events[cursor:]
        return [_detached(event) for event in events]

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

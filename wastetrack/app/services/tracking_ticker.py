"""
Live tracking ticker.

Keeps the latest driver location per route and, while tracking is on,
re-estimates distance and ETA to the active stop on a fixed interval,
publishing an eta-changed event each time.

Tracking is best-effort: a missing location sample, a stop without
coordinates or a failing location source is logged and the tick is
skipped. Only request errors (unknown route, bad interval) are raised.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Dict, Optional, Tuple

from wastetrack.app.core.config import Settings, settings as default_settings
from wastetrack.app.core.exceptions import ValidationError
from wastetrack.app.core.reliability import CircuitBreaker, CircuitOpenError
from wastetrack.app.models.collection import Collection
from wastetrack.app.models.enums import TrackingEventKind
from wastetrack.app.models.tracking import LocationSample, TrackingEvent
from wastetrack.app.services.audit import AuditAction, AuditTrail
from wastetrack.app.services.geo import distance_to_stop, eta_minutes
from wastetrack.app.services.record_store import CollectionRecordStore
from wastetrack.app.services.route_aggregator import RouteAggregator
from wastetrack.app.services.tracking_feed import TrackingFeed

logger = logging.getLogger("wastetrack.tracking")

LocationSource = Callable[[str], Awaitable[Optional[LocationSample]]]


class TrackingTicker:

    def __init__(
        self,
        store: CollectionRecordStore,
        routes: RouteAggregator,
        feed: TrackingFeed,
        audit: AuditTrail,
        settings: Settings = default_settings,
        location_source: Optional[LocationSource] = None
    ):
        self.store = store
        self.routes = routes
        self.feed = feed
        self.audit = audit
        self.settings = settings
        self.location_source = location_source or self.latest_location
        self._breakers: Dict[str, CircuitBreaker] = {}
        self._locations: Dict[str, LocationSample] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    # Location breadcrumbs

    def record_location(self, route_id: str, sample: LocationSample) -> TrackingEvent:
        """Store the driver's latest GPS sample for a route and publish it."""
        self.store.get_route(route_id)
        self._locations[route_id] = sample

        return self.feed.publish(
            TrackingEventKind.LOCATION_UPDATE,
            {
                "latitude": sample.latitude,
                "longitude": sample.longitude,
                "accuracyMeters": sample.accuracy_meters,
                "recordedAt": sample.recorded_at.isoformat()
            },
            route_id=route_id
        )

    async def latest_location(self, route_id: str) -> Optional[LocationSample]:
        return self._locations.get(route_id)

    def breaker_for(self, route_id: str) -> CircuitBreaker:
        """Circuit breaker guarding the location source for one route."""
        breaker = self._breakers.get(route_id)
        if breaker is None:
            breaker = self._breakers[route_id] = CircuitBreaker(
                failure_threshold=self.settings.location_failure_threshold,
                reset_timeout=self.settings.location_reset_timeout_seconds
            )
        return breaker

    # ETA tick

    async def tick(self, route_id: str, previous_eta: Optional[float] = None) -> Optional[TrackingEvent]:
        """
        Re-estimate distance/ETA to the active stop and publish eta-changed.

        Returns the published event, or None when there is no active stop or
        the estimate could not be computed.

        Raises:
            ResourceNotFoundError: unknown route
        """
        return await self._tick(route_id, previous_eta, should_publish=lambda: True)

    async def _tick(
        self,
        route_id: str,
        previous_eta: Optional[float],
        should_publish: Callable[[], bool]
    ) -> Optional[TrackingEvent]:
        self.store.get_route(route_id)

        try:
            estimate = await self._estimate(route_id)
        except Exception:
            logger.warning("ETA tick failed, skipping", exc_info=True, extra={"route_id": route_id})
            return None

        if estimate is None or not should_publish():
            return None

        stop, distance_km, eta = estimate
        payload = {
            "collectionId": stop.id,
            "distanceKm": round(distance_km, 1),
            "etaMinutes": round(eta, 1),
            "previousEtaMinutes": previous_eta,
            "etaDeltaMinutes": round(eta - previous_eta, 1) if previous_eta is not None else None
        }
        return self.feed.publish(TrackingEventKind.ETA_CHANGED, payload, route_id=route_id)

    async def _estimate(self, route_id: str) -> Optional[Tuple[Collection, float, float]]:
        stop = self.routes.next_stop(route_id)
        if stop is None:
            logger.debug("No active stop, nothing to track", extra={"route_id": route_id})
            return None

        if stop.coordinates is None:
            logger.warning(
                "Active stop has no coordinates, skipping ETA",
                extra={"route_id": route_id, "collection_id": stop.id}
            )
            return None

        try:
            sample = await self.breaker_for(route_id).call(self.location_source, route_id)
        except CircuitOpenError:
            logger.warning("Location source unavailable, skipping ETA", extra={"route_id": route_id})
            return None

        if sample is None:
            logger.warning("No location sample yet, skipping ETA", extra={"route_id": route_id})
            return None

        distance_km = distance_to_stop(sample, stop.coordinates)
        eta = eta_minutes(distance_km, self.settings.average_speed_kmh)
        if eta is None:
            logger.warning("Average speed must be positive, skipping ETA", extra={"route_id": route_id})
            return None

        return stop, distance_km, eta

    # Scheduling

    async def start_tracking(
        self,
        route_id: str,
        interval: Optional[float] = None,
        actor_id: Optional[str] = None
    ) -> bool:
        """
        Start periodic ticks for a route.

        Returns False if the route is already being tracked.

        Raises:
            ResourceNotFoundError: unknown route
            ValidationError: interval is not positive
        """
        self.store.get_route(route_id)
        interval = self.settings.tick_interval_seconds if interval is None else interval
        if interval <= 0:
            raise ValidationError("Tick interval must be positive", field="interval")

        if self.is_tracking(route_id):
            return False

        self._tasks[route_id] = asyncio.create_task(
            self._run(route_id, interval),
            name=f"tracking-{route_id}"
        )
        await self.audit.log_event(
            action=AuditAction.TRACKING_STARTED,
            actor_id=actor_id,
            route_id=route_id,
            metadata={"interval": interval}
        )
        return True

    async def stop_tracking(self, route_id: str, actor_id: Optional[str] = None) -> bool:
        """
        Stop periodic ticks for a route.

        Once this returns the timer publishes nothing more for the route.
        Returns False if the route was not being tracked.
        """
        task = self._tasks.pop(route_id, None)
        if task is None:
            return False

        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

        await self.audit.log_event(
            action=AuditAction.TRACKING_STOPPED,
            actor_id=actor_id,
            route_id=route_id
        )
        return True

    async def stop_all(self) -> None:
        for route_id in list(self._tasks):
            await self.stop_tracking(route_id)

    def is_tracking(self, route_id: str) -> bool:
        task = self._tasks.get(route_id)
        return task is not None and not task.done()

    async def _run(self, route_id: str, interval: float) -> None:
        current = asyncio.current_task()
        previous_eta = None

        def still_tracking() -> bool:
            return self._tasks.get(route_id) is current

        while still_tracking():
            await asyncio.sleep(interval)
            try:
                event = await self._tick(route_id, previous_eta, should_publish=still_tracking)
            except Exception:
                # Keep the timer alive; the next tick retries
                logger.exception("Tracking tick crashed", extra={"route_id": route_id})
                continue
            if event is not None:
                previous_eta = event.payload["etaMinutes"]

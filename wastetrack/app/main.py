"""
WasteTrack core entry point.

Wires the record store, lifecycle service, aggregators and tracking feed
into one object the UI layer talks to.
"""

from typing import Optional

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.core.config import Settings, settings as default_settings
from wastetrack.app.core.observability import configure_logging
from wastetrack.app.services.analytics import DashboardAggregator
from wastetrack.app.services.audit import AuditTrail
from wastetrack.app.services.collection_service import CollectionService
from wastetrack.app.services.issue_ledger import IssueLedger
from wastetrack.app.services.record_store import CollectionRecordStore
from wastetrack.app.services.route_aggregator import RouteAggregator
from wastetrack.app.services.tracking_feed import TrackingFeed
from wastetrack.app.services.tracking_ticker import LocationSource, TrackingTicker


class WasteTrackCore:
    """
    Collection lifecycle and tracking core.

    Attributes:
        store: authoritative routes/collections
        collections: start/complete/skip/cancel/report-issue
        issues: issue ledger reads
        routes: route progress and summaries
        dashboard: windowed summaries and growth
        feed: tracking events (since(cursor))
        tracking: location updates and the ETA ticker
        audit: audit trail
    """

    def __init__(
        self,
        settings: Settings = default_settings,
        clock: Clock = utcnow,
        location_source: Optional[LocationSource] = None
    ):
        self.settings = settings
        self.clock = clock

        self.store = CollectionRecordStore()
        self.audit = AuditTrail(clock=clock)
        self.feed = TrackingFeed(clock=clock)
        self.issues = IssueLedger(self.store, clock=clock)
        self.routes = RouteAggregator(self.store, settings=settings)
        self.dashboard = DashboardAggregator(self.store, clock=clock)
        self.collections = CollectionService(
            store=self.store,
            ledger=self.issues,
            routes=self.routes,
            dashboard=self.dashboard,
            feed=self.feed,
            audit=self.audit,
            clock=clock
        )
        self.tracking = TrackingTicker(
            store=self.store,
            routes=self.routes,
            feed=self.feed,
            audit=self.audit,
            settings=settings,
            location_source=location_source
        )

    async def shutdown(self) -> None:
        """Stop every tracking timer."""
        await self.tracking.stop_all()


def create_core(
    settings: Optional[Settings] = None,
    clock: Clock = utcnow,
    location_source: Optional[LocationSource] = None
) -> WasteTrackCore:
    """Build a core with logging configured from settings."""
    settings = settings or default_settings
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    return WasteTrackCore(settings=settings, clock=clock, location_source=location_source)

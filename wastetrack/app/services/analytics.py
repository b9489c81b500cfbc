"""
Analytics Service for the dashboard views.

Handles aggregation of collection snapshots into day/week/month summaries
and growth indicators. Focused on READ-ONLY operations.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Tuple

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.models.collection import Collection
from wastetrack.app.models.enums import CollectionStatus, ReportingWindow
from wastetrack.app.schemas.analytics import DashboardSummary, SummaryComparison
from wastetrack.app.services.record_store import CollectionRecordStore

# Metrics compared between two windows, in display order
COMPARED_METRICS = (
    "total",
    "completed",
    "pending",
    "in_progress",
    "skipped",
    "cancelled",
    "total_weight",
    "estimated_weight",
    "completion_rate",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def window_bounds(window: ReportingWindow, reference: datetime) -> Tuple[datetime, datetime]:
    """
    Calendar window containing reference, as [start, end) in UTC.

    Weeks start on Monday (ISO weeks).
    """
    reference = _as_utc(reference)
    day_start = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    window = ReportingWindow(window)

    if window == ReportingWindow.DAY:
        return day_start, day_start + timedelta(days=1)

    if window == ReportingWindow.WEEK:
        start = day_start - timedelta(days=day_start.weekday())
        return start, start + timedelta(days=7)

    start = day_start.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def previous_reference(window: ReportingWindow, reference: datetime) -> datetime:
    """A point inside the window just before the one containing reference."""
    start, _ = window_bounds(window, reference)
    return start - timedelta(days=1)


def percentage_change(current: float, previous: float) -> Optional[float]:
    """Signed change in percent; undefined (None) against a zero baseline."""
    if previous == 0:
        return None
    return round((current - previous) / previous * 100, 1)


def format_growth(delta: Optional[float]) -> str:
    """Growth badge text: "+12.5%", "-3.0%", or "n/a" when undefined."""
    if delta is None:
        return "n/a"
    return f"{delta:+.1f}%"


class DashboardAggregator:

    def __init__(self, store: CollectionRecordStore, clock: Clock = utcnow):
        self.store = store
        self.clock = clock

    def summarize(
        self,
        collections: Iterable[Collection],
        window: Optional[ReportingWindow] = None,
        reference: Optional[datetime] = None
    ) -> DashboardSummary:
        """
        Summarize collections scheduled inside a reporting window.

        Args:
            collections: Collections to consider
            window: day/week/month; None summarizes every given collection
            reference: Any moment inside the wanted window (default: now)
        """
        start = end = None
        if window is not None:
            window = ReportingWindow(window)
            start, end = window_bounds(window, reference or self.clock())
            collections = [
                c for c in collections
                if start <= _as_utc(c.scheduled_time) < end
            ]
        else:
            collections = list(collections)

        counts = {status: 0 for status in CollectionStatus}
        for collection in collections:
            counts[collection.status] += 1

        total = len(collections)
        completed = counts[CollectionStatus.COMPLETED]

        # 1. Actual weight only counts completed stops
        total_weight = sum(
            c.actual_weight for c in collections
            if c.status == CollectionStatus.COMPLETED and c.actual_weight is not None
        )
        estimated_weight = sum(c.estimated_weight for c in collections)

        # 2. Completion rate
        rate = (completed / total) if total > 0 else 0.0

        return DashboardSummary(
            window=window,
            window_start=start,
            window_end=end,
            total=total,
            completed=completed,
            pending=counts[CollectionStatus.PENDING],
            in_progress=counts[CollectionStatus.IN_PROGRESS],
            skipped=counts[CollectionStatus.SKIPPED],
            cancelled=counts[CollectionStatus.CANCELLED],
            total_weight=round(total_weight, 2),
            estimated_weight=round(estimated_weight, 2),
            completion_rate=round(rate, 4)
        )

    @staticmethod
    def compare(current: DashboardSummary, previous: DashboardSummary) -> SummaryComparison:
        """Per-metric growth of current over previous."""
        deltas = {
            metric: percentage_change(getattr(current, metric), getattr(previous, metric))
            for metric in COMPARED_METRICS
        }
        return SummaryComparison(current=current, previous=previous, deltas=deltas)

    def summarize_store(
        self,
        window: Optional[ReportingWindow] = None,
        reference: Optional[datetime] = None,
        route_id: Optional[str] = None
    ) -> DashboardSummary:
        """Summary over every stored collection, or one route's."""
        collections = self.store.list_collections(route_id=route_id)
        return self.summarize(collections, window, reference)

    def growth(
        self,
        window: ReportingWindow,
        reference: Optional[datetime] = None,
        route_id: Optional[str] = None
    ) -> SummaryComparison:
        """Compare the window containing reference with the one before it."""
        reference = reference or self.clock()
        # Read once so both windows come from the same snapshot
        collections = self.store.list_collections(route_id=route_id)

        current = self.summarize(collections, window, reference)
        previous = self.summarize(collections, window, previous_reference(window, reference))
        return self.compare(current, previous)

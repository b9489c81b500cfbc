"""
Route Aggregator.

Derives route progress, remaining stops and summary figures from the
current collection snapshots. Nothing here is cached: every call reads the
store once and recomputes, so a result can never be stale.
"""

from typing import List, Optional, Sequence

from wastetrack.app.core.config import Settings, settings as default_settings
from wastetrack.app.models.collection import Collection
from wastetrack.app.models.enums import CollectionStatus, OPEN_STATUSES
from wastetrack.app.schemas.route import RouteProgress, RouteSummary
from wastetrack.app.services.geo import distance_between
from wastetrack.app.services.record_store import CollectionRecordStore


def compute_progress(collections: Sequence[Collection], decimals: int = 1) -> RouteProgress:
    total = len(collections)
    completed = sum(1 for c in collections if c.status == CollectionStatus.COMPLETED)
    percentage = round(completed / total * 100, decimals) if total else 0.0
    return RouteProgress(
        completed_count=completed,
        total_stops=total,
        progress_percentage=percentage
    )


def count_remaining(collections: Sequence[Collection]) -> int:
    return sum(1 for c in collections if c.status in OPEN_STATUSES)


def find_next_stop(collections: Sequence[Collection]) -> Optional[Collection]:
    """The stop being worked, else the first pending one, else None (route complete)."""
    for collection in collections:
        if collection.status == CollectionStatus.IN_PROGRESS:
            return collection
    for collection in collections:
        if collection.status == CollectionStatus.PENDING:
            return collection
    return None


def sum_collected_weight(collections: Sequence[Collection]) -> float:
    # Estimated weights never count towards collected weight
    return sum(
        c.actual_weight for c in collections
        if c.status == CollectionStatus.COMPLETED and c.actual_weight is not None
    )


class RouteAggregator:

    def __init__(self, store: CollectionRecordStore, settings: Settings = default_settings):
        self.store = store
        self.settings = settings

    def _collections(self, route_id: str) -> List[Collection]:
        return self.store.route_collections(route_id)

    def progress(self, route_id: str) -> RouteProgress:
        return compute_progress(self._collections(route_id), self.settings.progress_decimals)

    def remaining_stops(self, route_id: str) -> int:
        return count_remaining(self._collections(route_id))

    def next_stop(self, route_id: str) -> Optional[Collection]:
        return find_next_stop(self._collections(route_id))

    def weight_collected(self, route_id: str) -> float:
        return sum_collected_weight(self._collections(route_id))

    def total_distance_km(self, route_id: str) -> float:
        """Straight-line length through consecutive stops that have coordinates."""
        points = [c.coordinates for c in self._collections(route_id) if c.coordinates]
        total = sum(distance_between(a, b) for a, b in zip(points, points[1:]))
        return round(total, 2)

    def summary(self, route_id: str) -> RouteSummary:
        """All route figures computed from a single read of the store."""
        route = self.store.get_route(route_id)
        collections = self.store.route_collections(route_id)

        progress = compute_progress(collections, self.settings.progress_decimals)
        remaining = count_remaining(collections)
        next_stop = find_next_stop(collections)

        return RouteSummary(
            route_id=route.id,
            name=route.name,
            driver_id=route.driver_id,
            completed_count=progress.completed_count,
            skipped_count=sum(1 for c in collections if c.status == CollectionStatus.SKIPPED),
            cancelled_count=sum(1 for c in collections if c.status == CollectionStatus.CANCELLED),
            total_stops=progress.total_stops,
            remaining_stops=remaining,
            progress_percentage=progress.progress_percentage,
            weight_collected=sum_collected_weight(collections),
            estimated_weight=sum(c.estimated_weight for c in collections),
            next_stop_id=next_stop.id if next_stop else None,
            is_complete=remaining == 0
        )

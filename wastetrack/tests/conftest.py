"""
Centralized Test Configuration.
"""

from datetime import datetime, timedelta, timezone

import pytest

from wastetrack.app.core.config import Settings
from wastetrack.app.main import WasteTrackCore
from wastetrack.app.models.collection import Collection, Coordinates
from wastetrack.app.models.enums import CollectionStatus

ROUTE_ID = "r1"
START_OF_SHIFT = datetime(2025, 1, 31, 8, 0, tzinfo=timezone.utc)


class FixedClock:
    """Test clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(START_OF_SHIFT)


@pytest.fixture
def settings():
    return Settings(
        tick_interval_seconds=0.01,
        average_speed_kmh=25.0,
        location_failure_threshold=3,
        location_reset_timeout_seconds=30.0
    )


@pytest.fixture
def core(settings, clock):
    return WasteTrackCore(settings=settings, clock=clock)


@pytest.fixture
def make_collection():
    """Factory for collections on the test route (one stop every 30 minutes)."""
    def _make(index: int, route_id: str = ROUTE_ID, **overrides) -> Collection:
        data = {
            "id": f"c{index}",
            "route_id": route_id,
            "estimated_weight": 10.0 + index,
            "scheduled_time": START_OF_SHIFT + timedelta(minutes=30 * index),
            "coordinates": Coordinates(lat=0.0, lng=0.1 * index),
        }
        data.update(overrides)
        return Collection(**data)
    return _make


@pytest.fixture
async def route(core, make_collection):
    """Route r1 with five pending stops c1..c5."""
    await core.collections.create_route(
        ROUTE_ID,
        "Test Route",
        [make_collection(i) for i in range(1, 6)],
        driver_id="driver-1"
    )
    return ROUTE_ID


async def drive_to(core: WasteTrackCore, collection_id: str, status: CollectionStatus) -> None:
    """Move a pending collection to the given status through the service."""
    service = core.collections
    if status == CollectionStatus.PENDING:
        return
    if status == CollectionStatus.SKIPPED:
        await service.skip(collection_id, "access_denied", "Gate locked")
        return
    if status == CollectionStatus.CANCELLED:
        await service.cancel(collection_id, "Customer cancelled")
        return

    await service.start(collection_id)
    if status == CollectionStatus.COMPLETED:
        await service.complete(collection_id, 12.5)


@pytest.fixture
def drive(core):
    """drive(collection_id, status): move a pending collection to status."""
    async def _drive(collection_id: str, status: CollectionStatus) -> None:
        await drive_to(core, collection_id, status)
    return _drive

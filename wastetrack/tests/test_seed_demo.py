"""
Demo route seeding tests.
"""

from datetime import datetime, timezone

import pytest

from wastetrack.app.models.enums import TrackingEventKind
from wastetrack.seed_demo_route import DEMO_ROUTE_ID, seed_demo_route


@pytest.mark.asyncio
async def test_seeded_route_summary(core):
    await seed_demo_route(core, datetime(2025, 1, 31, tzinfo=timezone.utc))

    summary = core.routes.summary(DEMO_ROUTE_ID)

    assert summary.total_stops == 5
    assert summary.completed_count == 1
    assert summary.progress_percentage == 20.0
    assert summary.remaining_stops == 3
    assert summary.next_stop_id == "c3"
    assert summary.weight_collected == 18
    assert summary.driver_id == "driver-1"

    issues = core.issues.list("c4")
    assert [i.display_text for i in issues] == [
        "Customer Not Available: No one home",
        "Special Equipment Needed: Hazardous drums",
    ]


@pytest.mark.asyncio
async def test_seeded_route_tracks_active_stop(core):
    await seed_demo_route(core)

    event = await core.tracking.tick(DEMO_ROUTE_ID)

    assert event.kind == TrackingEventKind.ETA_CHANGED
    assert event.payload["collectionId"] == "c3"
    assert event.payload["distanceKm"] > 0


@pytest.mark.asyncio
async def test_finishing_the_demo_route(core):
    await seed_demo_route(core)

    await core.collections.complete("c3", 22)
    await core.collections.start("c1")
    await core.collections.complete("c1", 24)
    result = await core.collections.cancel("c5", "Customer on holiday")

    assert result.progress.progress_percentage == 60.0
    assert result.event.payload["remainingStops"] == 0
    assert core.routes.summary(DEMO_ROUTE_ID).is_complete

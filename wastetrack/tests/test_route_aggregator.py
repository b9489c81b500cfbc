"""
Route progress and summary tests.
"""

import pytest

from wastetrack.app.core.exceptions import ResourceNotFoundError
from wastetrack.app.models.enums import CollectionStatus
from wastetrack.app.services.route_aggregator import compute_progress, find_next_stop


@pytest.mark.asyncio
async def test_progress_two_of_five(core, route, drive):
    """Two completed stops out of five is 40%."""
    await drive("c1", CollectionStatus.COMPLETED)
    await drive("c2", CollectionStatus.COMPLETED)

    progress = core.routes.progress(route)

    assert progress.completed_count == 2
    assert progress.total_stops == 5
    assert progress.progress_percentage == 40.0


@pytest.mark.asyncio
async def test_skipped_and_cancelled_do_not_count_as_completed(core, route, drive):
    await drive("c1", CollectionStatus.SKIPPED)
    await drive("c2", CollectionStatus.CANCELLED)

    assert core.routes.progress(route).progress_percentage == 0.0
    assert core.routes.remaining_stops(route) == 3


def test_progress_of_empty_route():
    progress = compute_progress([])

    assert progress.total_stops == 0
    assert progress.progress_percentage == 0.0


def test_progress_rounds_to_one_decimal(make_collection, clock):
    collections = [
        make_collection(1, status=CollectionStatus.COMPLETED, actual_weight=5, completed_at=clock.now),
        make_collection(2),
        make_collection(3),
    ]

    assert compute_progress(collections).progress_percentage == 33.3


@pytest.mark.asyncio
async def test_next_stop_prefers_in_progress(core, route, drive):
    assert core.routes.next_stop(route).id == "c1"

    await drive("c1", CollectionStatus.SKIPPED)
    await drive("c3", CollectionStatus.IN_PROGRESS)

    assert core.routes.next_stop(route).id == "c3"


def test_next_stop_none_when_route_closed(make_collection, clock):
    collections = [
        make_collection(1, status=CollectionStatus.COMPLETED, actual_weight=5, completed_at=clock.now),
        make_collection(2, status=CollectionStatus.CANCELLED),
    ]

    assert find_next_stop(collections) is None


@pytest.mark.asyncio
async def test_weight_collected_ignores_estimates(core, route, drive):
    await drive("c1", CollectionStatus.COMPLETED)
    await drive("c2", CollectionStatus.SKIPPED)
    await drive("c3", CollectionStatus.IN_PROGRESS)

    assert core.routes.weight_collected(route) == 12.5


@pytest.mark.asyncio
async def test_summary(core, route, drive):
    await drive("c1", CollectionStatus.COMPLETED)
    await drive("c2", CollectionStatus.SKIPPED)
    await drive("c4", CollectionStatus.CANCELLED)

    summary = core.routes.summary(route)

    assert summary.name == "Test Route"
    assert summary.driver_id == "driver-1"
    assert summary.completed_count == 1
    assert summary.skipped_count == 1
    assert summary.cancelled_count == 1
    assert summary.remaining_stops == 2
    assert summary.progress_percentage == 20.0
    assert summary.weight_collected == 12.5
    assert summary.estimated_weight == 65.0
    assert summary.next_stop_id == "c3"
    assert summary.is_complete is False


@pytest.mark.asyncio
async def test_summary_of_finished_route(core, route, drive):
    for collection_id in ("c1", "c2", "c3", "c4", "c5"):
        await drive(collection_id, CollectionStatus.COMPLETED)

    summary = core.routes.summary(route)

    assert summary.is_complete is True
    assert summary.next_stop_id is None
    assert summary.progress_percentage == 100.0


@pytest.mark.asyncio
async def test_total_distance(core, route):
    """Five stops 0.1 degrees of longitude apart on the equator."""
    assert core.routes.total_distance_km(route) == pytest.approx(44.48, abs=0.01)


def test_unknown_route(core):
    with pytest.raises(ResourceNotFoundError):
        core.routes.progress("missing")

"""
Demo seeding script for a driver route.

Creates the five-stop "Eco City" morning route with a mix of statuses and
prints the route and dashboard figures. Useful for eyeballing the core
without any UI attached.
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wastetrack.app.main import WasteTrackCore, create_core
from wastetrack.app.models.collection import Collection, Coordinates, Issue
from wastetrack.app.models.enums import (
    CollectionStatus, CollectionPriority, IssueType, ReportingWindow
)
from wastetrack.app.models.tracking import LocationSample
from wastetrack.app.services.analytics import format_growth

DEMO_ROUTE_ID = "route-eco-am"


def demo_collections(day: datetime):
    """Stops of the demo route, in route order."""
    def at(hour: int, minute: int) -> datetime:
        return day.replace(hour=hour, minute=minute, second=0, microsecond=0)

    return [
        Collection(
            id="c1", route_id=DEMO_ROUTE_ID, estimated_weight=25, scheduled_time=at(9, 0),
            address="123 Green Street, Eco City", customer_name="Sarah Johnson",
            waste_type="Mixed Household", notes="Ring doorbell twice",
            coordinates=Coordinates(lat=40.7128, lng=-74.006)
        ),
        Collection(
            id="c2", route_id=DEMO_ROUTE_ID, estimated_weight=15, scheduled_time=at(9, 30),
            status=CollectionStatus.COMPLETED, actual_weight=18, completed_at=at(9, 35),
            address="456 Recycling Road, Eco City", customer_name="Mike Chen",
            waste_type="Recyclables", notes="Leave bin by garage",
            coordinates=Coordinates(lat=40.7589, lng=-73.9851)
        ),
        Collection(
            id="c3", route_id=DEMO_ROUTE_ID, estimated_weight=20, scheduled_time=at(10, 0),
            status=CollectionStatus.IN_PROGRESS, started_at=at(9, 55),
            priority=CollectionPriority.HIGH,
            address="789 Compost Circle, Eco City", customer_name="Emily Davis",
            waste_type="Organic", notes="Customer requested early pickup",
            coordinates=Coordinates(lat=40.7831, lng=-73.9712)
        ),
        Collection(
            id="c4", route_id=DEMO_ROUTE_ID, estimated_weight=5, scheduled_time=at(10, 30),
            status=CollectionStatus.SKIPPED, priority=CollectionPriority.HIGH,
            issues=(
                Issue(type=IssueType.CUSTOMER_UNAVAILABLE, description="No one home",
                      recorded_at=at(10, 32)),
                Issue(type=IssueType.SPECIAL_EQUIPMENT, description="Hazardous drums",
                      recorded_at=at(10, 33)),
            ),
            address="321 Hazardous Highway, Eco City", customer_name="Robert Wilson",
            waste_type="Hazardous", notes="Special handling required",
            coordinates=Coordinates(lat=40.7505, lng=-73.9934)
        ),
        Collection(
            id="c5", route_id=DEMO_ROUTE_ID, estimated_weight=30, scheduled_time=at(11, 0),
            address="654 Garden Grove, Eco City", customer_name="Lisa Martinez",
            waste_type="Garden Waste", notes="Bags located behind house",
            coordinates=Coordinates(lat=40.7282, lng=-73.7949)
        ),
    ]


async def seed_demo_route(core: WasteTrackCore, day: Optional[datetime] = None) -> str:
    """
    Seed the demo route into a core.

    Creates:
    - 1 route assigned to driver "driver-1"
    - 5 collections (2 pending, 1 in progress, 1 completed, 1 skipped)
    - 1 driver location sample near the active stop
    """
    day = day or core.clock()
    await core.collections.create_route(
        DEMO_ROUTE_ID,
        "Eco City Morning Route",
        demo_collections(day),
        driver_id="driver-1",
        actor_id="admin"
    )
    core.tracking.record_location(
        DEMO_ROUTE_ID,
        LocationSample(latitude=40.7700, longitude=-73.9800, recorded_at=core.clock())
    )
    return DEMO_ROUTE_ID


async def main():
    core = create_core()
    print("🌱 Seeding demo route...")
    route_id = await seed_demo_route(core, datetime.now(timezone.utc) - timedelta(hours=1))

    summary = core.routes.summary(route_id)
    print(f"✅ {summary.name}: {summary.completed_count}/{summary.total_stops} stops "
          f"({summary.progress_percentage}%), {summary.remaining_stops} remaining")
    print(f"   Next stop: {summary.next_stop_id}, collected {summary.weight_collected} kg "
          f"of {summary.estimated_weight} kg estimated")
    print(f"   Route length: {core.routes.total_distance_km(route_id)} km")

    event = await core.tracking.tick(route_id)
    if event:
        print(f"🚚 {event.payload['distanceKm']} km away, ETA {event.payload['etaMinutes']} min")

    growth = core.dashboard.growth(ReportingWindow.DAY)
    print(f"📊 Today: {growth.current.total} collections, "
          f"completion {growth.current.completion_rate:.0%}, "
          f"vs yesterday {format_growth(growth.deltas['total'])}")


if __name__ == "__main__":
    asyncio.run(main())

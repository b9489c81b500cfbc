"""
Straight-line distance helpers for route metrics and ETA estimates.

Road routing is out of scope; great-circle distance is the estimate.
"""

import math
from typing import Optional

from wastetrack.app.models.collection import Coordinates
from wastetrack.app.models.tracking import LocationSample

EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2)**2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2)**2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinates, b: Coordinates) -> float:
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def distance_to_stop(sample: LocationSample, stop: Coordinates) -> float:
    return haversine_distance(sample.latitude, sample.longitude, stop.lat, stop.lng)


def eta_minutes(distance_km: float, average_speed_kmh: float) -> Optional[float]:
    """Minutes to cover distance_km at average_speed_kmh; None if speed is not positive."""
    if average_speed_kmh <= 0:
        return None
    return distance_km / average_speed_kmh * 60

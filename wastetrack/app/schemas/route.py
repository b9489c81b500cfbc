"""
Route progress schemas.
"""

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RouteProgress(BaseModel):
    """Progress bar figures for a route."""
    completed_count: int
    total_stops: int
    progress_percentage: float  # One decimal place, 0 for an empty route

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RouteSummary(BaseModel):
    """Driver dashboard card for a route."""
    route_id: str
    name: str
    driver_id: Optional[str]
    completed_count: int
    skipped_count: int
    cancelled_count: int
    total_stops: int
    remaining_stops: int
    progress_percentage: float
    weight_collected: float
    estimated_weight: float
    next_stop_id: Optional[str]
    is_complete: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True

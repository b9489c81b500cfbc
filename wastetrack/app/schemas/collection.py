"""
Collection lifecycle schemas.
"""

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from wastetrack.app.models.collection import Collection, Issue
from wastetrack.app.models.tracking import TrackingEvent
from wastetrack.app.schemas.analytics import DashboardSummary
from wastetrack.app.schemas.route import RouteProgress


class StopTransitionResult(BaseModel):
    """Outcome of a lifecycle operation on one stop."""
    collection: Collection
    progress: RouteProgress  # Route progress after the change
    summary: Optional[DashboardSummary] = None  # Route summary, recomputed when a stop closes
    issue: Optional[Issue] = None  # Issue recorded by skip/cancel/report-issue
    event: Optional[TrackingEvent] = None  # Feed entry emitted for the change

    class Config:
        alias_generator = to_camel
        populate_by_name = True

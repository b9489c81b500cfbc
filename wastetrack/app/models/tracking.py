"""
Tracking models.

Events in the tracking feed and the GPS samples reported by drivers.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from wastetrack.app.models.enums import TrackingEventKind


class LocationSample(BaseModel):
    """Driver GPS sample."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy_meters: Optional[float] = Field(None, gt=0)
    recorded_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class TrackingEvent(BaseModel):
    """One immutable entry of the tracking feed."""
    sequence: int = Field(..., ge=1)
    timestamp: datetime
    kind: TrackingEventKind
    route_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

"""
Collection and Issue models.

A collection is one scheduled pickup stop. Snapshots are immutable; every
status change produces a new Collection that replaces the old one in the
record store.
"""

from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from wastetrack.app.models.enums import CollectionStatus, CollectionPriority, IssueType


class Coordinates(BaseModel):
    """Pickup location (WGS84 degrees)."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    class Config:
        frozen = True


class Issue(BaseModel):
    """
    One recorded problem for a collection.

    Only ever created by a skip, cancel or report-issue operation.
    """
    type: IssueType
    description: str = Field(..., min_length=1)
    recorded_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @computed_field
    @property
    def display_text(self) -> str:
        """Issue line as shown on the stop card ("Access Denied: gate locked")."""
        if self.type == IssueType.OTHER:
            return self.description
        return f"{self.type.label}: {self.description}"


class Collection(BaseModel):
    """
    Collection snapshot.

    Invariants:
    - actual_weight and completed_at are set iff status is completed
    - a skipped collection carries at least one issue
    """
    id: str = Field(..., min_length=1)
    route_id: str
    status: CollectionStatus = CollectionStatus.PENDING
    priority: CollectionPriority = CollectionPriority.NORMAL

    # Weights in kg
    estimated_weight: float = Field(..., gt=0)
    actual_weight: Optional[float] = Field(None, gt=0)

    # Timestamps
    scheduled_time: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    issues: Tuple[Issue, ...] = ()
    notes: str = ""

    # Stop details shown to the driver
    address: Optional[str] = None
    customer_name: Optional[str] = None
    waste_type: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def check_status_invariants(self) -> "Collection":
        completed = self.status == CollectionStatus.COMPLETED
        if completed != (self.actual_weight is not None):
            raise ValueError("actual_weight must be set exactly when the collection is completed")
        if completed != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when the collection is completed")
        if self.status == CollectionStatus.SKIPPED and not self.issues:
            raise ValueError("a skipped collection must carry at least one issue")
        return self

    def evolve(self, **changes: Any) -> "Collection":
        """Return a validated copy with the given fields replaced."""
        data = self.model_dump(exclude={"issues"})
        data["issues"] = self.issues
        data.update(changes)
        return Collection.model_validate(data)

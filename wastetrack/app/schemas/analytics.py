"""
Analytics Schemas for the dashboard views.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from wastetrack.app.models.enums import ReportingWindow


class DashboardSummary(BaseModel):
    """Collection stats for one reporting window."""
    window: Optional[ReportingWindow] = None
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    total: int
    completed: int
    pending: int
    in_progress: int
    skipped: int
    cancelled: int
    total_weight: float  # Actual kg collected
    estimated_weight: float
    completion_rate: float  # 0..1, 0 when there are no collections

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SummaryComparison(BaseModel):
    """
    Growth between two summaries.

    deltas maps a metric name to its signed percentage change; None means the
    previous value was 0 and the change is undefined.
    """
    current: DashboardSummary
    previous: DashboardSummary
    deltas: Dict[str, Optional[float]]

    class Config:
        alias_generator = to_camel
        populate_by_name = True

"""
Collection-related enumerations.
"""

import enum


class CollectionStatus(str, enum.Enum):
    """Collection status enumeration."""
    PENDING = "pending"  # Scheduled, driver has not arrived
    IN_PROGRESS = "in-progress"  # Driver is at the stop
    COMPLETED = "completed"  # Waste collected and weighed
    SKIPPED = "skipped"  # Could not be collected, issue recorded
    CANCELLED = "cancelled"  # Withdrawn before collection

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    CollectionStatus.COMPLETED,
    CollectionStatus.SKIPPED,
    CollectionStatus.CANCELLED,
})

OPEN_STATUSES = frozenset({
    CollectionStatus.PENDING,
    CollectionStatus.IN_PROGRESS,
})


class CollectionPriority(str, enum.Enum):
    """Collection priority enumeration."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class IssueType(str, enum.Enum):
    """Issue type enumeration for problems found at a stop."""
    CUSTOMER_UNAVAILABLE = "customer_unavailable"
    ACCESS_DENIED = "access_denied"
    WRONG_WASTE_TYPE = "wrong_waste_type"
    OVERWEIGHT = "overweight"
    CONTAMINATED = "contaminated"
    SPECIAL_EQUIPMENT = "special_equipment"
    SAFETY_CONCERN = "safety_concern"
    OTHER = "other"

    @property
    def label(self) -> str:
        return ISSUE_TYPE_LABELS[self]


ISSUE_TYPE_LABELS = {
    IssueType.CUSTOMER_UNAVAILABLE: "Customer Not Available",
    IssueType.ACCESS_DENIED: "Access Denied",
    IssueType.WRONG_WASTE_TYPE: "Wrong Waste Type",
    IssueType.OVERWEIGHT: "Overweight Container",
    IssueType.CONTAMINATED: "Contaminated Waste",
    IssueType.SPECIAL_EQUIPMENT: "Special Equipment Needed",
    IssueType.SAFETY_CONCERN: "Safety Concern",
    IssueType.OTHER: "Other Issue",
}


class TrackingEventKind(str, enum.Enum):
    """Tracking feed event kinds."""
    LOCATION_UPDATE = "location-update"
    STOP_COMPLETED = "stop-completed"  # Also emitted for skipped/cancelled stops
    STOP_STARTED = "stop-started"
    ETA_CHANGED = "eta-changed"


class ReportingWindow(str, enum.Enum):
    """Dashboard reporting window."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

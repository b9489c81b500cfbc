"""
Collection State Machine (Domain Logic).

One transition table decides which lifecycle actions are legal from which
status. The apply_* functions are pure: they validate and return a new
Collection snapshot and never touch the store.

    pending -> in-progress -> completed
    pending | in-progress -> skipped
    pending | in-progress -> cancelled
"""

import enum
import math
from datetime import datetime
from typing import Optional

from wastetrack.app.core.exceptions import InvalidTransitionError, ValidationError
from wastetrack.app.models.collection import Collection, Issue
from wastetrack.app.models.enums import CollectionStatus


class LifecycleAction(str, enum.Enum):
    START = "start"
    COMPLETE = "complete"
    SKIP = "skip"
    CANCEL = "cancel"
    REPORT_ISSUE = "report-issue"


TRANSITIONS = {
    LifecycleAction.START: {
        CollectionStatus.PENDING: CollectionStatus.IN_PROGRESS,
    },
    LifecycleAction.COMPLETE: {
        CollectionStatus.IN_PROGRESS: CollectionStatus.COMPLETED,
    },
    LifecycleAction.SKIP: {
        CollectionStatus.PENDING: CollectionStatus.SKIPPED,
        CollectionStatus.IN_PROGRESS: CollectionStatus.SKIPPED,
    },
    LifecycleAction.CANCEL: {
        CollectionStatus.PENDING: CollectionStatus.CANCELLED,
        CollectionStatus.IN_PROGRESS: CollectionStatus.CANCELLED,
    },
    # Reporting an issue keeps the status
    LifecycleAction.REPORT_ISSUE: {
        CollectionStatus.PENDING: CollectionStatus.PENDING,
        CollectionStatus.IN_PROGRESS: CollectionStatus.IN_PROGRESS,
    },
}


def can_apply(status: CollectionStatus, action: LifecycleAction) -> bool:
    return status in TRANSITIONS[action]


def next_status(collection: Collection, action: LifecycleAction) -> CollectionStatus:
    """
    Resolve the status an action leads to.

    Raises:
        InvalidTransitionError: action not allowed from the current status
    """
    if not can_apply(collection.status, action):
        raise InvalidTransitionError(
            collection_id=collection.id,
            current_status=collection.status.value,
            attempted=action.value
        )
    return TRANSITIONS[action][collection.status]


def validate_weight(actual_weight) -> float:
    """Collected weight must be a finite number above zero."""
    if isinstance(actual_weight, bool) or not isinstance(actual_weight, (int, float)):
        raise ValidationError("Please enter a valid weight", field="actual_weight")
    if not math.isfinite(actual_weight) or actual_weight <= 0:
        raise ValidationError("Collected weight must be greater than zero", field="actual_weight")
    return float(actual_weight)


def apply_start(collection: Collection, now: datetime) -> Collection:
    status = next_status(collection, LifecycleAction.START)
    return collection.evolve(status=status, started_at=now)


def apply_complete(
    collection: Collection,
    actual_weight: float,
    now: datetime,
    notes: Optional[str] = None
) -> Collection:
    status = next_status(collection, LifecycleAction.COMPLETE)
    weight = validate_weight(actual_weight)

    changes = {"status": status, "actual_weight": weight, "completed_at": now}
    if notes:
        changes["notes"] = notes
    return collection.evolve(**changes)


def apply_skip(collection: Collection, issue: Issue) -> Collection:
    status = next_status(collection, LifecycleAction.SKIP)
    return collection.evolve(status=status, issues=collection.issues + (issue,))


def apply_cancel(collection: Collection, issue: Issue, now: datetime) -> Collection:
    status = next_status(collection, LifecycleAction.CANCEL)
    return collection.evolve(
        status=status,
        cancelled_at=now,
        issues=collection.issues + (issue,)
    )


def apply_issue(collection: Collection, issue: Issue) -> Collection:
    next_status(collection, LifecycleAction.REPORT_ISSUE)
    return collection.evolve(issues=collection.issues + (issue,))

"""
Issue Ledger.

Appends structured issue entries to an open collection when a stop is skipped,
cancelled or has a problem reported. Entries are never reordered,
deduplicated, edited or removed.
"""

from typing import List, Union

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.core.exceptions import ValidationError
from wastetrack.app.domain.lifecycle.state_machine import LifecycleAction, apply_issue, next_status
from wastetrack.app.models.collection import Issue
from wastetrack.app.models.enums import IssueType
from wastetrack.app.services.record_store import CollectionRecordStore


def parse_issue_type(issue_type: Union[IssueType, str]) -> IssueType:
    try:
        return IssueType(issue_type)
    except ValueError:
        raise ValidationError(f"Unknown issue type: {issue_type}", field="issue_type")


class IssueLedger:

    def __init__(self, store: CollectionRecordStore, clock: Clock = utcnow):
        self.store = store
        self.clock = clock

    def build(self, issue_type: Union[IssueType, str], description: str) -> Issue:
        """
        Create a validated Issue stamped with the current time, without storing it.

        Raises:
            ValidationError: unknown type or blank description
        """
        parsed_type = parse_issue_type(issue_type)
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("Please describe the issue", field="description")

        return Issue(type=parsed_type, description=description.strip(), recorded_at=self.clock())

    async def record(
        self,
        collection_id: str,
        issue_type: Union[IssueType, str],
        description: str
    ) -> Issue:
        """
        Append an issue to an open collection in arrival order.

        Runs under the collection's lock, like CollectionService.report_issue.

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection already closed
            ValidationError: unknown type or blank description
        """
        self.store.get_collection(collection_id)
        async with self.store.lock_for(collection_id):
            collection = self.store.get_collection(collection_id)
            next_status(collection, LifecycleAction.REPORT_ISSUE)
            issue = self.build(issue_type, description)
            self.store.replace(apply_issue(collection, issue))
        return issue

    def list(self, collection_id: str) -> List[Issue]:
        return list(self.store.get_collection(collection_id).issues)

    def list_by_type(self, collection_id: str, issue_type: Union[IssueType, str]) -> List[Issue]:
        """Issues of one type, in the order they were reported."""
        parsed_type = parse_issue_type(issue_type)
        return [
            issue for issue in self.store.get_collection(collection_id).issues
            if issue.type == parsed_type
        ]

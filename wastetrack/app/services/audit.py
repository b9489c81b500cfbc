"""
Audit logging service for collection lifecycle events.

Provides centralized logging of driver and admin actions for compliance
and the admin activity view. Entries go to the "wastetrack.audit" logger
and to a bounded in-memory trail.
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.models.audit_log import AuditEntry

logger = logging.getLogger("wastetrack.audit")

DEFAULT_TRAIL_SIZE = 1000


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    ROUTE_CREATED = "ROUTE_CREATED"
    COLLECTION_SCHEDULED = "COLLECTION_SCHEDULED"

    # Collection lifecycle
    COLLECTION_STARTED = "COLLECTION_STARTED"
    COLLECTION_COMPLETED = "COLLECTION_COMPLETED"
    COLLECTION_SKIPPED = "COLLECTION_SKIPPED"
    COLLECTION_CANCELLED = "COLLECTION_CANCELLED"
    ISSUE_REPORTED = "ISSUE_REPORTED"
    NOTES_UPDATED = "NOTES_UPDATED"

    # Live tracking
    TRACKING_STARTED = "TRACKING_STARTED"
    TRACKING_STOPPED = "TRACKING_STOPPED"


class AuditTrail:
    """Bounded, most-recent-last record of audit entries."""

    def __init__(self, max_entries: int = DEFAULT_TRAIL_SIZE, clock: Clock = utcnow):
        self.clock = clock
        self._entries: Deque[AuditEntry] = deque(maxlen=max_entries)

    async def log_event(
        self,
        action: str,
        actor_id: Optional[str] = None,
        route_id: Optional[str] = None,
        collection_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Log a lifecycle or admin event to the audit trail.

        Args:
            action: Action being performed (use AuditAction constants)
            actor_id: ID of the driver/admin performing the action
            route_id: Route the action belongs to
            collection_id: Collection being acted upon (if applicable)
            metadata: Additional context

        Returns:
            Created AuditEntry
        """
        entry = AuditEntry(
            action=action,
            timestamp=self.clock(),
            actor_id=actor_id,
            route_id=route_id,
            collection_id=collection_id,
            meta_data=metadata or {}
        )
        self._entries.append(entry)

        logger.info(
            action,
            extra={
                "actor_id": actor_id,
                "route_id": route_id,
                "collection_id": collection_id,
                "meta_data": entry.meta_data
            }
        )
        return entry

    def get_audit_trail(
        self,
        collection_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100
    ) -> List[AuditEntry]:
        """
        Retrieve audit trail with optional filtering.

        Args:
            collection_id: Filter by collection ID
            action: Filter by action type
            limit: Maximum number of records to return

        Returns:
            List of AuditEntry instances, most recent first
        """
        entries = reversed(self._entries)
        if collection_id:
            entries = (e for e in entries if e.collection_id == collection_id)
        if action:
            entries = (e for e in entries if e.action == action)

        result = []
        for entry in entries:
            if len(result) >= limit:
                break
            result.append(entry)
        return result

"""
Collection lifecycle service.

Drivers start, complete, skip and cancel stops and report problems. Each
operation:
- validates against the state machine under the collection's lock
- records an issue where the operation produces one
- swaps the new snapshot into the store in one step
- recomputes route progress (and the route summary when a stop closes)
- publishes a tracking event and writes an audit entry

A rejected operation raises before the store is touched.
"""

from typing import Iterable, Optional, Union

from wastetrack.app.core.clock import Clock, utcnow
from wastetrack.app.core.exceptions import ValidationError
from wastetrack.app.core.observability import track_operation
from wastetrack.app.domain.lifecycle.state_machine import (
    LifecycleAction, next_status,
    apply_start, apply_complete, apply_skip, apply_cancel, apply_issue
)
from wastetrack.app.models.collection import Collection, Issue
from wastetrack.app.models.enums import IssueType, TrackingEventKind
from wastetrack.app.models.route import Route
from wastetrack.app.schemas.collection import StopTransitionResult
from wastetrack.app.services.analytics import DashboardAggregator
from wastetrack.app.services.audit import AuditAction, AuditTrail
from wastetrack.app.services.issue_ledger import IssueLedger
from wastetrack.app.services.record_store import CollectionRecordStore
from wastetrack.app.services.route_aggregator import RouteAggregator
from wastetrack.app.services.tracking_feed import TrackingFeed


class CollectionService:

    def __init__(
        self,
        store: CollectionRecordStore,
        ledger: IssueLedger,
        routes: RouteAggregator,
        dashboard: DashboardAggregator,
        feed: TrackingFeed,
        audit: AuditTrail,
        clock: Clock = utcnow
    ):
        self.store = store
        self.ledger = ledger
        self.routes = routes
        self.dashboard = dashboard
        self.feed = feed
        self.audit = audit
        self.clock = clock

    # Route setup

    async def create_route(
        self,
        route_id: str,
        name: str,
        collections: Iterable[Collection] = (),
        driver_id: Optional[str] = None,
        actor_id: Optional[str] = None
    ) -> Route:
        route = self.store.add_route(route_id, name, collections, driver_id=driver_id)
        await self.audit.log_event(
            action=AuditAction.ROUTE_CREATED,
            actor_id=actor_id,
            route_id=route.id,
            metadata={"name": name, "driver_id": driver_id, "total_stops": route.total_stops}
        )
        return route

    async def schedule_collection(
        self,
        route_id: str,
        collection: Collection,
        actor_id: Optional[str] = None
    ) -> Route:
        """Append a new pickup to the end of a route."""
        route = self.store.append_collection(route_id, collection)
        await self.audit.log_event(
            action=AuditAction.COLLECTION_SCHEDULED,
            actor_id=actor_id,
            route_id=route_id,
            collection_id=collection.id,
            metadata={"scheduled_time": collection.scheduled_time.isoformat()}
        )
        return route

    # Lifecycle operations

    async def start(self, collection_id: str, actor_id: Optional[str] = None) -> StopTransitionResult:
        """
        Start a pending collection (driver arrived).

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection is not pending
        """
        async with track_operation("start", collection_id=collection_id) as log_data:
            self.store.get_collection(collection_id)

            async with self.store.lock_for(collection_id):
                current = self.store.get_collection(collection_id)
                updated = self.store.replace(apply_start(current, self.clock()))

                event = self.feed.publish(
                    TrackingEventKind.STOP_STARTED,
                    {
                        "collectionId": updated.id,
                        "startedAt": updated.started_at.isoformat()
                    },
                    route_id=updated.route_id
                )
                progress = self.routes.progress(updated.route_id)

                await self.audit.log_event(
                    action=AuditAction.COLLECTION_STARTED,
                    actor_id=actor_id,
                    route_id=updated.route_id,
                    collection_id=updated.id
                )

            log_data["route_id"] = updated.route_id
            log_data["status"] = updated.status.value
            return StopTransitionResult(collection=updated, progress=progress, event=event)

    async def complete(
        self,
        collection_id: str,
        actual_weight: float,
        notes: Optional[str] = None,
        actor_id: Optional[str] = None
    ) -> StopTransitionResult:
        """
        Complete an in-progress collection with its weighed amount.

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection is not in progress
            ValidationError: actual_weight is not a number above zero
        """
        async with track_operation("complete", collection_id=collection_id) as log_data:
            self.store.get_collection(collection_id)

            async with self.store.lock_for(collection_id):
                current = self.store.get_collection(collection_id)
                updated = self.store.replace(
                    apply_complete(current, actual_weight, self.clock(), notes=notes)
                )
                result = self._close_stop(updated, outcome="completed")

                await self.audit.log_event(
                    action=AuditAction.COLLECTION_COMPLETED,
                    actor_id=actor_id,
                    route_id=updated.route_id,
                    collection_id=updated.id,
                    metadata={
                        "actual_weight": updated.actual_weight,
                        "estimated_weight": updated.estimated_weight
                    }
                )

            log_data["route_id"] = updated.route_id
            log_data["status"] = updated.status.value
            return result

    async def skip(
        self,
        collection_id: str,
        issue_type: Union[IssueType, str],
        description: str,
        actor_id: Optional[str] = None
    ) -> StopTransitionResult:
        """
        Skip a pending or in-progress collection, recording why.

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection already closed
            ValidationError: unknown issue type or empty description
        """
        async with track_operation("skip", collection_id=collection_id) as log_data:
            self.store.get_collection(collection_id)

            async with self.store.lock_for(collection_id):
                current = self.store.get_collection(collection_id)
                next_status(current, LifecycleAction.SKIP)
                issue = self.ledger.build(issue_type, description)

                updated = self.store.replace(apply_skip(current, issue))
                result = self._close_stop(updated, outcome="skipped", issue=issue)

                await self.audit.log_event(
                    action=AuditAction.COLLECTION_SKIPPED,
                    actor_id=actor_id,
                    route_id=updated.route_id,
                    collection_id=updated.id,
                    metadata={"issue_type": issue.type.value, "description": issue.description}
                )

            log_data["route_id"] = updated.route_id
            log_data["status"] = updated.status.value
            return result

    async def cancel(
        self,
        collection_id: str,
        reason: str,
        actor_id: Optional[str] = None
    ) -> StopTransitionResult:
        """
        Cancel a pending or in-progress collection.

        The reason is kept as an issue of type "other".

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection already closed
            ValidationError: empty reason
        """
        async with track_operation("cancel", collection_id=collection_id) as log_data:
            self.store.get_collection(collection_id)

            async with self.store.lock_for(collection_id):
                current = self.store.get_collection(collection_id)
                next_status(current, LifecycleAction.CANCEL)
                if not isinstance(reason, str) or not reason.strip():
                    raise ValidationError("Please give a cancellation reason", field="reason")
                issue = self.ledger.build(IssueType.OTHER, reason)

                updated = self.store.replace(apply_cancel(current, issue, self.clock()))
                result = self._close_stop(updated, outcome="cancelled", issue=issue)

                await self.audit.log_event(
                    action=AuditAction.COLLECTION_CANCELLED,
                    actor_id=actor_id,
                    route_id=updated.route_id,
                    collection_id=updated.id,
                    metadata={"reason": issue.description}
                )

            log_data["route_id"] = updated.route_id
            log_data["status"] = updated.status.value
            return result

    async def report_issue(
        self,
        collection_id: str,
        issue_type: Union[IssueType, str],
        description: str,
        actor_id: Optional[str] = None
    ) -> StopTransitionResult:
        """
        Record a problem on an open collection without changing its status.

        Raises:
            ResourceNotFoundError: unknown collection
            InvalidTransitionError: collection already closed
            ValidationError: unknown issue type or empty description
        """
        async with track_operation("report_issue", collection_id=collection_id) as log_data:
            self.store.get_collection(collection_id)

            async with self.store.lock_for(collection_id):
                current = self.store.get_collection(collection_id)
                next_status(current, LifecycleAction.REPORT_ISSUE)
                issue = self.ledger.build(issue_type, description)

                updated = self.store.replace(apply_issue(current, issue))
                progress = self.routes.progress(updated.route_id)

                await self.audit.log_event(
                    action=AuditAction.ISSUE_REPORTED,
                    actor_id=actor_id,
                    route_id=updated.route_id,
                    collection_id=updated.id,
                    metadata={"issue_type": issue.type.value, "description": issue.description}
                )

            log_data["route_id"] = updated.route_id
            return StopTransitionResult(collection=updated, progress=progress, issue=issue)

    async def update_notes(
        self,
        collection_id: str,
        notes: str,
        actor_id: Optional[str] = None
    ) -> Collection:
        """Replace the free-text notes of a collection (any status)."""
        if not isinstance(notes, str):
            raise ValidationError("Notes must be text", field="notes")

        self.store.get_collection(collection_id)
        async with self.store.lock_for(collection_id):
            current = self.store.get_collection(collection_id)
            updated = self.store.replace(current.evolve(notes=notes))

        await self.audit.log_event(
            action=AuditAction.NOTES_UPDATED,
            actor_id=actor_id,
            route_id=updated.route_id,
            collection_id=updated.id
        )
        return updated

    # Helpers

    def _close_stop(
        self,
        collection: Collection,
        outcome: str,
        issue: Optional[Issue] = None
    ) -> StopTransitionResult:
        """Recompute route figures after a stop closes and announce it on the feed."""
        progress = self.routes.progress(collection.route_id)
        remaining = self.routes.remaining_stops(collection.route_id)
        summary = self.dashboard.summarize_store(route_id=collection.route_id)

        event = self.feed.publish(
            TrackingEventKind.STOP_COMPLETED,
            {
                "collectionId": collection.id,
                "outcome": outcome,
                "actualWeight": collection.actual_weight,
                "completedCount": progress.completed_count,
                "totalStops": progress.total_stops,
                "progressPercentage": progress.progress_percentage,
                "remainingStops": remaining,
                "completionRate": summary.completion_rate
            },
            route_id=collection.route_id
        )
        return StopTransitionResult(
            collection=collection,
            progress=progress,
            summary=summary,
            issue=issue,
            event=event
        )

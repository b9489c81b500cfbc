"""
Collection Record Store.

Single authoritative in-memory store for routes and their collections.
Every consumer reads projections from here instead of keeping its own copy.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from wastetrack.app.core.exceptions import ResourceNotFoundError, ValidationError
from wastetrack.app.models.collection import Collection
from wastetrack.app.models.enums import CollectionStatus, CollectionPriority
from wastetrack.app.models.route import Route

logger = logging.getLogger("wastetrack.store")


class CollectionRecordStore:
    """
    In-memory store of Route and Collection snapshots.

    Snapshots are immutable, so a write is a single dict assignment and
    readers always see either the old or the new collection. Writers that
    read-modify-write a collection must hold lock_for(collection_id).
    """

    def __init__(self):
        self._routes: Dict[str, Route] = {}
        self._collections: Dict[str, Collection] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # Routes

    def add_route(
        self,
        route_id: str,
        name: str,
        collections: Iterable[Collection] = (),
        driver_id: Optional[str] = None
    ) -> Route:
        """
        Register a route and the collections it owns, in route order.

        Raises:
            ValidationError: duplicate route/collection id or a collection
                that names another route
        """
        if route_id in self._routes:
            raise ValidationError(f"Route {route_id} already exists", field="route_id")

        collections = list(collections)
        seen = set()
        for collection in collections:
            self._check_new_collection(collection, route_id)
            if collection.id in seen:
                raise ValidationError(
                    f"Collection {collection.id} appears twice in route {route_id}",
                    field="collection_ids"
                )
            seen.add(collection.id)

        route = Route(
            id=route_id,
            name=name,
            driver_id=driver_id,
            collection_ids=tuple(c.id for c in collections)
        )
        for collection in collections:
            self._collections[collection.id] = collection
        self._routes[route_id] = route

        logger.info(
            "Route registered",
            extra={"route_id": route_id, "total_stops": route.total_stops}
        )
        return route

    def append_collection(self, route_id: str, collection: Collection) -> Route:
        """Add a newly scheduled pickup to the end of a route."""
        route = self.get_route(route_id)
        self._check_new_collection(collection, route_id)

        updated = route.model_copy(
            update={"collection_ids": route.collection_ids + (collection.id,)}
        )
        self._collections[collection.id] = collection
        self._routes[route_id] = updated
        return updated

    def assign_driver(self, route_id: str, driver_id: Optional[str]) -> Route:
        route = self.get_route(route_id)
        updated = route.model_copy(update={"driver_id": driver_id})
        self._routes[route_id] = updated
        return updated

    def get_route(self, route_id: str) -> Route:
        route = self._routes.get(route_id)
        if route is None:
            raise ResourceNotFoundError("Route", route_id)
        return route

    def list_routes(self, driver_id: Optional[str] = None) -> List[Route]:
        routes = list(self._routes.values())
        if driver_id is not None:
            routes = [r for r in routes if r.driver_id == driver_id]
        return routes

    def route_collections(self, route_id: str) -> List[Collection]:
        """Collections of a route in route order."""
        route = self.get_route(route_id)
        return [self._collections[cid] for cid in route.collection_ids]

    # Collections

    def get_collection(self, collection_id: str) -> Collection:
        collection = self._collections.get(collection_id)
        if collection is None:
            raise ResourceNotFoundError("Collection", collection_id)
        return collection

    def list_collections(
        self,
        status: Optional[CollectionStatus] = None,
        priority: Optional[CollectionPriority] = None,
        route_id: Optional[str] = None
    ) -> List[Collection]:
        """Filtered view used by the tracking list (status / priority chips)."""
        if route_id is not None:
            collections = self.route_collections(route_id)
        else:
            collections = list(self._collections.values())

        if status is not None:
            collections = [c for c in collections if c.status == status]
        if priority is not None:
            collections = [c for c in collections if c.priority == priority]
        return collections

    def replace(self, collection: Collection) -> Collection:
        """Swap in a new snapshot of an existing collection."""
        current = self.get_collection(collection.id)
        if current.route_id != collection.route_id:
            raise ValidationError(
                f"Collection {collection.id} cannot move between routes",
                field="route_id"
            )
        self._collections[collection.id] = collection
        return collection

    def lock_for(self, collection_id: str) -> asyncio.Lock:
        lock = self._locks.get(collection_id)
        if lock is None:
            lock = self._locks[collection_id] = asyncio.Lock()
        return lock

    def snapshot(self, route_id: str) -> Dict[str, Any]:
        """Serializable route view (camelCase field names) for the UI layer."""
        route = self.get_route(route_id)
        return {
            "route": route.model_dump(by_alias=True, mode="json"),
            "collections": [
                c.model_dump(by_alias=True, mode="json")
                for c in self.route_collections(route_id)
            ]
        }

    def _check_new_collection(self, collection: Collection, route_id: str) -> None:
        if collection.route_id != route_id:
            raise ValidationError(
                f"Collection {collection.id} belongs to route {collection.route_id}, not {route_id}",
                field="route_id"
            )
        if collection.id in self._collections:
            raise ValidationError(
                f"Collection {collection.id} already exists",
                field="collection_id"
            )

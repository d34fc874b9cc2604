import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ziroplans.config import settings
from ziroplans.errors import StoreError
from ziroplans.models.itinerary_models import TripPlan
from ziroplans.db.mongo import get_collection

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


def _to_document(plan: TripPlan) -> Dict[str, Any]:
    return plan.model_dump(mode="json", by_alias=True)


def _from_document(document: Dict[str, Any]) -> TripPlan:
    document = {k: v for k, v in document.items() if k != "_id"}
    return TripPlan.model_validate(document)


class TripStore:
    """
    Trips keyed by their string `id`. Writes are upserts, so saving the
    same plan twice updates it in place.
    """

    def __init__(self, collection=None):
        self._collection = collection

    @property
    def collection(self):
        if self._collection is None:
            self._collection = get_collection(settings.COLL_TRIPS)
        return self._collection

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index([("id", ASCENDING)], unique=True)
            await self.collection.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
        except PyMongoError as e:
            raise StoreError("Failed to create trip indexes", details=str(e)) from e

    async def save(self, plan: TripPlan) -> TripPlan:
        stamped = plan.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        try:
            await self.collection.update_one(
                {"id": stamped.id},
                {"$set": _to_document(stamped)},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error("Failed to save trip %s: %s", plan.id, e)
            raise StoreError("Failed to save trip to database.", details=str(e)) from e
        logger.info("Saved trip %s for user %s", stamped.id, stamped.user_id)
        return stamped

    async def get(self, trip_id: str) -> Optional[TripPlan]:
        try:
            document = await self.collection.find_one({"id": trip_id})
        except PyMongoError as e:
            raise StoreError("Failed to fetch trip from database.", details=str(e)) from e
        return _from_document(document) if document else None

    async def list_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[TripPlan]:
        try:
            cursor = self.collection.find({"userId": user_id}).sort("createdAt", DESCENDING).limit(limit)
            documents = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise StoreError("Failed to list trips from database.", details=str(e)) from e
        return [_from_document(d) for d in documents]

    async def delete(self, trip_id: str, user_id: str) -> bool:
        try:
            result = await self.collection.delete_one({"id": trip_id, "userId": user_id})
        except PyMongoError as e:
            raise StoreError("Failed to delete trip from database.", details=str(e)) from e
        return result.deleted_count > 0


_default_store: Optional[TripStore] = None


def get_trip_store() -> TripStore:
    """Process-wide store bound to the lazily created Mongo client."""
    global _default_store
    if _default_store is None:
        _default_store = TripStore()
    return _default_store

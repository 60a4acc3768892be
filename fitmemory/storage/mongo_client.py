import logging
from typing import Any, Dict, List, Optional, Sequence

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient

from ..utils.config import Settings, get_settings
from .base import STORAGE_KEY, ArrayRemove, ArrayUnion, RecordStoreClient

logger = logging.getLogger(__name__)


def _to_raw(doc: Dict[str, Any]) -> Dict[str, Any]:
    # _id is the storage key; user_id is a storage-side partition key
    raw = {k: v for k, v in doc.items() if k not in ("_id", "user_id")}
    raw[STORAGE_KEY] = doc.get("_id")
    return raw


def build_merge_update(fields: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Translate plain values and array operators into a MongoDB update document."""
    update: Dict[str, Dict[str, Any]] = {}
    for name, value in fields.items():
        if isinstance(value, ArrayUnion):
            update.setdefault("$addToSet", {})[name] = {"$each": list(value.values)}
        elif isinstance(value, ArrayRemove):
            update.setdefault("$pull", {})[name] = {"$in": list(value.values)}
        else:
            update.setdefault("$set", {})[name] = value
    return update


class MongoRecordStoreClient(RecordStoreClient):
    """
    MongoDB-backed record store.
    Records share one collection partitioned by ``user_id`` and are stored
    under ``_id`` = record id; each user's aggregate document lives in a
    second collection keyed by user id.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncMongoClient] = None,
    ):
        """
        Initialize the MongoDB client.

        Args:
            settings: Connection and collection settings (env-derived by default)
            client: Optional injected AsyncMongoClient (for testing)
        """
        self.settings = settings or get_settings()
        if client is None:
            client = AsyncMongoClient(
                self.settings.mongo_uri,
                tz_aware=True,
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
            )
        self.client = client
        self.db = self.client[self.settings.db_name]

        # Collections
        self.records = self.db[self.settings.records_collection]
        self.aggregates = self.db[self.settings.aggregates_collection]

    async def setup_indexes(self) -> None:
        """Create indexes for dedup lookups and recency ordering."""
        await self.records.create_index(
            [("user_id", ASCENDING), ("type", ASCENDING), ("value", ASCENDING)]
        )
        await self.records.create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )

    # --- Record Operations ---

    async def query(
        self,
        user_id: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        mongo_filter = dict(filters or {})
        mongo_filter["user_id"] = user_id
        cursor = self.records.find(mongo_filter).sort(
            order_by, DESCENDING if descending else ASCENDING
        )
        docs = await cursor.to_list(length=None)
        return [_to_raw(doc) for doc in docs]

    async def get(self, user_id: str, record_id: Any) -> Optional[Dict[str, Any]]:
        data = await self.records.find_one({"_id": record_id, "user_id": user_id})
        if data:
            return _to_raw(data)
        return None

    async def set(self, user_id: str, record_id: str, document: Dict[str, Any]) -> None:
        fields = {k: v for k, v in document.items() if k != STORAGE_KEY}
        await self.records.replace_one(
            {"_id": record_id, "user_id": user_id},
            {**fields, "_id": record_id, "user_id": user_id},
            upsert=True,
        )

    async def update(
        self, user_id: str, record_id: Any, fields: Dict[str, Any]
    ) -> None:
        if not fields:
            return
        await self.records.update_one(
            {"_id": record_id, "user_id": user_id}, {"$set": dict(fields)}
        )

    async def delete(self, user_id: str, record_id: Any) -> None:
        await self.records.delete_one({"_id": record_id, "user_id": user_id})

    async def batch_delete(self, user_id: str, record_ids: Sequence[Any]) -> None:
        ids = list(record_ids)
        if not ids:
            return
        mongo_filter = {"_id": {"$in": ids}, "user_id": user_id}

        if not self.settings.use_transactions:
            logger.warning(
                "Deleting %d memories for %s without a transaction; a failure may leave a partial wipe",
                len(ids),
                user_id,
            )
            await self.records.delete_many(mongo_filter)
            return

        async def _delete(session) -> None:
            await self.records.delete_many(mongo_filter, session=session)

        async with self.client.start_session() as session:
            await session.with_transaction(_delete)

    # --- Aggregate Operations ---

    async def merge_fields(self, user_id: str, fields: Dict[str, Any]) -> None:
        update = build_merge_update(fields)
        if not update:
            return
        await self.aggregates.update_one({"_id": user_id}, update, upsert=True)

    async def read_fields(self, user_id: str) -> Dict[str, Any]:
        data = await self.aggregates.find_one({"_id": user_id})
        if data:
            data.pop("_id", None)
            return data
        return {}

    async def close(self) -> None:
        await self.client.close()

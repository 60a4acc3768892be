"""Memory Service - dedup-or-create, reinforcement and deletion of personalization facts."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from ..errors import InvalidMemoryError
from ..models import (
    LegacyAggregates,
    MemoryKind,
    MemoryRecord,
    MemorySource,
    coerce_confidence,
)
from ..storage import (
    STORAGE_KEY,
    LegacyAggregateProjector,
    MongoRecordStoreClient,
    ProjectionOp,
    RecordStoreClient,
)
from ..utils import Settings, now_utc
from .notifications import ChangeNotificationChannel

logger = logging.getLogger(__name__)

REINFORCEMENT_STEP = 0.1
MAX_CONFIDENCE = 1.0


def reinforce_confidence(current: float) -> float:
    """One corroborating observation: +0.1, capped at 1.0, kept on the 0.1 grid."""
    return round(min(MAX_CONFIDENCE, current + REINFORCEMENT_STEP), 6)


def _coerce_kind(kind: Union[MemoryKind, str]) -> MemoryKind:
    try:
        return MemoryKind(kind)
    except ValueError:
        raise InvalidMemoryError(f"Unknown memory kind: {kind!r}")


def _coerce_source(source: Union[MemorySource, str]) -> MemorySource:
    try:
        return MemorySource(source)
    except ValueError:
        raise InvalidMemoryError(f"Unknown memory source: {source!r}")


class MemoryService:
    """
    Records observed preferences and aversions for users.

    Provides a unified interface for:
    - Creating facts on first observation, reinforcing them afterwards
    - Keeping the legacy aggregate lists in step with the records
    - Announcing new facts on the change notification channel
    - Deleting single facts or wiping a user's memory

    The service holds no per-user state and takes no locks; it relies on the
    store's single-document and batch atomicity. Concurrent calls for the same
    fact may race (duplicate create or a lost increment).

    Usage:
        service = MemoryService()
        await service.record_completed_exercise("u1", "Squats")
        records = await service.get_all("u1")
    """

    def __init__(
        self,
        store: Optional[RecordStoreClient] = None,
        projector: Optional[LegacyAggregateProjector] = None,
        channel: Optional[ChangeNotificationChannel] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the memory service.

        Args:
            store: Record store (creates a MongoDB client if not provided)
            projector: Legacy aggregate projector (built over the store if not provided)
            channel: Notification channel for newly created records
            settings: Settings used when a MongoDB client has to be created
        """
        if store is None:
            store = MongoRecordStoreClient(settings=settings)
        self.store = store
        self.projector = projector or LegacyAggregateProjector(store)
        self.channel = channel or ChangeNotificationChannel()

    # --- Retrieve ---

    async def get_all(self, user_id: str) -> List[MemoryRecord]:
        """All records for a user, most recently observed first."""
        docs = await self.store.query(user_id, order_by="created_at", descending=True)
        return self._decode_all(user_id, docs)

    async def get_by_kind(
        self, user_id: str, kind: Union[MemoryKind, str]
    ) -> List[MemoryRecord]:
        """Records of one kind, most recently observed first."""
        kind = _coerce_kind(kind)
        docs = await self.store.query(
            user_id, {"type": kind.value}, order_by="created_at", descending=True
        )
        return self._decode_all(user_id, docs)

    async def count(self, user_id: str) -> int:
        """Number of decodable records the user has."""
        return len(await self.get_all(user_id))

    async def group_by_kind(self, user_id: str) -> Dict[MemoryKind, List[MemoryRecord]]:
        """Records grouped by kind; each group keeps recency order."""
        groups: Dict[MemoryKind, List[MemoryRecord]] = {}
        for record in await self.get_all(user_id):
            groups.setdefault(record.type, []).append(record)
        return groups

    async def get_legacy_aggregates(self, user_id: str) -> LegacyAggregates:
        """The user's aggregate lists as currently stored."""
        return await self.projector.read(user_id)

    def _decode_all(self, user_id: str, docs: Iterable[dict]) -> List[MemoryRecord]:
        records = []
        for doc in docs:
            record = MemoryRecord.from_dict(doc)
            if record is None:
                logger.debug("Skipping malformed memory document for user %s: %r", user_id, doc)
                continue
            records.append(record)
        return records

    # --- Add ---

    async def add_or_reinforce(
        self,
        user_id: str,
        type: Union[MemoryKind, str],
        value: str,
        source: Union[MemorySource, str],
        notify: bool = True,
    ) -> MemoryRecord:
        """
        Record one observation of a (type, value) fact for a user.

        If the fact already exists its confidence grows by 0.1 (capped at 1.0)
        and its timestamp is refreshed; the original source is kept, nothing is
        emitted and the aggregates are left alone. Otherwise a record with
        confidence 0.5 is written, its value is projected into the legacy
        aggregates and, if ``notify``, the record is emitted.

        Args:
            user_id: Owner of the fact
            type: Kind of fact
            value: The observed value, e.g. an exercise name
            source: How the fact was observed
            notify: Emit the record on the channel when it is newly created

        Returns:
            The created or reinforced record
        """
        kind = _coerce_kind(type)
        source = _coerce_source(source)
        if not isinstance(value, str) or not value.strip():
            raise InvalidMemoryError("Memory value must be a non-empty string")

        existing = await self._find_existing(user_id, kind, value)
        if existing is not None:
            return await self._reinforce(user_id, kind, value, source, existing)

        record = MemoryRecord.create(type=kind, value=value, source=source)
        await self.store.set(user_id, record.id, record.to_dict())
        logger.info("Created %s memory %r for user %s", kind.value, value, user_id)

        # Aggregate write only after the record write has succeeded
        try:
            await self.projector.project(user_id, kind, value, ProjectionOp.ADD)
        except Exception:
            logger.warning(
                "Legacy aggregates for user %s are stale: failed to add %r", user_id, value
            )
            raise

        if notify:
            self.channel.emit(record)
        return record

    async def _find_existing(
        self, user_id: str, kind: MemoryKind, value: str
    ) -> Optional[Dict[str, Any]]:
        """First stored document for (kind, value), decodable or not."""
        docs = await self.store.query(user_id, {"type": kind.value, "value": value})
        return docs[0] if docs else None

    async def _reinforce(
        self,
        user_id: str,
        kind: MemoryKind,
        value: str,
        source: MemorySource,
        doc: Dict[str, Any],
    ) -> MemoryRecord:
        key = doc[STORAGE_KEY]
        confidence = reinforce_confidence(coerce_confidence(doc.get("confidence")))
        created_at = now_utc()
        await self.store.update(
            user_id, key, {"confidence": confidence, "created_at": created_at}
        )

        record = MemoryRecord.from_dict(doc)
        if record is None:
            if doc.get("source") in {s.value for s in MemorySource}:
                source = MemorySource(doc["source"])
            record_id = doc.get("id")
            record = MemoryRecord(
                type=kind,
                value=value,
                source=source,
                id=record_id if isinstance(record_id, str) and record_id else str(key),
            )
        record.confidence = confidence
        record.created_at = created_at
        logger.debug(
            "Reinforced memory %s for user %s to %.2f", key, user_id, confidence
        )
        return record

    # --- Delete ---

    async def remove(self, user_id: str, memory_id: str) -> None:
        """Delete one record and retract it from the aggregates. Missing ids are a no-op."""
        doc = await self.store.get(user_id, memory_id)
        record = MemoryRecord.from_dict(doc) if doc else None
        if record is None:
            return

        await self.store.delete(user_id, memory_id)
        logger.info("Deleted memory %s for user %s", memory_id, user_id)

        try:
            await self.projector.project(user_id, record.type, record.value, ProjectionOp.REMOVE)
        except Exception:
            logger.warning(
                "Legacy aggregates for user %s are stale: failed to remove %r",
                user_id,
                record.value,
            )
            raise

    async def wipe_all(self, user_id: str) -> int:
        """
        Delete every record for a user and empty all aggregate lists.

        The record deletion is one atomic batch; the aggregate reset is a
        separate write that may lag or fail on its own.

        Returns:
            Number of records deleted
        """
        docs = await self.store.query(user_id)
        # Undecodable documents are wiped too
        keys = [doc[STORAGE_KEY] for doc in docs]
        await self.store.batch_delete(user_id, keys)
        await self.projector.reset(user_id)
        logger.info("Wiped %d memories for user %s", len(keys), user_id)
        return len(keys)

    # --- Convenience Recording Methods ---

    async def record_completed_exercise(self, user_id: str, exercise_name: str) -> MemoryRecord:
        return await self.add_or_reinforce(
            user_id,
            MemoryKind.PREFERRED_EXERCISE,
            exercise_name,
            MemorySource.COMPLETED_EXERCISE,
            notify=True,
        )

    async def record_skipped_exercise(self, user_id: str, exercise_name: str) -> MemoryRecord:
        return await self.add_or_reinforce(
            user_id,
            MemoryKind.AVOIDED_EXERCISE,
            exercise_name,
            MemorySource.SKIPPED_EXERCISE,
            notify=True,
        )

    async def record_completed_meal(self, user_id: str, meal_name: str) -> MemoryRecord:
        return await self.add_or_reinforce(
            user_id,
            MemoryKind.PREFERRED_MEAL,
            meal_name,
            MemorySource.COMPLETED_MEAL,
            notify=True,
        )

    async def record_skipped_ingredients(
        self, user_id: str, ingredients: Iterable[str]
    ) -> List[MemoryRecord]:
        """
        Record each skipped ingredient as its own fact, in order.

        Items are independent: if one fails, the ones before it stay recorded
        and the error propagates.
        """
        records = []
        for ingredient in ingredients:
            records.append(
                await self.add_or_reinforce(
                    user_id,
                    MemoryKind.AVOIDED_INGREDIENT,
                    ingredient,
                    MemorySource.SKIPPED_MEAL,
                    notify=True,
                )
            )
        return records

    async def record_conversation_preference(
        self, user_id: str, type: Union[MemoryKind, str], value: str
    ) -> MemoryRecord:
        return await self.add_or_reinforce(
            user_id, type, value, MemorySource.CONVERSATION, notify=True
        )

    async def record_activity_pattern(self, user_id: str, pattern: str) -> MemoryRecord:
        # Background-inferred facts are not surfaced to the user
        return await self.add_or_reinforce(
            user_id,
            MemoryKind.ACTIVITY_PATTERN,
            pattern,
            MemorySource.HEALTHKIT_PATTERN,
            notify=False,
        )

    async def record_manual_entry(
        self, user_id: str, type: Union[MemoryKind, str], value: str
    ) -> MemoryRecord:
        return await self.add_or_reinforce(
            user_id, type, value, MemorySource.MANUAL_ENTRY, notify=True
        )

    async def close(self) -> None:
        await self.store.close()

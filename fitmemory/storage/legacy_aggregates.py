"""Projection of memory records into the legacy aggregate lists."""

import logging
from enum import Enum
from typing import Dict, Optional

from ..models import AGGREGATE_FIELDS, LegacyAggregates, MemoryKind
from ..models.aggregates import (
    AVOIDED_EXERCISE_TYPES,
    AVOIDED_MEAL_INGREDIENTS,
    PREFERRED_EXERCISE_TYPES,
    PREFERRED_MEAL_TYPES,
)
from .base import ArrayRemove, ArrayUnion, RecordStoreClient

logger = logging.getLogger(__name__)

KIND_TO_FIELD: Dict[MemoryKind, str] = {
    MemoryKind.PREFERRED_EXERCISE: PREFERRED_EXERCISE_TYPES,
    MemoryKind.AVOIDED_EXERCISE: AVOIDED_EXERCISE_TYPES,
    MemoryKind.PREFERRED_MEAL: PREFERRED_MEAL_TYPES,
    MemoryKind.AVOIDED_INGREDIENT: AVOIDED_MEAL_INGREDIENTS,
}


class ProjectionOp(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class LegacyAggregateProjector:
    """
    Keep the four legacy list fields in step with the record set.

    Best-effort denormalization: writes are not transactional with the
    record writes, and the record collection stays authoritative.
    """

    def __init__(self, store: RecordStoreClient):
        self.store = store

    @staticmethod
    def field_for(kind: MemoryKind) -> Optional[str]:
        """Return the aggregate field for a kind, or None if it is not projected."""
        return KIND_TO_FIELD.get(kind)

    async def project(
        self, user_id: str, kind: MemoryKind, value: str, op: ProjectionOp
    ) -> bool:
        """
        Add or remove a value in the mapped aggregate field.

        Returns:
            True if a write was issued, False for unmapped kinds
        """
        field_name = self.field_for(kind)
        if field_name is None:
            return False

        operator = ArrayUnion([value]) if op == ProjectionOp.ADD else ArrayRemove([value])
        await self.store.merge_fields(user_id, {field_name: operator})
        logger.debug("Projected %s %r on %s for user %s", op.value, value, field_name, user_id)
        return True

    async def reset(self, user_id: str) -> None:
        """Overwrite all aggregate fields with empty lists in one write."""
        await self.store.merge_fields(user_id, {name: [] for name in AGGREGATE_FIELDS})

    async def read(self, user_id: str) -> LegacyAggregates:
        return LegacyAggregates.from_dict(await self.store.read_fields(user_id))

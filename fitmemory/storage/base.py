"""Record store capability consumed by the memory service."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

# Key under which query/get results carry the document's storage key
STORAGE_KEY = "_key"


@dataclass(frozen=True)
class ArrayUnion:
    """Field operator: add values to an array field, skipping duplicates."""

    values: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ArrayRemove:
    """Field operator: remove every occurrence of values from an array field."""

    values: List[Any] = field(default_factory=list)


class RecordStoreClient(ABC):
    """
    Per-user document store.

    Records live in a per-user collection keyed by record id. Each user also
    owns one aggregate document that is written with ``merge_fields``.
    Single-document writes and ``batch_delete`` must be atomic.
    """

    @abstractmethod
    async def query(
        self,
        user_id: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Return raw documents matching all equality filters, ordered.

        Every document carries its storage key under STORAGE_KEY, even when
        its own fields are incomplete.
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, record_id: Any) -> Optional[Dict[str, Any]]:
        """Return the raw document stored under record_id (with STORAGE_KEY), or None."""
        pass

    @abstractmethod
    async def set(self, user_id: str, record_id: str, document: Dict[str, Any]) -> None:
        """Create or replace a document."""
        pass

    @abstractmethod
    async def update(
        self, user_id: str, record_id: Any, fields: Dict[str, Any]
    ) -> None:
        """Overwrite the given fields of an existing document."""
        pass

    @abstractmethod
    async def delete(self, user_id: str, record_id: Any) -> None:
        """Delete a document. Deleting a missing id is not an error."""
        pass

    @abstractmethod
    async def batch_delete(self, user_id: str, record_ids: Sequence[Any]) -> None:
        """Delete all documents with the given storage keys in one atomic commit."""
        pass

    @abstractmethod
    async def merge_fields(self, user_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into the user's aggregate document, creating it if needed.

        Values are either plain values (overwrite) or ArrayUnion/ArrayRemove
        operators applied to array fields.
        """
        pass

    @abstractmethod
    async def read_fields(self, user_id: str) -> Dict[str, Any]:
        """Return the user's aggregate document, or {} if it does not exist."""
        pass

    async def close(self) -> None:
        """Release client resources."""
        pass

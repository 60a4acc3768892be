"""Personalization-fact store for the fitness app."""

from .core import ChangeNotificationChannel, MemoryService, Subscription
from .errors import InvalidMemoryError, MemoryStoreError
from .models import LegacyAggregates, MemoryKind, MemoryRecord, MemorySource
from .storage import LegacyAggregateProjector, MongoRecordStoreClient, RecordStoreClient

__all__ = [
    "MemoryService",
    "ChangeNotificationChannel",
    "Subscription",
    "MemoryRecord",
    "MemoryKind",
    "MemorySource",
    "LegacyAggregates",
    "LegacyAggregateProjector",
    "RecordStoreClient",
    "MongoRecordStoreClient",
    "MemoryStoreError",
    "InvalidMemoryError",
]

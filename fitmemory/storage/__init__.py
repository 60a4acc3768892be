# Storage backends
from .base import STORAGE_KEY, ArrayRemove, ArrayUnion, RecordStoreClient
from .legacy_aggregates import KIND_TO_FIELD, LegacyAggregateProjector, ProjectionOp
from .mongo_client import MongoRecordStoreClient

__all__ = [
    "RecordStoreClient",
    "STORAGE_KEY",
    "ArrayUnion",
    "ArrayRemove",
    "MongoRecordStoreClient",
    "LegacyAggregateProjector",
    "ProjectionOp",
    "KIND_TO_FIELD",
]

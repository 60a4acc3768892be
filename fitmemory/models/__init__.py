# Data models for the personalization-fact store
from .aggregates import AGGREGATE_FIELDS, LegacyAggregates
from .memory import (
    DEFAULT_CONFIDENCE,
    MemoryKind,
    MemoryRecord,
    MemorySource,
    coerce_confidence,
)

__all__ = [
    "MemoryRecord",
    "MemoryKind",
    "MemorySource",
    "DEFAULT_CONFIDENCE",
    "coerce_confidence",
    "LegacyAggregates",
    "AGGREGATE_FIELDS",
]

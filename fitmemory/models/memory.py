"""MemoryRecord: a single personalization fact observed for a user."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..utils.datetime_utils import ensure_utc, now_utc, parse_datetime

DEFAULT_CONFIDENCE = 0.5
REQUIRED_KEYS = ("id", "type", "value", "source")


class MemoryKind(str, Enum):
    """Category of a personalization fact."""

    PREFERRED_EXERCISE = "preferred_exercise"
    AVOIDED_EXERCISE = "avoided_exercise"
    PREFERRED_MEAL = "preferred_meal"
    AVOIDED_INGREDIENT = "avoided_ingredient"
    PREFERRED_CUISINE = "preferred_cuisine"
    ACTIVITY_PATTERN = "activity_pattern"
    SCHEDULE_PREFERENCE = "schedule_preference"

    @property
    def display_name(self) -> str:
        return _KIND_DISPLAY_NAMES[self]

    @property
    def is_positive(self) -> bool:
        """True for preferences, False for aversions."""
        return self not in (MemoryKind.AVOIDED_EXERCISE, MemoryKind.AVOIDED_INGREDIENT)


_KIND_DISPLAY_NAMES = {
    MemoryKind.PREFERRED_EXERCISE: "Likes exercise",
    MemoryKind.AVOIDED_EXERCISE: "Avoids exercise",
    MemoryKind.PREFERRED_MEAL: "Likes meal",
    MemoryKind.AVOIDED_INGREDIENT: "Avoids ingredient",
    MemoryKind.PREFERRED_CUISINE: "Prefers cuisine",
    MemoryKind.ACTIVITY_PATTERN: "Activity pattern",
    MemoryKind.SCHEDULE_PREFERENCE: "Schedule preference",
}


class MemorySource(str, Enum):
    """How a personalization fact was observed."""

    COMPLETED_EXERCISE = "completed_exercise"
    SKIPPED_EXERCISE = "skipped_exercise"
    COMPLETED_MEAL = "completed_meal"
    SKIPPED_MEAL = "skipped_meal"
    CONVERSATION = "conversation"
    HEALTHKIT_PATTERN = "healthkit_pattern"
    MANUAL_ENTRY = "manual_entry"

    @property
    def display_name(self) -> str:
        return _SOURCE_DISPLAY_NAMES[self]


_SOURCE_DISPLAY_NAMES = {
    MemorySource.COMPLETED_EXERCISE: "Completed in workout",
    MemorySource.SKIPPED_EXERCISE: "Skipped in workout",
    MemorySource.COMPLETED_MEAL: "Completed meal",
    MemorySource.SKIPPED_MEAL: "Skipped meal",
    MemorySource.CONVERSATION: "Mentioned in chat",
    MemorySource.HEALTHKIT_PATTERN: "Detected from activity",
    MemorySource.MANUAL_ENTRY: "Added manually",
}


def coerce_confidence(raw: Any) -> float:
    """Stored confidence as a float in [0, 1]; non-numeric values read as 0.5."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, float(raw)))


def _coerce_created_at(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, str):
        return parse_datetime(raw)
    return now_utc()


@dataclass
class MemoryRecord:
    """
    A stored personalization fact with a confidence score.

    Identity for deduplication is (user, type, value); ``id`` is only the
    storage key. Confidence is a saturating belief score in [0.0, 1.0].
    """

    type: MemoryKind
    value: str
    source: MemorySource
    id: str = ""
    created_at: datetime = field(default_factory=now_utc)
    confidence: float = DEFAULT_CONFIDENCE

    def __post_init__(self):
        if not self.id:
            self.id = str(uuid.uuid4())

    @property
    def toast_message(self) -> str:
        """Short user-facing sentence announcing the fact."""
        if self.type == MemoryKind.PREFERRED_EXERCISE:
            return f"You enjoy {self.value}"
        if self.type == MemoryKind.AVOIDED_EXERCISE:
            return f"You tend to skip {self.value}"
        if self.type == MemoryKind.PREFERRED_MEAL:
            return f"You like {self.value}"
        if self.type == MemoryKind.AVOIDED_INGREDIENT:
            return f"You avoid {self.value}"
        if self.type == MemoryKind.PREFERRED_CUISINE:
            return f"You prefer {self.value} cuisine"
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a flat document for storage."""
        return {
            "id": self.id,
            "type": self.type.value,
            "value": self.value,
            "source": self.source.value,
            "created_at": self.created_at,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["MemoryRecord"]:
        """
        Create from a stored document.

        Returns None when a required key is missing or holds an unknown
        kind/source, so callers can drop the document instead of failing.
        """
        if not all(isinstance(data.get(key), str) for key in REQUIRED_KEYS):
            return None
        try:
            kind = MemoryKind(data["type"])
            source = MemorySource(data["source"])
        except ValueError:
            return None

        return cls(
            id=data["id"],
            type=kind,
            value=data["value"],
            source=source,
            created_at=_coerce_created_at(data.get("created_at")),
            confidence=coerce_confidence(data.get("confidence")),
        )

    @classmethod
    def create(
        cls,
        type: MemoryKind,
        value: str,
        source: MemorySource,
        confidence: float = DEFAULT_CONFIDENCE,
        created_at: Optional[datetime] = None,
    ) -> "MemoryRecord":
        """Factory method to create a fresh MemoryRecord."""
        return cls(
            id=str(uuid.uuid4()),
            type=type,
            value=value,
            source=source,
            created_at=created_at or now_utc(),
            confidence=confidence,
        )

"""Tests for MemoryRecord serialization and the kind/source enums."""

from datetime import datetime, timedelta, timezone

import pytest

from fitmemory.models import (
    DEFAULT_CONFIDENCE,
    LegacyAggregates,
    MemoryKind,
    MemoryRecord,
    MemorySource,
)
from fitmemory.utils import format_datetime


def _doc(**overrides):
    data = {
        "id": "mem_001",
        "type": "preferred_exercise",
        "value": "Squats",
        "source": "completed_exercise",
        "created_at": datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
        "confidence": 0.7,
    }
    data.update(overrides)
    return data


def test_memory_record_creation():
    """Test creating a MemoryRecord."""
    record = MemoryRecord.create(
        type=MemoryKind.PREFERRED_MEAL,
        value="Oatmeal",
        source=MemorySource.COMPLETED_MEAL,
    )

    assert record.id
    assert record.confidence == DEFAULT_CONFIDENCE
    assert record.created_at.tzinfo is not None


def test_memory_record_serialization():
    """Test MemoryRecord to/from dict conversion."""
    record = MemoryRecord.create(
        type=MemoryKind.AVOIDED_INGREDIENT,
        value="Peanuts",
        source=MemorySource.SKIPPED_MEAL,
    )

    data = record.to_dict()

    assert set(data) == {"id", "type", "value", "source", "created_at", "confidence"}
    assert data["type"] == "avoided_ingredient"
    assert data["source"] == "skipped_meal"
    assert isinstance(data["created_at"], datetime)

    assert MemoryRecord.from_dict(data) == record


@pytest.mark.parametrize("missing", ["id", "type", "value", "source"])
def test_missing_required_key_is_skipped(missing):
    data = _doc()
    del data[missing]

    assert MemoryRecord.from_dict(data) is None


def test_unknown_enum_values_are_skipped():
    assert MemoryRecord.from_dict(_doc(type="favourite_colour")) is None
    assert MemoryRecord.from_dict(_doc(source="telepathy")) is None
    assert MemoryRecord.from_dict(_doc(value=42)) is None


def test_optional_fields_fall_back():
    data = _doc()
    del data["created_at"]
    del data["confidence"]
    before = datetime.now(timezone.utc) - timedelta(seconds=1)

    record = MemoryRecord.from_dict(data)

    assert record.confidence == DEFAULT_CONFIDENCE
    assert record.created_at >= before


def test_created_at_accepts_strings_and_naive_datetimes():
    from_string = MemoryRecord.from_dict(_doc(created_at="2024-03-01T08:30:00Z"))
    naive = MemoryRecord.from_dict(_doc(created_at=datetime(2024, 3, 1, 8, 30)))

    expected = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    assert from_string.created_at == expected
    assert naive.created_at == expected


def test_format_datetime_renders_in_utc():
    local = datetime(2024, 3, 1, 10, 30, tzinfo=timezone(timedelta(hours=2)))

    assert format_datetime(local) == "2024-03-01 08:30:00"
    assert format_datetime(local, "%Y-%m-%d") == "2024-03-01"


def test_confidence_is_clamped():
    assert MemoryRecord.from_dict(_doc(confidence=1.7)).confidence == 1.0
    assert MemoryRecord.from_dict(_doc(confidence=-0.2)).confidence == 0.0
    assert MemoryRecord.from_dict(_doc(confidence="high")).confidence == DEFAULT_CONFIDENCE
    assert MemoryRecord.from_dict(_doc(confidence=1)).confidence == 1.0


def test_store_internal_keys_are_ignored():
    record = MemoryRecord.from_dict(_doc(_id="abc", _key="abc", user_id="u1"))

    assert record is not None
    assert "user_id" not in record.to_dict()


def test_toast_messages():
    cases = {
        MemoryKind.PREFERRED_EXERCISE: "You enjoy Yoga",
        MemoryKind.AVOIDED_EXERCISE: "You tend to skip Yoga",
        MemoryKind.PREFERRED_MEAL: "You like Yoga",
        MemoryKind.AVOIDED_INGREDIENT: "You avoid Yoga",
        MemoryKind.PREFERRED_CUISINE: "You prefer Yoga cuisine",
        MemoryKind.ACTIVITY_PATTERN: "Yoga",
        MemoryKind.SCHEDULE_PREFERENCE: "Yoga",
    }
    for kind, message in cases.items():
        record = MemoryRecord.create(kind, "Yoga", MemorySource.CONVERSATION)
        assert record.toast_message == message


def test_kind_and_source_metadata():
    assert MemoryKind.AVOIDED_EXERCISE.is_positive is False
    assert MemoryKind.AVOIDED_INGREDIENT.is_positive is False
    assert MemoryKind.ACTIVITY_PATTERN.is_positive is True
    assert all(kind.display_name for kind in MemoryKind)
    assert MemorySource.HEALTHKIT_PATTERN.value == "healthkit_pattern"
    assert MemorySource.CONVERSATION.display_name == "Mentioned in chat"


def test_legacy_aggregates_from_partial_document():
    aggregates = LegacyAggregates.from_dict(
        {"preferred_meal_types": ["Oatmeal", 3], "other": ["x"]}
    )

    assert aggregates.preferred_meal_types == ["Oatmeal"]
    assert aggregates.avoided_meal_ingredients == []
    assert not aggregates.is_empty()
    assert LegacyAggregates.from_dict({}).is_empty()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""Tests for the legacy aggregate projector."""

import asyncio

import pytest

from fitmemory.models import AGGREGATE_FIELDS, MemoryKind
from fitmemory.storage import LegacyAggregateProjector, ProjectionOp
from tests.mock_db import MockRecordStoreClient


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return MockRecordStoreClient()


@pytest.fixture
def projector(store):
    return LegacyAggregateProjector(store)


def test_field_mapping():
    assert LegacyAggregateProjector.field_for(MemoryKind.PREFERRED_EXERCISE) == "preferred_exercise_types"
    assert LegacyAggregateProjector.field_for(MemoryKind.AVOIDED_EXERCISE) == "avoided_exercise_types"
    assert LegacyAggregateProjector.field_for(MemoryKind.PREFERRED_MEAL) == "preferred_meal_types"
    assert LegacyAggregateProjector.field_for(MemoryKind.AVOIDED_INGREDIENT) == "avoided_meal_ingredients"
    for kind in (
        MemoryKind.PREFERRED_CUISINE,
        MemoryKind.ACTIVITY_PATTERN,
        MemoryKind.SCHEDULE_PREFERENCE,
    ):
        assert LegacyAggregateProjector.field_for(kind) is None


def test_add_is_set_union(projector):
    run(projector.project("u1", MemoryKind.PREFERRED_MEAL, "Oatmeal", ProjectionOp.ADD))
    run(projector.project("u1", MemoryKind.PREFERRED_MEAL, "Oatmeal", ProjectionOp.ADD))
    run(projector.project("u1", MemoryKind.PREFERRED_MEAL, "Salad", ProjectionOp.ADD))

    aggregates = run(projector.read("u1"))
    assert aggregates.preferred_meal_types == ["Oatmeal", "Salad"]


def test_remove_retracts_value(projector):
    run(projector.project("u1", MemoryKind.AVOIDED_INGREDIENT, "Peanuts", ProjectionOp.ADD))
    run(projector.project("u1", MemoryKind.AVOIDED_INGREDIENT, "Dairy", ProjectionOp.ADD))

    run(projector.project("u1", MemoryKind.AVOIDED_INGREDIENT, "Peanuts", ProjectionOp.REMOVE))

    assert run(projector.read("u1")).avoided_meal_ingredients == ["Dairy"]


def test_unmapped_kind_is_silent_noop(projector, store):
    wrote = run(
        projector.project("u1", MemoryKind.ACTIVITY_PATTERN, "Night owl", ProjectionOp.ADD)
    )

    assert wrote is False
    assert store.calls == []


def test_reset_is_single_write(projector, store):
    run(projector.project("u1", MemoryKind.PREFERRED_EXERCISE, "Squats", ProjectionOp.ADD))
    store.aggregates["u1"]["plan_notes"] = "keep me"
    store.calls.clear()

    run(projector.reset("u1"))

    assert store.calls == ["merge_fields"]
    for name in AGGREGATE_FIELDS:
        assert store.aggregates["u1"][name] == []
    # Merge write leaves unrelated fields alone
    assert store.aggregates["u1"]["plan_notes"] == "keep me"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

#!/usr/bin/env python3
"""
Interactive demo for the fitness personalization-fact store.

Demonstrates:
1. Recording workout and meal observations
2. Confidence reinforcement on repeated observations
3. Legacy aggregate projection
4. Change notifications (and silent background patterns)
5. Deleting and wiping memories

Needs a reachable MongoDB (MONGO_URI, default mongodb://localhost:27017).
Wiping runs in a transaction, which needs a replica set; against a
standalone server set FITMEMORY_USE_TRANSACTIONS=false.
"""

import argparse
import asyncio

from fitmemory import MemoryRecord, MemoryService, MongoRecordStoreClient
from fitmemory.utils import Settings, format_datetime, get_logger


def print_header(title: str) -> None:
    """Print a formatted header."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


def print_section(title: str) -> None:
    """Print a section header."""
    print(f"\n--- {title} ---")


def print_records(records) -> None:
    for r in records:
        seen = format_datetime(r.created_at)
        print(
            f"  - [{r.type.display_name}] {r.value} "
            f"({r.confidence:.1f}, {r.source.display_name}, last seen {seen})"
        )


async def demo_recording(service: MemoryService, user_id: str) -> None:
    """Demo: Recording observations and reinforcing them."""
    print_header("Demo 1: Recording Observations")

    def on_memory(record: MemoryRecord) -> None:
        print(f"  [toast] {record.toast_message}")

    with service.channel.subscribe(on_memory):
        print("\nUser completes a workout...")
        await service.record_completed_exercise(user_id, "Squats")
        await service.record_completed_exercise(user_id, "Plank")

        print("\nUser skips burpees and a peanut sauce...")
        await service.record_skipped_exercise(user_id, "Burpees")
        await service.record_skipped_ingredients(user_id, ["Peanuts", "Cilantro"])

        print("\nUser does squats again (no toast, confidence grows)...")
        await service.record_completed_exercise(user_id, "Squats")

        print("\nBackground pattern detected (never toasted)...")
        await service.record_activity_pattern(user_id, "Usually works out before 8am")

    print_section("All memories, most recent first")
    print_records(await service.get_all(user_id))


async def demo_legacy_aggregates(service: MemoryService, user_id: str) -> None:
    """Demo: Legacy aggregate lists mirror the record set."""
    print_header("Demo 2: Legacy Aggregates")

    aggregates = await service.get_legacy_aggregates(user_id)
    for name, values in aggregates.to_dict().items():
        print(f"  {name}: {values}")

    print_section("Deleting the Burpees memory")
    for record in await service.get_all(user_id):
        if record.value == "Burpees":
            await service.remove(user_id, record.id)

    aggregates = await service.get_legacy_aggregates(user_id)
    print(f"  avoided_exercise_types: {aggregates.avoided_exercise_types}")


async def demo_wipe(service: MemoryService, user_id: str) -> None:
    """Demo: Wiping all memories for a user."""
    print_header("Demo 3: Clear All Memories")

    deleted = await service.wipe_all(user_id)
    print(f"\nDeleted {deleted} memories")
    print(f"  Remaining: {await service.count(user_id)}")
    print(f"  Aggregates empty: {(await service.get_legacy_aggregates(user_id)).is_empty()}")


async def run_demos(user_id: str, keep: bool) -> None:
    settings = Settings.from_env()
    get_logger(level=settings.log_level)

    store = MongoRecordStoreClient(settings=settings)
    await store.setup_indexes()
    service = MemoryService(store=store)

    try:
        await demo_recording(service, user_id)
        await demo_legacy_aggregates(service, user_id)
        if not keep:
            await demo_wipe(service, user_id)
    finally:
        await service.close()


def main():
    """Run all demos."""
    parser = argparse.ArgumentParser(description="fitmemory demo")
    parser.add_argument("--user", default="demo-user", help="User id to record memories for")
    parser.add_argument("--keep", action="store_true", help="Skip the final wipe")
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("  Fitness Memory Store - Interactive Demo")
    print("=" * 60)

    asyncio.run(run_demos(args.user, args.keep))
    print_header("Demo Complete!")


if __name__ == "__main__":
    main()

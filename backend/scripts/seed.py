#!/usr/bin/env python3
"""
Seed script to generate and persist a demo schedule.

Builds a schedule from a sample residential estimate, optionally chains the
items inside each category with predecessor edges, and saves it.

Usage:
    python -m scripts.seed [--project UUID] [--start 2026-03-02] [--chain] [--clear]

Options:
    --project UUID   Project to seed (default: a new random id)
    --start DATE     Schedule start date (default: today)
    --chain          Make each item depend on the previous one in its category
    --clear          Delete the project's stored schedule instead of seeding
"""

import argparse
import asyncio
import time
import uuid
from datetime import date

from schedule_builder.database import init_db
from schedule_builder.services.engine import ScheduleEngine
from schedule_builder.services.items import LineItem
from schedule_builder.services.store import ScheduleStore


SAMPLE_ESTIMATE = [
    LineItem(category="sitework", name="Clear and grade lot"),
    LineItem(category="concrete", name="Footings", description="Form, rebar and pour"),
    LineItem(category="concrete", name="Foundation walls"),
    LineItem(category="framing", name="Floor system"),
    LineItem(category="framing", name="Wall framing"),
    LineItem(category="framing", name="Roof trusses and sheathing"),
    LineItem(category="roofing", name="Underlayment and shingles"),
    LineItem(category="plumbing", name="Rough-in"),
    LineItem(category="electrical", name="Rough-in"),
    LineItem(category="hvac", name="Ductwork"),
    LineItem(category="insulation", name="Batts and air sealing"),
    LineItem(category="drywall", name="Hang, tape and finish"),
    LineItem(category="plumbing", name="Fixtures"),
    LineItem(category="electrical", name="Devices and trim"),
    LineItem(category="paint", name="Interior paint"),
]


def chain_categories(engine: ScheduleEngine) -> int:
    """Wire each item to the previous item of the same category."""
    previous: dict[str, str] = {}
    wired = 0
    for item in list(engine.items.values()):
        if item.category in previous:
            engine.set_predecessor(item.id, previous[item.category])
            wired += 1
        previous[item.category] = item.id
    return wired


async def seed(project_id: uuid.UUID, start_date: date, chain: bool) -> None:
    store = ScheduleStore()
    engine = ScheduleEngine(project_id, start_date)

    started = time.time()
    items = engine.generate(SAMPLE_ESTIMATE)
    print(f"Generated {len(items)} items ({engine.start_date} -> {engine.end_date})")

    if chain:
        print(f"Wired {chain_categories(engine)} predecessor edges")

    await store.save(project_id, engine.snapshot())
    print(f"Saved schedule for project {project_id} in {time.time() - started:.2f}s")


async def clear(project_id: uuid.UUID) -> None:
    removed = await ScheduleStore().delete(project_id)
    print("Schedule deleted." if removed else "No stored schedule for that project.")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo project schedule")
    parser.add_argument("--project", type=uuid.UUID, default=None, help="Project id")
    parser.add_argument("--start", type=date.fromisoformat, default=date.today(), help="Start date")
    parser.add_argument("--chain", action="store_true", help="Chain items within each category")
    parser.add_argument("--clear", action="store_true", help="Delete instead of seeding")
    args = parser.parse_args()

    await init_db()
    project_id = args.project or uuid.uuid4()

    if args.clear:
        await clear(project_id)
    else:
        await seed(project_id, args.start, args.chain)


if __name__ == "__main__":
    asyncio.run(main())

"""
Initial schedule generation from estimate line items.

Produces a naive sequential schedule: line items are grouped by category
(first-seen order), every item gets a fixed duration, and consecutive items
are separated by a buffer day. No predecessor edges are created; those are
wired by hand afterwards.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable

from schedule_builder.services.items import LineItem, ScheduleItem, new_id

DEFAULT_ITEM_DURATION = 5
ITEM_BUFFER_DAYS = 1


@dataclass
class GenerationResult:
    """Generated items in schedule order, plus the resulting schedule end."""
    items: list[ScheduleItem]
    end_date: date | None  # None when there was nothing to schedule


def group_by_category(line_items: Iterable[LineItem]) -> dict[str, list[LineItem]]:
    """Group line items by category, keeping first-seen category order."""
    grouped: dict[str, list[LineItem]] = {}
    for line in line_items:
        grouped.setdefault(line.category, []).append(line)
    return grouped


def generate_schedule(
    line_items: Iterable[LineItem],
    start_date: date,
    duration: int = DEFAULT_ITEM_DURATION,
    buffer_days: int = ITEM_BUFFER_DAYS,
    id_factory: Callable[[], str] = new_id,
) -> GenerationResult:
    """
    Lay out one schedule item per line item, back to back.

    Each item starts on the cursor date and the cursor then moves to the
    item's end date plus ``buffer_days``, across category boundaries too.
    """
    cursor = start_date
    items: list[ScheduleItem] = []

    for category, lines in group_by_category(line_items).items():
        for line in lines:
            item = ScheduleItem(
                id=id_factory(),
                name=line.name,
                description=line.description,
                category=category,
                start_date=cursor,
                duration=duration,
            )
            items.append(item)
            cursor = item.end_date + timedelta(days=buffer_days)

    end_date = items[-1].end_date if items else None
    return GenerationResult(items=items, end_date=end_date)

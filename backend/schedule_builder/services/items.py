"""
In-memory schedule types used by the engine.

Items are immutable; every mutation produces a new item with
``dataclasses.replace`` so the end date is always re-derived from
``start_date + duration``.
"""

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any


class ItemStatus(str, enum.Enum):
    """Progress state of a schedule item. Transitions are unrestricted."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    DELAYED = "delayed"


MIN_DURATION = 1


def normalize_duration(value: Any) -> int:
    """
    Coerce user input into a valid duration in days.

    Non-numeric input and anything below one day collapse to one day.
    """
    try:
        days = int(value)
    except (TypeError, ValueError):
        return MIN_DURATION
    return max(days, MIN_DURATION)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class LineItem:
    """An estimate line item used to seed a schedule."""
    category: str
    name: str
    description: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class ScheduleItem:
    """
    One unit of work in the schedule.

    ``end_date`` is not an init argument: it is derived from
    ``start_date + duration`` whenever an item is built or replaced.
    """
    id: str
    name: str
    category: str
    start_date: date
    duration: int
    description: str | None = None
    predecessor_id: str | None = None
    status: ItemStatus = ItemStatus.NOT_STARTED
    percent_complete: int = 0
    notes: str | None = None
    assigned_to: tuple[str, ...] = ()
    actual_start_date: date | None = None
    actual_end_date: date | None = None
    end_date: date = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "duration", normalize_duration(self.duration))
        object.__setattr__(self, "status", ItemStatus(self.status))
        object.__setattr__(self, "percent_complete", max(0, min(100, int(self.percent_complete))))
        object.__setattr__(self, "assigned_to", tuple(self.assigned_to))
        object.__setattr__(self, "end_date", self.start_date + timedelta(days=self.duration))

    def starting_after(self, predecessor_end: date) -> "ScheduleItem":
        """Return a copy that starts the day after ``predecessor_end``."""
        return replace(self, start_date=predecessor_end + timedelta(days=1))


@dataclass(frozen=True)
class Milestone:
    """A dated checkpoint. Milestones are never moved by cascade."""
    id: str
    name: str
    target_date: date
    is_critical: bool = False
    is_complete: bool = False

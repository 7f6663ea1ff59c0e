"""
Whole-schedule statistics.

Calculates, at save time:
- Window duration, days elapsed and days remaining (rounded up, not clamped)
- Mean and duration-weighted percent complete
- On-schedule status: how far the most overdue item or critical milestone slipped
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from schedule_builder.services.items import ItemStatus, Milestone, ScheduleItem

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class ScheduleSummary:
    """Derived statistics for one schedule."""
    duration: int
    percent_complete: float
    weighted_percent_complete: float
    days_elapsed: int
    days_remaining: int | None  # None while the schedule has no end date
    is_on_schedule: bool
    days_ahead_behind: int  # 0 when on schedule, negative when behind


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Day count from ``start`` to ``end``, rounded up. Negative if end precedes start."""
    if not isinstance(start, datetime):
        start = datetime.combine(start, time.min)
    if not isinstance(end, datetime):
        end = datetime.combine(end, time.min)
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def mean_percent_complete(items: list[ScheduleItem]) -> float:
    if not items:
        return 0.0
    return sum(item.percent_complete for item in items) / len(items)


def weighted_percent_complete(items: list[ScheduleItem]) -> float:
    """Share of scheduled days that belong to completed items."""
    total_days = sum(item.duration for item in items)
    if total_days == 0:
        return 0.0
    completed_days = sum(item.duration for item in items if item.status == ItemStatus.COMPLETE)
    return completed_days / total_days * 100


def _days_overdue(items: list[ScheduleItem], milestones: list[Milestone], today: date) -> int:
    worst = 0
    for item in items:
        if item.status == ItemStatus.COMPLETE:
            continue
        if item.end_date < today:
            worst = max(worst, (today - item.end_date).days)
    for milestone in milestones:
        if milestone.is_critical and not milestone.is_complete and milestone.target_date < today:
            worst = max(worst, (today - milestone.target_date).days)
    return worst


def _has_late_work(items: list[ScheduleItem], milestones: list[Milestone], today: date) -> bool:
    for item in items:
        if item.status == ItemStatus.DELAYED:
            return True
        if item.status != ItemStatus.COMPLETE and item.end_date < today:
            return True
    return any(
        m.is_critical and not m.is_complete and m.target_date < today
        for m in milestones
    )


def summarize(
    items: Iterable[ScheduleItem],
    start_date: date,
    end_date: date | None,
    milestones: Iterable[Milestone] = (),
    now: datetime | None = None,
) -> ScheduleSummary:
    """Compute the summary of a schedule as of ``now`` (defaults to the current time)."""
    items = list(items)
    milestones = list(milestones)
    now = now or datetime.now()
    today = now.date()

    overdue = _days_overdue(items, milestones, today)

    return ScheduleSummary(
        duration=days_between(start_date, end_date) if end_date is not None else 0,
        percent_complete=mean_percent_complete(items),
        weighted_percent_complete=weighted_percent_complete(items),
        days_elapsed=days_between(start_date, now),
        days_remaining=days_between(now, end_date) if end_date is not None else None,
        is_on_schedule=not _has_late_work(items, milestones, today),
        days_ahead_behind=-overdue,
    )

"""
Schedule engine: the synchronous facade over one project's schedule.

Holds the current arena of schedule items and swaps it for a new one on
every mutation. All operations run to completion without awaiting; saving
is left to the caller (see ``services.autosave``).
"""

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from schedule_builder.exceptions import (
    CycleDetectedError,
    NotFoundError,
    SelfDependencyError,
    ValidationError,
)
from schedule_builder.logging_config import get_logger
from schedule_builder.schemas import MilestoneRead, ProjectSchedule, ScheduleItemRead
from schedule_builder.services.aggregate import ScheduleSummary, summarize
from schedule_builder.services.auto_calculate import (
    AutoCalculateResult,
    auto_calculate_from_predecessors,
)
from schedule_builder.services.cascade import cascade
from schedule_builder.services.generation import (
    DEFAULT_ITEM_DURATION,
    ITEM_BUFFER_DAYS,
    generate_schedule,
)
from schedule_builder.services.graph import would_create_cycle
from schedule_builder.services.items import (
    ItemStatus,
    LineItem,
    Milestone,
    ScheduleItem,
    new_id,
    normalize_duration,
)

logger = get_logger(__name__)

DATE_FIELDS = {"start_date", "duration"}
ITEM_FIELDS = {
    "name",
    "description",
    "category",
    "start_date",
    "duration",
    "predecessor_id",
    "status",
    "percent_complete",
    "notes",
    "assigned_to",
    "actual_start_date",
    "actual_end_date",
}
NON_NULLABLE_FIELDS = {"name", "category", "start_date", "duration", "status", "percent_complete", "assigned_to"}
MILESTONE_FIELDS = {"name", "target_date", "is_critical", "is_complete"}


class ScheduleEngine:
    """In-memory schedule for a single project."""

    def __init__(
        self,
        project_id: uuid.UUID,
        start_date: date,
        end_date: date | None = None,
        items: Iterable[ScheduleItem] = (),
        milestones: Iterable[Milestone] = (),
        item_duration: int = DEFAULT_ITEM_DURATION,
        buffer_days: int = ITEM_BUFFER_DAYS,
    ):
        self.project_id = project_id
        self.start_date = start_date
        self.end_date = end_date
        self.items: dict[str, ScheduleItem] = {item.id: item for item in items}
        self.milestones: dict[str, Milestone] = {m.id: m for m in milestones}
        self.item_duration = item_duration
        self.buffer_days = buffer_days

    @classmethod
    def from_schedule(cls, schedule: ProjectSchedule, **kwargs) -> "ScheduleEngine":
        """Rebuild an engine from a persisted schedule."""
        items = [
            ScheduleItem(**item.model_dump(exclude={"end_date"}))
            for item in schedule.items
        ]
        milestones = [Milestone(**m.model_dump()) for m in schedule.milestones]
        return cls(
            schedule.project_id,
            schedule.start_date,
            schedule.end_date,
            items=items,
            milestones=milestones,
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(self, line_items: Iterable[LineItem], start_date: date | None = None) -> list[ScheduleItem]:
        """
        Replace the schedule with a fresh one laid out from ``line_items``.

        Every existing item and manual edit is discarded. The schedule end
        date moves to the last generated item's end and is left as is when
        there was nothing to generate.
        """
        if start_date is not None:
            self.start_date = start_date

        result = generate_schedule(
            line_items,
            self.start_date,
            duration=self.item_duration,
            buffer_days=self.buffer_days,
        )
        self.items = {item.id: item for item in result.items}
        if result.end_date is not None:
            self.end_date = result.end_date

        logger.info(
            f"Generated {len(result.items)} schedule items for project={self.project_id} "
            f"starting {self.start_date}"
        )
        return result.items

    # -------------------------------------------------------------------------
    # Item edits
    # -------------------------------------------------------------------------

    def get_item(self, item_id: str) -> ScheduleItem:
        item = self.items.get(item_id)
        if item is None:
            raise NotFoundError("Schedule item", item_id)
        return item

    def update_item(self, item_id: str, changes: Mapping[str, Any]) -> ScheduleItem:
        """
        Apply a partial update to one item.

        A change of start date or duration re-derives the item's end date and
        cascades to every dependent. Any other field is applied as given.
        """
        item = self.get_item(item_id)
        changes = dict(changes)

        unknown = set(changes) - ITEM_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(unknown))}",
                details=[{"loc": ["body", name], "msg": "field is not editable", "type": "value_error"}
                         for name in sorted(unknown)],
            )

        nulls = sorted(name for name in NON_NULLABLE_FIELDS & changes.keys() if changes[name] is None)
        if nulls:
            raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}")

        if "duration" in changes:
            changes["duration"] = normalize_duration(changes["duration"])
        if "status" in changes:
            try:
                changes["status"] = ItemStatus(changes["status"])
            except ValueError:
                raise ValidationError(f"Unknown status: {changes['status']}")
        if "predecessor_id" in changes and changes["predecessor_id"] is not None:
            self._check_predecessor(changes["predecessor_id"], item_id)

        arena = dict(self.items)
        arena[item_id] = replace(item, **changes)

        if DATE_FIELDS & changes.keys():
            arena = cascade(arena, item_id)

        self.items = arena
        logger.debug(f"Updated item {item_id}: {sorted(changes)}")
        return arena[item_id]

    def set_predecessor(self, item_id: str, predecessor_id: str | None) -> ScheduleItem:
        """Wire (or clear) an item's predecessor. Dates are not moved."""
        return self.update_item(item_id, {"predecessor_id": predecessor_id})

    def remove_item(self, item_id: str) -> None:
        """Delete an item. Its dependents keep their dates and lose their predecessor."""
        self.get_item(item_id)
        arena = {}
        for other_id, other in self.items.items():
            if other_id == item_id:
                continue
            if other.predecessor_id == item_id:
                other = replace(other, predecessor_id=None)
            arena[other_id] = other
        self.items = arena
        logger.info(f"Removed item {item_id} from project={self.project_id}")

    def _check_predecessor(self, predecessor_id: str, successor_id: str) -> None:
        if predecessor_id == successor_id:
            logger.warning(f"Self-dependency rejected: {successor_id}")
            raise SelfDependencyError(successor_id)
        if predecessor_id not in self.items:
            raise NotFoundError("Predecessor item", predecessor_id)
        if would_create_cycle(self.items, predecessor_id, successor_id):
            logger.warning(f"Cycle detected: {predecessor_id} -> {successor_id} would create a cycle")
            raise CycleDetectedError(predecessor_id, successor_id)

    # -------------------------------------------------------------------------
    # Batch reconciliation
    # -------------------------------------------------------------------------

    def auto_calculate_from_predecessors(self) -> AutoCalculateResult:
        """Single pass that starts each dependent the day after its predecessor ends."""
        result = auto_calculate_from_predecessors(self.items)
        self.items = result.items
        logger.info(
            f"Auto-calculated project={self.project_id}: {len(result.updated_ids)} items moved, "
            f"{len(result.dangling)} dangling predecessors"
        )
        return result

    # -------------------------------------------------------------------------
    # Window and milestones
    # -------------------------------------------------------------------------

    def set_window(self, start_date: date | None = None, end_date: date | None = None) -> None:
        new_start = start_date or self.start_date
        new_end = end_date or self.end_date
        if new_end is not None and new_end < new_start:
            raise ValidationError(
                "Schedule end date cannot precede its start date",
                details=[{"loc": ["body", "end_date"], "msg": f"{new_end} < {new_start}", "type": "value_error"}],
            )
        self.start_date = new_start
        self.end_date = new_end

    def add_milestone(self, name: str, target_date: date, is_critical: bool = False) -> Milestone:
        milestone = Milestone(id=new_id(), name=name, target_date=target_date, is_critical=is_critical)
        self.milestones[milestone.id] = milestone
        return milestone

    def update_milestone(self, milestone_id: str, changes: Mapping[str, Any]) -> Milestone:
        milestone = self.milestones.get(milestone_id)
        if milestone is None:
            raise NotFoundError("Milestone", milestone_id)
        unknown = set(changes) - MILESTONE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        milestone = replace(milestone, **changes)
        self.milestones[milestone_id] = milestone
        return milestone

    def remove_milestone(self, milestone_id: str) -> None:
        if self.milestones.pop(milestone_id, None) is None:
            raise NotFoundError("Milestone", milestone_id)

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def summary(self, now: datetime | None = None) -> ScheduleSummary:
        return summarize(
            self.items.values(),
            self.start_date,
            self.end_date,
            milestones=self.milestones.values(),
            now=now,
        )

    def snapshot(self, now: datetime | None = None) -> ProjectSchedule:
        """The whole schedule with freshly computed summary fields."""
        summary = self.summary(now)
        return ProjectSchedule(
            project_id=self.project_id,
            start_date=self.start_date,
            end_date=self.end_date,
            duration=summary.duration,
            items=[ScheduleItemRead.model_validate(item) for item in self.items.values()],
            milestones=[MilestoneRead.model_validate(m) for m in self.milestones.values()],
            percent_complete=summary.percent_complete,
            weighted_percent_complete=summary.weighted_percent_complete,
            days_elapsed=summary.days_elapsed,
            days_remaining=summary.days_remaining,
            is_on_schedule=summary.is_on_schedule,
            days_ahead_behind=summary.days_ahead_behind,
        )

import uuid
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from schedule_builder.services.items import ItemStatus, normalize_duration


class LineItemIn(BaseModel):
    """An estimate line item used to seed the schedule."""
    id: str | None = None
    category: str
    name: str
    description: str | None = None


class GenerateRequest(BaseModel):
    """Schema for (re)generating a schedule from estimate line items."""
    start_date: date
    line_items: list[LineItemIn] = []


class ScheduleItemRead(BaseModel):
    """Schema for reading a schedule item."""
    id: str
    name: str
    description: str | None = None
    category: str
    start_date: date
    duration: int
    end_date: date
    predecessor_id: str | None = None
    status: ItemStatus = ItemStatus.NOT_STARTED
    percent_complete: int = 0
    notes: str | None = None
    assigned_to: list[str] = []
    actual_start_date: date | None = None
    actual_end_date: date | None = None

    model_config = {"from_attributes": True}


class ScheduleItemUpdate(BaseModel):
    """
    Schema for updating a schedule item.

    Only fields that are sent are applied; send ``predecessor_id: null``
    to clear a dependency.
    """
    name: str | None = None
    description: str | None = None
    category: str | None = None
    start_date: date | None = None
    duration: int | None = None
    predecessor_id: str | None = None
    status: ItemStatus | None = None
    percent_complete: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    assigned_to: list[str] | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def clamp_duration(cls, value: Any) -> int | None:
        """Non-numeric or sub-one-day durations become one day."""
        if value is None:
            return None
        return normalize_duration(value)


class MilestoneCreate(BaseModel):
    """Schema for creating a milestone."""
    name: str
    target_date: date
    is_critical: bool = False


class MilestoneUpdate(BaseModel):
    """Schema for updating a milestone."""
    name: str | None = None
    target_date: date | None = None
    is_critical: bool | None = None
    is_complete: bool | None = None


class MilestoneRead(BaseModel):
    """Schema for reading a milestone."""
    id: str
    name: str
    target_date: date
    is_critical: bool = False
    is_complete: bool = False

    model_config = {"from_attributes": True}


class WindowUpdate(BaseModel):
    """Schema for moving the schedule window. Items are not moved."""
    start_date: date | None = None
    end_date: date | None = None


class ProjectSchedule(BaseModel):
    """
    The whole schedule as persisted and returned by the API.

    Summary fields are recomputed whenever a snapshot is taken.
    """
    project_id: uuid.UUID
    start_date: date
    end_date: date | None = None
    duration: int = 0
    items: list[ScheduleItemRead] = []
    milestones: list[MilestoneRead] = []
    percent_complete: float = 0
    weighted_percent_complete: float = 0
    days_elapsed: int = 0
    days_remaining: int | None = None
    is_on_schedule: bool = True
    days_ahead_behind: int = 0


class AutoCalculateRead(BaseModel):
    """Result of an auto-calculate pass."""
    schedule: ProjectSchedule
    updated_ids: list[str]
    dangling: list[str]

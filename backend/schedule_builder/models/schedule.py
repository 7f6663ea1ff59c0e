import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class ScheduleRecord(SQLModel, table=True):
    """
    Persisted project schedule, one row per project.

    The row is replaced wholesale on every save (last writer wins).
    Items and milestones are stored as JSON documents; summary columns hold
    the values computed at save time.
    """

    __tablename__ = "schedules"

    project_id: uuid.UUID = Field(primary_key=True)
    start_date: date
    end_date: date | None = Field(default=None)
    duration: int = Field(default=0)

    items: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    milestones: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Summary at save time
    percent_complete: float = Field(default=0)
    weighted_percent_complete: float = Field(default=0)
    days_elapsed: int = Field(default=0)
    days_remaining: int | None = Field(default=None)
    is_on_schedule: bool = Field(default=True)
    days_ahead_behind: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

"""
Schedule store: wholesale persistence of project schedules.

``save`` replaces whatever was stored for the project; there is no version
check and no partial update.
"""

import uuid
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from schedule_builder.database import get_session_context
from schedule_builder.exceptions import PersistenceError
from schedule_builder.logging_config import get_logger
from schedule_builder.models import ScheduleRecord
from schedule_builder.schemas import ProjectSchedule

logger = get_logger(__name__)


class ScheduleStore:
    """Reads and writes ``ScheduleRecord`` rows."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None):
        self._session_maker = session_maker

    async def save(self, project_id: uuid.UUID, schedule: ProjectSchedule) -> None:
        """
        Persist ``schedule`` for ``project_id``, replacing any prior value.

        Raises:
            PersistenceError: If the database write fails.
        """
        values = {
            "start_date": schedule.start_date,
            "end_date": schedule.end_date,
            "duration": schedule.duration,
            "items": [item.model_dump(mode="json") for item in schedule.items],
            "milestones": [m.model_dump(mode="json") for m in schedule.milestones],
            "percent_complete": schedule.percent_complete,
            "weighted_percent_complete": schedule.weighted_percent_complete,
            "days_elapsed": schedule.days_elapsed,
            "days_remaining": schedule.days_remaining,
            "is_on_schedule": schedule.is_on_schedule,
            "days_ahead_behind": schedule.days_ahead_behind,
        }

        try:
            async with get_session_context(self._session_maker) as session:
                record = await session.get(ScheduleRecord, project_id)
                if record is None:
                    record = ScheduleRecord(project_id=project_id, **values)
                else:
                    for field, value in values.items():
                        setattr(record, field, value)
                    record.updated_at = datetime.utcnow()
                session.add(record)
        except SQLAlchemyError as exc:
            logger.error(f"Saving schedule for project={project_id} failed: {exc}")
            raise PersistenceError(str(project_id), str(exc)) from exc

        logger.info(f"Saved schedule for project={project_id} ({len(schedule.items)} items)")

    async def load(self, project_id: uuid.UUID) -> ProjectSchedule | None:
        """Fetch the stored schedule, or None if the project has never been saved."""
        async with get_session_context(self._session_maker) as session:
            record = await session.get(ScheduleRecord, project_id)
            if record is None:
                return None
            return ProjectSchedule.model_validate({
                "project_id": record.project_id,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "duration": record.duration,
                "items": record.items,
                "milestones": record.milestones,
                "percent_complete": record.percent_complete,
                "weighted_percent_complete": record.weighted_percent_complete,
                "days_elapsed": record.days_elapsed,
                "days_remaining": record.days_remaining,
                "is_on_schedule": record.is_on_schedule,
                "days_ahead_behind": record.days_ahead_behind,
            })

    async def delete(self, project_id: uuid.UUID) -> bool:
        """Remove the stored schedule. Returns False if there was none."""
        async with get_session_context(self._session_maker) as session:
            record = await session.get(ScheduleRecord, project_id)
            if record is None:
                return False
            await session.delete(record)
        logger.info(f"Deleted schedule for project={project_id}")
        return True

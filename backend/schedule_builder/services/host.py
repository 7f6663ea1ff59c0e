"""
Schedule host: keeps one engine per project in memory.

The host is the single mutator of each project's schedule. Route handlers
fetch the engine, call it synchronously, then ``touch`` the project so the
auto-saver picks the change up.
"""

import uuid
from datetime import date
from typing import Callable

from schedule_builder.config import Settings, get_settings
from schedule_builder.logging_config import get_logger
from schedule_builder.schemas import ProjectSchedule
from schedule_builder.services.autosave import AutoSaver
from schedule_builder.services.engine import ScheduleEngine
from schedule_builder.services.store import ScheduleStore

logger = get_logger(__name__)

SaverFactory = Callable[[uuid.UUID, Callable[[], ProjectSchedule], ScheduleStore, float], AutoSaver]


class ScheduleHost:
    """Registry of live schedule engines and their auto-savers."""

    def __init__(
        self,
        store: ScheduleStore,
        settings: Settings | None = None,
        saver_factory: SaverFactory = AutoSaver,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self._saver_factory = saver_factory
        self._engines: dict[uuid.UUID, ScheduleEngine] = {}
        self._savers: dict[uuid.UUID, AutoSaver] = {}

    async def get_engine(self, project_id: uuid.UUID) -> ScheduleEngine:
        """
        Return the live engine for a project.

        On first access the stored schedule is loaded; a project that was
        never saved starts with an empty schedule beginning today.
        """
        engine = self._engines.get(project_id)
        if engine is not None:
            return engine

        options = {
            "item_duration": self.settings.default_item_duration,
            "buffer_days": self.settings.item_buffer_days,
        }
        stored = await self.store.load(project_id)
        if stored is not None:
            engine = ScheduleEngine.from_schedule(stored, **options)
            logger.info(f"Loaded schedule for project={project_id} ({len(engine.items)} items)")
        else:
            engine = ScheduleEngine(project_id, date.today(), **options)
            logger.debug(f"Started empty schedule for project={project_id}")

        self._engines[project_id] = engine
        return engine

    def _saver(self, project_id: uuid.UUID) -> AutoSaver:
        saver = self._savers.get(project_id)
        if saver is None:
            engine = self._engines[project_id]
            saver = self._saver_factory(
                project_id,
                engine.snapshot,
                self.store,
                self.settings.autosave_quiet_seconds,
            )
            self._savers[project_id] = saver
        return saver

    async def touch(self, project_id: uuid.UUID) -> None:
        """Record that the project's schedule changed; schedules a deferred save."""
        await self._saver(project_id).schedule()

    async def save_now(self, project_id: uuid.UUID) -> ProjectSchedule:
        """Persist immediately, cancelling any deferred save."""
        await self.get_engine(project_id)
        return await self._saver(project_id).save_now()

    def has_pending_save(self, project_id: uuid.UUID) -> bool:
        saver = self._savers.get(project_id)
        return saver is not None and saver.pending

    async def shutdown(self) -> None:
        """Flush every pending deferred save and wait for those in flight."""
        for project_id, saver in self._savers.items():
            if saver.pending:
                logger.info(f"Flushing pending save for project={project_id}")
            await saver.flush()

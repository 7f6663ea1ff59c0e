"""
Debounced saving of a project's schedule.

Every mutation calls ``schedule()``; the save runs once the schedule has been
quiet for ``quiet_seconds``. A new call while a save is pending restarts the
quiet period, so a burst of edits becomes a single write. ``save_now()``
cancels the pending save and writes immediately. Writes are serialized and
each one snapshots the schedule only once it holds the write lock.
"""

import asyncio
import uuid
from typing import Callable

from schedule_builder.logging_config import get_logger
from schedule_builder.schemas import ProjectSchedule
from schedule_builder.services.store import ScheduleStore

logger = get_logger(__name__)


class AutoSaver:
    """In-process debounced saver backed by an asyncio task."""

    def __init__(
        self,
        project_id: uuid.UUID,
        snapshot: Callable[[], ProjectSchedule],
        store: ScheduleStore,
        quiet_seconds: float,
    ):
        self.project_id = project_id
        self.quiet_seconds = quiet_seconds
        self._snapshot = snapshot
        self._store = store
        self._pending: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def schedule(self) -> None:
        """(Re)start the quiet period; must be called from a running event loop."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._save_later())

    def cancel(self) -> None:
        if self.pending:
            self._pending.cancel()
        self._pending = None

    async def save_now(self) -> ProjectSchedule:
        """
        Cancel any deferred save and persist the current schedule.

        Waits for a deferred write already in flight, so the explicit save
        always lands last.

        Raises:
            PersistenceError: If the store rejects the write.
        """
        self.cancel()
        return await self._write()

    async def flush(self) -> None:
        """Write a pending deferred save now, or wait for one already in flight."""
        if self.pending:
            await self.save_now()
            return
        async with self._lock:
            pass

    async def _write(self) -> ProjectSchedule:
        # Snapshot under the lock; writes commit in the order they were taken
        async with self._lock:
            schedule = self._snapshot()
            await self._store.save(self.project_id, schedule)
        return schedule

    async def _save_later(self) -> None:
        await asyncio.sleep(self.quiet_seconds)
        # Past this point a new edit schedules a fresh save instead of cancelling this one
        self._pending = None
        try:
            await self._write()
        except Exception:
            logger.exception(f"Deferred save for project={self.project_id} failed")

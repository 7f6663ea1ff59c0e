"""
ARQ Worker for deferred schedule saves.

This worker handles:
- persist_schedule: Writes a schedule snapshot once its edit burst has gone quiet

With ``AUTOSAVE_BACKEND=arq`` the API enqueues one deferred job per edit.
Each job carries the edit version it was created for; only the job for the
latest version (still stored in Redis) writes, older ones return as stale.

Usage:
    arq schedule_builder.worker.WorkerSettings
"""

import uuid
from datetime import timedelta
from typing import Any, Callable

from arq import create_pool
from arq.connections import RedisSettings, ArqRedis

from schedule_builder.config import get_settings
from schedule_builder.schemas import ProjectSchedule
from schedule_builder.services.autosave import AutoSaver
from schedule_builder.services.store import ScheduleStore
from schedule_builder.logging_config import setup_logging, get_logger

# Initialize logging for the worker
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


def parse_redis_url(url: str) -> RedisSettings:
    """Parse redis URL into RedisSettings."""
    # redis://localhost:6380/0 -> host=localhost, port=6380, database=0
    url = url.replace("redis://", "")
    database = 0
    if "/" in url:
        url, db_part = url.split("/", 1)
        if db_part:
            database = int(db_part)
    if ":" in url:
        host, port = url.split(":")
        return RedisSettings(host=host, port=int(port), database=database)
    return RedisSettings(host=url, database=database)


def edit_version_key(project_id: str) -> str:
    return f"schedule:{project_id}:edit_version"


async def persist_schedule(ctx: dict, project_id: str, version_id: str, payload: dict[str, Any]) -> str:
    """
    ARQ job: save a schedule snapshot unless a newer edit superseded it.

    Args:
        ctx: ARQ context (``redis`` and ``store`` are used)
        project_id: The project whose schedule is saved
        version_id: The edit version this snapshot belongs to
        payload: ``ProjectSchedule`` dumped in JSON mode

    Returns:
        Status message
    """
    current = await ctx["redis"].get(edit_version_key(project_id))
    if isinstance(current, bytes):
        current = current.decode()

    if current != version_id:
        return f"Stale job: version mismatch (expected {version_id}, got {current})"

    schedule = ProjectSchedule.model_validate(payload)
    await ctx["store"].save(uuid.UUID(project_id), schedule)
    return f"Saved {len(schedule.items)} items"


async def startup(ctx: dict) -> None:
    """Worker startup."""
    logger.info("ARQ Worker starting up...")
    logger.info(f"Redis: {settings.redis_url}")
    ctx["store"] = ScheduleStore()


async def shutdown(ctx: dict) -> None:
    """Worker shutdown - cleanup."""
    logger.info("ARQ Worker shutting down...")


class WorkerSettings:
    """ARQ Worker configuration."""

    functions = [persist_schedule]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = parse_redis_url(settings.redis_url)
    max_jobs = 10
    job_timeout = 60


# Redis pool for enqueuing jobs from the API
_arq_pool: ArqRedis | None = None


async def get_arq_pool() -> ArqRedis:
    """Get or create the ARQ Redis pool for enqueuing jobs."""
    global _arq_pool
    if _arq_pool is None:
        logger.debug("Creating ARQ Redis pool")
        _arq_pool = await create_pool(parse_redis_url(settings.redis_url))
    return _arq_pool


class ArqAutoSaver(AutoSaver):
    """
    Debounced saver that defers the write to the ARQ worker.

    Each ``schedule()`` stores a fresh edit version in Redis and enqueues a
    job deferred by the quiet period; ``save_now()`` bumps the version so
    every queued job turns stale, then saves in-process.
    """

    def __init__(
        self,
        project_id: uuid.UUID,
        snapshot: Callable[[], ProjectSchedule],
        store: ScheduleStore,
        quiet_seconds: float,
        pool_factory: Callable[[], Any] = get_arq_pool,
    ):
        super().__init__(project_id, snapshot, store, quiet_seconds)
        self._pool_factory = pool_factory

    async def _new_version(self) -> str:
        version_id = str(uuid.uuid4())
        pool = await self._pool_factory()
        await pool.set(edit_version_key(str(self.project_id)), version_id)
        return version_id

    async def schedule(self) -> None:
        version_id = await self._new_version()
        payload = self._snapshot().model_dump(mode="json")
        pool = await self._pool_factory()
        logger.debug(f"Enqueuing deferred save: project={self.project_id} version={version_id[:8]}...")
        await pool.enqueue_job(
            "persist_schedule",
            str(self.project_id),
            version_id,
            payload,
            _defer_by=timedelta(seconds=self.quiet_seconds),
        )

    async def save_now(self) -> ProjectSchedule:
        await self._new_version()
        return await super().save_now()

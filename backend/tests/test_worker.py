"""
Tests for the ARQ deferred-save path and its edit-version guard.

Redis is replaced by a dict-backed stand-in; the job and the saver only
use ``get``, ``set`` and ``enqueue_job``.
"""

import uuid
from datetime import date, timedelta

import pytest

from schedule_builder.services.engine import ScheduleEngine
from schedule_builder.services.items import LineItem
from schedule_builder.worker import (
    ArqAutoSaver,
    edit_version_key,
    parse_redis_url,
    persist_schedule,
)


class FakeRedis:
    def __init__(self):
        self.values = {}
        self.jobs = []

    async def get(self, key):
        value = self.values.get(key)
        return value.encode() if value is not None else None

    async def set(self, key, value):
        self.values[key] = value

    async def enqueue_job(self, function, *args, **kwargs):
        self.jobs.append((function, args, kwargs))


class RecordingStore:
    def __init__(self):
        self.saves = []

    async def save(self, project_id, schedule):
        self.saves.append((project_id, schedule))


@pytest.fixture
def engine():
    schedule = ScheduleEngine(uuid.uuid4(), date(2026, 8, 3))
    schedule.generate([LineItem(category="hvac", name="Ductwork")])
    return schedule


def make_saver(engine, redis, store):
    async def pool_factory():
        return redis

    return ArqAutoSaver(engine.project_id, engine.snapshot, store, 2.0, pool_factory=pool_factory)


class TestParseRedisUrl:

    def test_host_port_and_database(self):
        settings = parse_redis_url("redis://cache:6380/2")

        assert settings.host == "cache"
        assert settings.port == 6380
        assert settings.database == 2

    def test_host_only(self):
        settings = parse_redis_url("redis://localhost")

        assert settings.host == "localhost"
        assert settings.database == 0


class TestPersistScheduleJob:

    @pytest.mark.asyncio
    async def test_current_version_saves(self, engine):
        redis, store = FakeRedis(), RecordingStore()
        project_id = str(engine.project_id)
        await redis.set(edit_version_key(project_id), "v1")
        payload = engine.snapshot().model_dump(mode="json")

        message = await persist_schedule({"redis": redis, "store": store}, project_id, "v1", payload)

        assert message == "Saved 1 items"
        assert store.saves[0][0] == engine.project_id
        assert store.saves[0][1].items[0].name == "Ductwork"

    @pytest.mark.asyncio
    async def test_stale_version_is_skipped(self, engine):
        redis, store = FakeRedis(), RecordingStore()
        project_id = str(engine.project_id)
        await redis.set(edit_version_key(project_id), "v2")
        payload = engine.snapshot().model_dump(mode="json")

        message = await persist_schedule({"redis": redis, "store": store}, project_id, "v1", payload)

        assert message.startswith("Stale job")
        assert store.saves == []


class TestArqAutoSaver:

    @pytest.mark.asyncio
    async def test_schedule_enqueues_deferred_job(self, engine):
        redis, store = FakeRedis(), RecordingStore()
        saver = make_saver(engine, redis, store)

        await saver.schedule()

        function, args, kwargs = redis.jobs[0]
        project_id, version_id, payload = args
        assert function == "persist_schedule"
        assert project_id == str(engine.project_id)
        assert redis.values[edit_version_key(project_id)] == version_id
        assert payload["items"][0]["name"] == "Ductwork"
        assert kwargs["_defer_by"] == timedelta(seconds=2.0)

    @pytest.mark.asyncio
    async def test_only_last_edit_survives(self, engine):
        redis, store = FakeRedis(), RecordingStore()
        saver = make_saver(engine, redis, store)

        await saver.schedule()
        await saver.schedule()

        ctx = {"redis": redis, "store": store}
        results = [await persist_schedule(ctx, *args) for _, args, _ in redis.jobs]

        assert results[0].startswith("Stale job")
        assert results[1] == "Saved 1 items"
        assert len(store.saves) == 1

    @pytest.mark.asyncio
    async def test_save_now_invalidates_queued_jobs(self, engine):
        redis, store = FakeRedis(), RecordingStore()
        saver = make_saver(engine, redis, store)

        await saver.schedule()
        await saver.save_now()

        _, args, _ = redis.jobs[0]
        message = await persist_schedule({"redis": redis, "store": store}, *args)

        assert message.startswith("Stale job")
        assert len(store.saves) == 1

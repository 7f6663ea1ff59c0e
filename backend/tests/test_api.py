"""
Route tests for the schedule API.
"""

import asyncio
import uuid

import pytest


LINE_ITEMS = [
    {"category": "framing", "name": "Walls"},
    {"category": "plumbing", "name": "Rough-in", "description": "Supply and drain"},
    {"category": "framing", "name": "Roof trusses"},
]


def schedule_url(project_id, suffix=""):
    return f"/projects/{project_id}/schedule{suffix}"


async def generate(client, project_id, start_date="2026-03-02", line_items=LINE_ITEMS):
    response = await client.post(
        schedule_url(project_id, "/generate"),
        json={"start_date": start_date, "line_items": line_items},
    )
    assert response.status_code == 200
    return response.json()


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestScheduleRoutes:

    @pytest.mark.asyncio
    async def test_new_project_has_empty_schedule(self, client):
        response = await client.get(schedule_url(uuid.uuid4()))

        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["end_date"] is None
        assert body["percent_complete"] == 0

    @pytest.mark.asyncio
    async def test_generate(self, client):
        body = await generate(client, uuid.uuid4())

        assert [item["name"] for item in body["items"]] == ["Walls", "Roof trusses", "Rough-in"]
        assert body["start_date"] == "2026-03-02"
        assert body["items"][1]["start_date"] == "2026-03-08"
        assert body["end_date"] == body["items"][-1]["end_date"] == "2026-03-19"
        assert body["duration"] == 17

    @pytest.mark.asyncio
    async def test_update_cascades(self, client):
        project_id = uuid.uuid4()
        items = (await generate(client, project_id))["items"]
        a, b = items[0]["id"], items[1]["id"]

        response = await client.patch(schedule_url(project_id, f"/items/{b}"), json={"predecessor_id": a})
        assert response.status_code == 200

        response = await client.patch(schedule_url(project_id, f"/items/{a}"), json={"start_date": "2026-03-12"})
        assert response.status_code == 200
        assert response.json()["end_date"] == "2026-03-17"

        body = (await client.get(schedule_url(project_id))).json()
        moved = next(item for item in body["items"] if item["id"] == b)
        assert moved["start_date"] == "2026-03-18"
        assert moved["end_date"] == "2026-03-23"

    @pytest.mark.asyncio
    async def test_non_numeric_duration_clamps(self, client):
        project_id = uuid.uuid4()
        item_id = (await generate(client, project_id))["items"][0]["id"]

        response = await client.patch(schedule_url(project_id, f"/items/{item_id}"), json={"duration": "abc"})

        assert response.status_code == 200
        assert response.json()["duration"] == 1

    @pytest.mark.asyncio
    async def test_cycle_is_rejected(self, client):
        project_id = uuid.uuid4()
        items = (await generate(client, project_id))["items"]
        a, b = items[0]["id"], items[1]["id"]
        await client.patch(schedule_url(project_id, f"/items/{b}"), json={"predecessor_id": a})

        response = await client.patch(schedule_url(project_id, f"/items/{a}"), json={"predecessor_id": b})

        assert response.status_code == 400
        assert response.json()["error"] == "cycle_detected"

    @pytest.mark.asyncio
    async def test_self_dependency_is_rejected(self, client):
        project_id = uuid.uuid4()
        a = (await generate(client, project_id))["items"][0]["id"]

        response = await client.patch(schedule_url(project_id, f"/items/{a}"), json={"predecessor_id": a})

        assert response.status_code == 400
        assert response.json()["error"] == "self_dependency"

    @pytest.mark.asyncio
    async def test_unknown_item(self, client):
        project_id = uuid.uuid4()
        await generate(client, project_id)

        response = await client.patch(schedule_url(project_id, "/items/missing"), json={"status": "complete"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_percent_complete(self, client):
        project_id = uuid.uuid4()
        a = (await generate(client, project_id))["items"][0]["id"]

        response = await client.patch(schedule_url(project_id, f"/items/{a}"), json={"percent_complete": 150})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_item(self, client):
        project_id = uuid.uuid4()
        items = (await generate(client, project_id))["items"]

        response = await client.delete(schedule_url(project_id, f"/items/{items[0]['id']}"))

        assert response.status_code == 204
        body = (await client.get(schedule_url(project_id))).json()
        assert len(body["items"]) == 2

    @pytest.mark.asyncio
    async def test_auto_calculate(self, client):
        project_id = uuid.uuid4()
        items = (await generate(client, project_id))["items"]
        a, b = items[0]["id"], items[1]["id"]
        await client.patch(schedule_url(project_id, f"/items/{b}"), json={"predecessor_id": a})
        await client.patch(schedule_url(project_id, f"/items/{b}"), json={"start_date": "2026-05-01"})

        response = await client.post(schedule_url(project_id, "/auto-calculate"))

        assert response.status_code == 200
        body = response.json()
        assert body["updated_ids"] == [b]
        assert body["dangling"] == []
        moved = next(item for item in body["schedule"]["items"] if item["id"] == b)
        assert moved["start_date"] == "2026-03-08"

    @pytest.mark.asyncio
    async def test_window(self, client):
        project_id = uuid.uuid4()
        await generate(client, project_id)

        response = await client.patch(schedule_url(project_id, "/window"), json={"end_date": "2026-04-30"})
        assert response.status_code == 200
        assert response.json()["end_date"] == "2026-04-30"

        response = await client.patch(schedule_url(project_id, "/window"), json={"end_date": "2026-01-01"})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_milestones(self, client):
        project_id = uuid.uuid4()
        await generate(client, project_id)

        response = await client.post(
            schedule_url(project_id, "/milestones"),
            json={"name": "Framing inspection", "target_date": "2026-03-20", "is_critical": True},
        )
        assert response.status_code == 201
        milestone_id = response.json()["id"]

        response = await client.patch(
            schedule_url(project_id, f"/milestones/{milestone_id}"),
            json={"is_complete": True},
        )
        assert response.status_code == 200
        assert response.json()["is_complete"] is True

        response = await client.delete(schedule_url(project_id, f"/milestones/{milestone_id}"))
        assert response.status_code == 204

        response = await client.delete(schedule_url(project_id, f"/milestones/{milestone_id}"))
        assert response.status_code == 404


class TestSaving:

    @pytest.mark.asyncio
    async def test_save_now_persists(self, client, host, store):
        project_id = uuid.uuid4()
        await generate(client, project_id)

        response = await client.post(schedule_url(project_id, "/save"))

        assert response.status_code == 200
        assert not host.has_pending_save(project_id)
        stored = await store.load(project_id)
        assert [item.name for item in stored.items] == ["Walls", "Roof trusses", "Rough-in"]

    @pytest.mark.asyncio
    async def test_edits_are_auto_saved(self, client, host, store):
        project_id = uuid.uuid4()
        items = (await generate(client, project_id))["items"]
        await client.patch(schedule_url(project_id, f"/items/{items[0]['id']}"), json={"percent_complete": 40})

        assert host.has_pending_save(project_id)
        await asyncio.sleep(host.settings.autosave_quiet_seconds * 4)

        stored = await store.load(project_id)
        assert stored is not None
        assert stored.items[0].percent_complete == 40

    @pytest.mark.asyncio
    async def test_saved_schedule_is_loaded_by_a_new_host(self, client, host, store):
        from schedule_builder.services.host import ScheduleHost

        project_id = uuid.uuid4()
        await generate(client, project_id)
        await client.post(schedule_url(project_id, "/save"))

        fresh = ScheduleHost(store, host.settings)
        engine = await fresh.get_engine(project_id)

        assert [item.name for item in engine.items.values()] == ["Walls", "Roof trusses", "Rough-in"]

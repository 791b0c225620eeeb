"""
HTTP tests for the record-keeping API and the voice test endpoints.
Requests run in-process through httpx's ASGI transport against the test
database.
"""
import httpx
import pytest
import pytest_asyncio

from joinery.db.session import get_session
from joinery.main import app
from joinery.services.assistant import VoiceAssistant

API_KEY = "test_api_key"

PROJECT = {
    "project_number": "MJ2501",
    "client": "Holly Parry",
    "project_name": "9 wood st, Randwick",
    "project_address": "9 wood st, Randwick",
    "project_status": "in_progress",
    "install_commencement_date": "2025-11-03",
    "install_duration": 5,
    "overall_project_budget": 19500,
    "priority_level": "high",
}


@pytest_asyncio.fixture
async def client(session_factory, store, dispatcher, fake_nlu):
    async def _get_session():
        async with session_factory() as session:
            yield session

    saved_state = (app.state.session_store, app.state.assistant)
    app.dependency_overrides[get_session] = _get_session
    app.state.session_store = store
    app.state.assistant = VoiceAssistant(store, dispatcher=dispatcher, nlu=fake_nlu)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test",
                                 headers={"X-API-Key": API_KEY}) as c:
        yield c

    app.dependency_overrides.clear()
    app.state.session_store, app.state.assistant = saved_state


@pytest_asyncio.fixture
async def project(client):
    resp = await client.post("/projects", json=PROJECT)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
class TestSecurity:

    async def test_missing_api_key_rejected(self, client):
        resp = await client.get("/projects", headers={"X-API-Key": ""})
        assert resp.status_code == 401

    async def test_wrong_api_key_rejected(self, client):
        resp = await client.get("/projects", headers={"X-API-Key": "nope"})
        assert resp.status_code == 401

    async def test_health_is_public(self, client):
        resp = await client.get("/healthz", headers={"X-API-Key": ""})
        assert resp.status_code == 200


@pytest.mark.essential
@pytest.mark.asyncio
class TestProjects:

    async def test_create_and_read(self, client, project):
        assert project["project_number"] == "MJ2501"
        assert project["install_end_date"] == "2025-11-07"
        assert project["date_created"]

        resp = await client.get(f"/projects/{project['id']}")
        assert resp.status_code == 200
        assert resp.json()["client"] == "Holly Parry"

    async def test_duplicate_number_conflicts(self, client, project):
        resp = await client.post("/projects", json=PROJECT)
        assert resp.status_code == 409

    async def test_invalid_status_rejected(self, client):
        resp = await client.post("/projects", json={**PROJECT, "project_status": "abandoned"})
        assert resp.status_code == 422

    async def test_list_and_filter(self, client, project):
        await client.post("/projects", json={**PROJECT, "project_number": "MJ2502", "project_status": "completed"})

        everything = (await client.get("/projects")).json()
        completed = (await client.get("/projects", params={"status": "completed"})).json()

        assert {p["project_number"] for p in everything} == {"MJ2501", "MJ2502"}
        assert [p["project_number"] for p in completed] == ["MJ2502"]

    async def test_partial_update(self, client, project):
        resp = await client.patch(f"/projects/{project['id']}", json={"project_status": "on_hold"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["project_status"] == "on_hold"
        assert body["client"] == "Holly Parry"

    async def test_missing_project(self, client):
        assert (await client.get("/projects/nope")).status_code == 404
        assert (await client.patch("/projects/nope", json={"client": "x"})).status_code == 404
        assert (await client.delete("/projects/nope")).status_code == 404

    async def test_delete_removes_children(self, client, project):
        pid = project["id"]
        await client.post(f"/projects/{pid}/tasks", json={"task_description": "Order hinges"})
        await client.post(f"/projects/{pid}/materials", json={"material_name": "MDF"})

        assert (await client.delete(f"/projects/{pid}")).status_code == 204
        assert (await client.get(f"/projects/{pid}")).status_code == 404
        assert (await client.get(f"/projects/{pid}/tasks")).status_code == 404


@pytest.mark.asyncio
class TestTasks:

    async def test_create_toggle_delete(self, client, project):
        pid = project["id"]
        created = await client.post(f"/projects/{pid}/tasks", json={"task_description": "Order hinges"})
        assert created.status_code == 201
        task = created.json()
        assert task["is_completed"] is False

        toggled = (await client.post(f"/tasks/{task['id']}/toggle")).json()
        assert toggled["is_completed"] is True
        toggled_back = (await client.post(f"/tasks/{task['id']}/toggle")).json()
        assert toggled_back["is_completed"] is False

        listed = (await client.get(f"/projects/{pid}/tasks")).json()
        assert [t["task_description"] for t in listed] == ["Order hinges"]

        assert (await client.delete(f"/tasks/{task['id']}")).status_code == 204
        assert (await client.post(f"/tasks/{task['id']}/toggle")).status_code == 404

    async def test_task_for_missing_project(self, client):
        resp = await client.post("/projects/nope/tasks", json={"task_description": "x"})
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestMaterials:

    async def test_create_and_mark_ordered(self, client, project):
        pid = project["id"]
        created = await client.post(f"/projects/{pid}/materials", json={
            "material_name": "White Melamine", "thickness": 16, "board_size": "2400x1200", "quantity": 12,
        })
        assert created.status_code == 201
        material = created.json()
        assert material["is_ordered"] is False

        resp = await client.patch(f"/materials/{material['id']}", json={"is_ordered": True, "order_number": "PO-77"})

        assert resp.status_code == 200
        assert resp.json()["is_ordered"] is True
        assert resp.json()["quantity"] == 12


@pytest.mark.asyncio
class TestJoineryItems:

    async def test_checklist_progress(self, client, project):
        created = await client.post(f"/projects/{project['id']}/joinery-items", json={
            "item_name": "Kitchen", "item_budget": 12000,
            "install_commencement_date": "2025-11-03", "install_duration": 3,
        })
        assert created.status_code == 201
        item = created.json()
        assert item["progress"] == 0
        assert item["install_end_date"] == "2025-11-05"

        for step in ("shop_drawings_approved", "board_ordered", "hardware_ordered"):
            resp = await client.put(f"/joinery-items/{item['id']}/checklist/{step}", json={"completed": True})
            assert resp.status_code == 200

        body = resp.json()
        assert body["board_ordered"] is True
        assert body["progress"] == 23

        resp = await client.put(f"/joinery-items/{item['id']}/checklist/board_ordered", json={"completed": False})
        assert resp.json()["progress"] == 15

    async def test_unknown_step(self, client, project):
        item = (await client.post(f"/projects/{project['id']}/joinery-items", json={"item_name": "Vanity"})).json()

        resp = await client.put(f"/joinery-items/{item['id']}/checklist/painted", json={"completed": True})

        assert resp.status_code == 404

    async def test_update_and_delete(self, client, project):
        item = (await client.post(f"/projects/{project['id']}/joinery-items", json={"item_name": "Vanity"})).json()

        resp = await client.patch(f"/joinery-items/{item['id']}", json={"item_budget": 3500})
        assert resp.json()["item_budget"] == 3500

        assert (await client.delete(f"/joinery-items/{item['id']}")).status_code == 204
        assert (await client.delete(f"/joinery-items/{item['id']}")).status_code == 404


@pytest.mark.asyncio
class TestVoiceEndpoints:

    async def test_test_ai_runs_a_turn(self, client, fake_nlu, project):
        fake_nlu.queue_intent("get_status", parameters={"project_number": "MJ2501"},
                              update_context={"project_number": "MJ2501"})

        resp = await client.post("/voice/test-ai", json={"speech": "What's the status of MJ2501?"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["session_id"] == "test-session"
        assert body["response"].startswith("Project MJ2501 is currently in progress.")

        session = (await client.get("/voice/sessions/test-session")).json()
        assert session["context"] == {"project_number": "MJ2501"}
        assert len(session["history"]) == 2

    async def test_test_ai_requires_speech(self, client):
        resp = await client.post("/voice/test-ai", json={"speech": "  "})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No speech provided"

    async def test_session_reset(self, client, fake_nlu):
        fake_nlu.queue("Hello")
        await client.post("/voice/test-ai", json={"speech": "hi", "session_id": "CA9"})

        assert (await client.delete("/voice/sessions/CA9")).status_code == 204
        assert (await client.get("/voice/sessions/CA9")).status_code == 404


@pytest.mark.asyncio
class TestNullPatches:
    """Required columns can be left out of a PATCH but not set to null."""

    @pytest.mark.parametrize("field", ["client", "overall_project_budget", "project_status", "project_number"])
    async def test_project_null_rejected(self, client, project, field):
        resp = await client.patch(f"/projects/{project['id']}", json={field: None})

        assert resp.status_code == 422
        unchanged = (await client.get(f"/projects/{project['id']}")).json()
        assert unchanged[field] == project[field]

    async def test_project_nullable_field_can_be_cleared(self, client, project):
        resp = await client.patch(f"/projects/{project['id']}", json={"install_commencement_date": None})

        assert resp.status_code == 200
        assert resp.json()["install_commencement_date"] is None
        assert resp.json()["install_end_date"] is None

    async def test_material_null_rejected(self, client, project):
        material = (await client.post(f"/projects/{project['id']}/materials", json={"material_name": "MDF"})).json()

        for field in ("is_ordered", "quantity", "material_name"):
            resp = await client.patch(f"/materials/{material['id']}", json={field: None})
            assert resp.status_code == 422, field

        resp = await client.patch(f"/materials/{material['id']}", json={"order_number": None})
        assert resp.status_code == 200

    async def test_task_null_rejected(self, client, project):
        task = (await client.post(f"/projects/{project['id']}/tasks", json={"task_description": "Order hinges"})).json()

        resp = await client.patch(f"/tasks/{task['id']}", json={"is_completed": None})

        assert resp.status_code == 422

    async def test_joinery_item_null_rejected(self, client, project):
        item = (await client.post(f"/projects/{project['id']}/joinery-items", json={"item_name": "Vanity"})).json()

        resp = await client.patch(f"/joinery-items/{item['id']}", json={"item_budget": None})

        assert resp.status_code == 422

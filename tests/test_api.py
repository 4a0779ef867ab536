"""
REST API tests.
"""

from uuid import uuid4

import docker.errors
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import AUTH_HEADERS, make_settings
from dockgate.engine import TaskRegistry
from dockgate.main import create_app
from dockgate.services import build_services


# ============================================================================
# Tasks
# ============================================================================


@pytest.mark.asyncio
async def test_submit_task_returns_202(client, services):
    response = await client.post(
        "/v1/tasks",
        json={"type": "start_container", "params": {"containerId": "abc"}},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 202
    data = response.json()
    assert data["status"] == "pending"
    assert data["message"] == "Task start_container submitted"

    await services.scheduler.wait_idle(timeout=2)

    response = await client.get(f"/v1/tasks/{data['task_id']}", headers=AUTH_HEADERS)
    assert response.status_code == 200
    task = response.json()
    assert task["id"] == data["task_id"]
    assert task["status"] == "completed"
    assert task["result"] == {"message": "Container abc started"}
    assert task["error"] is None


@pytest.mark.asyncio
async def test_unknown_type_is_accepted_then_fails(client, services):
    response = await client.post(
        "/v1/tasks", json={"type": "bogus_op", "params": {}}, headers=AUTH_HEADERS
    )
    assert response.status_code == 202

    await services.scheduler.wait_idle(timeout=2)

    task = (await client.get(f"/v1/tasks/{response.json()['task_id']}", headers=AUTH_HEADERS)).json()
    assert task["status"] == "failed"
    assert task["error"] == "Unknown task type: bogus_op"
    assert task["result"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"params": {}}, {"type": "", "params": {}}])
async def test_submit_without_type_is_rejected(client, services, body):
    response = await client.post("/v1/tasks", json=body, headers=AUTH_HEADERS)

    assert response.status_code == 422
    assert len(services.registry) == 0


@pytest.mark.asyncio
async def test_submit_without_params_defaults_to_empty(client, services):
    response = await client.post("/v1/tasks", json={"type": "start_container"}, headers=AUTH_HEADERS)
    assert response.status_code == 202

    await services.scheduler.wait_idle(timeout=2)

    task = services.registry.list()[0]
    assert task.params == {}
    assert task.error.startswith("Invalid params for start_container")


@pytest.mark.asyncio
async def test_get_unknown_task_returns_404(client):
    response = await client.get(f"/v1/tasks/{uuid4()}", headers=AUTH_HEADERS)
    assert response.status_code == 404
    assert response.json()["detail"].startswith("Task not found")


@pytest.mark.asyncio
async def test_get_task_with_malformed_id_returns_422(client):
    response = await client.get("/v1/tasks/not-a-uuid", headers=AUTH_HEADERS)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_tasks(client, services):
    for container_id in ("a", "b"):
        await client.post(
            "/v1/tasks",
            json={"type": "stop_container", "params": {"containerId": container_id}},
            headers=AUTH_HEADERS,
        )
    await services.scheduler.wait_idle(timeout=2)

    response = await client.get("/v1/tasks", headers=AUTH_HEADERS)

    assert response.status_code == 200
    tasks = response.json()["tasks"]
    assert len(tasks) == 2
    assert {t["params"]["containerId"] for t in tasks} == {"a", "b"}
    assert all(t["status"] == "completed" for t in tasks)


@pytest.mark.asyncio
async def test_clear_removes_completed_tasks_after_an_hour(fake_engine, clock):
    """Completed tasks are cleared once older than an hour; failed ones stay."""
    settings = make_settings()
    services = build_services(settings, engine=fake_engine, registry=TaskRegistry(clock=clock))
    app = create_app(settings, services=services)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        ok = await client.post(
            "/v1/tasks",
            json={"type": "start_container", "params": {"containerId": "abc"}},
            headers=AUTH_HEADERS,
        )
        bad = await client.post("/v1/tasks", json={"type": "bogus_op"}, headers=AUTH_HEADERS)
        await services.scheduler.wait_idle(timeout=2)

        response = await client.delete("/v1/tasks", headers=AUTH_HEADERS)
        assert response.json()["cleared"] == 0

        clock.advance(hours=1, seconds=1)
        response = await client.delete("/v1/tasks", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["cleared"] == 1
        assert response.json()["remaining"] == 1

        ok_id, bad_id = ok.json()["task_id"], bad.json()["task_id"]
        assert (await client.get(f"/v1/tasks/{ok_id}", headers=AUTH_HEADERS)).status_code == 404
        assert (await client.get(f"/v1/tasks/{bad_id}", headers=AUTH_HEADERS)).status_code == 200


# ============================================================================
# Containers and networks
# ============================================================================


@pytest.mark.asyncio
async def test_list_containers_passes_all_flag(client, fake_engine):
    fake_engine.containers["c1"] = {"Id": "c1", "Image": "nginx"}

    response = await client.get("/v1/containers", params={"all": "true"}, headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == [{"Id": "c1", "Image": "nginx"}]
    assert fake_engine.calls == [("list_containers", True)]


@pytest.mark.asyncio
async def test_get_container(client, fake_engine):
    fake_engine.containers["c1"] = {"Id": "c1", "Image": "nginx"}

    response = await client.get("/v1/containers/c1", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json()["Id"] == "c1"


@pytest.mark.asyncio
async def test_missing_container_returns_404(client, fake_engine):
    fake_engine.errors["get_container"] = docker.errors.NotFound("No such container: ghost")

    response = await client.get("/v1/containers/ghost", headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Container not found"


@pytest.mark.asyncio
async def test_engine_error_returns_500(client, fake_engine):
    fake_engine.errors["list_networks"] = docker.errors.APIError("engine unavailable")

    response = await client.get("/v1/networks", headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert "engine unavailable" in response.json()["detail"]


@pytest.mark.asyncio
async def test_container_logs_are_plain_text(client, fake_engine):
    response = await client.get(
        "/v1/containers/c1/logs", params={"tail": 20}, headers=AUTH_HEADERS
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "2026-01-01T00:00:00Z hello\n"
    assert fake_engine.calls == [("get_container_logs", "c1", 20)]


@pytest.mark.asyncio
async def test_container_stats(client):
    response = await client.get("/v1/containers/c1/stats", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json()["memory_stats"] == {"usage": 1024}


@pytest.mark.asyncio
async def test_networks(client, fake_engine):
    fake_engine.networks["n1"] = {"Id": "n1", "Name": "backend", "Driver": "bridge"}

    listed = await client.get("/v1/networks", headers=AUTH_HEADERS)
    single = await client.get("/v1/networks/n1", headers=AUTH_HEADERS)

    assert listed.json() == [{"Id": "n1", "Name": "backend", "Driver": "bridge"}]
    assert single.json()["Name"] == "backend"


@pytest.mark.asyncio
async def test_missing_network_returns_404(client, fake_engine):
    fake_engine.errors["get_network"] = docker.errors.NotFound("network ghost not found")

    response = await client.get("/v1/networks/ghost", headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Network not found"


# ============================================================================
# Service endpoints
# ============================================================================


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    data = response.json()
    assert data["status"] == "healthy"
    assert data["observers"] == 0
    assert data["scheduler"] == {"active": 0, "queued": 0, "max_concurrent": 5}
    assert data["uptime_seconds"] >= 0


@pytest.mark.asyncio
async def test_metrics_counts_submissions(client, services):
    before = (await client.get("/v1/metrics", headers=AUTH_HEADERS)).json()
    submitted_before = before["counters"].get("tasks.submitted", 0)

    await client.post(
        "/v1/tasks",
        json={"type": "start_container", "params": {"containerId": "abc"}},
        headers=AUTH_HEADERS,
    )
    await services.scheduler.wait_idle(timeout=2)

    after = (await client.get("/v1/metrics", headers=AUTH_HEADERS)).json()
    assert after["counters"]["tasks.submitted"] == submitted_before + 1
    assert after["histograms"]["task.duration_ms"]["count"] >= 1


@pytest.mark.asyncio
async def test_debug_hidden_unless_enabled(client):
    response = await client.get("/v1/debug", headers=AUTH_HEADERS)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_debug_when_enabled(fake_engine):
    app = create_app(make_settings(debug=True), engine=fake_engine)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/v1/debug", headers=AUTH_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["tasks"] == 0
    assert data["observers"] == []
    routes = {route["path"]: route["methods"] for route in data["routes"]}
    assert routes["/v1/tasks"] == ["DELETE", "GET", "POST"]
    assert "/health" in routes


def test_build_services_keeps_injected_registry(fake_engine, clock):
    """An empty injected registry is used as-is, not replaced."""
    registry = TaskRegistry(clock=clock)

    services = build_services(make_settings(), engine=fake_engine, registry=registry)

    assert services.registry is registry
    assert services.scheduler.registry is registry
    assert services.sweeper.registry is registry
    assert services.engine is fake_engine
    assert services.operations.engine is fake_engine

# tests/test_api.py

from __future__ import annotations

from fastapi.testclient import TestClient

from task_manager.app.main import create_app
from task_manager.config import AppConfig, FeaturesConfig, Settings


def test_list_tasks_envelope(client: TestClient) -> None:
    resp = client.get("/api/v1/tasks")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["error"] is None
    assert body["data"]["count"] == 4
    assert [t["id"] for t in body["data"]["tasks"]] == [4, 3, 2, 1]


def test_list_tasks_query_filters(client: TestClient) -> None:
    pending = client.get("/api/v1/tasks", params={"status": "pending"}).json()["data"]
    assert {t["title"] for t in pending["tasks"]} == {"Add authentication", "Write documentation"}

    tagged = client.get("/api/v1/tasks", params={"tags": "api,docs"}).json()["data"]
    assert [t["id"] for t in tagged["tasks"]] == [4, 2]

    repeated = client.get("/api/v1/tasks?tags=setup&tags=auth").json()["data"]
    assert [t["id"] for t in repeated["tasks"]] == [3, 1]

    page = client.get("/api/v1/tasks", params={"limit": 2, "offset": 3}).json()["data"]
    assert page["count"] == 1

    # malformed pagination is ignored
    lenient = client.get("/api/v1/tasks", params={"limit": "abc", "offset": "-3"}).json()["data"]
    assert lenient["count"] == 4


def test_create_task(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/tasks",
        json={"title": "  New task ", "priority": "critical", "tags": ["x"], "assigned_to": "erin"},
    )
    assert resp.status_code == 201
    task = resp.json()["data"]
    assert task["id"] == 5
    assert task["title"] == "New task"
    assert task["status"] == "pending"
    assert task["priority"] == "critical"
    assert task["created_at"] == task["updated_at"]

    assert client.get("/api/v1/tasks/5").json()["data"] == task


def test_create_task_validation_errors(client: TestClient) -> None:
    resp = client.post("/api/v1/tasks", json={"title": "   "})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "title is required"
    assert resp.json()["data"] is None

    resp = client.post("/api/v1/tasks", json={"title": "ok", "status": "done"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("status must be one of")


def test_create_task_malformed_body(client: TestClient) -> None:
    resp = client.post("/api/v1/tasks", content="{nope", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request format"


def test_create_task_at_capacity() -> None:
    settings = Settings(features=FeaturesConfig(rate_limit_per_min=0, max_tasks_per_user=4))
    client = TestClient(create_app(settings))
    resp = client.post("/api/v1/tasks", json={"title": "one too many"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "maximum number of tasks (4) reached"


def test_get_task_errors(client: TestClient) -> None:
    missing = client.get("/api/v1/tasks/999")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Task not found"

    bad_id = client.get("/api/v1/tasks/abc")
    assert bad_id.status_code == 400
    assert bad_id.json()["error"] == "Invalid task ID"


def test_update_task_partial(client: TestClient) -> None:
    before = client.get("/api/v1/tasks/2").json()["data"]
    resp = client.put("/api/v1/tasks/2", json={"status": "completed"})
    assert resp.status_code == 200
    after = resp.json()["data"]

    assert after["status"] == "completed"
    assert after["updated_at"] >= before["updated_at"]
    for field in ("title", "description", "priority", "assigned_to", "tags", "created_at"):
        assert after[field] == before[field]

    assert client.put("/api/v1/tasks/2", json={"priority": "urgent"}).status_code == 400
    assert client.put("/api/v1/tasks/77", json={"title": "x"}).status_code == 404


def test_delete_task(client: TestClient) -> None:
    resp = client.delete("/api/v1/tasks/1")
    assert resp.status_code == 204
    assert resp.content == b""

    again = client.delete("/api/v1/tasks/1")
    assert again.status_code == 404
    assert client.get("/api/v1/tasks").json()["data"]["count"] == 3


def test_search_tasks(client: TestClient) -> None:
    resp = client.post("/api/v1/tasks/search", json={"query": "API", "fields": ["title"]})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["query"] == "API"
    assert data["count"] == 1
    assert data["tasks"][0]["title"] == "Implement API endpoints"

    sorted_resp = client.post(
        "/api/v1/tasks/search",
        json={"query": "", "filters": {"status": "pending"}, "sort_by": "priority", "sort_desc": True},
    )
    assert [t["priority"] for t in sorted_resp.json()["data"]["tasks"]] == ["medium", "low"]


def test_task_stats(client: TestClient) -> None:
    resp = client.get("/api/v1/tasks/stats")
    assert resp.status_code == 200
    stats = resp.json()["data"]
    assert stats["total_tasks"] == 4
    assert sum(stats["tasks_by_status"].values()) == 4
    assert stats["tasks_by_user"] == {"alice": 1, "bob": 1, "charlie": 1}
    assert "last_updated" in stats


def test_health_endpoints(client: TestClient) -> None:
    health = client.get("/api/v1/health").json()["data"]
    assert health["status"] == "healthy"
    assert health["version"] == "1.0.0"
    assert health["uptime"] == "less than a minute"

    assert client.get("/api/v1/ready").json()["data"]["status"] == "ready"
    assert client.get("/api/v1/live").json()["data"]["status"] == "alive"


def test_unknown_endpoint(client: TestClient) -> None:
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Endpoint not found: GET /api/v1/nope"


def test_request_id_is_echoed(client: TestClient) -> None:
    resp = client.get("/api/v1/tasks", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert client.get("/api/v1/tasks").headers["X-Request-ID"]


def test_cors_preflight(client: TestClient) -> None:
    resp = client.options(
        "/api/v1/tasks",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-max-age"] == "86400"


def test_cors_can_be_disabled() -> None:
    settings = Settings(features=FeaturesConfig(rate_limit_per_min=0, enable_cors=False))
    client = TestClient(create_app(settings))
    resp = client.get("/api/v1/tasks", headers={"Origin": "http://example.com"})
    assert "access-control-allow-origin" not in resp.headers


def test_home_page(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Task Manager API" in resp.text
    assert "/api/v1/tasks/search" in resp.text

    css = client.get("/static/app.css")
    assert css.status_code == 200


def test_empty_store_when_seeding_disabled() -> None:
    settings = Settings(features=FeaturesConfig(rate_limit_per_min=0, seed_sample_tasks=False))
    client = TestClient(create_app(settings))
    assert client.get("/api/v1/tasks").json()["data"] == {"tasks": [], "count": 0}


def test_search_treats_null_fields_and_filters_as_omitted(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/tasks/search",
        json={"query": "api", "fields": None, "filters": None, "sort_by": None},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert {t["id"] for t in data["tasks"]} == {2, 4}

    paged = client.post("/api/v1/tasks/search", json={"filters": {"status": "pending", "limit": None}})
    assert paged.status_code == 200
    assert paged.json()["data"]["count"] == 2


def test_create_task_null_title_reports_required(client: TestClient) -> None:
    resp = client.post("/api/v1/tasks", json={"title": None})
    assert resp.status_code == 400
    assert resp.json()["error"] == "title is required"


def test_debug_mode_keeps_error_envelope() -> None:
    settings = Settings(app=AppConfig(debug=True), features=FeaturesConfig(rate_limit_per_min=0))
    app = create_app(settings)

    @app.get("/api/v1/boom")
    def boom():
        raise RuntimeError("kaboom")

    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/api/v1/boom")
    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Internal server error"
    assert "Traceback" not in resp.text

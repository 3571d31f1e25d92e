from fastapi.testclient import TestClient

from teamspace.config import settings
from teamspace.ratelimit import FixedWindowCounter, RateLimitRule


def test_auth_guard_errors_use_envelope(client: TestClient):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Not authorized to access this route"}

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


def test_register_login_and_me(client: TestClient, signup):
    user, headers = signup("Alice Admin", "alice@example.com")
    assert user["role"] == "admin"
    assert user["loginStreak"] == 1
    assert "passwordHash" not in user

    response = client.post("/api/auth/login", json={"email": "ALICE@example.com", "password": "secret123"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "alice@example.com"

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["data"]["id"] == user["id"]
    assert me["data"]["isActive"] is True


def test_validation_errors_report_fields(client: TestClient):
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "123", "name": "A"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation Error"
    assert {detail["field"] for detail in body["details"]} == {"email", "password"}


def test_validation_details_hidden_in_production(client: TestClient, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    response = client.post("/api/auth/register", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Validation Error"}


def test_unknown_route(client: TestClient):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found"}


def test_admin_only_routes(client: TestClient, signup):
    signup("Alice Admin", "alice@example.com")
    _, editor_headers = signup("Bob Builder", "bob@example.com")

    response = client.post("/api/projects", json={"name": "Side project"}, headers=editor_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "User role 'editor' is not authorized to access this route"


def test_invalid_project_transition_is_400(client: TestClient, signup):
    _, headers = signup("Alice Admin", "alice@example.com")
    project = client.post("/api/projects", json={"name": "Launch"}, headers=headers).json()["data"]

    assert client.delete(f"/api/projects/{project['id']}", headers=headers).status_code == 200
    response = client.put(f"/api/projects/{project['id']}", json={"status": "archived"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot change status from 'completed' to 'archived'"


def test_project_payload_is_camel_case(client: TestClient, signup):
    _, headers = signup("Alice Admin", "alice@example.com")

    created = client.post("/api/projects", json={"name": "Launch", "category": "tech"}, headers=headers).json()
    assert created["message"] == "Project created successfully"
    assert created["data"]["taskCount"] == 0
    assert created["data"]["memberCount"] == 1

    detail = client.get(f"/api/projects/{created['data']['id']}", headers=headers).json()["data"]
    assert detail["tasksByStatus"] == {"new": 0, "in_progress": 0, "done": 0}


def test_auth_rate_limit(app_factory, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_RATE_LIMIT_MAX", 2)

    with TestClient(app_factory()) as client:
        credentials = {"email": "ghost@example.com", "password": "whatever"}
        assert client.post("/api/auth/login", json=credentials).status_code == 401
        assert client.post("/api/auth/login", json=credentials).status_code == 401

        response = client.post("/api/auth/login", json=credentials)
        assert response.status_code == 429
        assert response.json() == {"success": False, "error": "Too many login attempts, please try again later."}

        assert client.get("/api/auth/me").status_code == 401


def test_health_reports_database(client: TestClient):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["environment"] == settings.ENVIRONMENT
    assert body["timestamp"]


def test_rate_limit_counter_forgets_finished_windows():
    now = [0.0]
    counter = FixedWindowCounter(clock=lambda: now[0])
    rule = RateLimitRule(name="api", prefixes=("/api/",), max_requests=2, window_seconds=60, message="Slow down")

    for index in range(500):
        assert counter.hit(rule, f"10.0.{index // 256}.{index % 256}")
    assert counter.hit(rule, "10.0.0.0")
    assert not counter.hit(rule, "10.0.0.0")
    assert counter.tracked(rule) == 500

    now[0] = 600.0
    assert counter.hit(rule, "10.0.0.0")
    assert counter.tracked(rule) == 1

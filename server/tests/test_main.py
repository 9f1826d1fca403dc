# server/tests/test_main.py
from unittest.mock import patch

from fastapi.testclient import TestClient

from askbudi.database import Database
from askbudi.main import create_app


def test_health(client):
    response = client.get("/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["version"] == "1.0.0"
    assert data["service"] == "AskBudi API"
    assert data["timestamp"]


def test_health_degraded_when_store_unreachable(client):
    with patch("askbudi.main.text", side_effect=RuntimeError("down")):
        response = client.get("/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "error"


def test_metrics_exposed(client, user, make_key):
    _, secret = make_key(user.id)
    client.get(
        "/v1/libraries/search",
        params={"search_term": "fastapi"},
        headers={"Authorization": f"Bearer {secret}"},
    )

    response = client.get("/metrics/")

    assert response.status_code == 200
    assert "askbudi_gateway_requests_total" in response.text


def test_lifespan_creates_tables(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'fresh.db'}")
    app = create_app(database)

    with TestClient(app) as client:
        response = client.post("/v1/auth/signup", json={
            "email": "first@example.com",
            "password": "password123",
        })

    assert response.status_code == 200


def test_apps_do_not_share_stores(tmp_path):
    first = create_app(Database(f"sqlite:///{tmp_path / 'a.db'}"))
    second = create_app(Database(f"sqlite:///{tmp_path / 'b.db'}"))
    assert first.state.database is not second.state.database


def test_unknown_route_uses_error_shape(client):
    response = client.get("/v1/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}

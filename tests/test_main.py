"""Integration tests for the FastAPI application."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from user_directory.core.comment_synthesizer import SynthesisConfig
from user_directory.main import create_app, status_for_error
from user_directory.core.exceptions import (
    ConflictError,
    NetworkError,
    RequestCancelledError,
    ServerError,
    ValidationError,
)

SEED_USERS = [
    {"id": "1", "name": "Leanne Graham", "username": "Bret", "email": "Sincere@april.biz",
     "address": {"street": "Kulas Light", "suite": "Apt. 556", "city": "Gwenborough",
                 "zipcode": "92998-3874", "geo": {"lat": "-37.3159", "lng": "81.1496"}},
     "createdAt": "2024-01-01T00:00:00.000Z"},
    {"id": "2", "name": "Ervin Howell", "username": "Antonette", "email": "Shanna@melissa.tv",
     "address": {"street": "Victor Plains", "suite": "Suite 879", "city": "Wisokyburgh",
                 "zipcode": "90566-7771", "geo": {"lat": "-43.9509", "lng": "-34.4618"}},
     "createdAt": "2024-01-02T00:00:00.000Z"},
]

FORM = {
    "name": "Ada Lovelace",
    "username": "ada",
    "email": "ada@example.com",
    "street": "Main Street",
    "city": "London",
    "zipcode": "12345",
    "phone": "555-123-4567",
    "companyName": "Analytical Engines",
}


def backend_handler(request):
    path = request.url.path
    if request.method == "GET" and path == "/users":
        return httpx.Response(200, json=SEED_USERS)
    if request.method == "POST" and path == "/users":
        return httpx.Response(201, json=json.loads(request.content))
    if request.method == "PUT":
        return httpx.Response(200, json=json.loads(request.content))
    if request.method == "DELETE":
        return httpx.Response(200, json={})
    return httpx.Response(404)


def demo_handler(request):
    path = request.url.path
    if path == "/posts":
        return httpx.Response(200, json=[{"userId": 1, "id": 1, "title": "t", "body": "b"}])
    if path == "/users/1":
        return httpx.Response(200, json={"id": 1, "name": "Leanne Graham"})
    if path == "/users":
        return httpx.Response(200, json=[{"id": 1, "name": "Leanne Graham"}, {"id": 2, "name": "Ervin Howell"}])
    if path == "/comments":
        return httpx.Response(200, json=[
            {"postId": 1, "id": 1, "name": "n", "email": "Eliseo@gardner.biz", "body": "first"},
            {"postId": 1, "id": 2, "name": "n", "email": "Jayne_Kuhic@sydney.com", "body": "second"},
        ])
    return httpx.Response(500)


def postal_handler(request):
    return httpx.Response(200, json={"records": [
        {"fields": {"postal_code": "M5V", "place_name": "Toronto", "admin_name1": "Ontario", "country_code": "CA"}},
    ]})


@pytest.fixture
def client():
    app = create_app(
        backend_transport=httpx.MockTransport(backend_handler),
        demo_transport=httpx.MockTransport(demo_handler),
        postal_transport=httpx.MockTransport(postal_handler),
        synthesizer_config=SynthesisConfig(max_depth=3),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "User Directory API"


def test_health_reports_initialized(client):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["initialized"] is True


def test_list_users_as_display_rows(client):
    response = client.get("/users", params={"sort": "name", "desc": True})
    rows = response.json()
    assert [row["id"] for row in rows] == ["1", "2"]
    assert rows[0]["address"] == "Apt. 556, Kulas Light, Gwenborough, 92998-3874"

    filtered = client.get("/users", params={"q": "ervin"}).json()
    assert [row["id"] for row in filtered] == ["2"]

    assert client.get("/users", params={"sort": "age"}).status_code == 400


def test_get_user_from_mirror(client):
    assert client.get("/users/2").json()["name"] == "Ervin Howell"
    assert client.get("/users/99").status_code == 404


def test_create_update_delete(client):
    created = client.post("/users", json=FORM)
    assert created.status_code == 201
    assert created.json()["id"] == "3"
    assert created.json()["company"]["name"] == "Analytical Engines"

    updated = client.put("/users/3", json={**FORM, "name": "Grace Hopper"})
    assert updated.json()["name"] == "Grace Hopper"

    assert client.delete("/users/1").status_code == 204
    assert [row["id"] for row in client.get("/users").json()] == ["2", "3"]


def test_invalid_form_returns_field_errors(client):
    response = client.post("/users", json={**FORM, "email": "nope"})
    assert response.status_code == 422
    assert response.json()["errors"] == {"email": "Please enter a valid email address"}


def test_user_comments(client):
    response = client.get("/users/1/comments")
    assert response.status_code == 200
    thread = response.json()
    assert thread
    for comment in thread:
        assert comment["comments"] == len(comment["replies"])


def test_user_comments_failure_returns_502(client):
    assert client.get("/users/7/comments").status_code == 502


def test_postal_codes(client):
    results = client.get("/postal-codes", params={"city": "Toronto"}).json()
    assert results[0]["fullAddress"] == "Toronto, Ontario, CA"
    assert client.get("/postal-codes", params={"city": "T"}).json() == []


def test_websocket_receives_snapshot_and_changes(client):
    """Test UI clients get a snapshot on connect and change messages after mutations."""
    with client.websocket_connect("/ws/ui-1") as websocket:
        snapshot = websocket.receive_json()
        assert snapshot["type"] == "reset"
        assert [user["id"] for user in snapshot["data"]] == ["1", "2"]

        websocket.send_text(json.dumps({"type": "ping"}))
        assert websocket.receive_json()["type"] == "pong"

        client.delete("/users/2")
        types = [websocket.receive_json()["type"] for _ in range(3)]
        assert types == ["loading", "delete", "loading"]

        websocket.send_text(json.dumps({"type": "bogus"}))
        assert websocket.receive_json()["type"] == "error"


def test_status_for_error():
    assert status_for_error(ValidationError("bad")) == 422
    assert status_for_error(RequestCancelledError("stop")) == 499
    assert status_for_error(NetworkError("down")) == 503
    assert status_for_error(ConflictError("busy", 409, "update the user")) == 409
    assert status_for_error(ServerError("boom", 500, "fetch users")) == 502

"""Unit tests for database seeding."""

import json

import httpx
import pytest

from user_directory.core.http_client import HttpClient
from user_directory.core.seed import setup_database

USERS = [
    {"id": 1, "name": "Leanne Graham", "username": "Bret", "email": "Sincere@april.biz",
     "address": {"street": "Kulas Light", "suite": "Apt. 556", "city": "Gwenborough",
                 "zipcode": "92998-3874", "geo": {"lat": "-37.3159", "lng": "81.1496"}}},
    {"id": 2, "name": "Ervin Howell", "username": "Antonette", "email": "Shanna@melissa.tv",
     "address": {"street": "Victor Plains", "suite": "Suite 879", "city": "Wisokyburgh",
                 "zipcode": "90566-7771", "geo": {"lat": "-43.9509", "lng": "-34.4618"}}},
]


def demo_client(handler):
    return HttpClient("https://demo.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_setup_writes_users_with_same_timestamp(tmp_path):
    path = tmp_path / "db.json"

    written = await setup_database(str(path), demo_client(lambda request: httpx.Response(200, json=USERS)))

    assert written is True
    db = json.loads(path.read_text())
    assert [user["id"] for user in db["users"]] == ["1", "2"]
    assert len({user["createdAt"] for user in db["users"]}) == 1
    assert db["users"][0]["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_setup_skips_existing_file(tmp_path):
    path = tmp_path / "db.json"
    path.write_text('{"users": []}')
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=USERS)

    assert await setup_database(str(path), demo_client(handler)) is False
    assert requests == []
    assert path.read_text() == '{"users": []}'


@pytest.mark.asyncio
async def test_setup_failure_writes_nothing(tmp_path):
    path = tmp_path / "db.json"

    assert await setup_database(str(path), demo_client(lambda request: httpx.Response(500))) is False
    assert not path.exists()

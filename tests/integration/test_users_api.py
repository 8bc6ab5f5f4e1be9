"""Integration tests for /users endpoints with an in-memory user repository."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.deps import get_user_repository
from app.errors import StorageError
from app.main import app
from app.repositories.protocols import UserRepository

REGISTER_PAYLOAD = {
    "email": "user.name@example.com",
    "password": "opaque-secret",
    "full_name": "User Name",
    "profile_picture": "https://cdn.example.com/u.png",
    "bio": "hello",
    "phone_number": "+998901234567",
}


def _register(client: TestClient, **overrides) -> str:
    r = client.post("/users/register", json={**REGISTER_PAYLOAD, **overrides})
    assert r.status_code == 200, r.text
    return r.json()["id"]


def test_register_then_get_round_trip(client: TestClient):
    user_id = _register(client)
    r = client.get(f"/users/{user_id}")
    assert r.status_code == 200
    assert r.json() == {
        "email": REGISTER_PAYLOAD["email"],
        "full_name": REGISTER_PAYLOAD["full_name"],
        "profile_picture": REGISTER_PAYLOAD["profile_picture"],
        "bio": REGISTER_PAYLOAD["bio"],
        "phone_number": REGISTER_PAYLOAD["phone_number"],
    }


def test_register_twice_returns_409(client: TestClient):
    _register(client)
    r = client.post("/users/register", json=REGISTER_PAYLOAD)
    assert r.status_code == 409
    assert r.json()["code"] == "user_already_registered"


def test_register_invalid_email_returns_400(client: TestClient, in_memory_user_repo):
    r = client.post("/users/register", json={**REGISTER_PAYLOAD, "email": "a@@b.com"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_email_format"
    assert in_memory_user_repo.writes == 0


def test_register_invalid_phone_returns_400(client: TestClient):
    r = client.post("/users/register", json={**REGISTER_PAYLOAD, "phone_number": "12345"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_phone_format"


def test_register_missing_field_returns_structured_422(client: TestClient):
    payload = {k: v for k, v in REGISTER_PAYLOAD.items() if k != "phone_number"}
    r = client.post("/users/register", json=payload)
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "validation_error"
    assert any("phone_number" in d["code"] for d in body["details"])


def test_login_returns_stored_row(client: TestClient):
    user_id = _register(client)
    r = client.post("/users/login", json={"email": REGISTER_PAYLOAD["email"]})
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == user_id
    assert data["password"] == "opaque-secret"
    assert data["role"] == "user"


def test_login_unknown_email_is_generic_401(client: TestClient):
    r = client.post("/users/login", json={"email": "ghost@example.com"})
    assert r.status_code == 401
    assert r.json()["code"] == "invalid_credentials"


def test_get_unknown_user_returns_404(client: TestClient):
    r = client.get("/users/12345")
    assert r.status_code == 404
    assert r.json()["code"] == "user_not_found"


def test_update_only_bio(client: TestClient):
    user_id = _register(client)
    r = client.patch(f"/users/{user_id}", json={"bio": "new bio", "email": "string", "full_name": ""})
    assert r.status_code == 200
    assert r.json() == {
        "id": user_id,
        "bio": "new bio",
        "email": REGISTER_PAYLOAD["email"],
        "full_name": REGISTER_PAYLOAD["full_name"],
        "profile_picture": REGISTER_PAYLOAD["profile_picture"],
    }


def test_update_nothing_returns_400_without_write(client: TestClient, in_memory_user_repo):
    user_id = _register(client)
    writes = in_memory_user_repo.writes
    r = client.patch(
        f"/users/{user_id}",
        json={"bio": "", "email": "string", "full_name": "string", "profile_picture": ""},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "nothing_to_update"
    assert in_memory_user_repo.writes == writes


def test_delete_is_soft_and_idempotent(client: TestClient):
    user_id = _register(client)
    assert client.delete(f"/users/{user_id}").status_code == 200
    assert client.get(f"/users/{user_id}").status_code == 404
    assert client.post("/users/login", json={"email": REGISTER_PAYLOAD["email"]}).status_code == 401
    # Already deleted and never existed both succeed
    assert client.delete(f"/users/{user_id}").status_code == 200
    assert client.delete("/users/999").status_code == 200


def test_deleted_email_cannot_register_again(client: TestClient):
    user_id = _register(client)
    client.delete(f"/users/{user_id}")
    r = client.post("/users/register", json=REGISTER_PAYLOAD)
    assert r.status_code == 409


@pytest.fixture
def failing_client():
    repo = MagicMock(spec=UserRepository)
    repo.get_by_id_user.side_effect = StorageError("failed to query users", RuntimeError("password=hunter2"))
    app.dependency_overrides[get_user_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_user_repository, None)


def test_storage_error_returns_500_without_driver_text(failing_client: TestClient):
    r = failing_client.get("/users/1", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 500
    body = r.json()
    assert body["code"] == "storage_error"
    assert "hunter2" not in r.text
    assert body["request_id"] == "req-123"
    assert r.headers["X-Request-ID"] == "req-123"

"""
Pytest fixtures: mocked PyMySQL connection, in-memory user repository, API client.
"""
from contextlib import contextmanager
from typing import Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on path and .env is loaded
import config  # noqa: F401

from app.deps import get_user_repository
from app.errors import (
    InvalidCredentials,
    InvalidEmailFormat,
    InvalidPhoneFormat,
    NothingToUpdate,
    UserAlreadyRegistered,
    UserNotFound,
)
from app.main import app
from app.models import (
    DeleteUserRequest,
    DeleteUserResponse,
    GetByIdUserRequest,
    GetByIdUserResponse,
    LoginUserRequest,
    LoginUserResponse,
    RegisterUserRequest,
    RegisterUserResponse,
    UpdateUserRequest,
    UpdateUserResponse,
)
from app.repositories.protocols import UserRepository
from app.utils.validators import is_valid_email, is_valid_phone_number

FIXED_NOW = 1_700_000_000.0


class InMemoryUserRepository(UserRepository):
    """In-memory user store for tests. Mirrors MySQLUserRepository semantics."""

    def __init__(self) -> None:
        self._users: dict = {}  # id -> row
        self._next_id = 1
        self.writes = 0

    def _active(self, user_id: str) -> Optional[dict]:
        row = self._users.get(user_id)
        if row and row["deleted_at"] == 0:
            return row
        return None

    def register_user(self, request: RegisterUserRequest) -> RegisterUserResponse:
        if not is_valid_email(request.email):
            raise InvalidEmailFormat()
        if not is_valid_phone_number(request.phone_number):
            raise InvalidPhoneFormat()
        if any(u["email"] == request.email for u in self._users.values()):
            raise UserAlreadyRegistered()
        uid = str(self._next_id)
        self._next_id += 1
        self._users[uid] = {
            **request.model_dump(),
            "id": uid,
            "role": "user",
            "deleted_at": 0,
        }
        self.writes += 1
        return RegisterUserResponse(id=uid)

    def login_user(self, request: LoginUserRequest) -> LoginUserResponse:
        for u in self._users.values():
            if u["email"] == request.email and u["deleted_at"] == 0:
                return LoginUserResponse(**u)
        raise InvalidCredentials()

    def get_by_id_user(self, request: GetByIdUserRequest) -> GetByIdUserResponse:
        row = self._active(request.id)
        if row is None:
            raise UserNotFound()
        return GetByIdUserResponse(**row)

    def update_user(self, request: UpdateUserRequest) -> UpdateUserResponse:
        changes = request.changes()
        if not changes:
            raise NothingToUpdate()
        row = self._users.get(request.id)
        if row is None:
            raise UserNotFound()
        row.update(changes)
        self.writes += 1
        return UpdateUserResponse(**row)

    def delete_user(self, request: DeleteUserRequest) -> DeleteUserResponse:
        row = self._active(request.id)
        if row is not None:
            row["deleted_at"] = int(FIXED_NOW)
            self.writes += 1
        return DeleteUserResponse()


@pytest.fixture
def cursor():
    """PyMySQL DictCursor stand-in: no rows by default."""
    cur = MagicMock()
    cur.fetchone.return_value = None
    cur.lastrowid = 42
    cur.rowcount = 1
    return cur


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def connection_factory(connection):
    """Same contract as app.db.get_connection, yielding the mocked connection."""
    calls = []

    @contextmanager
    def factory():
        calls.append(connection)
        yield connection

    factory.calls = calls
    return factory


@pytest.fixture
def in_memory_user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def client(in_memory_user_repo):
    """TestClient with the user repository overridden to in-memory (no lifespan, no MySQL)."""
    app.dependency_overrides[get_user_repository] = lambda: in_memory_user_repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_user_repository, None)

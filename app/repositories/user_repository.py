"""MySQL implementation of UserRepository. One connection (one transaction) per operation."""
import time
from datetime import datetime
from typing import Callable, ContextManager, Optional

import pymysql
from pymysql.constants import ER

from app.db import get_connection
from app.errors import (
    InvalidCredentials,
    InvalidEmailFormat,
    InvalidPhoneFormat,
    NothingToUpdate,
    StorageError,
    UserAlreadyRegistered,
    UserNotFound,
)
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
from app.utils.validators import is_valid_email, is_valid_phone_number

# Deleted rows count too: an email that was ever registered stays taken
EMAIL_EXISTS = "SELECT EXISTS(SELECT 1 FROM users WHERE email = %s) AS taken"

INSERT_USER = """INSERT INTO users (email, password, full_name, profile_picture, bio, phone_number, created_at)
   VALUES (%s, %s, %s, %s, %s, %s, %s)"""

SELECT_LOGIN = """SELECT id, email, password, full_name, profile_picture, bio, phone_number, role
   FROM users WHERE email = %s AND deleted_at = 0"""

SELECT_BY_ID = """SELECT email, full_name, profile_picture, bio, phone_number
   FROM users WHERE id = %s AND deleted_at = 0"""

SELECT_UPDATED = "SELECT id, bio, email, full_name, profile_picture FROM users WHERE id = %s"

SOFT_DELETE = "UPDATE users SET deleted_at = %s WHERE id = %s AND deleted_at = 0"


def _parse_id(raw: str) -> Optional[int]:
    """Return the numeric key, or None when `raw` is not plain ASCII digits.

    MySQL coerces '1abc', ' 1' and '1.0' to 1 when compared with a BIGINT column.
    """
    if raw and raw.isascii() and raw.isdigit():
        return int(raw)
    return None


class MySQLUserRepository:
    """User persistence in MySQL.

    connection_factory: context manager yielding a PyMySQL connection with a DictCursor,
    committing on success and rolling back on error (app.db.get_connection by default).
    clock: returns the current Unix time in seconds; used for created_at and deleted_at.
    """

    def __init__(
        self,
        connection_factory: Callable[[], ContextManager] = get_connection,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._connect = connection_factory
        self._clock = clock

    def register_user(self, request: RegisterUserRequest) -> RegisterUserResponse:
        if not is_valid_email(request.email):
            raise InvalidEmailFormat()
        if not is_valid_phone_number(request.phone_number):
            raise InvalidPhoneFormat()

        # Naive local time: PyMySQL drops tzinfo and TIMESTAMP reads in the session zone
        created_at = datetime.fromtimestamp(self._clock())
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(EMAIL_EXISTS, (request.email,))
                    row = cur.fetchone()
                    if row and row["taken"]:
                        raise UserAlreadyRegistered()
                    cur.execute(
                        INSERT_USER,
                        (
                            request.email,
                            request.password,
                            request.full_name,
                            request.profile_picture,
                            request.bio,
                            request.phone_number,
                            created_at,
                        ),
                    )
                    user_id = cur.lastrowid
        except pymysql.err.IntegrityError as e:
            # Lost the check-then-insert race; the unique key on email caught it
            if e.args and e.args[0] == ER.DUP_ENTRY:
                raise UserAlreadyRegistered() from e
            raise StorageError("failed to insert user", e) from e
        except pymysql.MySQLError as e:
            raise StorageError("failed to register user", e) from e
        return RegisterUserResponse(id=str(user_id))

    def login_user(self, request: LoginUserRequest) -> LoginUserResponse:
        row = self._fetch_one(SELECT_LOGIN, (request.email,))
        if row is None:
            raise InvalidCredentials()
        return LoginUserResponse(**{**row, "id": str(row["id"])})

    def get_by_id_user(self, request: GetByIdUserRequest) -> GetByIdUserResponse:
        user_id = _parse_id(request.id)
        if user_id is None:
            raise UserNotFound()
        row = self._fetch_one(SELECT_BY_ID, (user_id,))
        if row is None:
            raise UserNotFound()
        return GetByIdUserResponse(**row)

    def update_user(self, request: UpdateUserRequest) -> UpdateUserResponse:
        changes = request.changes()
        if not changes:
            raise NothingToUpdate()
        user_id = _parse_id(request.id)
        if user_id is None:
            raise UserNotFound()
        # Column names come from UPDATABLE_FIELDS, never from the request
        assignments = ", ".join(f"{column} = %s" for column in changes)
        query = f"UPDATE users SET {assignments} WHERE id = %s"
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (*changes.values(), user_id))
                    # MySQL has no UPDATE ... RETURNING; read back inside the same transaction
                    cur.execute(SELECT_UPDATED, (user_id,))
                    row = cur.fetchone()
        except pymysql.MySQLError as e:
            raise StorageError("failed to update user", e) from e
        if row is None:
            raise UserNotFound()
        return UpdateUserResponse(**{**row, "id": str(row["id"])})

    def delete_user(self, request: DeleteUserRequest) -> DeleteUserResponse:
        user_id = _parse_id(request.id)
        if user_id is None:
            # No row can match; same outcome as deleting an unknown id
            return DeleteUserResponse()
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(SOFT_DELETE, (int(self._clock()), user_id))
        except pymysql.MySQLError as e:
            raise StorageError("failed to delete user", e) from e
        return DeleteUserResponse()

    def _fetch_one(self, query: str, args: tuple):
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, args)
                    return cur.fetchone()
        except pymysql.MySQLError as e:
            raise StorageError("failed to query users", e) from e

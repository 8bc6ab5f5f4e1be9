"""Repository protocols (interfaces) for testability and clear boundaries."""
from typing import Protocol

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


class UserRepository(Protocol):
    """User account persistence: register, login lookup, get by id, partial update, soft delete.

    Every operation raises a subclass of app.errors.UserStorageError on failure.
    """

    def register_user(self, request: RegisterUserRequest) -> RegisterUserResponse:
        """Validate email/phone, reject taken emails, insert; return new id."""
        ...

    def login_user(self, request: LoginUserRequest) -> LoginUserResponse:
        """Return the active row for this email, password included. Does not verify the password."""
        ...

    def get_by_id_user(self, request: GetByIdUserRequest) -> GetByIdUserResponse:
        """Return public profile fields of an active user."""
        ...

    def update_user(self, request: UpdateUserRequest) -> UpdateUserResponse:
        """Apply the provided fields; return the row as updated."""
        ...

    def delete_user(self, request: DeleteUserRequest) -> DeleteUserResponse:
        """Soft delete. Succeeds even when no active row matches."""
        ...

"""Errors raised by the user repository. The HTTP layer maps them to status codes."""
from typing import Optional


class UserStorageError(Exception):
    """Base class. `code` is stable and safe to return to clients."""

    code = "user_storage_error"
    message = "User storage error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class InvalidEmailFormat(UserStorageError):
    code = "invalid_email_format"
    message = "invalid email format"


class InvalidPhoneFormat(UserStorageError):
    code = "invalid_phone_format"
    message = "invalid phone number format"


class UserAlreadyRegistered(UserStorageError):
    code = "user_already_registered"
    message = "user already registered"


class InvalidCredentials(UserStorageError):
    """Login found no active row. Deliberately says nothing about whether the email exists."""

    code = "invalid_credentials"
    message = "invalid email or password"


class UserNotFound(UserStorageError):
    code = "user_not_found"
    message = "user not found"


class NothingToUpdate(UserStorageError):
    code = "nothing_to_update"
    message = "nothing to update"


class StorageError(UserStorageError):
    """Unclassified database failure. The driver exception is kept on `cause`."""

    code = "storage_error"
    message = "storage error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        text = message or self.message
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)

"""
Pydantic data models for repository request/response records and the API error schema.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

# Default value generated API clients send for untouched string fields; treated as "not provided"
UNSET_PLACEHOLDER = "string"

# Columns UpdateUser may touch, in SET clause order
UPDATABLE_FIELDS = ("bio", "email", "full_name", "profile_picture")


class ErrorDetail(BaseModel):
    """Single error detail (e.g. field-level)."""

    code: str = Field(..., description="Error code or field name")
    message: str = Field(..., description="Human-readable message")


class ErrorResponse(BaseModel):
    """Structured error response for 4xx/5xx."""

    code: str = Field(..., description="Application error code")
    message: str = Field(..., description="Human-readable summary")
    details: Optional[List[ErrorDetail]] = Field(None, description="Optional per-field or extra details")


# ----- Register -----


class RegisterUserRequest(BaseModel):
    email: str
    password: str = Field(..., description="Stored verbatim; hashing is the caller's job")
    full_name: str = ""
    profile_picture: str = ""
    bio: str = ""
    phone_number: str


class RegisterUserResponse(BaseModel):
    id: str


# ----- Login -----


class LoginUserRequest(BaseModel):
    email: str


class LoginUserResponse(BaseModel):
    """Active user row for login. The caller compares `password` against the supplied credential."""

    id: str
    email: str
    password: str
    full_name: str = ""
    profile_picture: str = ""
    bio: str = ""
    phone_number: str = ""
    role: str = ""


# ----- Get by id -----


class GetByIdUserRequest(BaseModel):
    id: str


class GetByIdUserResponse(BaseModel):
    email: str
    full_name: str = ""
    profile_picture: str = ""
    bio: str = ""
    phone_number: str = ""


# ----- Update -----


class UpdateUserBody(BaseModel):
    """Fields a client may change. Empty or "string" means leave as is."""

    bio: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None

    def changes(self) -> Dict[str, str]:
        """Fields that take part in the update, keyed by column, in UPDATABLE_FIELDS order."""
        out: Dict[str, str] = {}
        for name in UPDATABLE_FIELDS:
            value = getattr(self, name)
            if value and value != UNSET_PLACEHOLDER:
                out[name] = value
        return out


class UpdateUserRequest(UpdateUserBody):
    id: str


class UpdateUserResponse(BaseModel):
    id: str
    bio: str = ""
    email: str
    full_name: str = ""
    profile_picture: str = ""


# ----- Delete -----


class DeleteUserRequest(BaseModel):
    id: str


class DeleteUserResponse(BaseModel):
    pass

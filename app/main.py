"""
FastAPI application and API endpoints.
Layered: API -> repository. The repository is injected via app.deps so tests can swap it.
"""
import logging
import time
import uuid

logger = logging.getLogger(__name__)
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.health import check_live, check_ready
from app.db import init_db
from app.deps import get_user_repository
from app.errors import (
    InvalidCredentials,
    InvalidEmailFormat,
    InvalidPhoneFormat,
    NothingToUpdate,
    StorageError,
    UserAlreadyRegistered,
    UserNotFound,
    UserStorageError,
)
from app.models import (
    DeleteUserRequest,
    DeleteUserResponse,
    ErrorDetail,
    ErrorResponse,
    GetByIdUserRequest,
    GetByIdUserResponse,
    LoginUserRequest,
    LoginUserResponse,
    RegisterUserRequest,
    RegisterUserResponse,
    UpdateUserBody,
    UpdateUserRequest,
    UpdateUserResponse,
)
from app.repositories.protocols import UserRepository
from app.utils.request_logger import log_request

ERROR_STATUS = {
    InvalidEmailFormat: 400,
    InvalidPhoneFormat: 400,
    NothingToUpdate: 400,
    InvalidCredentials: 401,
    UserNotFound: 404,
    UserAlreadyRegistered: 409,
    StorageError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create database and users table if missing."""
    if init_db():
        logger.info("Database ready")
    yield


app = FastAPI(
    title="User Storage",
    description="User account storage: register, login lookup, get, update, soft delete",
    version="1.0.0",
    lifespan=lifespan,
)


def _error_response(request: Request, status_code: int, body: ErrorResponse) -> JSONResponse:
    payload = body.model_dump()
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        payload["request_id"] = request_id
    response = JSONResponse(status_code=status_code, content=payload)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def _normalize_detail(detail: object) -> list:
    """Convert FastAPI/HTTPException detail to list of strings for ErrorResponse."""
    if isinstance(detail, str):
        return [detail]
    if isinstance(detail, list):
        out = []
        for d in detail:
            if isinstance(d, str):
                out.append(d)
            elif isinstance(d, dict):
                out.append(d.get("msg", d.get("message", str(d))))
            else:
                out.append(str(d))
        return out if out else ["Error"]
    return [str(detail)]


@app.exception_handler(UserStorageError)
def user_storage_error_handler(request: Request, exc: UserStorageError) -> JSONResponse:
    """Map repository errors to status codes. Storage failures are logged, not echoed."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    message = str(exc)
    if isinstance(exc, StorageError):
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        message = StorageError.message
    request.state.error_code = exc.code
    return _error_response(request, status_code, ErrorResponse(code=exc.code, message=message))


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return structured ErrorResponse for 4xx/5xx. Includes request_id when available."""
    details = _normalize_detail(exc.detail)
    body = ErrorResponse(
        code=str(exc.status_code),
        message=details[0] if details else "Error",
        details=[ErrorDetail(code=str(exc.status_code), message=d) for d in details],
    )
    return _error_response(request, exc.status_code, body)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        ErrorDetail(code=".".join(str(p) for p in err.get("loc", ())), message=err.get("msg", "invalid"))
        for err in exc.errors()
    ]
    body = ErrorResponse(code="validation_error", message="Request validation failed", details=details)
    return _error_response(request, 422, body)


@app.middleware("http")
async def structured_logging_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    log_request(request, response.status_code, latency_ms)
    return response


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Set request_id on request.state and add X-Request-ID to response."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ----- Users -----


@app.post("/users/register", response_model=RegisterUserResponse)
def register_user(
    body: RegisterUserRequest,
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
):
    """Register a new user. Returns the new id."""
    return user_repo.register_user(body)


@app.post("/users/login", response_model=LoginUserResponse)
def login_user(
    body: LoginUserRequest,
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
):
    """Look up the active account for an email. The calling gateway verifies the password."""
    return user_repo.login_user(body)


@app.get("/users/{user_id}", response_model=GetByIdUserResponse)
def get_user(
    user_id: str,
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
):
    return user_repo.get_by_id_user(GetByIdUserRequest(id=user_id))


@app.patch("/users/{user_id}", response_model=UpdateUserResponse)
def update_user(
    user_id: str,
    body: UpdateUserBody,
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
):
    """Partial update. Fields left empty or set to "string" are not changed."""
    return user_repo.update_user(UpdateUserRequest(id=user_id, **body.model_dump()))


@app.delete("/users/{user_id}", response_model=DeleteUserResponse)
def delete_user(
    user_id: str,
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
):
    """Soft delete. Deleting an unknown or already deleted user still succeeds."""
    return user_repo.delete_user(DeleteUserRequest(id=user_id))


# ----- Health -----


@app.get("/health")
def health():
    """Simple health."""
    return {"status": "ok"}


@app.get("/health/live")
def health_live():
    return check_live()


@app.get("/health/ready")
def health_ready():
    return check_ready()

"""Error taxonomy and the centralized HTTP error translator.

Learn: Two ways a failure travels through the app:
1. Expected failures (duplicate user, wrong password) are RETURNED by
   services as a Failure value. Routes turn them into an ApiError.
2. ApiError subclasses are RAISED from routes and auth dependencies and
   caught by the handlers registered here, which map each kind to its
   HTTP status and a stable {message, details?} body.

Anything else that escapes a handler is logged and answered with a
generic 500 — driver errors and stack traces never reach the client.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class ErrorKind(str, Enum):
    VALIDATION_FAILURE = "ValidationFailure"
    CONFLICT = "Conflict"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CREDENTIAL = "InvalidCredential"
    NOT_FOUND = "NotFound"
    UNEXPECTED = "Unexpected"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILURE: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.AUTHENTICATION_FAILED: 401,
    ErrorKind.MISSING_CREDENTIAL: 401,
    ErrorKind.INVALID_CREDENTIAL: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNEXPECTED: 500,
}


# ═══════════════════════════════════════════════════════════
# Raised errors
# ═══════════════════════════════════════════════════════════


class ApiError(Exception):
    """Base for every error the translator knows how to render."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    default_message: str = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Any = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class ValidationFailure(ApiError):
    kind = ErrorKind.VALIDATION_FAILURE
    default_message = "Validation failed"


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT
    default_message = "Identity already registered"


class AuthenticationFailed(ApiError):
    kind = ErrorKind.AUTHENTICATION_FAILED
    default_message = "Invalid credentials"


class MissingCredential(ApiError):
    kind = ErrorKind.MISSING_CREDENTIAL
    default_message = "Access token required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredential(ApiError):
    kind = ErrorKind.INVALID_CREDENTIAL
    default_message = "Invalid or expired token"


class NotFound(ApiError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


_ERRORS_BY_KIND: dict[ErrorKind, type[ApiError]] = {
    cls.kind: cls
    for cls in (
        ValidationFailure,
        ConflictError,
        AuthenticationFailed,
        MissingCredential,
        InvalidCredential,
        NotFound,
    )
}


# ═══════════════════════════════════════════════════════════
# Returned failures
# ═══════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Failure:
    """An expected, typed failure returned by a service call."""

    kind: ErrorKind
    message: str

    def to_error(self) -> ApiError:
        error_cls = _ERRORS_BY_KIND.get(self.kind, ApiError)
        return error_cls(self.message)


# ═══════════════════════════════════════════════════════════
# Translator
# ═══════════════════════════════════════════════════════════


def error_body(message: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message}
    if details is not None:
        body["details"] = details
    return body


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        # loc is ("body", "title") / ("query", "status") / ("path", "task_id")
        loc = [str(part) for part in err.get("loc", ())]
        details.append({
            "location": loc[0] if loc else "",
            "field": ".".join(loc[1:]),
            "message": err.get("msg", "Invalid value"),
        })
    return details


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
        headers=exc.headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body("Validation failed", _validation_details(exc)),
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        message = "Route not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "http.unhandled_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=error_body("Internal Server Error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the single translator for every failure kind."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

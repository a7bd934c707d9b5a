"""
Centralized error handling for API failures.

Routes and services raise AppError subclasses; the handlers installed by
install_error_handlers render every failure as {"success": false, "message": ...}
so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500

MSG_SERVER_ERROR = "Server error"
MSG_VALIDATION_FAILED = "Validation failed"


class AppError(Exception):
    status_code = STATUS_INTERNAL_ERROR
    default_message = MSG_SERVER_ERROR

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationFailed(AppError):
    status_code = STATUS_BAD_REQUEST
    default_message = MSG_VALIDATION_FAILED

    def __init__(self, message: str | None = None, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_body(self) -> dict:
        body = super().to_body()
        if self.errors:
            body["errors"] = self.errors
        return body


class Unauthorized(AppError):
    status_code = STATUS_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = STATUS_FORBIDDEN
    default_message = "Access denied"


class NotFound(AppError):
    status_code = STATUS_NOT_FOUND
    default_message = "Not found"


def _field_name(loc: tuple) -> str:
    # ("body", "notificationIds", 0) -> "notificationIds.0"; drop the request part
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def validation_errors_to_fields(exc: RequestValidationError) -> dict[str, str]:
    out: dict[str, str] = {}
    for err in exc.errors():
        out.setdefault(_field_name(tuple(err.get("loc", ()))), err.get("msg", "invalid"))
    return out


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= STATUS_INTERNAL_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ValidationFailed(errors=validation_errors_to_fields(exc)).to_body()
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content=body)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Full detail stays in the server log; clients get a generic message.
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=STATUS_INTERNAL_ERROR, content={"success": False, "message": MSG_SERVER_ERROR})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

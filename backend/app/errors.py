"""Domain error kinds and their HTTP rendering.

Every failure that reaches a client is one of the ``AppError`` subclasses
below. The persistence layer translates SQLAlchemy exceptions into these
once (see ``app.services.store``); routers raise them directly for input
problems. ``register_exception_handlers`` renders them as ``{"error": ...}``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    UPSTREAM = "upstream"


class AppError(Exception):
    """Base class for errors rendered to the client."""

    kind: ErrorKind = ErrorKind.PERSISTENCE
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    # Uniqueness violations are reported as a client error, not 409
    kind = ErrorKind.CONFLICT
    status_code = 400
    default_message = "Record already exists"


class PersistenceError(AppError):
    kind = ErrorKind.PERSISTENCE
    status_code = 500
    default_message = "Database operation failed"


class UpstreamError(AppError):
    kind = ErrorKind.UPSTREAM
    status_code = 502
    default_message = "Upstream request failed"


def error_body(message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return body


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.kind is ErrorKind.PERSISTENCE:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.warning(
            "%s %s -> %d %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.kind.value,
            exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    in_body = bool(errors) and all(e["loc"][:1] == ["body"] for e in errors)
    message = "Invalid request body" if in_body else "Invalid request"
    logger.warning("%s %s -> 400 %s", request.method, request.url.path, message.lower())
    return JSONResponse(
        status_code=400,
        content=error_body(message, {"errors": errors}),
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]

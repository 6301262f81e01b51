"""
Error taxonomy and the JSON envelope rendering used by every route.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error rendered as `{success: false, message, error?}`."""

    status_code = 500

    def __init__(self, message: str, *, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class BadRequestError(ApiError):
    status_code = 400


class ConflictError(ApiError):
    # The frontend expects duplicate registration to come back as a 400.
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class UpstreamError(ApiError):
    """A database or media-host call failed."""

    status_code = 500


def envelope(message: str, *, success: bool = False, error: Optional[str] = None) -> dict:
    body = {"success": success, "message": message}
    if error is not None:
        body["error"] = error
    return body


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(exc.message, error=exc.error),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=envelope("Invalid request", error=details),
    )


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=UpstreamError.status_code,
        content=envelope("Database error"),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=envelope("Internal server error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(PyMongoError, _database_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

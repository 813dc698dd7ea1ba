from __future__ import annotations

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from app.common.responses import ErrorResponse
from app.common.request_context import current_request_id


class ApiException(StarletteHTTPException):
    def __init__(
        self,
        status_code: int = 400,
        message: str = "Bad Request",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details


class StorageError(Exception):
    """Persistence layer failure."""


class RecordNotFoundError(StorageError):
    """Raised when a write targets a row that does not exist."""


def _debug_details(request_id: str, exc: Exception) -> dict[str, Any]:
    return {
        "requestId": request_id,
        "type": exc.__class__.__name__,
        "message": str(exc),
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Render every failure as ``{"error": ..., "details"?: ...}`` and log it once."""
    logger = logging.getLogger(__name__)

    def reply(
        request: Request,
        status_code: int,
        error: str,
        details: Any = None,
        *,
        event: str,
        extra: str = "",
        exc_info: Optional[BaseException] = None,
    ) -> JSONResponse:
        if status_code >= 500:
            log_fn = logger.error
        else:
            log_fn = logger.warning
        log_fn(
            "%s request_id=%s %s %s -> %s %s%s",
            event,
            current_request_id(request),
            request.method,
            request.url.path,
            status_code,
            error,
            extra,
            exc_info=exc_info,
        )
        return JSONResponse(status_code=status_code, content=ErrorResponse.of(error, details).to_content())

    @app.exception_handler(ApiException)
    async def on_api_exception(request: Request, exc: ApiException) -> JSONResponse:
        return reply(request, exc.status_code, exc.message, exc.details, event="api_error")

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        return reply(request, 422, "Validation Error", errors, event="bad_request", extra=f" errors={errors}")

    @app.exception_handler(StarletteHTTPException)
    async def on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "HTTP Error" if exc.detail is None else str(exc.detail)
        return reply(request, exc.status_code, message, event="http_error")

    @app.exception_handler(Exception)
    async def on_unexpected(request: Request, exc: Exception) -> JSONResponse:
        details = _debug_details(current_request_id(request), exc) if debug else None
        return reply(
            request,
            HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            details,
            event="unexpected_error",
            exc_info=exc,
        )

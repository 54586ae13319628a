from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

INTERNAL_PATH_PREFIX = "/internal"
INTERNAL_SERVER_ERROR_MESSAGE = "Internal server error"

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """Public-route failure rendered as ``{"error": message}``."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    if request.url.path.startswith(INTERNAL_PATH_PREFIX):
        return await request_validation_exception_handler(request, exc)
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Runs in ServerErrorMiddleware; the exception is re-raised after the response is sent.
    logger.exception("unhandled_request_error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

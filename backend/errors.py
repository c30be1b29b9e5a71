"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AggregatorError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AggregatorError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class UpstreamError(AggregatorError):
    """Upstream call failed, returned non-JSON, or returned an unexpected shape."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


def error_body(message: str) -> dict:
    return {"status": "error", "message": message}


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(AggregatorError)
    async def handle_aggregator_error(_request: Request, exc: AggregatorError):
        return JSONResponse(error_body(exc.message), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        logger.info("Rejected request parameters: %s", exc.errors())
        return JSONResponse(error_body("Invalid request parameters"), status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            error_body("Internal server error"),
            status_code=500,
        )

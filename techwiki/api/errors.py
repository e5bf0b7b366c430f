"""Shared JSON error responses and exception handlers for API routes."""

import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Build the standard {"error": {...}, "timestamp": ...} body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


def storage_unavailable() -> JSONResponse:
    return error_response(503, "STORAGE_UNAVAILABLE", "Article storage is unavailable, retry later")


def internal_error() -> JSONResponse:
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


def describe_validation_errors(errors: list[dict]) -> tuple[str, str]:
    """Map the first pydantic error to an (error code, message) pair."""
    if not errors:
        return "INVALID_PARAMETER", "Invalid parameters"

    first = errors[0]
    if first.get("type") == "missing":
        loc = first.get("loc") or ("parameter",)
        return "MISSING_PARAMETER", f"Missing required parameter: {loc[-1]}"
    return "INVALID_PARAMETER", first.get("msg", "Invalid parameters")


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 rather than FastAPI's 422."""
    code, message = describe_validation_errors(exc.errors())
    logger.warning(f"Rejected request parameters ({code}): {message}")
    return error_response(400, code, message)


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return internal_error()

"""
Custom exception hierarchy for the Hebit API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class HebitException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class HabitNotFoundError(HebitException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "HABIT_NOT_FOUND"

    def __init__(self, habit_id: int):
        super().__init__(
            message=f"Habit {habit_id} not found.",
            details={"habit_id": habit_id},
        )


class FutureDateError(HebitException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "FUTURE_DATE"

    def __init__(self, when: datetime):
        super().__init__(
            message="Cannot track habit for future dates.",
            details={"date": when.isoformat()},
        )


class InvalidDateRangeError(HebitException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_DATE_RANGE"

    def __init__(self, start: date, end: date):
        super().__init__(
            message=f"start_date {start} is after end_date {end}.",
            details={"start_date": str(start), "end_date": str(end)},
        )


class AuthenticationRequiredError(HebitException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_REQUIRED"

    def __init__(self):
        super().__init__(message="Missing X-User-Id header.")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def hebit_exception_handler(request: Request, exc: HebitException) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )

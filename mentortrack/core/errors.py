"""
Custom exception hierarchy for mentortrack.

Rule: every error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Remote failures (`RemoteServiceError` and subclasses) are raised by the
data sources and caught at the cache boundary; they only reach HTTP
clients through explicit handlers below.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class MentorTrackException(Exception):
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


# --- remote collaborator ---------------------------------------------------

class RemoteServiceError(MentorTrackException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "REMOTE_ERROR"

    def __init__(self, message: str, operation: str | None = None, status_code: int | None = None):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message=message, details=details)
        self.operation = operation
        self.status_code = status_code


class RateLimitedError(RemoteServiceError):
    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"

    def __init__(self, operation: str | None = None):
        super().__init__(
            message="Remote data service is rate limiting requests.",
            operation=operation,
            status_code=429,
        )


class MalformedResponseError(RemoteServiceError):
    code = "MALFORMED_RESPONSE"

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Unexpected response shape from {operation}: {reason}",
            operation=operation,
        )


# --- dashboard input -------------------------------------------------------

class InvalidWeekError(MentorTrackException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_WEEK"

    def __init__(self, week: Any):
        super().__init__(
            message=f"Week must be between 1 and 12. Received {week}.",
            details={"week": week},
        )


class UnknownAgentError(MentorTrackException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "UNKNOWN_AGENT"

    def __init__(self, agent_id: int):
        super().__init__(
            message=f"Agent {agent_id} is not in the current roster.",
            details={"agent_id": agent_id},
        )


class UnknownMetricError(MentorTrackException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "UNKNOWN_METRIC"

    def __init__(self, kind: str, position: int, reason: str = "no such catalog position"):
        super().__init__(
            message=f"Invalid {kind} metric at position {position}: {reason}.",
            details={"kind": kind, "position": position},
        )


class InvalidTargetValueError(MentorTrackException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_TARGET_VALUE"

    def __init__(self, value: Any):
        super().__init__(
            message=f"Target must be a non-negative integer. Received {value!r}.",
            details={"value": value},
        )


class CatalogNotLoadedError(MentorTrackException):
    http_status = status.HTTP_409_CONFLICT
    code = "CATALOG_NOT_LOADED"

    def __init__(self):
        super().__init__(message="Metric catalog has not been loaded yet.")


class TargetEditorClosedError(MentorTrackException):
    http_status = status.HTTP_409_CONFLICT
    code = "TARGET_EDITOR_CLOSED"

    def __init__(self):
        super().__init__(message="Open the target editor for an agent and week first.")


class NoTargetSelectedError(MentorTrackException):
    http_status = status.HTTP_409_CONFLICT
    code = "NO_TARGET_SELECTED"

    def __init__(self):
        super().__init__(message="Select a metric in the target editor before saving.")


class DashboardClosedError(MentorTrackException):
    http_status = status.HTTP_409_CONFLICT
    code = "DASHBOARD_CLOSED"

    def __init__(self):
        super().__init__(message="The dashboard session has been closed.")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def mentortrack_exception_handler(request: Request, exc: MentorTrackException) -> JSONResponse:
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
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )

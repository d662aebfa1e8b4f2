"""Error response models for consistent client-facing failures."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes surfaced to clients.

    Provider and store internals never appear in messages paired with
    these codes.
    """

    INVALID_IDEMPOTENCY_KEY = "INVALID_IDEMPOTENCY_KEY"
    """The idempotency key is missing or malformed."""

    GENERATION_IN_PROGRESS = "GENERATION_IN_PROGRESS"
    """A request with the same idempotency key is still running."""

    QUOTA_EXHAUSTED = "QUOTA_EXHAUSTED"
    """The user has no free-tier credits left in the current window."""

    MISSING_PROVIDER_CREDENTIAL = "MISSING_PROVIDER_CREDENTIAL"
    """Neither the user nor the server has a usable provider key."""

    GENERATION_FAILED = "GENERATION_FAILED"
    """Every provider profile failed."""

    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    """The artifact was generated but could not be saved."""

    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    """The coordination store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorBody(BaseModel):
    """Error body content for error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""


class ErrorResponse(BaseModel):
    """Standard error response format.

    Example:
        {
            "error": {
                "code": "GENERATION_IN_PROGRESS",
                "message": "A generation for this request is already in progress."
            }
        }
    """

    error: ErrorBody


class QuotaErrorResponse(ErrorResponse):
    """429 body: tells the client when credits come back.

    Example:
        {
            "error": {"code": "QUOTA_EXHAUSTED", "message": "..."},
            "remaining": 0,
            "reset_at": "2025-01-08T00:00:00Z"
        }
    """

    remaining: int = 0
    reset_at: datetime | None = None

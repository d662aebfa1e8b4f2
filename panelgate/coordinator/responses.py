"""Mapping of request outcomes to HTTP status codes and JSON bodies.

Error bodies follow ErrorResponse. Messages are fixed strings; provider
output and store keys never reach the client.
"""

from typing import Any

from panelgate.coordinator.models import (
    FailedGeneration,
    FailedPersistence,
    RejectedConflict,
    RejectedInvalidKey,
    RejectedQuotaExhausted,
    ReplayedResponse,
    RequestOutcome,
    ServiceUnavailable,
    SucceededGeneration,
)
from panelgate.errors import ErrorBody, ErrorCode, ErrorResponse, QuotaErrorResponse
from panelgate.exceptions import (
    CoordinationStoreError,
    LockConflictError,
    PanelgateError,
    PersistenceFailureError,
    QuotaExhaustedError,
)

GENERATION_IN_PROGRESS_MESSAGE = "A generation for this request is already in progress."
QUOTA_EXHAUSTED_MESSAGE = (
    "Free tier limit reached. Add your own API key for unlimited usage."
)
GENERATION_FAILED_MESSAGE = "Image generation failed. Please try again."
PERSISTENCE_FAILED_MESSAGE = "The generated page could not be saved. Please try again."
SERVICE_UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again."


def _error(status: int, code: ErrorCode, message: str) -> tuple[int, dict[str, Any]]:
    body = ErrorResponse(error=ErrorBody(code=code, message=message))
    return status, body.model_dump(mode="json")


def render_error(exc: PanelgateError) -> tuple[int, dict[str, Any]]:
    """Render a seam exception (e.g. a missing credential) as a response."""
    return _error(exc.status_code, exc.error_code, exc.message)


def render_outcome(outcome: RequestOutcome) -> tuple[int, dict[str, Any]]:
    """Map a terminal outcome to (status, body)."""
    if isinstance(outcome, SucceededGeneration):
        return outcome.status, outcome.body

    if isinstance(outcome, ReplayedResponse):
        return outcome.status, outcome.body

    if isinstance(outcome, RejectedInvalidKey):
        return _error(400, ErrorCode.INVALID_IDEMPOTENCY_KEY, outcome.message)

    if isinstance(outcome, RejectedConflict):
        return render_error(LockConflictError(GENERATION_IN_PROGRESS_MESSAGE))

    if isinstance(outcome, RejectedQuotaExhausted):
        body = QuotaErrorResponse(
            error=ErrorBody(
                code=QuotaExhaustedError.error_code,
                message=QUOTA_EXHAUSTED_MESSAGE,
            ),
            remaining=outcome.remaining,
            reset_at=outcome.reset_at,
        )
        return QuotaExhaustedError.status_code, body.model_dump(mode="json")

    if isinstance(outcome, FailedGeneration):
        return _error(500, ErrorCode.GENERATION_FAILED, GENERATION_FAILED_MESSAGE)

    if isinstance(outcome, FailedPersistence):
        return render_error(PersistenceFailureError(PERSISTENCE_FAILED_MESSAGE))

    if isinstance(outcome, ServiceUnavailable):
        return render_error(CoordinationStoreError(SERVICE_UNAVAILABLE_MESSAGE))

    raise TypeError(f"Unknown outcome: {outcome!r}")

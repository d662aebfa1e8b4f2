"""Request coordination for paid generation requests."""

from panelgate.coordinator.models import (
    FailedGeneration,
    FailedPersistence,
    GenerationRequest,
    RejectedConflict,
    RejectedInvalidKey,
    RejectedQuotaExhausted,
    ReplayedResponse,
    RequestOutcome,
    ServiceUnavailable,
    SucceededGeneration,
)
from panelgate.coordinator.responses import render_error, render_outcome
from panelgate.coordinator.service import RequestCoordinator

__all__ = [
    "FailedGeneration",
    "FailedPersistence",
    "GenerationRequest",
    "RejectedConflict",
    "RejectedInvalidKey",
    "RejectedQuotaExhausted",
    "ReplayedResponse",
    "RequestCoordinator",
    "RequestOutcome",
    "ServiceUnavailable",
    "SucceededGeneration",
    "render_error",
    "render_outcome",
]

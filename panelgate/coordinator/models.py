"""Request coordinator inputs and terminal outcomes.

Every request ends in exactly one outcome. Outcomes are values, not
exceptions; render_outcome maps them to status codes and bodies.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal
from uuid import uuid4


@dataclass(frozen=True)
class GenerationRequest:
    """What the coordinator needs to know about one incoming request.

    Attributes:
        user_id: Authenticated user
        idempotency_key: Raw header value, None if absent
        metered: False when the user supplied their own provider key
        request_id: Correlation id for logs
    """

    user_id: str
    idempotency_key: str | None
    metered: bool = True
    request_id: str = field(default_factory=lambda: uuid4().hex)


@dataclass(frozen=True)
class RejectedInvalidKey:
    message: str
    kind: Literal["rejected_invalid_key"] = "rejected_invalid_key"


@dataclass(frozen=True)
class ReplayedResponse:
    """Cached response of an earlier completed request with the same key."""

    status: int
    body_text: str
    kind: Literal["replayed"] = "replayed"

    @property
    def body(self) -> Any:
        return json.loads(self.body_text)


@dataclass(frozen=True)
class RejectedConflict:
    kind: Literal["rejected_conflict"] = "rejected_conflict"


@dataclass(frozen=True)
class RejectedQuotaExhausted:
    reset_at: datetime | None
    remaining: int = 0
    kind: Literal["rejected_quota_exhausted"] = "rejected_quota_exhausted"


@dataclass(frozen=True)
class FailedGeneration:
    """Every profile failed. Category and attempts are for logs only."""

    attempts: int
    last_category: str
    kind: Literal["failed_generation"] = "failed_generation"


@dataclass(frozen=True)
class FailedPersistence:
    kind: Literal["failed_persistence"] = "failed_persistence"


@dataclass(frozen=True)
class SucceededGeneration:
    """The artifact was generated, persisted and (if keyed) recorded for replay.

    Attributes:
        body_text: Serialized response body, identical to what a replay returns
        profile_id: Adapter profile that produced the artifact
        credits_remaining: Credits left after this request; None if unmetered
    """

    body_text: str
    profile_id: str
    credits_remaining: int | None = None
    status: int = 200
    kind: Literal["succeeded"] = "succeeded"

    @property
    def body(self) -> Any:
        return json.loads(self.body_text)


@dataclass(frozen=True)
class ServiceUnavailable:
    """The coordination store could not be reached."""

    kind: Literal["service_unavailable"] = "service_unavailable"


RequestOutcome = (
    RejectedInvalidKey
    | ReplayedResponse
    | RejectedConflict
    | RejectedQuotaExhausted
    | FailedGeneration
    | FailedPersistence
    | SucceededGeneration
    | ServiceUnavailable
)

"""Idempotency coordination for generation requests.

At-most-once execution per client key with verbatim replay of completed
responses. Concurrent duplicates are rejected, never queued.
"""

from panelgate.idempotency.coordinator import (
    KEY_PATTERN,
    IdempotencyCoordinator,
    idempotency_key_from_headers,
    serialize_body,
)
from panelgate.idempotency.models import (
    AcquireResult,
    Acquired,
    Conflict,
    IdempotencyKey,
    IdempotencyRecord,
    IdempotencyState,
    LockToken,
    Replay,
)

__all__ = [
    "KEY_PATTERN",
    "AcquireResult",
    "Acquired",
    "Conflict",
    "IdempotencyCoordinator",
    "IdempotencyKey",
    "IdempotencyRecord",
    "IdempotencyState",
    "LockToken",
    "Replay",
    "idempotency_key_from_headers",
    "serialize_body",
]

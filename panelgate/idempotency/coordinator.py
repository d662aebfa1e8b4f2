"""Idempotency coordinator.

Turns the shared store's set-if-absent primitive into an at-most-once
execution guarantee with response replay. Only this module reads or
writes idempotency records.

Key format: idempotency:{key}, or idempotency:{scope}:{key} when scoped.
"""

import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Any
from uuid import uuid4

from pydantic_core import to_json

from panelgate.config.models.coordination import IdempotencyConfig
from panelgate.coordination.store import LockStore
from panelgate.exceptions import InvalidKeyFormatError
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
from panelgate.observability.logging import get_logger
from panelgate.observability.metrics import IDEMPOTENCY_ACQUIRES, IDEMPOTENCY_TRANSITIONS
from panelgate.utils.clock import Clock, SystemClock

logger = get_logger(__name__)

KEY_PATTERN = re.compile(r"[A-Za-z0-9-]+")

# A lock can lapse between our failed SET NX and the follow-up GET; one
# more SET NX round covers that window.
_ACQUIRE_ROUNDS = 2


def serialize_body(body: Mapping[str, Any]) -> str:
    """Serialize a response body to the compact JSON text stored for replay.

    Datetimes, UUIDs, tuples and pydantic models are encoded the way
    pydantic encodes them in JSON mode.

    Args:
        body: Response body mapping

    Returns:
        Compact JSON text

    Raises:
        pydantic_core.PydanticSerializationError: If a value has no JSON form
    """
    return to_json(body).decode()


def idempotency_key_from_headers(
    headers: Mapping[str, str], header_name: str = "X-Idempotency-Key"
) -> str | None:
    """Extract the raw idempotency key from request headers.

    Lookup is case-insensitive. Blank values count as absent. The value is
    not validated here; pass it to IdempotencyCoordinator.validate_key.
    """
    wanted = header_name.lower()
    for name, value in headers.items():
        if name.lower() == wanted:
            value = value.strip()
            return value or None
    return None


class IdempotencyCoordinator:
    """At-most-once execution with replay over a LockStore."""

    def __init__(
        self,
        store: LockStore,
        config: IdempotencyConfig | None = None,
        clock: Clock | None = None,
        key_prefix: str = "idempotency",
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Shared lock store
            config: Key rules and TTLs
            clock: Time source for record expiry stamps
            key_prefix: Namespace for record keys
        """
        self._store = store
        self._config = config or IdempotencyConfig()
        self._clock = clock or SystemClock()
        self._key_prefix = key_prefix

    @property
    def config(self) -> IdempotencyConfig:
        return self._config

    def validate_key(self, raw: str | None) -> IdempotencyKey:
        """Check a client key against the length and charset rules.

        Never touches the store.

        Raises:
            InvalidKeyFormatError: If the key is missing or malformed
        """
        if raw is None:
            raise InvalidKeyFormatError("Idempotency key is required.")

        if not (self._config.key_min_length <= len(raw) <= self._config.key_max_length):
            raise InvalidKeyFormatError(
                f"Idempotency key must be {self._config.key_min_length}-"
                f"{self._config.key_max_length} characters."
            )

        if not KEY_PATTERN.fullmatch(raw):
            raise InvalidKeyFormatError(
                "Idempotency key may only contain letters, digits and hyphens."
            )

        return IdempotencyKey(raw)

    def _make_key(self, key: IdempotencyKey, scope: str | None) -> str:
        # RequestCoordinator passes the user id as scope, giving
        # idempotency:{user_id}:{key}, so one user's key never replays
        # another user's response.
        if scope:
            return f"{self._key_prefix}:{scope}:{key}"
        return f"{self._key_prefix}:{key}"

    async def acquire(self, key: IdempotencyKey, scope: str | None = None) -> AcquireResult:
        """Try to move the record from absent to locked.

        Returns:
            Acquired with a lock token if this attempt now owns the key,
            Replay with the cached response if the key already completed,
            Conflict if another attempt holds the lock.

        Raises:
            CoordinationStoreError: If the store is unreachable
        """
        store_key = self._make_key(key, scope)
        ttl = self._config.lock_ttl_seconds

        for _ in range(_ACQUIRE_ROUNDS):
            owner = uuid4().hex
            locked_value = IdempotencyRecord(
                state=IdempotencyState.LOCKED,
                lock_owner=owner,
                expires_at=self._clock.now() + timedelta(seconds=ttl),
            ).to_json()

            if await self._store.set_if_absent(store_key, locked_value, ttl):
                logger.info("idempotency_acquired", idempotency_key=key, ttl=ttl)
                IDEMPOTENCY_ACQUIRES.labels(result="acquired").inc()
                return Acquired(
                    token=LockToken(
                        store_key=store_key,
                        owner=owner,
                        locked_value=locked_value,
                    )
                )

            existing_raw = await self._store.get(store_key)
            if existing_raw is None:
                continue

            existing = IdempotencyRecord.parse(existing_raw)
            if existing is None:
                logger.warning("idempotency_corrupted_record", idempotency_key=key)
                IDEMPOTENCY_ACQUIRES.labels(result="conflict").inc()
                return Conflict()

            if existing.state == IdempotencyState.COMPLETED:
                logger.debug("idempotency_replay", idempotency_key=key)
                IDEMPOTENCY_ACQUIRES.labels(result="replay").inc()
                # parse() guarantees both fields on completed records
                return Replay(
                    status=existing.cached_status,  # type: ignore[arg-type]
                    body_text=existing.cached_body,  # type: ignore[arg-type]
                )

            logger.info("idempotency_conflict", idempotency_key=key)
            IDEMPOTENCY_ACQUIRES.labels(result="conflict").inc()
            return Conflict()

        logger.warning("idempotency_acquire_contended", idempotency_key=key)
        IDEMPOTENCY_ACQUIRES.labels(result="conflict").inc()
        return Conflict()

    async def complete(self, token: LockToken, status: int, body_text: str) -> bool:
        """Move a held lock to completed and cache the response.

        Call only after the generated artifact has been durably persisted.

        Args:
            token: Token from Acquired
            status: Response status to replay
            body_text: Serialized response body (see serialize_body), replayed
                byte for byte

        Returns:
            True if the record was completed; False if the token is disabled
            or the lock was lost (expired and possibly re-acquired)

        Raises:
            CoordinationStoreError: If the store is unreachable
        """
        if not token.enabled:
            return False

        ttl = self._config.replay_ttl_seconds
        completed_value = IdempotencyRecord(
            state=IdempotencyState.COMPLETED,
            lock_owner=token.owner,
            cached_status=status,
            cached_body=body_text,
            expires_at=self._clock.now() + timedelta(seconds=ttl),
        ).to_json()

        completed = await self._store.replace_if_equal(
            token.store_key, token.locked_value, completed_value, ttl
        )
        if completed:
            logger.info("idempotency_completed", store_key=token.store_key, status=status)
            IDEMPOTENCY_TRANSITIONS.labels(transition="complete", result="ok").inc()
        else:
            logger.warning("idempotency_lock_lost_on_complete", store_key=token.store_key)
            IDEMPOTENCY_TRANSITIONS.labels(transition="complete", result="lock_lost").inc()
        return completed

    async def release(self, token: LockToken) -> bool:
        """Delete a held lock so a fresh attempt can run.

        Returns:
            True if the lock was deleted; False if disabled or already gone

        Raises:
            CoordinationStoreError: If the store is unreachable
        """
        if not token.enabled:
            return False

        released = await self._store.delete_if_equal(token.store_key, token.locked_value)
        if released:
            logger.info("idempotency_released", store_key=token.store_key)
            IDEMPOTENCY_TRANSITIONS.labels(transition="release", result="ok").inc()
        else:
            logger.warning("idempotency_lock_lost_on_release", store_key=token.store_key)
            IDEMPOTENCY_TRANSITIONS.labels(transition="release", result="lock_lost").inc()
        return released

"""Idempotency models.

Record lifecycle for one key:

    absent --acquire--> locked --complete--> completed --(replay TTL)--> absent
                          |
                          +--release / lock TTL--> absent
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal, NewType

from pydantic import BaseModel, Field, ValidationError

IdempotencyKey = NewType("IdempotencyKey", str)
"""A client key that passed format validation."""


class IdempotencyState(str, Enum):
    """Stored state of an idempotency record."""

    LOCKED = "locked"
    COMPLETED = "completed"


class IdempotencyRecord(BaseModel):
    """Value stored under idempotency:{key}.

    Serialized once and compared verbatim by the store's owner-checked
    operations, so the JSON form is the record's identity.
    """

    state: IdempotencyState = Field(description="Lifecycle state")
    lock_owner: str | None = Field(default=None, description="Owner token of the acquiring attempt")
    cached_status: int | None = Field(default=None, description="Status of the completed response")
    cached_body: str | None = Field(
        default=None, description="Serialized body of the completed response"
    )
    expires_at: datetime = Field(description="When the record lapses back to absent")

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def parse(cls, raw: str) -> "IdempotencyRecord | None":
        """Parse a stored value; None if it is not a well-formed record."""
        try:
            record = cls.model_validate_json(raw)
        except ValidationError:
            return None
        if record.state == IdempotencyState.COMPLETED and (
            record.cached_status is None or record.cached_body is None
        ):
            return None
        return record


@dataclass(frozen=True)
class LockToken:
    """Proof of ownership of a locked record.

    Attributes:
        store_key: Full key in the coordination store
        owner: Random owner id written into the lock
        locked_value: Exact serialized lock record, used for compare-and-set
        enabled: False for requests that run without idempotency
    """

    store_key: str
    owner: str
    locked_value: str
    enabled: bool = True

    @classmethod
    def disabled(cls) -> "LockToken":
        """Token for an unkeyed request; complete/release are no-ops."""
        return cls(store_key="", owner="", locked_value="", enabled=False)


@dataclass(frozen=True)
class Acquired:
    """This attempt owns the key and must complete or release it."""

    token: LockToken
    kind: Literal["acquired"] = "acquired"


@dataclass(frozen=True)
class Replay:
    """The key already completed; return the cached response verbatim."""

    status: int
    body_text: str
    kind: Literal["replay"] = "replay"

    @property
    def body(self) -> Any:
        return json.loads(self.body_text)


@dataclass(frozen=True)
class Conflict:
    """Another attempt holds the lock."""

    kind: Literal["conflict"] = "conflict"


AcquireResult = Acquired | Replay | Conflict

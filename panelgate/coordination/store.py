"""Capability interfaces over the shared coordination store.

The coordination core needs exactly two things from the store:

- LockStore: set-if-absent with TTL, get, and owner-checked replace/delete
  for idempotency records.
- CounterStore: windowed reserve/refund on a bounded per-user counter.

Both must be atomic across every process instance. In-process locking is
never a substitute.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


class LockStore(ABC):
    """Atomic string slots with TTL."""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value only if key is absent.

        Returns:
            True if this call created the key
        """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired."""

    @abstractmethod
    async def replace_if_equal(
        self, key: str, expected: str, value: str, ttl_seconds: int
    ) -> bool:
        """Overwrite key with value and a fresh TTL only if it still holds expected.

        Returns:
            True if the value was replaced
        """

    @abstractmethod
    async def delete_if_equal(self, key: str, expected: str) -> bool:
        """Delete key only if it still holds expected.

        Returns:
            True if the key was deleted
        """


@dataclass(frozen=True)
class CounterSnapshot:
    """State of a windowed counter after an operation.

    Attributes:
        success: Whether the operation took effect (reserve only)
        remaining: Units left in the active window
        reset_at: When the active window ends; None if no window is open
    """

    success: bool
    remaining: int
    reset_at: datetime | None


class CounterStore(ABC):
    """Bounded counters that refill at the end of a fixed window."""

    @abstractmethod
    async def reserve(
        self, key: str, capacity: int, window_seconds: int, now: datetime
    ) -> CounterSnapshot:
        """Take one unit if any remain.

        An elapsed (or missing) window is reset to full capacity first.
        """

    @abstractmethod
    async def refund(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        """Return one unit, never exceeding capacity.

        Refunding into an elapsed window is a no-op: the next reserve
        starts from full capacity anyway.
        """

    @abstractmethod
    async def peek(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        """Read the counter without mutating it."""


class CoordinationStore(LockStore, CounterStore, ABC):
    """A single backend offering both capabilities."""

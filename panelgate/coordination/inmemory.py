"""In-memory coordination store for testing and single-process development.

Expiry is driven by the injected clock. Each operation completes without
yielding to the event loop, so operations are atomic with respect to other
tasks on the same loop. Not shared across processes.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta

from panelgate.coordination.store import CoordinationStore, CounterSnapshot
from panelgate.utils.clock import Clock, SystemClock


@dataclass
class _Slot:
    value: str
    expires_at: datetime


@dataclass
class _Counter:
    remaining: int
    window_reset_at: datetime


class InMemoryCoordinationStore(CoordinationStore):
    """Dict-backed store implementing both capability interfaces."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._slots: dict[str, _Slot] = {}
        self._counters: dict[str, _Counter] = {}
        self.calls: Counter[str] = Counter()

    @property
    def total_calls(self) -> int:
        """Number of store operations performed (test utility)."""
        return sum(self.calls.values())

    def _live_slot(self, key: str) -> _Slot | None:
        slot = self._slots.get(key)
        if slot is None:
            return None
        if self._clock.now() >= slot.expires_at:
            del self._slots[key]
            return None
        return slot

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        self.calls["set_if_absent"] += 1
        if self._live_slot(key) is not None:
            return False
        self._slots[key] = _Slot(
            value=value,
            expires_at=self._clock.now() + timedelta(seconds=ttl_seconds),
        )
        return True

    async def get(self, key: str) -> str | None:
        self.calls["get"] += 1
        slot = self._live_slot(key)
        return slot.value if slot else None

    async def replace_if_equal(
        self, key: str, expected: str, value: str, ttl_seconds: int
    ) -> bool:
        self.calls["replace_if_equal"] += 1
        slot = self._live_slot(key)
        if slot is None or slot.value != expected:
            return False
        self._slots[key] = _Slot(
            value=value,
            expires_at=self._clock.now() + timedelta(seconds=ttl_seconds),
        )
        return True

    async def delete_if_equal(self, key: str, expected: str) -> bool:
        self.calls["delete_if_equal"] += 1
        slot = self._live_slot(key)
        if slot is None or slot.value != expected:
            return False
        del self._slots[key]
        return True

    async def reserve(
        self, key: str, capacity: int, window_seconds: int, now: datetime
    ) -> CounterSnapshot:
        self.calls["reserve"] += 1
        counter = self._counters.get(key)
        if counter is None or now >= counter.window_reset_at:
            counter = _Counter(
                remaining=capacity,
                window_reset_at=now + timedelta(seconds=window_seconds),
            )
            self._counters[key] = counter

        counter.remaining = min(counter.remaining, capacity)
        if counter.remaining <= 0:
            return CounterSnapshot(
                success=False, remaining=0, reset_at=counter.window_reset_at
            )

        counter.remaining -= 1
        return CounterSnapshot(
            success=True,
            remaining=counter.remaining,
            reset_at=counter.window_reset_at,
        )

    async def refund(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        self.calls["refund"] += 1
        counter = self._counters.get(key)
        if counter is None or now >= counter.window_reset_at:
            return CounterSnapshot(success=False, remaining=capacity, reset_at=None)

        counter.remaining = min(counter.remaining + 1, capacity)
        return CounterSnapshot(
            success=True,
            remaining=counter.remaining,
            reset_at=counter.window_reset_at,
        )

    async def peek(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        self.calls["peek"] += 1
        counter = self._counters.get(key)
        if counter is None or now >= counter.window_reset_at:
            return CounterSnapshot(success=True, remaining=capacity, reset_at=None)
        return CounterSnapshot(
            success=True,
            remaining=min(counter.remaining, capacity),
            reset_at=counter.window_reset_at,
        )

    def clear(self) -> None:
        """Drop all state (test utility)."""
        self._slots.clear()
        self._counters.clear()
        self.calls.clear()

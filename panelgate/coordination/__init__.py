"""Shared coordination store.

Two capability interfaces (LockStore, CounterStore) with a Redis backend
for deployments and an in-memory backend for tests and local development.
"""

from panelgate.coordination.inmemory import InMemoryCoordinationStore
from panelgate.coordination.redis import RedisCoordinationStore
from panelgate.coordination.store import (
    CoordinationStore,
    CounterSnapshot,
    CounterStore,
    LockStore,
)

__all__ = [
    "CoordinationStore",
    "CounterSnapshot",
    "CounterStore",
    "InMemoryCoordinationStore",
    "LockStore",
    "RedisCoordinationStore",
]

"""Redis-backed coordination store.

Key format: {prefix}:{key} when a prefix is configured, otherwise {key}.
Locks use SET NX PX; every compare-and-mutate runs as a Lua script so the
read and the write happen in one atomic step on the server.

Credit counters are hashes:
    remaining        units left in the window
    window_reset_at  epoch milliseconds when the window ends
and expire at window_reset_at via PEXPIREAT.
"""

from datetime import datetime
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from panelgate.coordination.store import CoordinationStore, CounterSnapshot
from panelgate.exceptions import CoordinationStoreError
from panelgate.observability.logging import get_logger
from panelgate.utils.clock import from_epoch_ms, to_epoch_ms

logger = get_logger(__name__)

REPLACE_IF_EQUAL_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    redis.call('SET', KEYS[1], ARGV[2], 'PX', ARGV[3])
    return 1
end
return 0
"""

DELETE_IF_EQUAL_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""

RESERVE_LUA = """
local capacity = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])
local now_ms = tonumber(ARGV[3])
local remaining = tonumber(redis.call('HGET', KEYS[1], 'remaining'))
local reset_at = tonumber(redis.call('HGET', KEYS[1], 'window_reset_at'))
if remaining == nil or reset_at == nil or now_ms >= reset_at then
    remaining = capacity
    reset_at = now_ms + window_ms
end
if remaining > capacity then
    remaining = capacity
end
local success = 0
if remaining > 0 then
    remaining = remaining - 1
    success = 1
end
redis.call('HSET', KEYS[1], 'remaining', remaining, 'window_reset_at', reset_at)
redis.call('PEXPIREAT', KEYS[1], reset_at)
return {success, remaining, reset_at}
"""

REFUND_LUA = """
local capacity = tonumber(ARGV[1])
local now_ms = tonumber(ARGV[2])
local remaining = tonumber(redis.call('HGET', KEYS[1], 'remaining'))
local reset_at = tonumber(redis.call('HGET', KEYS[1], 'window_reset_at'))
if remaining == nil or reset_at == nil or now_ms >= reset_at then
    return {0, capacity, 0}
end
remaining = remaining + 1
if remaining > capacity then
    remaining = capacity
end
redis.call('HSET', KEYS[1], 'remaining', remaining)
return {1, remaining, reset_at}
"""


def _decode(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


class RedisCoordinationStore(CoordinationStore):
    """Coordination store on a shared Redis instance.

    Works with clients created with or without decode_responses.
    """

    def __init__(self, redis: Redis, key_prefix: str | None = None) -> None:
        """Initialize the store.

        Args:
            redis: Async Redis client
            key_prefix: Optional namespace for every key
        """
        self._redis = redis
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        if self._key_prefix:
            return f"{self._key_prefix}:{key}"
        return key

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            created = await self._redis.set(
                self._key(key), value, nx=True, px=ttl_seconds * 1000
            )
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to acquire key: {e}") from e
        return bool(created)

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to read key: {e}") from e
        return _decode(value)

    async def replace_if_equal(
        self, key: str, expected: str, value: str, ttl_seconds: int
    ) -> bool:
        try:
            replaced = await self._redis.eval(
                REPLACE_IF_EQUAL_LUA,
                1,
                self._key(key),
                expected,
                value,
                ttl_seconds * 1000,
            )
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to replace key: {e}") from e
        return int(replaced) == 1

    async def delete_if_equal(self, key: str, expected: str) -> bool:
        try:
            deleted = await self._redis.eval(DELETE_IF_EQUAL_LUA, 1, self._key(key), expected)
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to delete key: {e}") from e
        return int(deleted) == 1

    async def reserve(
        self, key: str, capacity: int, window_seconds: int, now: datetime
    ) -> CounterSnapshot:
        try:
            result = await self._redis.eval(
                RESERVE_LUA,
                1,
                self._key(key),
                capacity,
                window_seconds * 1000,
                to_epoch_ms(now),
            )
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to reserve credit: {e}") from e

        success, remaining, reset_at_ms = (int(v) for v in result)
        return CounterSnapshot(
            success=success == 1,
            remaining=remaining,
            reset_at=from_epoch_ms(reset_at_ms),
        )

    async def refund(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        try:
            result = await self._redis.eval(
                REFUND_LUA, 1, self._key(key), capacity, to_epoch_ms(now)
            )
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to refund credit: {e}") from e

        applied, remaining, reset_at_ms = (int(v) for v in result)
        if not applied:
            logger.debug("refund_into_elapsed_window", key=key)
        return CounterSnapshot(
            success=applied == 1,
            remaining=remaining,
            reset_at=from_epoch_ms(reset_at_ms) if reset_at_ms else None,
        )

    async def peek(self, key: str, capacity: int, now: datetime) -> CounterSnapshot:
        try:
            values = await self._redis.hmget(self._key(key), ["remaining", "window_reset_at"])
        except RedisError as e:
            raise CoordinationStoreError(f"Failed to read credit: {e}") from e

        raw_remaining, raw_reset_at = (_decode(v) for v in values)
        if raw_remaining is None or raw_reset_at is None:
            return CounterSnapshot(success=True, remaining=capacity, reset_at=None)

        reset_at_ms = int(raw_reset_at)
        if to_epoch_ms(now) >= reset_at_ms:
            return CounterSnapshot(success=True, remaining=capacity, reset_at=None)

        return CounterSnapshot(
            success=True,
            remaining=min(int(raw_remaining), capacity),
            reset_at=from_epoch_ms(reset_at_ms),
        )

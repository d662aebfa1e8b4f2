"""Coordination store configuration."""

from typing import Literal

from pydantic import BaseModel, Field

CoordinationBackend = Literal["redis", "inmemory"]


class StorageConfig(BaseModel):
    """Shared coordination store configuration.

    The in-memory backend is only correct for a single process; every
    multi-instance deployment must use redis.
    """

    backend: CoordinationBackend = Field(
        default="redis",
        description="Backend type",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (from env var)",
    )
    key_prefix: str | None = Field(
        default=None,
        description="Optional namespace prepended to every key",
    )
    socket_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Redis socket timeout in seconds",
    )

"""Request coordination configuration models.

These values are handed to the RequestCoordinator at construction time;
nothing in the coordination core reads settings from global state.
"""

from pydantic import BaseModel, Field, model_validator

from panelgate.exceptions import ConfigurationError


class IdempotencyConfig(BaseModel):
    """Idempotency key rules and record lifetimes."""

    lock_ttl_seconds: int = Field(
        default=60,
        gt=0,
        description="Lifetime of a locked record; bounds how long a crashed holder blocks retries",
    )
    replay_ttl_seconds: int = Field(
        default=86400,
        gt=0,
        description="How long a completed response is replayed",
    )
    key_min_length: int = Field(default=8, gt=0, description="Minimum key length")
    key_max_length: int = Field(default=128, gt=0, description="Maximum key length")
    require_key: bool = Field(
        default=True,
        description="Reject requests that carry no idempotency key",
    )
    header_name: str = Field(
        default="X-Idempotency-Key",
        description="Request header carrying the key",
    )

    @model_validator(mode="after")
    def _check_length_range(self) -> "IdempotencyConfig":
        if self.key_min_length > self.key_max_length:
            raise ValueError(
                f"key_min_length ({self.key_min_length}) exceeds "
                f"key_max_length ({self.key_max_length})"
            )
        return self


class CreditConfig(BaseModel):
    """Free-tier credit quota."""

    capacity: int = Field(default=3, gt=0, description="Credits per window")
    window_seconds: int = Field(
        default=7 * 24 * 3600,
        gt=0,
        description="Fixed window length; the counter refills when it elapses",
    )


class CoordinatorConfig(BaseModel):
    """Everything the request coordinator needs to know about time and quota."""

    idempotency: IdempotencyConfig = Field(
        default_factory=IdempotencyConfig,
        description="Idempotency settings",
    )
    credits: CreditConfig = Field(
        default_factory=CreditConfig,
        description="Credit ledger settings",
    )
    attempt_timeout_seconds: float = Field(
        default=25.0,
        gt=0,
        description="Budget for a single provider attempt",
    )

    def chain_budget_seconds(self, profile_count: int) -> float:
        """Worst-case time to walk a fallback chain of the given length."""
        return self.attempt_timeout_seconds * profile_count

    def check_lock_ttl(self, profile_count: int) -> None:
        """Ensure a lock outlives the longest possible fallback traversal.

        Raises:
            ConfigurationError: If the lock could expire mid-generation
        """
        budget = self.chain_budget_seconds(profile_count)
        if self.idempotency.lock_ttl_seconds <= budget:
            raise ConfigurationError(
                f"lock_ttl_seconds ({self.idempotency.lock_ttl_seconds}) must exceed the "
                f"fallback chain budget ({budget:g}s for {profile_count} profiles)"
            )

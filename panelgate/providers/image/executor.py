"""Adapter fallback executor.

Walks an ordered list of adapter profiles, one attempt per profile:
- transient failure: record it and move to the next profile
- terminal failure: stop immediately
- success: return the artifact and the profile that produced it

Each attempt runs under a timeout; a timeout is a transient failure.
Cancellation of the surrounding task is never swallowed.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from panelgate.observability.logging import get_logger
from panelgate.observability.metrics import FALLBACK_ATTEMPTS, GENERATION_LATENCY
from panelgate.providers.image.base import (
    AdapterProfile,
    FailureKind,
    GenerationFailed,
    GenerationOutcome,
    GenerationSucceeded,
    ProviderError,
    ProviderFailure,
    TerminalProviderError,
    TransientProviderError,
)
from panelgate.providers.image.classification import category_for_status, classify_failure

logger = get_logger(__name__)

Attempt = Callable[[AdapterProfile], Awaitable[GenerationOutcome]]


@dataclass(frozen=True)
class FallbackSuccess:
    """A profile produced an artifact."""

    artifact_url: str
    profile: AdapterProfile
    attempts: int
    failures: tuple[ProviderFailure, ...] = field(default_factory=tuple)
    kind: Literal["success"] = "success"


@dataclass(frozen=True)
class FallbackExhausted:
    """Every tried profile failed, or a terminal failure stopped the chain."""

    last_failure: ProviderFailure
    attempts: int
    failures: tuple[ProviderFailure, ...] = field(default_factory=tuple)
    kind: Literal["exhausted"] = "exhausted"


FallbackResult = FallbackSuccess | FallbackExhausted


class AdapterFallbackExecutor:
    """Runs one generation across an ordered chain of adapter profiles.

    Example:
        executor = AdapterFallbackExecutor(attempt_timeout=25.0)
        result = await executor.run(
            profiles,
            lambda profile: provider.generate(request, profile),
        )
    """

    def __init__(self, attempt_timeout: float = 25.0) -> None:
        """Initialize the executor.

        Args:
            attempt_timeout: Seconds allowed for a single profile attempt
        """
        if attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be positive")
        self._attempt_timeout = attempt_timeout

    @property
    def attempt_timeout(self) -> float:
        return self._attempt_timeout

    async def run(self, profiles: Sequence[AdapterProfile], attempt: Attempt) -> FallbackResult:
        """Try each profile in order until one succeeds or the chain stops.

        Args:
            profiles: Ordered chain; the first entry is always tried first
            attempt: Callable performing one provider call for a profile

        Returns:
            FallbackSuccess or FallbackExhausted

        Raises:
            ValueError: If profiles is empty
            asyncio.CancelledError: If the calling task is cancelled
        """
        if not profiles:
            raise ValueError("At least one adapter profile is required")

        failures: list[ProviderFailure] = []
        started = time.perf_counter()

        for profile in profiles:
            outcome = await self._attempt_once(profile, attempt)

            if isinstance(outcome, GenerationSucceeded):
                FALLBACK_ATTEMPTS.labels(profile_id=profile.id, result="success").inc()
                GENERATION_LATENCY.labels(result="success").observe(
                    time.perf_counter() - started
                )
                if failures:
                    logger.info(
                        "fallback_recovered",
                        profile_id=profile.id,
                        model=profile.model,
                        failed_attempts=len(failures),
                    )
                return FallbackSuccess(
                    artifact_url=outcome.artifact_url,
                    profile=profile,
                    attempts=len(failures) + 1,
                    failures=tuple(failures),
                )

            failure = outcome.failure
            failures.append(failure)
            FALLBACK_ATTEMPTS.labels(profile_id=profile.id, result=failure.kind.value).inc()
            logger.warning(
                "fallback_profile_failed",
                profile_id=profile.id,
                model=profile.model,
                failure_kind=failure.kind.value,
                category=failure.category,
                status_code=failure.status_code,
                detail=failure.detail,
            )

            if failure.kind == FailureKind.TERMINAL:
                break

        GENERATION_LATENCY.labels(result="exhausted").observe(time.perf_counter() - started)
        logger.warning(
            "fallback_exhausted",
            attempts=len(failures),
            profiles=len(profiles),
            last_category=failures[-1].category,
        )
        return FallbackExhausted(
            last_failure=failures[-1],
            attempts=len(failures),
            failures=tuple(failures),
        )

    async def _attempt_once(
        self, profile: AdapterProfile, attempt: Attempt
    ) -> GenerationOutcome:
        """Run one attempt and fold any raised error into a GenerationFailed."""
        try:
            async with asyncio.timeout(self._attempt_timeout):
                return await attempt(profile)
        except TimeoutError:
            return GenerationFailed(
                ProviderFailure(
                    kind=FailureKind.TRANSIENT,
                    category="timeout",
                    detail=f"attempt exceeded {self._attempt_timeout:g}s",
                )
            )
        except ProviderError as e:
            category = e.category or category_for_status(e.status_code)
            if isinstance(e, TerminalProviderError):
                kind = FailureKind.TERMINAL
            elif isinstance(e, TransientProviderError):
                kind = FailureKind.TRANSIENT
            else:
                kind = classify_failure(e.status_code, category)
            return GenerationFailed(
                ProviderFailure(
                    kind=kind,
                    category=category,
                    status_code=e.status_code,
                    detail=e.message,
                )
            )
        except Exception as e:
            logger.warning(
                "fallback_unexpected_error",
                profile_id=profile.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return GenerationFailed(
                ProviderFailure(
                    kind=FailureKind.TRANSIENT,
                    category="unexpected",
                    detail=f"{type(e).__name__}: {e}",
                )
            )

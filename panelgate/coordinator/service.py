"""Request coordinator.

Sequences one paid generation request:

    validate key -> acquire -> reserve credit -> fallback chain
        -> persist -> complete

and guarantees compensation on every exit path after acquisition:
- credit reserved but not spent: refund it
- lock held but not completed: release it

A generated but unpersisted artifact still spends the credit (the
provider has been paid); only the lock is released so the client can
retry under the same key.

Store calls whose effect compensation depends on (acquire, reserve) are
allowed to settle when the request is cancelled mid-call.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

from panelgate.config.models.coordination import CoordinatorConfig
from panelgate.coordinator.models import (
    FailedGeneration,
    FailedPersistence,
    GenerationRequest,
    RejectedConflict,
    RejectedInvalidKey,
    RejectedQuotaExhausted,
    ReplayedResponse,
    RequestOutcome,
    ServiceUnavailable,
    SucceededGeneration,
)
from panelgate.credentials import ProviderCredential
from panelgate.credits.ledger import CreditLedger
from panelgate.credits.models import CreditReservation, CreditStatus
from panelgate.exceptions import (
    ConfigurationError,
    CoordinationStoreError,
    InvalidKeyFormatError,
)
from panelgate.idempotency.coordinator import IdempotencyCoordinator, serialize_body
from panelgate.idempotency.models import (
    AcquireResult,
    Acquired,
    Conflict,
    IdempotencyKey,
    LockToken,
    Replay,
)
from panelgate.observability.logging import get_logger
from panelgate.observability.metrics import REQUEST_OUTCOMES
from panelgate.providers.image.base import AdapterProfile, GenerationOutcome
from panelgate.providers.image.executor import (
    AdapterFallbackExecutor,
    FallbackExhausted,
    FallbackSuccess,
)

logger = get_logger(__name__)

Generate = Callable[[AdapterProfile], Awaitable[GenerationOutcome]]
Persist = Callable[[FallbackSuccess], Awaitable[Mapping[str, Any]]]

_T = TypeVar("_T")


class _Progress:
    """Mutable bookkeeping read by the compensation step."""

    def __init__(self, token: LockToken | None = None) -> None:
        self.token = token or LockToken.disabled()
        self.reserved = False
        self.credit_spent = False
        self.lock_settled = False


async def _settle(aw: Awaitable[_T]) -> _T:
    """Await a store call, letting it finish even if the caller is cancelled.

    A call abandoned mid-flight may already have been applied by the store.
    Letting it run to completion keeps the compensation bookkeeping true.
    CancelledError is re-raised once the call has settled.
    """
    task = asyncio.ensure_future(aw)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        if not task.done():
            await asyncio.wait([task])
        if task.done() and not task.cancelled():
            # Store errors here are moot; retrieve them so asyncio does not warn.
            task.exception()
        raise


class RequestCoordinator:
    """Runs generation requests under idempotency and credit control.

    Example:
        coordinator = RequestCoordinator(idempotency, ledger, executor, profiles, config)
        outcome = await coordinator.handle(
            GenerationRequest(user_id="u1", idempotency_key=key),
            generate=lambda profile: provider.generate(image_request, profile),
            persist=save_page,
        )
        status, body = render_outcome(outcome)
    """

    def __init__(
        self,
        idempotency: IdempotencyCoordinator,
        ledger: CreditLedger,
        executor: AdapterFallbackExecutor,
        profiles: Sequence[AdapterProfile],
        config: CoordinatorConfig | None = None,
    ) -> None:
        """Initialize the coordinator.

        Raises:
            ConfigurationError: If the lock TTL cannot cover the fallback chain
        """
        self._config = config or CoordinatorConfig()
        if not profiles:
            raise ConfigurationError("At least one adapter profile is required")
        if executor.attempt_timeout > self._config.attempt_timeout_seconds:
            raise ConfigurationError(
                f"executor attempt timeout ({executor.attempt_timeout:g}s) exceeds "
                f"attempt_timeout_seconds ({self._config.attempt_timeout_seconds:g}s)"
            )
        self._config.check_lock_ttl(len(profiles))

        self._idempotency = idempotency
        self._ledger = ledger
        self._executor = executor
        self._profiles = tuple(profiles)

    @property
    def profiles(self) -> tuple[AdapterProfile, ...]:
        return self._profiles

    async def handle(
        self,
        request: GenerationRequest,
        generate: Generate,
        persist: Persist,
    ) -> RequestOutcome:
        """Run one request to a terminal outcome.

        Args:
            request: Who is asking, with which key, and whether it is metered
            generate: Performs one provider attempt for a profile
            persist: Stores the artifact and returns the response body as a
                JSON mapping. The body is serialized once and that text is
                both returned and replayed. Any exception, including an
                unserializable body, counts as a persistence failure

        Returns:
            The terminal RequestOutcome

        Raises:
            asyncio.CancelledError: After compensation, if the task is cancelled
        """
        outcome = await self._handle(request, generate, persist)
        REQUEST_OUTCOMES.labels(outcome=outcome.kind).inc()
        logger.info(
            "generation_request_finished",
            request_id=request.request_id,
            user_id=request.user_id,
            outcome=outcome.kind,
        )
        return outcome

    async def _handle(
        self,
        request: GenerationRequest,
        generate: Generate,
        persist: Persist,
    ) -> RequestOutcome:
        raw_key = request.idempotency_key
        if raw_key is None and not self._idempotency.config.require_key:
            return await self._run_locked(request, _Progress(), generate, persist)

        try:
            key = self._idempotency.validate_key(raw_key)
        except InvalidKeyFormatError as e:
            return RejectedInvalidKey(message=e.message)

        progress = _Progress()
        try:
            acquired = await _settle(self._acquire(key, request.user_id, progress))
        except CoordinationStoreError as e:
            logger.error(
                "coordination_store_unavailable",
                request_id=request.request_id,
                stage="acquire",
                error=str(e),
            )
            return ServiceUnavailable()
        except asyncio.CancelledError:
            await asyncio.shield(self._compensate(request, progress))
            raise

        if isinstance(acquired, Replay):
            return ReplayedResponse(status=acquired.status, body_text=acquired.body_text)
        if isinstance(acquired, Conflict):
            return RejectedConflict()

        return await self._run_locked(request, progress, generate, persist)

    async def _acquire(
        self, key: IdempotencyKey, user_id: str, progress: _Progress
    ) -> AcquireResult:
        acquired = await self._idempotency.acquire(key, scope=user_id)
        if isinstance(acquired, Acquired):
            progress.token = acquired.token
        return acquired

    async def _reserve(self, user_id: str, progress: _Progress) -> CreditReservation:
        reservation = await self._ledger.reserve(user_id)
        progress.reserved = reservation.success
        return reservation

    async def _run_locked(
        self,
        request: GenerationRequest,
        progress: _Progress,
        generate: Generate,
        persist: Persist,
    ) -> RequestOutcome:
        try:
            return await self._generate(request, progress, generate, persist)
        except CoordinationStoreError as e:
            logger.error(
                "coordination_store_unavailable",
                request_id=request.request_id,
                stage="generation",
                error=str(e),
            )
            return ServiceUnavailable()
        finally:
            await asyncio.shield(self._compensate(request, progress))

    async def _generate(
        self,
        request: GenerationRequest,
        progress: _Progress,
        generate: Generate,
        persist: Persist,
    ) -> RequestOutcome:
        credits_remaining: int | None = None
        if request.metered:
            # Settled even on cancellation: the store may have applied the
            # decrement before the reply arrives.
            reservation = await _settle(self._reserve(request.user_id, progress))
            if not reservation.success:
                return RejectedQuotaExhausted(reset_at=reservation.reset_at)
            credits_remaining = reservation.remaining

        result = await self._executor.run(self._profiles, generate)

        if isinstance(result, FallbackExhausted):
            return FailedGeneration(
                attempts=result.attempts,
                last_category=result.last_failure.category,
            )

        progress.credit_spent = True

        try:
            body_text = serialize_body(await persist(result))
        except Exception as e:
            logger.error(
                "generation_persist_failed",
                request_id=request.request_id,
                user_id=request.user_id,
                profile_id=result.profile.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return FailedPersistence()

        if progress.token.enabled:
            try:
                await self._idempotency.complete(progress.token, 200, body_text)
            except CoordinationStoreError as e:
                # The artifact is saved; the lock is left to expire rather
                # than released, so a retry cannot regenerate immediately.
                logger.error(
                    "idempotency_complete_failed",
                    request_id=request.request_id,
                    error=str(e),
                )
        progress.lock_settled = True

        return SucceededGeneration(
            body_text=body_text,
            profile_id=result.profile.id,
            credits_remaining=credits_remaining,
        )

    async def _compensate(self, request: GenerationRequest, progress: _Progress) -> None:
        """Refund an unspent credit and release an unsettled lock."""
        if progress.reserved and not progress.credit_spent:
            try:
                await self._ledger.refund(request.user_id)
            except CoordinationStoreError as e:
                logger.error(
                    "credit_refund_failed",
                    request_id=request.request_id,
                    user_id=request.user_id,
                    error=str(e),
                )

        if progress.token.enabled and not progress.lock_settled:
            try:
                await self._idempotency.release(progress.token)
            except CoordinationStoreError as e:
                logger.error(
                    "idempotency_release_failed",
                    request_id=request.request_id,
                    error=str(e),
                )

    async def check_credits(self, user_id: str, credential: ProviderCredential) -> CreditStatus:
        """Report remaining credits; users on their own key are unlimited."""
        if not credential.metered:
            return CreditStatus(unlimited=True)
        return await self._ledger.get_status(user_id)

"""Per-user windowed credit ledger.

Each user gets `capacity` credits per fixed window. The window opens on
the first reservation and the counter refills when it elapses. Counts
live only in the shared store; nothing is cached in process.
"""

from panelgate.config.models.coordination import CreditConfig
from panelgate.coordination.store import CounterStore
from panelgate.credits.models import CreditReservation, CreditStatus
from panelgate.observability.logging import get_logger
from panelgate.observability.metrics import CREDIT_OPERATIONS
from panelgate.utils.clock import Clock, SystemClock

logger = get_logger(__name__)


class CreditLedger:
    """Atomic reserve/refund of free-tier generation credits."""

    def __init__(
        self,
        store: CounterStore,
        config: CreditConfig | None = None,
        clock: Clock | None = None,
        key_prefix: str = "credit",
    ) -> None:
        self._store = store
        self._config = config or CreditConfig()
        self._clock = clock or SystemClock()
        self._key_prefix = key_prefix

    @property
    def config(self) -> CreditConfig:
        return self._config

    def _make_key(self, user_id: str) -> str:
        return f"{self._key_prefix}:{user_id}"

    async def reserve(self, user_id: str) -> CreditReservation:
        """Take one credit if any remain in the active window.

        Raises:
            CoordinationStoreError: If the store is unreachable
        """
        snapshot = await self._store.reserve(
            self._make_key(user_id),
            capacity=self._config.capacity,
            window_seconds=self._config.window_seconds,
            now=self._clock.now(),
        )

        if snapshot.success:
            logger.info(
                "credit_reserved",
                user_id=user_id,
                remaining=snapshot.remaining,
            )
            CREDIT_OPERATIONS.labels(operation="reserve", result="ok").inc()
        else:
            logger.info(
                "credit_exhausted",
                user_id=user_id,
                reset_at=snapshot.reset_at.isoformat() if snapshot.reset_at else None,
            )
            CREDIT_OPERATIONS.labels(operation="reserve", result="exhausted").inc()

        return CreditReservation(
            success=snapshot.success,
            remaining=snapshot.remaining if snapshot.success else 0,
            reset_at=snapshot.reset_at,
        )

    async def refund(self, user_id: str) -> CreditStatus:
        """Return one credit, clamped to capacity.

        Call at most once per successful reserve.

        Raises:
            CoordinationStoreError: If the store is unreachable
        """
        snapshot = await self._store.refund(
            self._make_key(user_id),
            capacity=self._config.capacity,
            now=self._clock.now(),
        )
        logger.info("credit_refunded", user_id=user_id, remaining=snapshot.remaining)
        CREDIT_OPERATIONS.labels(operation="refund", result="ok").inc()
        return CreditStatus(remaining=snapshot.remaining, reset_at=snapshot.reset_at)

    async def get_status(self, user_id: str) -> CreditStatus:
        """Read remaining credits without mutating them."""
        snapshot = await self._store.peek(
            self._make_key(user_id),
            capacity=self._config.capacity,
            now=self._clock.now(),
        )
        return CreditStatus(remaining=snapshot.remaining, reset_at=snapshot.reset_at)

"""Construction of the coordination stack from settings.

Usage:
    settings = get_settings()
    setup_logging(**settings.observability.logging.model_dump())
    coordinator = create_request_coordinator(settings)
"""

from redis.asyncio import Redis

from panelgate.config import Settings, get_settings
from panelgate.config.models.storage import StorageConfig
from panelgate.coordination.inmemory import InMemoryCoordinationStore
from panelgate.coordination.redis import RedisCoordinationStore
from panelgate.coordination.store import CoordinationStore
from panelgate.coordinator.service import RequestCoordinator
from panelgate.credentials import ProviderCredential
from panelgate.credits.ledger import CreditLedger
from panelgate.idempotency.coordinator import IdempotencyCoordinator
from panelgate.observability.logging import get_logger
from panelgate.providers.image.executor import AdapterFallbackExecutor
from panelgate.providers.image.profiles import build_adapter_profiles
from panelgate.providers.image.together import TogetherImageProvider
from panelgate.utils.clock import Clock, SystemClock

logger = get_logger(__name__)


def create_coordination_store(
    config: StorageConfig,
    redis: Redis | None = None,
    clock: Clock | None = None,
) -> CoordinationStore:
    """Create the shared store for the configured backend.

    Args:
        config: Storage configuration
        redis: Existing client to reuse; one is created from redis_url otherwise
        clock: Clock for the in-memory backend's expiry
    """
    if config.backend == "inmemory":
        logger.warning("inmemory_coordination_store", reason="single process only")
        return InMemoryCoordinationStore(clock=clock)

    if redis is None:
        redis = Redis.from_url(config.redis_url, socket_timeout=config.socket_timeout)
    return RedisCoordinationStore(redis, key_prefix=config.key_prefix)


def create_request_coordinator(
    settings: Settings | None = None,
    redis: Redis | None = None,
    clock: Clock | None = None,
    store: CoordinationStore | None = None,
) -> RequestCoordinator:
    """Wire store, ledger, idempotency, executor and profiles from settings.

    Raises:
        ConfigurationError: If the lock TTL cannot cover the fallback chain
    """
    settings = settings or get_settings()
    clock = clock or SystemClock()
    store = store or create_coordination_store(settings.storage, redis=redis, clock=clock)

    coordination = settings.coordination
    profiles = build_adapter_profiles(settings.providers.image)

    coordinator = RequestCoordinator(
        idempotency=IdempotencyCoordinator(store, coordination.idempotency, clock),
        ledger=CreditLedger(store, coordination.credits, clock),
        executor=AdapterFallbackExecutor(coordination.attempt_timeout_seconds),
        profiles=profiles,
        config=coordination,
    )

    logger.info(
        "request_coordinator_created",
        backend=settings.storage.backend,
        profiles=[profile.id for profile in profiles],
        lock_ttl_seconds=coordination.idempotency.lock_ttl_seconds,
        credit_capacity=coordination.credits.capacity,
    )
    return coordinator


def create_image_provider(
    credential: ProviderCredential, settings: Settings | None = None
) -> TogetherImageProvider:
    """Create a provider bound to the request's resolved credential."""
    settings = settings or get_settings()
    image = settings.providers.image
    return TogetherImageProvider(
        api_key=credential.api_key,
        base_url=image.base_url,
        temperature=image.temperature,
    )


def server_api_key(settings: Settings | None = None) -> str | None:
    """Return the configured server provider key, if any."""
    settings = settings or get_settings()
    key = settings.providers.image.api_key
    return key.get_secret_value() if key else None

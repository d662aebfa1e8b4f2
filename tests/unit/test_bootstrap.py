"""Unit tests for coordinator wiring."""

from unittest.mock import AsyncMock

import pytest

from panelgate.bootstrap import (
    create_coordination_store,
    create_image_provider,
    create_request_coordinator,
    server_api_key,
)
from panelgate.config.models.storage import StorageConfig
from panelgate.config.settings import Settings
from panelgate.coordination.inmemory import InMemoryCoordinationStore
from panelgate.coordination.redis import RedisCoordinationStore
from panelgate.coordinator import GenerationRequest, SucceededGeneration
from panelgate.credentials import ProviderCredential
from panelgate.exceptions import ConfigurationError
from panelgate.providers.image import ImageRequest, MockImageProvider


class TestCreateCoordinationStore:
    """Tests for backend selection."""

    def test_inmemory_backend(self) -> None:
        store = create_coordination_store(StorageConfig(backend="inmemory"))
        assert isinstance(store, InMemoryCoordinationStore)

    def test_redis_backend_reuses_client(self) -> None:
        store = create_coordination_store(
            StorageConfig(backend="redis", key_prefix="pg"), redis=AsyncMock()
        )
        assert isinstance(store, RedisCoordinationStore)

    def test_redis_backend_builds_client(self) -> None:
        """A client is created lazily from the URL; no connection is made."""
        store = create_coordination_store(StorageConfig(backend="redis"))
        assert isinstance(store, RedisCoordinationStore)


class TestCreateRequestCoordinator:
    """Tests for create_request_coordinator."""

    def test_profiles_from_settings(self) -> None:
        settings = Settings(
            storage={"backend": "inmemory"},
            providers={"image": {"fallback_model": "google/flash-image-2.5"}},
        )

        coordinator = create_request_coordinator(settings)

        assert [p.id for p in coordinator.profiles] == ["together-primary", "together-fallback"]

    def test_inconsistent_timing_rejected(self) -> None:
        settings = Settings(
            storage={"backend": "inmemory"},
            coordination={"idempotency": {"lock_ttl_seconds": 30}},
        )
        with pytest.raises(ConfigurationError):
            create_request_coordinator(settings)

    async def test_wired_coordinator_handles_request(self, store, clock) -> None:
        coordinator = create_request_coordinator(Settings(), clock=clock, store=store)
        provider = MockImageProvider()

        async def persist(result):
            return {"imageUrl": result.artifact_url}

        outcome = await coordinator.handle(
            GenerationRequest(user_id="u1", idempotency_key="abc123-REQ-0001"),
            lambda profile: provider.generate(ImageRequest(prompt="p"), profile),
            persist,
        )

        assert isinstance(outcome, SucceededGeneration)
        assert outcome.credits_remaining == 2


class TestProviderHelpers:
    """Tests for provider wiring helpers."""

    def test_create_image_provider(self) -> None:
        provider = create_image_provider(ProviderCredential("tgp_v1_x", "user"), Settings())
        assert provider.provider_name == "together"

    def test_server_api_key(self) -> None:
        assert server_api_key(Settings()) is None
        settings = Settings(providers={"image": {"api_key": "tgp_v1_x"}})
        assert server_api_key(settings) == "tgp_v1_x"

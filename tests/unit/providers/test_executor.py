"""Unit tests for AdapterFallbackExecutor."""

import asyncio

import pytest

from panelgate.providers.image import (
    AdapterFallbackExecutor,
    AdapterProfile,
    FailureKind,
    FallbackExhausted,
    FallbackSuccess,
    GenerationFailed,
    GenerationSucceeded,
    ImageRequest,
    MockImageProvider,
    ProviderError,
    ProviderFailure,
    TerminalProviderError,
    TransientProviderError,
)


def make_profiles(count: int) -> list[AdapterProfile]:
    return [
        AdapterProfile(
            id=f"profile-{i}",
            model=f"model-{i}",
            width=864,
            height=1184,
            fallback_order=i,
        )
        for i in range(1, count + 1)
    ]


def transient(category: str = "server_error") -> GenerationFailed:
    return GenerationFailed(ProviderFailure(kind=FailureKind.TRANSIENT, category=category))


def terminal(category: str = "content_policy") -> GenerationFailed:
    return GenerationFailed(ProviderFailure(kind=FailureKind.TERMINAL, category=category))


@pytest.fixture
def request_() -> ImageRequest:
    return ImageRequest(prompt="A detective in the rain")


class TestRun:
    """Tests for the fallback walk."""

    async def test_first_profile_succeeds(self, request_: ImageRequest) -> None:
        provider = MockImageProvider()
        executor = AdapterFallbackExecutor(attempt_timeout=1)

        result = await executor.run(make_profiles(3), lambda p: provider.generate(request_, p))

        assert isinstance(result, FallbackSuccess)
        assert result.profile.id == "profile-1"
        assert result.attempts == 1
        assert provider.models_called == ["model-1"]

    async def test_transient_failures_then_success(self, request_: ImageRequest) -> None:
        """N-1 transient failures then success: N attempts, in order."""
        provider = MockImageProvider(
            outcomes={"model-1": [transient()], "model-2": [transient("timeout")]}
        )
        executor = AdapterFallbackExecutor(attempt_timeout=1)

        result = await executor.run(make_profiles(3), lambda p: provider.generate(request_, p))

        assert isinstance(result, FallbackSuccess)
        assert result.profile.id == "profile-3"
        assert result.attempts == 3
        assert [f.category for f in result.failures] == ["server_error", "timeout"]
        assert provider.models_called == ["model-1", "model-2", "model-3"]

    async def test_terminal_stops_chain(self, request_: ImageRequest) -> None:
        """Terminal failure at position k: exactly k attempts."""
        provider = MockImageProvider(outcomes={"model-1": [transient()], "model-2": [terminal()]})
        executor = AdapterFallbackExecutor(attempt_timeout=1)

        result = await executor.run(make_profiles(3), lambda p: provider.generate(request_, p))

        assert isinstance(result, FallbackExhausted)
        assert result.attempts == 2
        assert result.last_failure.category == "content_policy"
        assert provider.models_called == ["model-1", "model-2"]

    async def test_all_transient_exhausts(self, request_: ImageRequest) -> None:
        provider = MockImageProvider(
            outcomes={"model-1": [transient()], "model-2": [transient("network")]}
        )
        executor = AdapterFallbackExecutor(attempt_timeout=1)

        result = await executor.run(make_profiles(2), lambda p: provider.generate(request_, p))

        assert isinstance(result, FallbackExhausted)
        assert result.attempts == 2
        assert result.last_failure.category == "network"
        assert len(result.failures) == 2

    async def test_empty_profiles_rejected(self) -> None:
        executor = AdapterFallbackExecutor()
        with pytest.raises(ValueError):
            await executor.run([], lambda p: None)  # type: ignore[arg-type, return-value]


class TestAttemptErrors:
    """Tests for errors raised by the attempt callable."""

    async def test_timeout_is_transient(self, request_: ImageRequest) -> None:
        slow = MockImageProvider(delay=1.0)
        fast = MockImageProvider(default_url="https://img/fast.png")
        profiles = make_profiles(2)
        executor = AdapterFallbackExecutor(attempt_timeout=0.01)

        async def attempt(profile: AdapterProfile):
            provider = slow if profile.id == "profile-1" else fast
            return await provider.generate(request_, profile)

        result = await executor.run(profiles, attempt)

        assert isinstance(result, FallbackSuccess)
        assert result.artifact_url == "https://img/fast.png"
        assert result.failures[0].category == "timeout"

    async def test_provider_error_is_classified(self) -> None:
        async def attempt(profile: AdapterProfile):
            raise ProviderError("payment required", status_code=402)

        result = await AdapterFallbackExecutor().run(make_profiles(2), attempt)

        assert isinstance(result, FallbackExhausted)
        assert result.attempts == 1
        assert result.last_failure.kind == FailureKind.TERMINAL
        assert result.last_failure.category == "credit_limit"

    async def test_explicit_subclasses_override_status(self) -> None:
        """Typed errors decide the kind regardless of status."""

        async def attempt(profile: AdapterProfile):
            if profile.id == "profile-1":
                raise TransientProviderError("overloaded", status_code=400)
            raise TerminalProviderError("blocked", category="content_policy")

        result = await AdapterFallbackExecutor().run(make_profiles(3), attempt)

        assert isinstance(result, FallbackExhausted)
        assert result.attempts == 2
        assert result.failures[0].kind == FailureKind.TRANSIENT
        assert result.last_failure.kind == FailureKind.TERMINAL

    async def test_unexpected_exception_is_transient(self) -> None:
        calls: list[str] = []

        async def attempt(profile: AdapterProfile):
            calls.append(profile.id)
            if profile.id == "profile-1":
                raise RuntimeError("boom")
            return GenerationSucceeded(artifact_url="https://img/2.png")

        result = await AdapterFallbackExecutor().run(make_profiles(2), attempt)

        assert isinstance(result, FallbackSuccess)
        assert calls == ["profile-1", "profile-2"]
        assert result.failures[0].category == "unexpected"

    async def test_cancellation_propagates(self, request_: ImageRequest) -> None:
        started = asyncio.Event()

        async def attempt(profile: AdapterProfile):
            started.set()
            await asyncio.sleep(10)
            return GenerationSucceeded(artifact_url="never")

        executor = AdapterFallbackExecutor(attempt_timeout=30)
        task = asyncio.create_task(executor.run(make_profiles(2), attempt))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestExecutorConfig:
    """Tests for constructor validation."""

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            AdapterFallbackExecutor(attempt_timeout=0)

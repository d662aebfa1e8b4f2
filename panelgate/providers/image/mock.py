"""Mock image provider for testing."""

import asyncio
from collections import defaultdict, deque
from typing import Any

from panelgate.providers.image.base import (
    AdapterProfile,
    GenerationOutcome,
    GenerationSucceeded,
    ImageProvider,
    ImageRequest,
)


class MockImageProvider(ImageProvider):
    """Mock image provider for testing.

    Returns scripted outcomes per model without making API calls. When a
    model's script runs out, the default URL is returned.
    """

    def __init__(
        self,
        default_url: str = "https://images.example.test/panel.png",
        outcomes: dict[str, list[GenerationOutcome]] | None = None,
        delay: float = 0.0,
    ):
        """Initialize mock provider.

        Args:
            default_url: Artifact URL returned when nothing is scripted
            outcomes: Dict mapping model id to outcomes returned in order
            delay: Seconds to sleep before answering
        """
        self._default_url = default_url
        self._outcomes: dict[str, deque[GenerationOutcome]] = defaultdict(deque)
        for model, scripted in (outcomes or {}).items():
            self._outcomes[model].extend(scripted)
        self._delay = delay
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    @property
    def models_called(self) -> list[str]:
        return [call["model"] for call in self._call_history]

    def clear_history(self) -> None:
        """Clear call history."""
        self._call_history.clear()

    def script(self, model: str, *outcomes: GenerationOutcome) -> None:
        """Queue outcomes for a model."""
        self._outcomes[model].extend(outcomes)

    async def generate(
        self, request: ImageRequest, profile: AdapterProfile, **kwargs: Any
    ) -> GenerationOutcome:
        """Return the next scripted outcome for the profile's model."""
        self._call_history.append({
            "prompt": request.prompt,
            "model": profile.model,
            "profile_id": profile.id,
            "width": profile.width,
            "height": profile.height,
            "kwargs": kwargs,
        })

        if self._delay:
            await asyncio.sleep(self._delay)

        queue = self._outcomes.get(profile.model)
        if queue:
            return queue.popleft()
        return GenerationSucceeded(artifact_url=self._default_url)

"""Image generation data models and provider interface.

This module provides the core types shared by providers and the
AdapterFallbackExecutor:
- AdapterProfile: one entry of the ordered fallback chain
- ImageRequest: what to draw
- GenerationSucceeded / GenerationFailed: the outcome of one attempt
- ProviderFailure: a classified failure with its internal detail
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AdapterProfile(BaseModel):
    """Immutable provider configuration for one fallback position."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable profile id, used in logs and metrics")
    provider: str = Field(default="together", description="Provider name")
    model: str = Field(..., description="Provider model id")
    width: int = Field(..., gt=0, description="Output width in pixels")
    height: int = Field(..., gt=0, description="Output height in pixels")
    fallback_order: int = Field(..., ge=1, description="Position in the chain, 1 first")
    cost_tier: Literal["free", "standard", "premium"] = Field(default="standard")
    capabilities: tuple[str, ...] = Field(
        default=("image_generation", "reference_images"),
        description="Features this model supports",
    )


class ImageRequest(BaseModel):
    """A single comic panel to generate."""

    prompt: str = Field(..., min_length=1, description="Full panel prompt")
    reference_images: list[str] = Field(
        default_factory=list, description="Reference image URLs (character sheets)"
    )
    temperature: float | None = Field(default=None, description="Sampling temperature")


class FailureKind(str, Enum):
    """How the fallback chain reacts to a failure."""

    TRANSIENT = "transient"
    """Try the next profile."""

    TERMINAL = "terminal"
    """Stop the chain; another model will not help."""


@dataclass(frozen=True)
class ProviderFailure:
    """A classified provider failure.

    `detail` is raw provider text for logs only; it never reaches clients.
    """

    kind: FailureKind
    category: str
    status_code: int | None = None
    detail: str = ""


@dataclass(frozen=True)
class GenerationSucceeded:
    """The provider produced an image."""

    artifact_url: str
    kind: Literal["succeeded"] = "succeeded"


@dataclass(frozen=True)
class GenerationFailed:
    """The provider did not produce an image."""

    failure: ProviderFailure
    kind: Literal["failed"] = "failed"


GenerationOutcome = GenerationSucceeded | GenerationFailed


class ProviderError(Exception):
    """Raised by attempt callables that prefer exceptions to outcomes.

    The executor classifies it from status_code and category; the
    Transient and Terminal subclasses fix the kind explicitly.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        category: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.category = category
        super().__init__(message)


class TransientProviderError(ProviderError):
    """Failure that another profile may not share (overload, outage)."""


class TerminalProviderError(ProviderError):
    """Failure that no other profile will fix (bad credential, blocked prompt)."""


class ImageProvider(ABC):
    """Interface for image generation providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def generate(
        self, request: ImageRequest, profile: AdapterProfile, **kwargs: Any
    ) -> GenerationOutcome:
        """Run one generation attempt with the given profile.

        Failures are returned as GenerationFailed, never raised, except
        for cancellation.
        """
        pass

"""Image generation providers and the adapter fallback chain."""

from panelgate.providers.image.base import (
    AdapterProfile,
    FailureKind,
    GenerationFailed,
    GenerationOutcome,
    GenerationSucceeded,
    ImageProvider,
    ImageRequest,
    ProviderError,
    ProviderFailure,
    TerminalProviderError,
    TransientProviderError,
)
from panelgate.providers.image.classification import classify_failure
from panelgate.providers.image.executor import (
    AdapterFallbackExecutor,
    FallbackExhausted,
    FallbackResult,
    FallbackSuccess,
)
from panelgate.providers.image.mock import MockImageProvider
from panelgate.providers.image.profiles import build_adapter_profiles
from panelgate.providers.image.together import TogetherImageProvider

__all__ = [
    "AdapterFallbackExecutor",
    "AdapterProfile",
    "FailureKind",
    "FallbackExhausted",
    "FallbackResult",
    "FallbackSuccess",
    "GenerationFailed",
    "GenerationOutcome",
    "GenerationSucceeded",
    "ImageProvider",
    "ImageRequest",
    "MockImageProvider",
    "ProviderError",
    "ProviderFailure",
    "TerminalProviderError",
    "TogetherImageProvider",
    "TransientProviderError",
    "build_adapter_profiles",
    "classify_failure",
]

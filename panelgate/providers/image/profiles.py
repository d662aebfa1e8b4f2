"""Adapter profile construction from provider configuration."""

from panelgate.config.models.providers import ImageProviderConfig
from panelgate.providers.image.base import AdapterProfile

MODEL_DIMENSIONS: dict[str, tuple[int, int]] = {
    "google/gemini-3-pro-image": (896, 1152),
    "google/flash-image-2.5": (864, 1184),
}

DEFAULT_DIMENSIONS = (864, 1184)


def dimensions_for_model(model: str) -> tuple[int, int]:
    """Return (width, height) for a model, falling back to the default."""
    return MODEL_DIMENSIONS.get(model, DEFAULT_DIMENSIONS)


def build_adapter_profiles(config: ImageProviderConfig) -> list[AdapterProfile]:
    """Build the ordered fallback chain.

    The primary profile always comes first. A fallback profile is added
    only when configured and distinct from the primary model.
    """
    width, height = dimensions_for_model(config.primary_model)
    profiles = [
        AdapterProfile(
            id="together-primary",
            model=config.primary_model,
            width=width,
            height=height,
            fallback_order=1,
        )
    ]

    fallback = config.fallback_model
    if fallback and fallback != config.primary_model:
        width, height = dimensions_for_model(fallback)
        profiles.append(
            AdapterProfile(
                id="together-fallback",
                model=fallback,
                width=width,
                height=height,
                fallback_order=2,
            )
        )

    return sorted(profiles, key=lambda profile: profile.fallback_order)

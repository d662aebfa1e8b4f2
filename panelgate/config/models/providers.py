"""Image provider configuration models."""

from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_PRIMARY_IMAGE_MODEL = "google/gemini-3-pro-image"


class ImageProviderConfig(BaseModel):
    """Configuration for the image-generation provider."""

    primary_model: str = Field(
        default=DEFAULT_PRIMARY_IMAGE_MODEL,
        description="Model attempted first",
    )
    fallback_model: str | None = Field(
        default=None,
        description="Model attempted when the primary fails transiently",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Server API key (prefer env var)",
    )
    base_url: str = Field(
        default="https://api.together.xyz/v1",
        description="Provider API base URL",
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )

    @field_validator("primary_model")
    @classmethod
    def _strip_primary(cls, value: str) -> str:
        value = value.strip()
        return value or DEFAULT_PRIMARY_IMAGE_MODEL

    @field_validator("fallback_model")
    @classmethod
    def _strip_fallback(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ProvidersConfig(BaseModel):
    """AI provider configuration."""

    image: ImageProviderConfig = Field(
        default_factory=ImageProviderConfig,
        description="Image generation provider",
    )

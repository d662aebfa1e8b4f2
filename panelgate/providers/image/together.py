"""Together AI image generation provider."""

from typing import Any

import httpx

from panelgate.observability.logging import get_logger
from panelgate.providers.image.base import (
    AdapterProfile,
    GenerationFailed,
    GenerationOutcome,
    GenerationSucceeded,
    ImageProvider,
    ImageRequest,
    ProviderFailure,
)
from panelgate.providers.image.classification import (
    category_for_status,
    classify_failure,
    is_content_policy_violation,
)

logger = get_logger(__name__)


class TogetherImageProvider(ImageProvider):
    """Image provider using the Together AI images API.

    Never raises for provider-side failures: HTTP errors, transport errors
    and malformed payloads come back as classified GenerationFailed
    outcomes. Timeouts are left to the fallback executor.
    """

    DEFAULT_BASE_URL = "https://api.together.xyz/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float | None = 0.1,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        """Initialize Together image provider.

        Args:
            api_key: Together API key (user-supplied or server key)
            base_url: API base URL
            temperature: Default sampling temperature
            client: Shared httpx client; one is created if omitted
            timeout: HTTP timeout in seconds for an owned client
        """
        if not api_key:
            raise ValueError("Together API key is required")

        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._temperature = temperature
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "together"

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    def _build_payload(self, request: ImageRequest, profile: AdapterProfile) -> dict[str, Any]:
        temperature = request.temperature
        if temperature is None:
            temperature = self._temperature

        payload: dict[str, Any] = {
            "model": profile.model,
            "prompt": request.prompt,
            "width": profile.width,
            "height": profile.height,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if request.reference_images:
            payload["reference_images"] = list(request.reference_images)
        return payload

    async def generate(
        self, request: ImageRequest, profile: AdapterProfile, **kwargs: Any
    ) -> GenerationOutcome:
        """Generate one image with the profile's model and dimensions."""
        payload = self._build_payload(request, profile)
        payload.update(kwargs)

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

        logger.debug(
            "together_image_request",
            model=profile.model,
            width=profile.width,
            height=profile.height,
            reference_images=len(request.reference_images),
        )

        try:
            response = await self._client.post(
                f"{self._base_url}/images/generations",
                headers=headers,
                json=payload,
            )
        except httpx.TimeoutException as e:
            return _failed("timeout", None, str(e) or "request timed out")
        except httpx.TransportError as e:
            return _failed("network", None, str(e) or type(e).__name__)

        if response.status_code >= 400:
            detail = _error_message(response)
            if is_content_policy_violation(detail):
                category = "content_policy"
            else:
                category = category_for_status(response.status_code)
            return _failed(category, response.status_code, detail)

        try:
            data = response.json()
        except ValueError:
            return _failed("invalid_response", response.status_code, "response is not JSON")

        url = _first_image_url(data)
        if url is None:
            return _failed("invalid_response", response.status_code, "no image URL in response")

        logger.debug("together_image_generated", model=profile.model)
        return GenerationSucceeded(artifact_url=url)


def _failed(category: str, status_code: int | None, detail: str) -> GenerationFailed:
    return GenerationFailed(
        ProviderFailure(
            kind=classify_failure(status_code, category),
            category=category,
            status_code=status_code,
            detail=detail,
        )
    )


def _first_image_url(data: Any) -> str | None:
    """Extract data[0].url from an images response."""
    if not isinstance(data, dict):
        return None
    items = data.get("data")
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None
    url = items[0].get("url")
    if not isinstance(url, str) or not url:
        return None
    return url


def _error_message(response: httpx.Response) -> str:
    """Pull a message out of an error response, falling back to the status."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        if isinstance(body.get("message"), str):
            return body["message"]
    return f"HTTP {response.status_code}"

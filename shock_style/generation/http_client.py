from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError, NoImageGeneratedError, ProviderError
from ..schema import GenerationRequest, GenerationResponse
from ..settings import Settings
from ..shard import constants as C
from ..shard.enums import GenerationProvider
from ..utils.error_helpers import augment_with_credentials_tip
from .base_client import GenerationClient


def _error_message_from_response(resp: httpx.Response) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if body.get("message"):
            return str(body["message"])
    text = resp.text.strip()
    return text or resp.reason_phrase or f"HTTP {resp.status_code}"


class HttpGenerationClient(GenerationClient):
    """Client for a JSON generation endpoint.

    Sends ``{"prompt", "style", "inputImage"?}`` and expects ``{"imageUrl"}``.
    """

    endpoint: str
    api_key: str | None = None
    timeout: float = C.DEFAULT_GENERATION_TIMEOUT
    transport: httpx.AsyncBaseTransport | None = None

    def __init__(self, provider: GenerationProvider = GenerationProvider.HTTP, **data):
        super().__init__(provider=provider, name=f"http:{provider.value}", **data)

    @classmethod
    def from_settings(cls, provider: GenerationProvider, settings: Settings) -> HttpGenerationClient:
        if not settings.generation_endpoint:
            raise ConfigurationError("GENERATION_ENDPOINT must be set to use the HTTP generation provider")
        return cls(
            provider=provider,
            endpoint=settings.generation_endpoint,
            api_key=settings.generation_api_key,
            timeout=settings.generation_timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        payload: dict[str, Any] = request.to_payload()
        logger.debug(f"POST {self.endpoint} (style={request.style_id}, input_image={'yes' if request.input_image else 'no'})")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.endpoint, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise ProviderError(augment_with_credentials_tip(f"Request to generation endpoint failed: {e}"), self.provider) from e

        if resp.status_code >= 400:
            message = _error_message_from_response(resp)
            raise ProviderError(augment_with_credentials_tip(message), self.provider, status_code=resp.status_code)

        try:
            return GenerationResponse.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            raise NoImageGeneratedError(self.provider, "response has no imageUrl") from e

from __future__ import annotations

from enum import StrEnum
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..exceptions import ConfigurationError, GenerationError, NoImageGeneratedError, ProviderError
from ..schema import GenerationRequest, GenerationResponse
from ..settings import Settings
from ..shard.enums import GenerationProvider, ImageModel
from ..utils.error_helpers import augment_with_credentials_tip
from ..utils.image_utils import guess_extension_from_mime, parse_data_url
from .base_client import GenerationClient

# Default API version for Azure OpenAI
API_VERSION_DEFAULT = "2025-04-01-preview"


class OpenAISize(StrEnum):
    """Native square size; acquired images are square crops too."""

    SQUARE = "1024x1024"


class OpenAIResponseFormat(StrEnum):
    B64_JSON = "b64_json"
    URL = "url"


class OpenAIGenerationClient(GenerationClient):
    """OpenAI/Azure OpenAI Images API client.

    Prompt-only requests go to ``images.generate``; requests carrying an
    input image go to ``images.edit`` with the decoded reference image.
    Base64 results are returned as data URLs so callers always get a URL.
    """

    api_key: str | None = None
    azure_endpoint: str | None = None
    azure_api_version: str | None = None
    image_model: ImageModel = ImageModel.DALL_E_3
    edit_model: ImageModel = ImageModel.GPT_IMAGE_1

    def __init__(self, provider: GenerationProvider = GenerationProvider.OPENAI, **data):
        super().__init__(provider=provider, name=f"openai:{provider.value}", **data)

    @classmethod
    def from_settings(cls, provider: GenerationProvider, settings: Settings) -> OpenAIGenerationClient:
        if provider == GenerationProvider.AZURE_OPENAI:
            return cls(
                provider=provider,
                api_key=settings.azure_openai_api_key,
                azure_endpoint=settings.azure_openai_endpoint,
                azure_api_version=settings.azure_openai_api_version,
                image_model=settings.openai_image_model,
                edit_model=settings.openai_edit_model,
            )
        return cls(
            provider=provider,
            api_key=settings.openai_api_key,
            image_model=settings.openai_image_model,
            edit_model=settings.openai_edit_model,
        )

    # Client management
    def _openai_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable must be set to use OpenAI provider")
        return AsyncOpenAI(api_key=self.api_key)

    def _azure_client(self) -> AsyncAzureOpenAI:
        if not self.azure_endpoint:
            raise ConfigurationError("AZURE_OPENAI_ENDPOINT environment variable must be set to use Azure OpenAI")
        if not self.api_key:
            raise ConfigurationError("AZURE_OPENAI_API_KEY environment variable must be set to use Azure OpenAI")
        return AsyncAzureOpenAI(
            api_key=self.api_key,
            azure_endpoint=self.azure_endpoint,
            api_version=self.azure_api_version or API_VERSION_DEFAULT,
        )

    def _get_client(self) -> AsyncAzureOpenAI | AsyncOpenAI:
        if self.provider == GenerationProvider.AZURE_OPENAI:
            return self._azure_client()
        return self._openai_client()

    # Response processing
    def _first_image_url(self, result: Any) -> str:
        """Return the first image in the response as a URL (data URL for base64)."""
        for item in getattr(result, "data", None) or []:
            url = getattr(item, "url", None)
            if url:
                return url
            b64 = getattr(item, "b64_json", None)
            if b64:
                return f"data:image/png;base64,{b64}"
        raise NoImageGeneratedError(self.provider, "no image content in response")

    # API operations
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        client = self._get_client()
        try:
            if request.input_image:
                data, mime = parse_data_url(request.input_image)
                result = await client.images.edit(
                    model=self.edit_model.value,
                    image=(f"input{guess_extension_from_mime(mime)}", data, mime),
                    prompt=request.prompt,
                    size=OpenAISize.SQUARE.value,
                    n=1,
                )
            else:
                params: dict[str, Any] = {}
                if self.image_model == ImageModel.DALL_E_3:
                    # gpt-image-1 always answers with base64 and rejects response_format
                    params["response_format"] = OpenAIResponseFormat.URL.value
                result = await client.images.generate(
                    model=self.image_model.value,
                    prompt=request.prompt,
                    size=OpenAISize.SQUARE.value,
                    n=1,
                    **params,
                )
            return GenerationResponse(image_url=self._first_image_url(result))
        except GenerationError:
            raise
        except Exception as e:
            raise ProviderError(augment_with_credentials_tip(str(e)), self.provider, status_code=getattr(e, "status_code", None)) from e


__all__ = ["OpenAIGenerationClient"]

from __future__ import annotations

from functools import lru_cache
from typing import ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .shard import constants as C
from .shard.enums import GenerationProvider, ImageModel


class Settings(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(env_nested_delimiter="__")

    generation_provider: GenerationProvider = Field(default=GenerationProvider.HTTP, description="Generation client to use: http | openai | azure")

    generation_endpoint: str | None = Field(default=None, description="URL of the HTTP generation endpoint")
    generation_api_key: str | None = Field(default=None, description="Bearer token sent to the HTTP generation endpoint")
    generation_timeout: float = Field(default=C.DEFAULT_GENERATION_TIMEOUT, gt=0, description="Transport timeout in seconds for the HTTP generation endpoint")

    openai_api_key: str | None = Field(default=None, description="API key for OpenAI")
    openai_image_model: ImageModel = Field(default=ImageModel.DALL_E_3, description="Model used for prompt-only generation")
    openai_edit_model: ImageModel = Field(default=ImageModel.GPT_IMAGE_1, description="Model used when an input image is attached")

    azure_openai_api_key: str | None = Field(default=None, description="API key for Azure OpenAI")
    azure_openai_endpoint: str | None = Field(default=None, description="Endpoint for Azure OpenAI")
    azure_openai_api_version: str | None = Field(default="2025-04-01-preview", description="API version for Azure OpenAI")

    capture_quality: float = Field(default=C.DEFAULT_SOURCE_QUALITY, ge=0, le=1, description="Quality requested from capture/selection sources")
    normalize_max_width: int = Field(default=C.DEFAULT_MAX_WIDTH, gt=0, description="Maximum width in pixels of normalized images")
    normalize_quality: float = Field(default=C.DEFAULT_COMPRESSION, ge=0, le=1, description="JPEG compression quality of normalized images")
    working_directory: str | None = Field(default=None, description="Directory for normalized images; a temporary directory when unset")

    styles_file: str | None = Field(default=None, description="Optional JSON file replacing the built-in style vocabulary")
    max_prompt_length: int = Field(default=C.MAX_PROMPT_LENGTH, gt=0, description="Maximum accepted prompt length in characters")

    @property
    def use_http(self) -> bool:
        """Determine if the HTTP endpoint can be used based on configuration."""
        return bool(self.generation_endpoint)

    @property
    def use_openai(self) -> bool:
        """Determine if OpenAI should be used based on available credentials."""
        return bool(self.openai_api_key)

    @property
    def use_azure_openai(self) -> bool:
        """Determine if Azure OpenAI should be used based on available credentials."""
        return bool(self.azure_openai_api_key and self.azure_openai_endpoint)


@lru_cache
def get_settings() -> Settings:
    return Settings()

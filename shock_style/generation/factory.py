from __future__ import annotations

import importlib

from loguru import logger

from ..exceptions import ProviderUnavailableError
from ..settings import get_settings, Settings
from ..shard.enums import GenerationProvider
from .base_client import GenerationClient

# Provider-to-client mappings; import paths keep SDK imports lazy
PROVIDER_CLIENT_MAP: dict[GenerationProvider, type[GenerationClient] | str] = {
    GenerationProvider.HTTP: "shock_style.generation.http_client.HttpGenerationClient",
    GenerationProvider.OPENAI: "shock_style.generation.openai_client.OpenAIGenerationClient",
    GenerationProvider.AZURE_OPENAI: "shock_style.generation.openai_client.OpenAIGenerationClient",
}


def _load_client_class(path_or_cls: type[GenerationClient] | str) -> type[GenerationClient]:
    """Resolve a client class from either a direct class or an import path string."""
    if isinstance(path_or_cls, str):
        module_path, class_name = path_or_cls.rsplit(".", 1)
        module = importlib.import_module(module_path)
        return getattr(module, class_name)
    return path_or_cls


def _get_enabled_providers(settings: Settings) -> dict[GenerationProvider, bool]:
    """Get mapping of providers to their enabled status based on configuration."""
    return {
        GenerationProvider.HTTP: settings.use_http,
        GenerationProvider.OPENAI: settings.use_openai,
        GenerationProvider.AZURE_OPENAI: settings.use_azure_openai,
    }


class ClientFactory:
    """Creates generation clients from settings."""

    @classmethod
    def create(cls, provider: GenerationProvider | None = None, settings: Settings | None = None) -> GenerationClient:
        """
        Create a client for ``provider`` (default: ``settings.generation_provider``).

        Raises:
            ProviderUnavailableError: If the provider lacks endpoint/credentials.
        """
        settings = settings or get_settings()
        effective = provider or settings.generation_provider

        if not cls.is_provider_enabled(effective, settings):
            raise ProviderUnavailableError(effective)

        client_class = _load_client_class(PROVIDER_CLIENT_MAP[effective])
        client = client_class.from_settings(effective, settings)
        logger.debug(f"Created generation client {client.name}")
        return client

    @classmethod
    def get_enabled_providers(cls, settings: Settings | None = None) -> dict[GenerationProvider, bool]:
        return _get_enabled_providers(settings or get_settings())

    @classmethod
    def is_provider_enabled(cls, provider: GenerationProvider, settings: Settings | None = None) -> bool:
        """Check if a provider is enabled (has required endpoint/credentials)."""
        return cls.get_enabled_providers(settings).get(provider, False)


__all__ = ["ClientFactory", "PROVIDER_CLIENT_MAP"]

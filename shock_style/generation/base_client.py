from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from ..schema import GenerationRequest, GenerationResponse
from ..settings import Settings
from ..shard.enums import GenerationProvider


class SupportsGenerate(Protocol):
    """Anything the orchestrator can send a request to.

    Implementations return a ``GenerationResponse`` or a mapping with an
    ``imageUrl`` key, and raise on failure.
    """

    def generate(self, request: GenerationRequest) -> Awaitable[GenerationResponse | Mapping[str, Any]]: ...  # pragma: no cover - interface


class GenerationClient(ABC, BaseModel):
    """Abstract base for generation endpoint clients."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    provider: GenerationProvider

    def __init__(self, provider: GenerationProvider, **data):
        """Initialize client with provider."""
        super().__init__(provider=provider, **data)

    @classmethod
    @abstractmethod
    def from_settings(cls, provider: GenerationProvider, settings: Settings) -> GenerationClient:
        """Build a client for ``provider`` from application settings."""
        raise NotImplementedError

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send one request; raise ``GenerationError`` subclasses on failure."""
        raise NotImplementedError

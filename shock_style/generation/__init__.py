from .base_client import GenerationClient, SupportsGenerate
from .factory import ClientFactory

__all__ = ["GenerationClient", "SupportsGenerate", "ClientFactory"]

"""
Shock Style

Client-side orchestration for single-shot styled image generation:
prompt composition, reference-image acquisition and a single-flight
request lifecycle around a pluggable generation endpoint.
"""

__version__ = "0.1.0"

try:
    import importlib.metadata

    __version__ = importlib.metadata.version("shock-style")
except (importlib.metadata.PackageNotFoundError, ImportError):
    # Fallback for development mode
    pass

__all__ = ["__version__"]

"""Exception hierarchy for prompt, acquisition and generation failures.

Every error carries a ``user_message`` suitable for a notice shown to the end
user; ``str(error)`` keeps the detailed message for logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shard.enums import GenerationProvider, ImageSource


class ShockStyleError(Exception):
    """Base class for all errors raised by this package."""

    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, *, user_message: str | None = None):
        super().__init__(message)
        self.message = message
        self._user_message = user_message

    @property
    def user_message(self) -> str:
        return self._user_message or self.message or self.default_user_message


# ----------------------------- Submission errors ----------------------------- #


class ValidationError(ShockStyleError):
    """Raised when submission input is rejected before any request starts."""

    def __init__(self, message: str, *, field: str | None = None, user_message: str | None = None):
        super().__init__(message, user_message=user_message)
        self.field = field


class RequestInFlightError(ShockStyleError):
    """Raised when an operation is attempted while a generation is pending."""

    def __init__(self, operation: str = "submit"):
        self.operation = operation
        super().__init__(f"Cannot {operation} while a generation request is pending.")


# ----------------------------- Acquisition errors ---------------------------- #


class PermissionDenied(ShockStyleError):
    """Device permission for the camera or photo library was refused."""

    def __init__(self, source: ImageSource, *, user_message: str | None = None):
        self.source = source
        super().__init__(f"Permission to access the {source.value} was not granted.", user_message=user_message)


class AcquisitionError(ShockStyleError):
    """Capture, selection or normalization of an input image failed."""

    default_user_message = "Failed to load the image."


class EncodingError(AcquisitionError):
    """The normalized image bytes could not be read or encoded."""


# ------------------------------ Generation errors ---------------------------- #


class GenerationError(ShockStyleError):
    """The generation endpoint failed or reported an error."""

    default_user_message = "Image generation failed. Please try again."


class ProviderError(GenerationError):
    """Transport or API error returned by a generation provider."""

    def __init__(self, message: str, provider: GenerationProvider | None = None, *, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class NoImageGeneratedError(GenerationError):
    """The provider answered successfully but returned no usable image."""

    def __init__(self, provider: GenerationProvider | None = None, detail: str | None = None):
        self.provider = provider
        name = provider.value if provider else "generation endpoint"
        message = f"No image returned by {name}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


# ---------------------------- Configuration errors --------------------------- #


class ConfigurationError(ShockStyleError):
    """Missing or invalid configuration for a generation client."""


class ProviderUnavailableError(ConfigurationError):
    """Raised when a provider is selected but its credentials are missing."""

    def __init__(self, provider: GenerationProvider):
        self.provider = provider
        super().__init__(f"Provider '{provider.value}' is not enabled (missing endpoint or credentials).")


__all__ = [
    "ShockStyleError",
    "ValidationError",
    "RequestInFlightError",
    "PermissionDenied",
    "AcquisitionError",
    "EncodingError",
    "GenerationError",
    "ProviderError",
    "NoImageGeneratedError",
    "ConfigurationError",
    "ProviderUnavailableError",
]

from __future__ import annotations

from enum import StrEnum


class GenerationProvider(StrEnum):
    """Identifiers for the generation client implementations.

    Values match the ``GENERATION_PROVIDER`` setting. Keep names stable.
    """

    HTTP = "http"
    OPENAI = "openai"
    AZURE_OPENAI = "azure"


class ImageModel(StrEnum):
    """OpenAI image models usable by the OpenAI generation client."""

    DALL_E_3 = "dall-e-3"
    GPT_IMAGE_1 = "gpt-image-1"


class ImageSource(StrEnum):
    """Where an acquired image came from."""

    CAMERA = "camera"
    LIBRARY = "library"


class PermissionStatus(StrEnum):
    """Outcome of a device permission request."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class AcquisitionStatus(StrEnum):
    """Outcome of one acquisition attempt (camera capture or library pick)."""

    ACQUIRED = "acquired"
    CANCELLED = "cancelled"
    PERMISSION_DENIED = "permission_denied"
    FAILED = "failed"


class RequestStatus(StrEnum):
    """Lifecycle states of a generation request.

    - ``IDLE``: nothing submitted, or reset after a terminal state
    - ``PENDING``: one request in flight
    - ``SUCCEEDED`` / ``FAILED``: terminal; a new submission or reset is allowed
    """

    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.SUCCEEDED, RequestStatus.FAILED)


__all__ = ["GenerationProvider", "ImageModel", "ImageSource", "PermissionStatus", "AcquisitionStatus", "RequestStatus"]

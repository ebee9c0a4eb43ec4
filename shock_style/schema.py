from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import GenerationError, ShockStyleError
from .shard import constants as C
from .shard.enums import AcquisitionStatus, ImageSource, RequestStatus

# ------------------------------ Error handling ------------------------------ #


class Error(BaseModel):
    """Normalized error record for logs and host-side reporting."""

    code: str = Field(description="Stable machine-readable error code, e.g. 'validation_error'.")
    message: str = Field(description="Human-readable error message.")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional provider/debug details; treat as best-effort and unstable for parsing.",
    )


class Notice(BaseModel):
    """A user-facing notice (alert title + message) raised by the orchestrator."""

    model_config = ConfigDict(frozen=True)

    title: str
    message: str


# ---------------------------------- Styles ---------------------------------- #


class StyleDefinition(BaseModel):
    """A named visual treatment and the modifier text appended to prompts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Unique style id, e.g. 'anime'.")
    modifier_text: str = Field(default="", alias="modifier", description="Modifier vocabulary appended to prompts.")
    name: str | None = Field(default=None, description="Display name for style pickers.")


# ----------------------------- Image acquisition ----------------------------- #


class CaptureOptions(BaseModel):
    """Fixed options passed to capture/selection sources."""

    model_config = ConfigDict(frozen=True)

    aspect: tuple[int, int] = Field(default=C.SQUARE_ASPECT, description="Crop aspect ratio (width, height).")
    quality: float = Field(default=C.DEFAULT_SOURCE_QUALITY, ge=0, le=1, description="Source-side compression quality.")
    allows_editing: bool = Field(default=True, description="Whether the source may offer a crop/edit step.")


class CaptureResult(BaseModel):
    """Result of a capture or library pick: an image reference or a cancellation."""

    model_config = ConfigDict(frozen=True)

    cancelled: bool = False
    reference: str | None = None

    @classmethod
    def cancel(cls) -> CaptureResult:
        return cls(cancelled=True)

    @classmethod
    def of(cls, reference: str) -> CaptureResult:
        return cls(reference=reference)


class NormalizeOptions(BaseModel):
    """Bounds applied by the image normalization service."""

    model_config = ConfigDict(frozen=True)

    max_width: int = Field(default=C.DEFAULT_MAX_WIDTH, gt=0)
    quality: float = Field(default=C.DEFAULT_COMPRESSION, ge=0, le=1)
    format: str = Field(default=C.NORMALIZED_FORMAT)


class AcquiredImage(BaseModel):
    """Handle to a normalized local image ready for encoding."""

    model_config = ConfigDict(frozen=True)

    local_reference: str = Field(min_length=1, description="Local path (or file:// URL) of the normalized image.")
    source: ImageSource | None = Field(default=None, description="Where the image was acquired from.")


class AcquisitionResult(BaseModel):
    """Explicit outcome of one acquisition attempt."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: AcquisitionStatus
    source: ImageSource
    image: AcquiredImage | None = None
    error: ShockStyleError | None = None

    @property
    def acquired(self) -> bool:
        return self.status == AcquisitionStatus.ACQUIRED


# ------------------------------- Generate API -------------------------------- #


class GenerationRequest(BaseModel):
    """A fully composed generation request.

    Wire form: ``{"prompt": ..., "style": ..., "inputImage": ...}`` with
    ``inputImage`` omitted when no reference image is attached.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str = Field(min_length=1, description="Composed prompt text.")
    style_id: str = Field(min_length=1, alias="style", description="Selected style id.")
    input_image: str | None = Field(default=None, alias="inputImage", description="Optional data URL of the reference image.")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GenerationResponse(BaseModel):
    """Successful generation result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    image_url: str = Field(min_length=1, alias="imageUrl", description="URL (or data URL) of the generated image.")

    @field_validator("image_url")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("imageUrl must not be blank")
        return v


# ------------------------------- Request state ------------------------------- #


class _StateBase(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal  # type: ignore[attr-defined]


class Idle(_StateBase):
    status: Literal[RequestStatus.IDLE] = RequestStatus.IDLE


class Pending(_StateBase):
    status: Literal[RequestStatus.PENDING] = RequestStatus.PENDING
    request: GenerationRequest


class Succeeded(_StateBase):
    status: Literal[RequestStatus.SUCCEEDED] = RequestStatus.SUCCEEDED
    result_url: str


class Failed(_StateBase):
    status: Literal[RequestStatus.FAILED] = RequestStatus.FAILED
    error: GenerationError


RequestState = Annotated[Idle | Pending | Succeeded | Failed, Field(discriminator="status")]


__all__ = [
    "Error",
    "Notice",
    "StyleDefinition",
    "CaptureOptions",
    "CaptureResult",
    "NormalizeOptions",
    "AcquiredImage",
    "AcquisitionResult",
    "GenerationRequest",
    "GenerationResponse",
    "Idle",
    "Pending",
    "Succeeded",
    "Failed",
    "RequestState",
]

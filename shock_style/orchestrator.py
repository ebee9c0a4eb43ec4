"""Request lifecycle for a single styled generation.

The orchestrator owns two slots: the current ``RequestState`` and the
currently selected ``AcquiredImage``. Nothing else writes them.

State machine::

    Idle --submit--> Pending --ok--> Succeeded --reset--> Idle
                             \\-err--> Failed    --reset--> Idle

``submit`` is accepted from Idle, Succeeded or Failed and rejected with
``RequestInFlightError`` while Pending. The client is awaited in-line and no
``await`` happens before the state becomes Pending, so concurrent submissions
on one event loop are serialized by rejection rather than queued.

Hosts are notified only through ``on_success`` / ``on_error`` and the
``notifier`` (user-facing notices); all three may be plain functions or
coroutine functions. A failing notifier is logged and does not stop the
callbacks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .acquisition.base import CaptureSource
from .acquisition.encoder import ImageEncoder
from .acquisition.pipeline import ImageAcquisitionPipeline
from .exceptions import (
    ConfigurationError,
    EncodingError,
    GenerationError,
    NoImageGeneratedError,
    RequestInFlightError,
    ValidationError,
)
from .generation.base_client import SupportsGenerate
from .generation.factory import ClientFactory
from .schema import (
    AcquiredImage,
    AcquisitionResult,
    Failed,
    GenerationRequest,
    GenerationResponse,
    Idle,
    Notice,
    Pending,
    RequestState,
    Succeeded,
)
from .settings import get_settings, Settings
from .shard import constants as C
from .shard.enums import AcquisitionStatus, ImageSource, RequestStatus
from .shard.notices import NOTICE_TEXTS
from .styles import StyleCatalog
from .utils.async_utils import maybe_await
from .utils.error_helpers import as_generation_error, error_record
from .utils.image_utils import discard_image_file
from .utils.prompt import PromptComposer

Notifier = Callable[[Notice], Any]
SuccessCallback = Callable[[str], Any]
ErrorCallback = Callable[[GenerationError], Any]


def log_notice(notice: Notice) -> None:
    """Default notifier: write the notice to the log."""
    logger.warning(f"{notice.title}: {notice.message}")


def build_notice(key: str, **values: Any) -> Notice:
    title, message = NOTICE_TEXTS[key]
    return Notice(title=title, message=message.format(**values) if values else message)


class RequestOrchestrator:
    def __init__(
        self,
        client: SupportsGenerate,
        *,
        composer: PromptComposer | None = None,
        encoder: ImageEncoder | None = None,
        pipeline: ImageAcquisitionPipeline | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
        notifier: Notifier | None = None,
        max_prompt_length: int = C.MAX_PROMPT_LENGTH,
    ):
        self._client = client
        self._composer = composer or PromptComposer()
        self._encoder = encoder or ImageEncoder()
        self._pipeline = pipeline
        self._on_success = on_success
        self._on_error = on_error
        self._notifier: Notifier = notifier or log_notice
        self._max_prompt_length = max_prompt_length

        self._state: RequestState = Idle()
        self._selected_image: AcquiredImage | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def selected_image(self) -> AcquiredImage | None:
        return self._selected_image

    @property
    def is_generating(self) -> bool:
        return self._state.status == RequestStatus.PENDING

    @property
    def generated_image_url(self) -> str | None:
        return self._state.result_url if isinstance(self._state, Succeeded) else None

    @property
    def error(self) -> GenerationError | None:
        return self._state.error if isinstance(self._state, Failed) else None

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    async def submit(self, prompt: str, style_id: str, additional_instructions: str | None = None) -> RequestState:
        """Compose and send one generation request; return the terminal state.

        Raises:
            RequestInFlightError: A request is already pending.
            ValidationError: Blank prompt/style or prompt too long.
            EncodingError: The selected image could not be encoded.
        """
        if self.is_generating:
            logger.warning("Rejected submit: a generation request is already pending")
            raise RequestInFlightError("submit")

        await self._validate(prompt, style_id)

        input_image: str | None = None
        image = self._selected_image
        if image is not None:
            try:
                input_image = self._encoder.encode(image)
            except EncodingError as e:
                logger.error(f"Submission aborted: {e.message}")
                await self._notify(build_notice("encoding_failed"))
                raise

        request = GenerationRequest(
            prompt=self._composer.compose(style_id, prompt, additional_instructions),
            style_id=style_id,
            input_image=input_image,
        )
        self._state = Pending(request=request)
        logger.info(f"Generation submitted (style={style_id}, input_image={'yes' if input_image else 'no'})")
        logger.debug(f"Composed prompt: {request.prompt}")

        try:
            response = self._coerce_response(await maybe_await(self._client.generate(request)))
        except asyncio.CancelledError:
            self._state = Failed(error=GenerationError("Generation was cancelled"))
            logger.warning("Generation cancelled while pending")
            raise
        except Exception as e:
            return await self._fail(as_generation_error(e))

        return await self._succeed(response.image_url)

    async def _validate(self, prompt: str, style_id: str) -> None:
        if not prompt or not prompt.strip():
            notice = build_notice("missing_prompt")
            error = ValidationError("Prompt must not be empty", field="prompt", user_message=notice.message)
        elif not style_id or not style_id.strip():
            notice = build_notice("missing_style")
            error = ValidationError("A style must be selected", field="style_id", user_message=notice.message)
        elif len(prompt) > self._max_prompt_length:
            notice = build_notice("prompt_too_long", limit=self._max_prompt_length)
            error = ValidationError(f"Prompt exceeds {self._max_prompt_length} characters", field="prompt", user_message=notice.message)
        else:
            return
        logger.warning(f"Rejected submit: {error.message}")
        await self._notify(notice)
        raise error

    def _coerce_response(self, raw: GenerationResponse | Mapping[str, Any]) -> GenerationResponse:
        if isinstance(raw, GenerationResponse):
            return raw
        try:
            return GenerationResponse.model_validate(raw)
        except PydanticValidationError as e:
            raise NoImageGeneratedError(detail="response has no imageUrl") from e

    async def _succeed(self, result_url: str) -> RequestState:
        state = Succeeded(result_url=result_url)
        self._state = state
        # A successful generation consumes the input image.
        self._replace_selected_image(None)
        logger.info(f"Generation succeeded: {result_url[:80]}")
        if self._on_success is not None:
            await maybe_await(self._on_success(result_url))
        return state

    async def _fail(self, error: GenerationError) -> RequestState:
        state = Failed(error=error)
        self._state = state
        # Selected image is kept so the user can retry without re-acquiring.
        record = error_record(error)
        logger.error(f"Generation failed [{record.code}]: {record.message}")
        if record.details:
            logger.debug(f"Failure details: {record.details}")
        await self._notify(build_notice("generation_failed", message=error.user_message))
        if self._on_error is not None:
            await maybe_await(self._on_error(error))
        return state

    # ------------------------------------------------------------------
    # Image slot
    # ------------------------------------------------------------------
    async def capture_from_camera(self) -> AcquisitionResult:
        return await self._acquire(ImageSource.CAMERA)

    async def pick_from_library(self) -> AcquisitionResult:
        return await self._acquire(ImageSource.LIBRARY)

    async def _acquire(self, source: ImageSource) -> AcquisitionResult:
        if self._pipeline is None:
            raise ConfigurationError("No image acquisition pipeline configured")

        if source == ImageSource.CAMERA:
            result = await self._pipeline.capture_from_camera()
        else:
            result = await self._pipeline.pick_from_library()

        if result.status == AcquisitionStatus.ACQUIRED:
            self._replace_selected_image(result.image)
        elif result.status == AcquisitionStatus.PERMISSION_DENIED:
            await self._notify(build_notice(f"{source.value}_permission"))
        elif result.status == AcquisitionStatus.FAILED:
            await self._notify(build_notice(f"{source.value}_failed"))
        return result

    def clear_selected_image(self) -> None:
        """Drop the selected image; allowed in any state."""
        self._replace_selected_image(None)

    def reset(self) -> None:
        """Return to Idle, dropping the selected image and any terminal result."""
        if self.is_generating:
            raise RequestInFlightError("reset")
        self._state = Idle()
        self._replace_selected_image(None)

    def _replace_selected_image(self, image: AcquiredImage | None) -> None:
        """Swap the image slot and delete the normalized file it held."""
        previous, self._selected_image = self._selected_image, image
        if previous is not None and (image is None or image.local_reference != previous.local_reference):
            logger.debug(f"Discarding selected image {previous.local_reference}")
            discard_image_file(previous.local_reference)

    async def _notify(self, notice: Notice) -> None:
        # Host notifier errors must not prevent callbacks or state updates.
        try:
            await maybe_await(self._notifier(notice))
        except Exception:
            logger.exception(f"Notifier failed for notice '{notice.title}'")


def create_orchestrator(
    capture_source: CaptureSource | None = None,
    *,
    settings: Settings | None = None,
    client: SupportsGenerate | None = None,
    catalog: StyleCatalog | Mapping[str, str] | None = None,
    on_success: SuccessCallback | None = None,
    on_error: ErrorCallback | None = None,
    notifier: Notifier | None = None,
) -> RequestOrchestrator:
    """Wire an orchestrator from settings.

    The generation client defaults to the one selected by
    ``GENERATION_PROVIDER``; acquisition is only available when a capture
    source is given.
    """
    settings = settings or get_settings()
    pipeline = ImageAcquisitionPipeline.from_settings(capture_source, settings) if capture_source is not None else None
    return RequestOrchestrator(
        client or ClientFactory.create(settings=settings),
        composer=PromptComposer(catalog),
        pipeline=pipeline,
        on_success=on_success,
        on_error=on_error,
        notifier=notifier,
        max_prompt_length=settings.max_prompt_length,
    )


__all__ = [
    "RequestOrchestrator",
    "create_orchestrator",
    "build_notice",
    "log_notice",
]

"""Image acquisition: permission, capture/pick, normalization.

Each entry point returns an explicit ``AcquisitionResult`` instead of raising,
so hosts (and tests) can drive it without a real device:

- ``acquired``: a new normalized ``AcquiredImage``
- ``cancelled``: the user backed out; nothing to do
- ``permission_denied``: carries a ``PermissionDenied`` error
- ``failed``: carries an ``AcquisitionError``; no partial image is exposed

The pipeline holds no image state; the orchestrator owns the selected image.
"""

from __future__ import annotations

from loguru import logger

from ..exceptions import AcquisitionError, PermissionDenied
from ..schema import AcquiredImage, AcquisitionResult, CaptureOptions, NormalizeOptions
from ..settings import get_settings, Settings
from ..shard.enums import AcquisitionStatus, ImageSource, PermissionStatus
from ..utils.async_utils import maybe_await
from .base import CaptureSource, ImageNormalizer
from .normalizer import PillowNormalizer


class ImageAcquisitionPipeline:
    def __init__(
        self,
        source: CaptureSource,
        normalizer: ImageNormalizer | None = None,
        *,
        capture_options: CaptureOptions | None = None,
        normalize_options: NormalizeOptions | None = None,
    ):
        self._source = source
        self._normalizer = normalizer or PillowNormalizer()
        self._capture_options = capture_options or CaptureOptions()
        self._normalize_options = normalize_options or NormalizeOptions()

    @classmethod
    def from_settings(cls, source: CaptureSource, settings: Settings | None = None, normalizer: ImageNormalizer | None = None) -> ImageAcquisitionPipeline:
        settings = settings or get_settings()
        return cls(
            source,
            normalizer or PillowNormalizer(settings.working_directory),
            capture_options=CaptureOptions(quality=settings.capture_quality),
            normalize_options=NormalizeOptions(max_width=settings.normalize_max_width, quality=settings.normalize_quality),
        )

    @property
    def capture_options(self) -> CaptureOptions:
        return self._capture_options

    @property
    def normalize_options(self) -> NormalizeOptions:
        return self._normalize_options

    async def capture_from_camera(self) -> AcquisitionResult:
        return await self._acquire(ImageSource.CAMERA)

    async def pick_from_library(self) -> AcquisitionResult:
        return await self._acquire(ImageSource.LIBRARY)

    # ------------------------------------------------------------------
    # Internal flow
    # ------------------------------------------------------------------
    async def _acquire(self, source: ImageSource) -> AcquisitionResult:
        if source == ImageSource.CAMERA:
            request_permission = self._source.request_camera_permission
            launch = self._source.capture
        else:
            request_permission = self._source.request_library_permission
            launch = self._source.pick_from_library

        try:
            status = await maybe_await(request_permission())
        except Exception as e:
            return self._failed(source, f"Permission request for {source.value} failed: {e}", e)

        if status != PermissionStatus.GRANTED:
            logger.warning(f"Permission for {source.value} not granted (status={status})")
            return AcquisitionResult(status=AcquisitionStatus.PERMISSION_DENIED, source=source, error=PermissionDenied(source))

        try:
            result = await maybe_await(launch(self._capture_options))
            if result.cancelled or not result.reference:
                logger.debug(f"Acquisition from {source.value} cancelled")
                return AcquisitionResult(status=AcquisitionStatus.CANCELLED, source=source)

            normalized = await self._normalizer.normalize(result.reference, self._normalize_options)
            image = AcquiredImage(local_reference=normalized, source=source)
        except AcquisitionError as e:
            logger.error(e.message)
            return AcquisitionResult(status=AcquisitionStatus.FAILED, source=source, error=e)
        except Exception as e:
            return self._failed(source, f"Acquisition from {source.value} failed: {e}", e)

        logger.info(f"Acquired image from {source.value}: {image.local_reference}")
        return AcquisitionResult(status=AcquisitionStatus.ACQUIRED, source=source, image=image)

    def _failed(self, source: ImageSource, message: str, cause: BaseException) -> AcquisitionResult:
        logger.error(message)
        error = AcquisitionError(message)
        error.__cause__ = cause
        return AcquisitionResult(status=AcquisitionStatus.FAILED, source=source, error=error)

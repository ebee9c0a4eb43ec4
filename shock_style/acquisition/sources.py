from __future__ import annotations

import os
from collections.abc import Awaitable, Callable

from loguru import logger

from ..schema import CaptureOptions, CaptureResult
from ..shard.enums import PermissionStatus
from ..utils.async_utils import maybe_await
from ..utils.image_utils import local_path

# A chooser receives the capture options and returns a file path, or None when
# the user cancels. It may be a plain function or a coroutine function.
Chooser = Callable[[CaptureOptions], "str | None | Awaitable[str | None]"]


class LocalFileSource:
    """Capture source backed by local files, for hosts without a device camera.

    ``library_chooser`` selects an existing image file. ``camera`` is optional;
    without it the camera permission is reported as denied.
    """

    def __init__(self, library_chooser: Chooser, camera: Chooser | None = None):
        self._library_chooser = library_chooser
        self._camera = camera

    def request_camera_permission(self) -> PermissionStatus:
        if self._camera is None:
            logger.warning("No camera configured for LocalFileSource")
            return PermissionStatus.DENIED
        return PermissionStatus.GRANTED

    def request_library_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED

    async def capture(self, options: CaptureOptions) -> CaptureResult:
        if self._camera is None:
            raise RuntimeError("No camera configured")
        return await self._choose(self._camera, options)

    async def pick_from_library(self, options: CaptureOptions) -> CaptureResult:
        return await self._choose(self._library_chooser, options)

    async def _choose(self, chooser: Chooser, options: CaptureOptions) -> CaptureResult:
        path = await maybe_await(chooser(options))
        if not path:
            return CaptureResult.cancel()
        if not os.path.isfile(local_path(path)):
            raise FileNotFoundError(f"File not found: {path}")
        return CaptureResult.of(path)

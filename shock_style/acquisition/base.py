from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from ..schema import CaptureOptions, CaptureResult, NormalizeOptions
from ..shard.enums import PermissionStatus


@runtime_checkable
class CaptureSource(Protocol):
    """Device-side camera and photo-library access.

    Methods may be plain functions or coroutines. ``capture`` and
    ``pick_from_library`` return a ``CaptureResult`` holding either an image
    reference or a cancellation marker; raising signals an I/O failure.
    """

    def request_camera_permission(self) -> PermissionStatus | Awaitable[PermissionStatus]: ...

    def request_library_permission(self) -> PermissionStatus | Awaitable[PermissionStatus]: ...

    def capture(self, options: CaptureOptions) -> CaptureResult | Awaitable[CaptureResult]: ...

    def pick_from_library(self, options: CaptureOptions) -> CaptureResult | Awaitable[CaptureResult]: ...


class ImageNormalizer(Protocol):
    """Resizes and re-encodes a captured image, returning a new local reference."""

    async def normalize(self, reference: str, options: NormalizeOptions) -> str:  # pragma: no cover - interface
        ...

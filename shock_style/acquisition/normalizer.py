from __future__ import annotations

import asyncio

from loguru import logger
from PIL import UnidentifiedImageError

from ..exceptions import AcquisitionError
from ..schema import NormalizeOptions
from ..utils.image_utils import ensure_directory, normalize_image_file


class PillowNormalizer:
    """Default normalization service backed by Pillow.

    Writes normalized copies into ``directory`` (a temporary directory is
    created lazily when none is given). Decoding and encoding run in a worker
    thread so the event loop is not blocked.
    """

    def __init__(self, directory: str | None = None):
        self._directory = directory

    @property
    def directory(self) -> str:
        if self._directory is None:
            self._directory = ensure_directory(None)
        else:
            self._directory = ensure_directory(self._directory)
        return self._directory

    async def normalize(self, reference: str, options: NormalizeOptions) -> str:
        try:
            path = await asyncio.to_thread(
                normalize_image_file,
                reference,
                self.directory,
                max_width=options.max_width,
                quality=options.quality,
                image_format=options.format,
            )
        except (OSError, UnidentifiedImageError, ValueError) as e:
            raise AcquisitionError(f"Cannot normalize image {reference}: {e}") from e
        logger.debug(f"Normalized {reference} -> {path}")
        return path

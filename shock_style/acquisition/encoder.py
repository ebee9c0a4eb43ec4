from __future__ import annotations

from loguru import logger

from ..exceptions import EncodingError
from ..schema import AcquiredImage
from ..utils.image_utils import read_image_bytes_and_mime, to_image_data_url


class ImageEncoder:
    """Turns a normalized local image into a MIME-tagged base64 data URL."""

    def encode(self, image: AcquiredImage) -> str:
        try:
            data, mime = read_image_bytes_and_mime(image.local_reference)
        except (OSError, ValueError) as e:
            raise EncodingError(f"Cannot encode image {image.local_reference}: {e}") from e
        logger.debug(f"Encoded {image.local_reference} ({len(data)} bytes, {mime})")
        return to_image_data_url(data, mime)

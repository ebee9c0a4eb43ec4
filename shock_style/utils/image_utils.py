from __future__ import annotations

import base64
import io
import mimetypes
import os
import tempfile
from datetime import datetime
from urllib.parse import unquote, urlparse
from uuid import uuid4

import httpx
from loguru import logger
from PIL import Image, ImageOps

from ..shard import constants as C


# --------------------------- source classifiers --------------------------- #
def is_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def is_file_url(value: str) -> bool:
    return value.startswith("file://")


def file_url_to_path(url: str) -> str:
    parsed = urlparse(url)
    return unquote(parsed.path)


def local_path(reference: str) -> str:
    """Return a filesystem path for a local reference (plain path or file:// URL)."""
    return file_url_to_path(reference) if is_file_url(reference) else reference


def guess_mime_from_path(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    return mime or C.DEFAULT_MIME


# --------------------------- validation ---------------------------------- #
def validate_image_bytes(data: bytes) -> None:
    """Basic validation to ensure the bytes look like an image.

    Checks common magic numbers for PNG/JPEG/WEBP/GIF and a sane minimum length.
    Raises ValueError if validation fails.
    """
    if not data or len(data) < 16:
        raise ValueError("Image data is empty or too small")

    # Magic headers
    png_sig = b"\x89PNG\r\n\x1a\x0a"
    jpeg_sig = b"\xff\xd8\xff"
    riff = b"RIFF"
    webp = b"WEBP"
    gif87a = b"GIF87a"
    gif89a = b"GIF89a"

    valid = False
    if data.startswith(png_sig):
        valid = True
    elif data.startswith(jpeg_sig):
        valid = True
    elif data.startswith(gif87a) or data.startswith(gif89a):
        valid = True
    elif data.startswith(riff) and webp in data[:32]:
        valid = True

    if not valid:
        raise ValueError("Unsupported or corrupt image data; expected PNG/JPEG/GIF/WEBP")


# --------------------------- IO + conversion ------------------------------ #
def read_image_bytes_and_mime(reference: str, *, validate: bool = True) -> tuple[bytes, str]:
    """Read image content from a local reference.

    Accepts local file paths and file:// URLs. Returns (bytes, mime_type).
    Raises OSError when the file cannot be read and ValueError when the
    content does not look like an image.
    """
    path = local_path(reference)
    with open(path, "rb") as f:
        data = f.read()
    mime = guess_mime_from_path(path)
    if validate:
        validate_image_bytes(data)
    return data, mime


def to_image_data_url(data: bytes, mime: str = C.DEFAULT_MIME) -> str:
    """Wrap raw image bytes in a ``data:<mime>;base64,<payload>`` URL."""
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def parse_data_url(data_url: str) -> tuple[bytes, str]:
    """Split a base64 data URL into (bytes, mime_type)."""
    try:
        header, payload = data_url.split(",", 1)
    except ValueError:
        raise ValueError("Invalid data URL format")
    if not header.startswith("data:"):
        raise ValueError("Invalid data URL format")

    mime = header[len("data:") :].split(";")[0] or C.DEFAULT_MIME
    try:
        data = base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ValueError(f"Cannot decode base64 data: {e}") from e
    return data, mime


def guess_extension_from_mime(mime: str) -> str:
    """Guess file extension from MIME type."""
    if mime.endswith("/png"):
        return ".png"
    elif mime.endswith("/jpeg") or mime.endswith("/jpg"):
        return ".jpg"
    elif mime.endswith("/webp"):
        return ".webp"
    elif mime.endswith("/gif"):
        return ".gif"
    else:
        return ".jpg"  # Default fallback


def ensure_directory(directory: str | None) -> str:
    """Ensure directory exists, creating if necessary. Returns absolute path.

    If directory is None, creates a temporary directory.
    """
    if directory is None:
        return tempfile.mkdtemp(prefix=C.WORKDIR_PREFIX, dir=tempfile.gettempdir())

    abs_directory = os.path.abspath(directory)

    try:
        os.makedirs(abs_directory, exist_ok=True)
    except OSError as e:
        # Fallback to temp directory on error
        temp_dir = tempfile.mkdtemp(prefix=f"{C.WORKDIR_PREFIX}fallback_", dir=tempfile.gettempdir())
        logger.warning(f"Cannot create directory {abs_directory}: {e}. Using temp directory: {temp_dir}")
        return temp_dir

    return abs_directory


def unique_filename(extension: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    unique_id = str(uuid4())[:8]  # Short UUID for readability
    return f"{timestamp}_{unique_id}{extension}"


def save_image_bytes(image_bytes: bytes, directory: str | None, mime_type: str = C.DEFAULT_MIME) -> str:
    """Save image bytes to disk and return the absolute path.

    Args:
        image_bytes: Raw image data
        directory: Target directory (None for temp directory)
        mime_type: MIME type for determining file extension

    Returns:
        Absolute path to the saved file

    Raises:
        OSError: If the file cannot be written
    """
    target_dir = ensure_directory(directory)
    file_path = os.path.join(target_dir, unique_filename(guess_extension_from_mime(mime_type)))

    with open(file_path, "wb") as f:
        f.write(image_bytes)

    return os.path.abspath(file_path)


def discard_image_file(reference: str) -> None:
    """Remove a local image file; a missing file is not an error."""
    path = local_path(reference)
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning(f"Cannot remove image {path}: {e}")
        return
    logger.debug(f"Removed image {path}")


# --------------------------- normalization -------------------------------- #
def scale_to_width(size: tuple[int, int], max_width: int) -> tuple[int, int]:
    """Return (width, height) bounded by ``max_width``, aspect ratio preserved.

    Images already narrower than the bound are returned unchanged (no upscaling).
    """
    width, height = size
    if width <= max_width:
        return width, height
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def normalize_image_file(
    reference: str,
    directory: str | None,
    *,
    max_width: int = C.DEFAULT_MAX_WIDTH,
    quality: float = C.DEFAULT_COMPRESSION,
    image_format: str = C.NORMALIZED_FORMAT,
) -> str:
    """Resize an image to ``max_width`` and re-encode it; return the new file path.

    Orientation from EXIF metadata is applied first so camera captures keep
    their visual orientation. Alpha is flattened because JPEG has no alpha.
    """
    with Image.open(local_path(reference)) as src:
        img = ImageOps.exif_transpose(src)
        target = scale_to_width(img.size, max_width)
        if target != img.size:
            logger.debug(f"Resizing {reference} from {img.size} to {target}")
            img = img.resize(target, Image.Resampling.LANCZOS)
        if image_format.upper() == "JPEG" and img.mode != "RGB":
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, image_format, quality=round(quality * 100))

    mime = Image.MIME.get(image_format.upper(), C.DEFAULT_MIME)
    return save_image_bytes(buf.getvalue(), directory, mime)


# --------------------------- export --------------------------------------- #
async def download_image(url: str, directory: str | None, *, transport: httpx.AsyncBaseTransport | None = None) -> str:
    """Save a generated image (http(s) or data URL) to ``directory`` and return its path."""
    if is_data_url(url):
        data, mime = parse_data_url(url)
    elif not is_url(url):
        raise ValueError(f"Unsupported image URL: {url[:40]}")
    else:
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            data = resp.content
            mime = resp.headers.get("content-type", C.DEFAULT_MIME).split(";")[0].strip() or C.DEFAULT_MIME
    validate_image_bytes(data)
    return save_image_bytes(data, directory, mime)


__all__ = [
    "is_url",
    "is_data_url",
    "is_file_url",
    "file_url_to_path",
    "local_path",
    "guess_mime_from_path",
    "validate_image_bytes",
    "read_image_bytes_and_mime",
    "to_image_data_url",
    "parse_data_url",
    "guess_extension_from_mime",
    "ensure_directory",
    "unique_filename",
    "save_image_bytes",
    "discard_image_file",
    "scale_to_width",
    "normalize_image_file",
    "download_image",
]

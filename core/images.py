"""Race photo thumbnail processing.

Uploaded photos are stored as small JPEG thumbnails next to the race row, so
every upload is downscaled to a fixed width before it reaches the database.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH = 600
JPEG_QUALITY = 70


class PhotoProcessingError(ValueError):
    """Raised when an upload cannot be decoded as an image."""


def compress_photo(data: bytes, *, width: int = THUMBNAIL_WIDTH, quality: int = JPEG_QUALITY) -> bytes:
    """Scale an image to `width` pixels wide and re-encode it as JPEG.

    Height is scaled by the same factor as width. Images narrower than `width`
    are scaled up, matching the fixed-width thumbnails the race list expects.

    Args:
        data: Raw uploaded file bytes.
        width: Target width in pixels.
        quality: JPEG quality (1-95).

    Returns:
        JPEG-encoded thumbnail bytes.

    Raises:
        PhotoProcessingError: When `data` is not a readable image.
    """

    try:
        with Image.open(io.BytesIO(data)) as image:
            image = ImageOps.exif_transpose(image)
            scale = width / image.width
            height = max(1, round(image.height * scale))
            thumbnail = image.convert("RGB").resize((width, height), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ZeroDivisionError) as exc:
        raise PhotoProcessingError("Uploaded file is not a readable image.") from exc

    buffer = io.BytesIO()
    thumbnail.save(buffer, format="JPEG", quality=quality)
    logger.debug("Compressed photo from %d to %d bytes", len(data), buffer.tell())
    return buffer.getvalue()

"""Image normalization ahead of extraction upload."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from quick_receipt.config import JPEG_QUALITY, MAX_IMAGE_EDGE
from quick_receipt.errors import ImageDecodeError
from quick_receipt.models import NormalizedImage

logger = logging.getLogger(__name__)

# Pillow signals malformed or oversized input with any of these
_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    EOFError,
    ValueError,
)


def normalize_image(
    data: bytes,
    *,
    max_edge: int = MAX_IMAGE_EDGE,
    quality: float = JPEG_QUALITY,
) -> NormalizedImage:
    """Clamp the longer edge to ``max_edge`` and re-encode as JPEG.

    Aspect ratio is preserved and images already within bounds keep
    their dimensions. ``quality`` is on a 0-1 scale.

    Raises ImageDecodeError if ``data`` is not a decodable image.
    """
    img = _decode(data)

    width, height = img.size
    target = fit_within(width, height, max_edge)
    if target != (width, height):
        logger.debug("Resizing image from %sx%s to %sx%s", width, height, *target)
        img = img.resize(target, Image.Resampling.LANCZOS)

    if img.mode != "RGB":
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=round(quality * 100))
    encoded = buffer.getvalue()
    if not encoded:
        msg = "Image encoder produced no data"
        raise ImageDecodeError(msg)

    return NormalizedImage(data=encoded, width=img.width, height=img.height)


def fit_within(width: int, height: int, max_edge: int) -> tuple[int, int]:
    """Return dimensions scaled down so the longer edge is at most ``max_edge``."""
    longer = max(width, height)
    if longer <= max_edge:
        return width, height

    scale = max_edge / longer
    if width >= height:
        return max_edge, max(1, round(height * scale))
    return max(1, round(width * scale)), max_edge


def _decode(data: bytes) -> Image.Image:
    """Open and fully load an image, honouring EXIF orientation."""
    if not data:
        msg = "Image payload is empty"
        raise ImageDecodeError(msg)

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        transposed = ImageOps.exif_transpose(img)
    except _DECODE_ERRORS as exc:
        msg = f"Could not decode image: {exc}"
        raise ImageDecodeError(msg) from exc

    return transposed if transposed is not None else img

"""
Input Validation

Cheap checks run before an upload is decoded and before text is parsed.
Both return ``(ok, reason)`` instead of raising so the caller picks the
exception type.
"""

from typing import Optional, Tuple
from io import BytesIO

from PIL import Image as PILImage, UnidentifiedImageError


ACCEPTED_FORMATS = frozenset({"jpeg", "png", "bmp", "webp", "tiff", "mpo"})
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_SIDE_PIXELS = 8192

Check = Tuple[bool, Optional[str]]


def _probe(image_bytes: bytes) -> Tuple[str, int, int]:
    """Return (format, width, height) from the header; raises on corrupt data."""
    with PILImage.open(BytesIO(image_bytes)) as probe:
        probe.verify()
    # verify() leaves the image unusable, read the header again for the size
    with PILImage.open(BytesIO(image_bytes)) as image:
        return (image.format or "unknown").lower(), image.width, image.height


def validate_image_bytes(image_bytes: bytes) -> Check:
    """
    Check that bytes look like a photo the preprocessing stage can decode.

    Args:
        image_bytes: Encoded upload

    Returns:
        (True, None), or (False, reason)
    """
    if not image_bytes:
        return False, "Image data is empty"
    if len(image_bytes) > MAX_UPLOAD_BYTES:
        return False, f"Image is larger than {MAX_UPLOAD_BYTES // (1024 * 1024)} MB"

    try:
        image_format, width, height = _probe(image_bytes)
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        return False, f"Invalid image data: {e}"

    if image_format not in ACCEPTED_FORMATS:
        return False, f"Unsupported image format: {image_format}"
    if not width or not height:
        return False, "Image has no pixels"
    if max(width, height) > MAX_SIDE_PIXELS:
        return False, f"Image side exceeds {MAX_SIDE_PIXELS} pixels ({width}x{height})"

    return True, None


def validate_text(text: str, min_length: int = 1, max_length: int = 100000) -> Check:
    """Check that recognized text is worth handing to the parser."""
    stripped = (text or "").strip()
    if not stripped:
        return False, "Text cannot be empty"
    if len(stripped) < min_length:
        return False, f"Text too short (minimum {min_length} characters)"
    if len(text) > max_length:
        return False, f"Text too long (maximum {max_length} characters)"
    return True, None

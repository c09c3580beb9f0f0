"""
Pixel Buffer Utilities

Pure transforms over PixelBuffer used by every preprocessing strategy,
plus the OpenCV decode step at the input boundary.

Every function returns a new buffer; inputs are never modified.
"""

import math
import logging

import cv2
import numpy as np

from ...domain.value_objects.pixel_buffer import PixelBuffer
from ...domain.exceptions import ImageLoadError, BufferAllocationError


logger = logging.getLogger(__name__)

# Luma weights (ITU-R BT.601)
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def ensure_capacity(width: int, height: int, max_pixels: int) -> None:
    """
    Refuse to create a working buffer larger than the pixel budget.

    Raises:
        BufferAllocationError: If width * height exceeds max_pixels
    """
    if width <= 0 or height <= 0:
        raise BufferAllocationError(
            f"Cannot allocate a {width}x{height} buffer",
            width=width,
            height=height
        )
    if width * height > max_pixels:
        raise BufferAllocationError(
            f"Buffer of {width}x{height} exceeds the {max_pixels} pixel budget",
            width=width,
            height=height
        )


def decode_image(image_bytes: bytes) -> PixelBuffer:
    """
    Decode encoded image bytes (JPEG, PNG, ...) into an RGBA buffer.

    Raises:
        ImageLoadError: If the bytes are not a decodable image
    """
    nparr = np.frombuffer(image_bytes, np.uint8)
    try:
        img = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise ImageLoadError(f"Failed to decode image from bytes: {e}")

    if img is None:
        raise ImageLoadError("Failed to decode image from bytes")

    # 16-bit sources (some PNG/TIFF) come back as uint16
    if img.dtype != np.uint8:
        img = cv2.convertScaleAbs(img, alpha=255.0 / max(float(img.max()), 1.0))

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)

    return PixelBuffer(rgba)


def to_grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Replace R, G and B with the luma-weighted average."""
    rgb = buffer.pixels[:, :, :3].astype(np.float64)
    gray = np.rint(rgb @ LUMA_WEIGHTS)
    return buffer.with_rgb(np.clip(gray, 0, 255).astype(np.uint8))


def scale_contrast(buffer: PixelBuffer, factor: float) -> PixelBuffer:
    """Stretch each channel around mid-gray: v' = factor * (v - 128) + 128."""
    rgb = buffer.pixels[:, :, :3].astype(np.float64)
    scaled = factor * (rgb - 128.0) + 128.0
    return buffer.with_rgb(np.clip(np.rint(scaled), 0, 255).astype(np.uint8))


def binarize(buffer: PixelBuffer, threshold: int) -> PixelBuffer:
    """Map each channel to 255 if it is above the threshold, else 0."""
    rgb = buffer.pixels[:, :, :3]
    return buffer.with_rgb(np.where(rgb > threshold, 255, 0).astype(np.uint8))


def neighbor_average(buffer: PixelBuffer) -> PixelBuffer:
    """
    Five-point smoothing: each interior pixel becomes the mean of itself
    and its four direct neighbours. Border pixels are left unchanged.
    """
    rgb = buffer.pixels[:, :, :3].astype(np.float64)
    out = rgb.copy()
    if buffer.width >= 3 and buffer.height >= 3:
        out[1:-1, 1:-1] = (
            rgb[1:-1, 1:-1]
            + rgb[1:-1, :-2]
            + rgb[1:-1, 2:]
            + rgb[:-2, 1:-1]
            + rgb[2:, 1:-1]
        ) / 5.0
    return buffer.with_rgb(np.clip(np.rint(out), 0, 255).astype(np.uint8))


def rotate90(buffer: PixelBuffer) -> PixelBuffer:
    """Rotate 90 degrees clockwise about the centre, swapping width and height."""
    return PixelBuffer(np.rot90(buffer.pixels, k=-1))


def upscale_factor(width: int, height: int, target_long_edge: int = 2000, max_scale: float = 2.0) -> float:
    """
    Scale factor that brings the long edge towards target_long_edge.

    Never below 1 (no downscaling) and never above max_scale.
    """
    long_edge = max(width, height)
    if long_edge <= 0:
        return 1.0
    return max(1.0, min(max_scale, target_long_edge / long_edge))


def upscale(
    buffer: PixelBuffer,
    target_long_edge: int = 2000,
    max_scale: float = 2.0,
    max_pixels: int = 40_000_000
) -> PixelBuffer:
    """
    Enlarge small captures before analysis.

    Recognition on small label photos improves markedly with upscaling;
    the cap keeps memory bounded on large captures.

    Raises:
        BufferAllocationError: If the scaled buffer would exceed max_pixels
    """
    scale = upscale_factor(buffer.width, buffer.height, target_long_edge, max_scale)
    new_width = math.floor(buffer.width * scale)
    new_height = math.floor(buffer.height * scale)

    if (new_width, new_height) == (buffer.width, buffer.height):
        return buffer.copy()

    ensure_capacity(new_width, new_height, max_pixels)

    try:
        resized = cv2.resize(buffer.pixels, (new_width, new_height), interpolation=cv2.INTER_CUBIC)
    except MemoryError:
        raise BufferAllocationError(
            f"Out of memory scaling to {new_width}x{new_height}",
            width=new_width,
            height=new_height
        )

    logger.debug(f"Upscaled image from {buffer.width}x{buffer.height} to {new_width}x{new_height}")

    return PixelBuffer(resized)

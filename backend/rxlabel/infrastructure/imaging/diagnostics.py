"""
Image Diagnostics

Blur and rotation heuristics computed on the scaled working image.
Neither check stops the pipeline; the scores are reported back so the
capture screen can suggest a retake.
"""

import logging
from typing import Tuple

import numpy as np

from ...domain.value_objects.pixel_buffer import PixelBuffer
from .pixels import LUMA_WEIGHTS, rotate90


logger = logging.getLogger(__name__)

ROTATION_SAMPLE_STRIDE = 10
ROTATION_MARGIN = 10
DEFAULT_ROTATION_RATIO = 1.2


def _luma(buffer: PixelBuffer) -> np.ndarray:
    return buffer.pixels[:, :, :3].astype(np.float64) @ LUMA_WEIGHTS


def detect_blur(buffer: PixelBuffer) -> float:
    """
    Laplacian sharpness score.

    For every interior pixel take |4c - top - bottom - left - right| on
    luma, average over the interior and multiply by 10. Sharp text on a
    label usually scores well above 100.

    Args:
        buffer: Grayscale image to score (output of ``to_grayscale``)

    Returns:
        Score, 0.0 for images smaller than 3x3
    """
    if buffer.width < 3 or buffer.height < 3:
        return 0.0

    luma = buffer.luma
    center = luma[1:-1, 1:-1]
    laplacian = np.abs(
        4.0 * center
        - luma[:-2, 1:-1]
        - luma[2:, 1:-1]
        - luma[1:-1, :-2]
        - luma[1:-1, 2:]
    )
    return float(laplacian.mean() * 10.0)


def detect_rotation(buffer: PixelBuffer, ratio_threshold: float = DEFAULT_ROTATION_RATIO) -> int:
    """
    Guess whether the text runs vertically.

    Samples a coarse grid and compares edge energy across columns with
    edge energy across rows. Horizontal text lines produce strong changes
    from one row to the next only between lines, so a dominant vertical
    energy means the lines are standing on end.

    Returns:
        90 when vertical energy dominates, otherwise 0
    """
    ys = np.arange(ROTATION_MARGIN, buffer.height - ROTATION_MARGIN, ROTATION_SAMPLE_STRIDE)
    xs = np.arange(ROTATION_MARGIN, buffer.width - ROTATION_MARGIN, ROTATION_SAMPLE_STRIDE)
    if ys.size == 0 or xs.size == 0:
        return 0

    luma = _luma(buffer)
    grid = luma[np.ix_(ys, xs)]
    horizontal_energy = float(np.abs(grid - luma[np.ix_(ys, xs + 1)]).sum())
    vertical_energy = float(np.abs(grid - luma[np.ix_(ys + 1, xs)]).sum())

    ratio = vertical_energy / (horizontal_energy + 1.0)
    logger.debug(
        f"Rotation energy: horizontal={horizontal_energy:.0f}, "
        f"vertical={vertical_energy:.0f}, ratio={ratio:.2f}"
    )
    return 90 if ratio > ratio_threshold else 0


def correct_rotation(
    buffer: PixelBuffer,
    ratio_threshold: float = DEFAULT_ROTATION_RATIO
) -> Tuple[PixelBuffer, int]:
    """
    Rotate the buffer upright if it looks sideways.

    Only a quarter turn clockwise is ever applied.

    Returns:
        Tuple of (oriented buffer, detected degrees)
    """
    degrees = detect_rotation(buffer, ratio_threshold)
    if degrees == 90:
        return rotate90(buffer), degrees
    return buffer, degrees

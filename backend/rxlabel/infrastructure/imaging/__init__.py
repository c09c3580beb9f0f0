"""
Imaging Infrastructure

Pixel transforms, quality diagnostics and strategy selection.
"""

from .pixels import (
    decode_image,
    ensure_capacity,
    to_grayscale,
    scale_contrast,
    binarize,
    neighbor_average,
    rotate90,
    upscale,
    upscale_factor,
)
from .diagnostics import detect_blur, detect_rotation, correct_rotation
from .strategies import apply_strategy, edge_score, select_strategy

__all__ = [
    "decode_image",
    "ensure_capacity",
    "to_grayscale",
    "scale_contrast",
    "binarize",
    "neighbor_average",
    "rotate90",
    "upscale",
    "upscale_factor",
    "detect_blur",
    "detect_rotation",
    "correct_rotation",
    "apply_strategy",
    "edge_score",
    "select_strategy",
]

"""
Value Objects

Immutable objects that represent domain concepts with no identity.
"""

from .bounding_box import BoundingBox
from .image_data import ImageData
from .pixel_buffer import PixelBuffer
from .preprocessing_strategy import PreprocessingStrategy

__all__ = [
    "BoundingBox",
    "ImageData",
    "PixelBuffer",
    "PreprocessingStrategy",
]

"""
Shared test helpers: synthetic label images and canned label text.
"""

import cv2
import numpy as np
import pytest

from rxlabel.domain.value_objects.pixel_buffer import PixelBuffer


LISINOPRIL_LABEL = "Lisinopril 10mg\nTake 1 tablet by mouth once daily"


def encode_png(array: np.ndarray) -> bytes:
    """Encode a gray or BGR array as PNG bytes."""
    ok, encoded = cv2.imencode(".png", array)
    assert ok
    return encoded.tobytes()


def horizontal_stripes(height: int = 60, width: int = 100) -> np.ndarray:
    """Rows alternate black and white."""
    img = np.zeros((height, width), dtype=np.uint8)
    img[1::2, :] = 255
    return img


def vertical_stripes(height: int = 60, width: int = 100) -> np.ndarray:
    """Columns alternate black and white."""
    img = np.zeros((height, width), dtype=np.uint8)
    img[:, 1::2] = 255
    return img


def checkerboard(size: int = 64) -> np.ndarray:
    yy, xx = np.indices((size, size))
    return (((yy + xx) % 2) * 255).astype(np.uint8)


def text_image(width: int = 300, height: int = 200) -> np.ndarray:
    """White card with a few lines of dark text."""
    img = np.full((height, width, 3), 255, dtype=np.uint8)
    for i, line in enumerate(["LISINOPRIL 10MG", "TAKE 1 TABLET", "BY MOUTH DAILY"]):
        cv2.putText(img, line, (10, 50 + i * 50), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 2)
    return img


@pytest.fixture
def label_png() -> bytes:
    return encode_png(text_image())


@pytest.fixture
def gray_buffer() -> PixelBuffer:
    rng = np.random.default_rng(7)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(40, 60), dtype=np.uint8))

"""
Pixel Buffer Value Object

An owned RGBA pixel array that every preprocessing transform consumes and
produces. Grayscale images are stored as RGBA with R == G == B.
"""

from dataclasses import dataclass
import base64

import cv2
import numpy as np


@dataclass(frozen=True)
class PixelBuffer:
    """
    Immutable RGBA pixel buffer.

    The wrapped array has shape (height, width, 4) and dtype uint8. The
    constructor stores a read-only copy, so the caller keeps a writable
    array and transforms must build a new buffer instead of writing
    through a shared one.

    Attributes:
        pixels: RGBA pixel array
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects (height, width, 4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"PixelBuffer expects uint8 pixels, got {self.pixels.dtype}")
        owned = self.pixels.copy()
        owned.setflags(write=False)
        object.__setattr__(self, "pixels", owned)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self):
        """(width, height) tuple."""
        return (self.width, self.height)

    @property
    def luma(self) -> np.ndarray:
        """
        First channel as a 2-D float array.

        For grayscale buffers this is the luma value; callers that need the
        luma of a colour buffer convert it with ``to_grayscale`` first.
        """
        return self.pixels[:, :, 0].astype(np.float64)

    def copy(self) -> "PixelBuffer":
        """Return a buffer with its own pixel storage."""
        return PixelBuffer(self.pixels)

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """
        Build a new buffer from RGB values, keeping this buffer's alpha.

        ``rgb`` may be (h, w) for a single value replicated to R, G and B,
        or (h, w, 3).
        """
        if rgb.ndim == 2:
            rgb = np.repeat(rgb[:, :, np.newaxis], 3, axis=2)
        out = np.empty((rgb.shape[0], rgb.shape[1], 4), dtype=np.uint8)
        out[:, :, :3] = rgb
        out[:, :, 3] = self.pixels[:, :, 3]
        return PixelBuffer(out)

    def to_png_bytes(self) -> bytes:
        """Encode as PNG."""
        bgra = cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2BGRA)
        ok, encoded = cv2.imencode(".png", bgra)
        if not ok:
            raise ValueError("Failed to encode pixel buffer as PNG")
        return encoded.tobytes()

    def to_base64(self) -> str:
        """Encode as a PNG data URL, the form the capture UI displays."""
        payload = base64.b64encode(self.to_png_bytes()).decode("utf-8")
        return f"data:image/png;base64,{payload}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    def __hash__(self) -> int:
        return hash((self.pixels.shape, self.pixels.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Create from a gray (h, w), RGB (h, w, 3) or RGBA (h, w, 4) array.

        Values are clipped to [0, 255]; missing alpha is set to opaque.
        """
        arr = np.clip(np.asarray(array), 0, 255).astype(np.uint8)
        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported array shape for PixelBuffer: {arr.shape}")
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        return cls(np.ascontiguousarray(arr))

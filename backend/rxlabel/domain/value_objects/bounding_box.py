"""
Bounding Box Value Object

Represents the pixel region a recognized word occupies.
"""

from dataclasses import dataclass
from typing import Tuple, Dict


@dataclass(frozen=True)
class BoundingBox:
    """
    Immutable value object for a word's bounding box.

    Coordinates are absolute pixels in the preprocessed image, which has
    the same size as the preview image returned to the caller.

    Attributes:
        x0: Left edge
        y0: Top edge
        x1: Right edge
        y1: Bottom edge
    """

    x0: int
    y0: int
    x1: int
    y1: int

    def __post_init__(self) -> None:
        """Validate bounding box coordinates."""
        if self.x0 > self.x1:
            raise ValueError(f"x0 ({self.x0}) must be <= x1 ({self.x1})")
        if self.y0 > self.y1:
            raise ValueError(f"y0 ({self.y0}) must be <= y1 ({self.y1})")

    @property
    def width(self) -> int:
        """Calculate box width."""
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        """Calculate box height."""
        return self.y1 - self.y0

    @property
    def area(self) -> int:
        """Calculate box area."""
        return self.width * self.height

    def to_relative(self, image_width: int, image_height: int) -> Dict[str, float]:
        """
        Express the box as percentages of the image size.

        Used to overlay highlights on a preview that is rendered at a
        different size than the source.
        """
        return {
            "left": self.x0 / image_width * 100,
            "top": self.y0 / image_height * 100,
            "width": self.width / image_width * 100,
            "height": self.height / image_height * 100,
        }

    def to_xyxy(self) -> Tuple[int, int, int, int]:
        """Return coordinates as (x0, y0, x1, y1) tuple."""
        return (self.x0, self.y0, self.x1, self.y1)

    def to_dict(self) -> Dict[str, int]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> "BoundingBox":
        """Create from left/top corner plus size, as OCR engines report it."""
        return cls(x0=x, y0=y, x1=x + width, y1=y + height)

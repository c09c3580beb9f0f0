"""
Preprocessing Strategy Value Object

The competing binarization strategies tried on every label photo.
"""

from enum import Enum
from typing import Optional


class PreprocessingStrategy(Enum):
    """
    Enumeration of preprocessing strategies, in tie-break order.

    Each member carries its contrast factor (None when the strategy
    smooths instead of stretching contrast) and binarization threshold.
    """

    STANDARD = ("standard", 1.5, 128)          # Default, balanced
    HIGH_CONTRAST = ("high-contrast", 2.0, 140)  # Faded / low-ink labels
    DENOISE = ("denoise", None, 128)           # Grainy captures
    AGGRESSIVE = ("aggressive", 2.5, 120)      # Last resort for very poor sources

    def __init__(self, label: str, contrast: Optional[float], threshold: int):
        self.label = label
        self.contrast = contrast
        self.threshold = threshold

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_string(cls, value: str) -> "PreprocessingStrategy":
        """Parse a strategy from its label, e.g. "high-contrast"."""
        value_lower = value.lower().strip().replace("_", "-")
        for strategy in cls:
            if strategy.label == value_lower:
                return strategy
        raise ValueError(f"Unknown preprocessing strategy: {value}")

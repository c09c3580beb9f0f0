"""
Recognition Result Entities

Output of the external text recognition engine, normalized into a flat
word sequence.
"""

from dataclasses import dataclass, field
from typing import Tuple, Optional, Dict, Any

from ..value_objects.bounding_box import BoundingBox


@dataclass(frozen=True)
class RecognizedWord:
    """
    A single word reported by the recognition engine.

    Attributes:
        text: The recognized word
        bounding_box: Pixel region of the word
        confidence: Engine confidence, 0-100
    """

    text: str
    bounding_box: BoundingBox
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "bbox": self.bounding_box.to_dict(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class RecognitionResult:
    """
    Result of one recognition call. Immutable once returned.

    Attributes:
        text: Raw recognized text, lines separated by newlines
        confidence: Overall engine confidence, 0-100
        words: Ordered words with bounding boxes
        engine: Name of the engine that produced the result
        processing_time_ms: Time spent inside the engine
    """

    text: str = ""
    confidence: float = 0.0
    words: Tuple[RecognizedWord, ...] = field(default_factory=tuple)
    engine: Optional[str] = None
    processing_time_ms: float = 0.0

    @property
    def has_text(self) -> bool:
        """Check if any text was recognized."""
        return bool(self.text.strip())

    @property
    def word_count(self) -> int:
        return len(self.words)

    def __str__(self) -> str:
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"RecognitionResult('{preview}', confidence={self.confidence:.1f})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "words": [w.to_dict() for w in self.words],
            "engine": self.engine,
        }

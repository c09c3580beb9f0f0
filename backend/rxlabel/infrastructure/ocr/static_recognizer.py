"""
Static Text Recognizer

Returns preset text instead of running an engine. Used for tests and for
dry runs of the pipeline without Tesseract installed.
"""

from typing import Optional, Sequence
import time

from ...domain.ports.text_recognizer import TextRecognizerPort
from ...domain.value_objects.pixel_buffer import PixelBuffer
from ...domain.value_objects.bounding_box import BoundingBox
from ...domain.entities.recognition import RecognizedWord, RecognitionResult


# Synthetic layout used when no word boxes are supplied
CHAR_WIDTH = 10
LINE_HEIGHT = 20


def layout_words(text: str, confidence: float = 90.0) -> tuple:
    """Lay the words of ``text`` out on a fixed character grid."""
    words = []
    for line_index, line in enumerate(text.split("\n")):
        column = 0
        for token in line.split(" "):
            if token:
                words.append(RecognizedWord(
                    text=token,
                    bounding_box=BoundingBox.from_xywh(
                        column * CHAR_WIDTH,
                        line_index * LINE_HEIGHT,
                        len(token) * CHAR_WIDTH,
                        LINE_HEIGHT,
                    ),
                    confidence=confidence,
                ))
            column += len(token) + 1
    return tuple(words)


class StaticTextRecognizer(TextRecognizerPort):
    """
    Recognizer stand-in that returns preset text.

    Attributes:
        acquire_count: Number of acquire() calls
        release_count: Number of release() calls
        recognized: Buffers passed to recognize(), in order
    """

    def __init__(
        self,
        preset_text: str = "",
        words: Optional[Sequence[RecognizedWord]] = None,
        confidence: float = 90.0,
        error: Optional[Exception] = None,
        delay_seconds: float = 0.0
    ):
        """
        Args:
            preset_text: Text returned for every buffer
            words: Word boxes to return; laid out on a grid when omitted
            confidence: Reported overall confidence
            error: Raised from recognize() when set
            delay_seconds: Sleep before answering, to exercise timeouts
        """
        self._preset_text = preset_text
        self._words = tuple(words) if words is not None else layout_words(preset_text, confidence)
        self._confidence = confidence
        self._error = error
        self._delay_seconds = delay_seconds

        self.acquire_count = 0
        self.release_count = 0
        self.recognized = []

    def acquire(self) -> None:
        self.acquire_count += 1

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        self.recognized.append(buffer)
        if self._delay_seconds:
            time.sleep(self._delay_seconds)
        if self._error is not None:
            raise self._error
        return RecognitionResult(
            text=self._preset_text,
            confidence=self._confidence if self._preset_text else 0.0,
            words=self._words,
            engine=self.engine_name,
            processing_time_ms=1.0,
        )

    def release(self) -> None:
        self.release_count += 1

    @property
    def is_active(self) -> bool:
        return self.acquire_count > self.release_count

    @property
    def engine_name(self) -> str:
        return "Static"

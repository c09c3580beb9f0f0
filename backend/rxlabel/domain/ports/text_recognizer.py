"""
Text Recognizer Port

Abstract interface for the external text recognition engine.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from ..value_objects.pixel_buffer import PixelBuffer
from ..entities.recognition import RecognitionResult


class TextRecognizerPort(ABC):
    """
    Port (interface) for text recognition engines.

    The engine is treated as a black box: it receives one binarized pixel
    buffer and returns text, an overall confidence and per-word boxes.

    Engines follow an acquire -> recognize -> release lifecycle. Use
    ``session()`` so release happens on every exit path:

        with recognizer.session() as engine:
            result = engine.recognize(buffer)
    """

    @abstractmethod
    def acquire(self) -> None:
        """
        Prepare the engine for use (start a worker, load a model, ...).

        Raises:
            RecognitionError: If the engine cannot be made available
        """
        pass

    @abstractmethod
    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        """
        Recognize text in a preprocessed image.

        Args:
            buffer: Binarized pixel buffer

        Returns:
            RecognitionResult with text, confidence and words

        Raises:
            RecognitionError: If the engine cannot process the buffer
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Free whatever ``acquire`` took."""
        pass

    @property
    @abstractmethod
    def engine_name(self) -> str:
        """Get the name of the recognition engine."""
        pass

    @contextmanager
    def session(self) -> Iterator["TextRecognizerPort"]:
        """Acquire the engine and guarantee its release."""
        self.acquire()
        try:
            yield self
        finally:
            self.release()

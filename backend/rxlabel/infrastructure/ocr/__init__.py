"""
Text Recognition Adapters

Implementations of TextRecognizerPort and the timeout-enforcing adapter.
"""

from .tesseract_recognizer import TesseractRecognizer, build_recognition_result
from .static_recognizer import StaticTextRecognizer
from .adapter import RecognitionAdapter
from .factory import RecognizerFactory, RecognizerType

__all__ = [
    "TesseractRecognizer",
    "build_recognition_result",
    "StaticTextRecognizer",
    "RecognitionAdapter",
    "RecognizerFactory",
    "RecognizerType",
]

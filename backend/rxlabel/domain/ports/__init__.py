"""
Domain Ports

Abstract interfaces implemented by infrastructure adapters.
"""

from .text_recognizer import TextRecognizerPort

__all__ = [
    "TextRecognizerPort",
]

"""
Infrastructure Layer

Concrete implementations of domain ports (adapters) and the image and
text processing they rely on.
"""

from .ocr import TesseractRecognizer, StaticTextRecognizer, RecognitionAdapter, RecognizerFactory
from .lookup import OpenFDAClient, UPCLookupClient

__all__ = [
    # Recognition
    "TesseractRecognizer",
    "StaticTextRecognizer",
    "RecognitionAdapter",
    "RecognizerFactory",
    # Lookup
    "OpenFDAClient",
    "UPCLookupClient",
]

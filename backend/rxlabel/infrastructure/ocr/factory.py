"""
Recognizer Factory

Factory for creating text recognizer instances.
"""

from enum import Enum

from ...domain.ports.text_recognizer import TextRecognizerPort
from ...config.settings import OCRConfig
from .tesseract_recognizer import TesseractRecognizer
from .static_recognizer import StaticTextRecognizer


class RecognizerType(Enum):
    """Available recognizer implementations."""

    TESSERACT = "tesseract"
    STATIC = "static"


class RecognizerFactory:
    """
    Factory for creating recognizer instances.

    Usage:
        # Create Tesseract recognizer
        recognizer = RecognizerFactory.create(RecognizerType.TESSERACT, lang="eng")

        # Create a static recognizer for dry runs
        recognizer = RecognizerFactory.create(RecognizerType.STATIC, preset_text="...")
    """

    @staticmethod
    def create(
        recognizer_type: RecognizerType,
        **kwargs
    ) -> TextRecognizerPort:
        """
        Create a recognizer instance.

        Args:
            recognizer_type: Type of recognizer to create
            **kwargs: Configuration options
                For TESSERACT:
                - lang: Tesseract language code (default: "eng")
                - oem: OCR engine mode
                - psm: Page segmentation mode
                - timeout: pytesseract per-call timeout
                For STATIC:
                - preset_text: Text to return

        Returns:
            TextRecognizerPort implementation
        """
        if recognizer_type == RecognizerType.TESSERACT:
            return TesseractRecognizer(
                lang=kwargs.get("lang", "eng"),
                config=kwargs.get("config", ""),
                oem=kwargs.get("oem", 3),
                psm=kwargs.get("psm", 3),
                timeout=kwargs.get("timeout", 0)
            )

        elif recognizer_type == RecognizerType.STATIC:
            return StaticTextRecognizer(
                preset_text=kwargs.get("preset_text", ""),
                confidence=kwargs.get("confidence", 90.0)
            )

        else:
            raise ValueError(f"Unknown recognizer type: {recognizer_type}")

    @staticmethod
    def create_from_config(config: OCRConfig) -> TextRecognizerPort:
        """
        Create a recognizer from the OCR configuration section.

        ``config.timeout_seconds`` is also passed to the engine; pytesseract
        kills the tesseract process when it expires.
        """
        recognizer_type = RecognizerType(config.type.lower())
        return RecognizerFactory.create(
            recognizer_type,
            lang=config.language,
            oem=config.oem,
            psm=config.psm,
            timeout=config.timeout_seconds
        )

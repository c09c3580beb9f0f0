"""
Domain Entities

Core entities of the label scanning domain.
"""

from .medication import MedicationRecord, ParsedBatch, MEDICATION_FIELDS
from .recognition import RecognizedWord, RecognitionResult
from .scan_result import (
    ImageDiagnostics,
    StrategyTrial,
    PreprocessedImage,
    LabelScanResult,
    BLUR_THRESHOLD,
)

__all__ = [
    "MedicationRecord",
    "ParsedBatch",
    "MEDICATION_FIELDS",
    "RecognizedWord",
    "RecognitionResult",
    "ImageDiagnostics",
    "StrategyTrial",
    "PreprocessedImage",
    "LabelScanResult",
    "BLUR_THRESHOLD",
]

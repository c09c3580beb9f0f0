"""
Medication Extraction

Heuristic parsing of recognized label text into medication records.
"""

from .medication_parser import parse_medication_from_text, is_common_false_positive
from .segmenter import parse_multiple_medications, detect_layout, split_fragments
from .confidence import get_medication_confidence, score_batch, WEIGHTS
from .highlights import FieldHighlight, locate_field_words, FIELD_LEGEND

__all__ = [
    "parse_medication_from_text",
    "is_common_false_positive",
    "parse_multiple_medications",
    "detect_layout",
    "split_fragments",
    "get_medication_confidence",
    "score_batch",
    "WEIGHTS",
    "FieldHighlight",
    "locate_field_words",
    "FIELD_LEGEND",
]

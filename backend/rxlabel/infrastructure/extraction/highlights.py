"""
Field Highlights

Maps parsed medication fields back to the recognized words they came from,
so the capture screen can outline each field on the preview image.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence
import re

from ...domain.entities.medication import MedicationRecord
from ...domain.entities.recognition import RecognizedWord


# (field, display label, colour), in legend order
FIELD_LEGEND = (
    ("name", "Medication Name", "#0966CC"),
    ("dosage", "Dosage", "#10B981"),
    ("frequency", "Frequency", "#F59E0B"),
    ("route", "Route", "#8B5CF6"),
    ("quantity", "Quantity", "#EC4899"),
    ("instructions", "Instructions", "#F97316"),
    ("prescriber", "Prescriber", "#06B6D4"),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _clean(text: str) -> str:
    return _NON_ALNUM.sub("", text.lower())


@dataclass(frozen=True)
class FieldHighlight:
    """
    One recognized word that belongs to a parsed field.

    Attributes:
        field: Record attribute, e.g. "dosage"
        label: Display label
        color: Hex colour for the outline
        word: The matched word with its box
    """

    field: str
    label: str
    color: str
    word: RecognizedWord

    def relative_box(self, image_width: int, image_height: int) -> Dict[str, float]:
        """Word box as percentages of the preview size."""
        return self.word.bounding_box.to_relative(image_width, image_height)

    def to_dict(self) -> Dict[str, object]:
        return {
            "field": self.field,
            "label": self.label,
            "color": self.color,
            "text": self.word.text,
            "bbox": self.word.bounding_box.to_dict(),
        }


def locate_field_words(
    record: MedicationRecord,
    words: Sequence[RecognizedWord]
) -> List[FieldHighlight]:
    """
    Find the words that make up each found field.

    Field text and word text are both lower-cased and stripped to letters
    and digits; a word belongs to the field when its cleaned text occurs
    inside the cleaned field text.

    Args:
        record: Parsed medication
        words: Recognized words with boxes

    Returns:
        Highlights grouped by field in legend order, words in reading order
    """
    highlights = []
    for field_name, label, color in FIELD_LEGEND:
        value = getattr(record, field_name)
        if not value:
            continue
        field_text = _clean(str(value))
        for word in words:
            word_text = _clean(word.text)
            if word_text and word_text in field_text:
                highlights.append(FieldHighlight(field_name, label, color, word))
    return highlights

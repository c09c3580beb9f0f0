"""
Multi-Medication Segmenter

Decides whether recognized text is one pharmacy label or a list of
medications, and parses it accordingly.
"""

from typing import List
import logging

from ...domain.entities.medication import MedicationRecord, ParsedBatch
from .medication_parser import parse_medication_from_text
from .rules import RX_NUMBER, BULLET_LINE, NUMBERED_LINE, LIST_SEPARATOR


logger = logging.getLogger(__name__)

LAYOUT_SINGLE = "single"
LAYOUT_LIST = "list"

# Shorter fragments are headers, markers or noise
MIN_FRAGMENT_LENGTH = 20


def detect_layout(text: str) -> str:
    """
    Classify text as a single label or a list of medications.

    A list is assumed when the text carries two or more distinct
    prescription numbers, bullet lines or numbered lines.

    Returns:
        "single" or "list"
    """
    text = text or ""
    rx_numbers = set(RX_NUMBER.findall(text))
    if len(rx_numbers) >= 2:
        return LAYOUT_LIST
    if BULLET_LINE.search(text):
        return LAYOUT_LIST
    if NUMBERED_LINE.search(text):
        return LAYOUT_LIST
    return LAYOUT_SINGLE


def split_fragments(text: str) -> List[str]:
    """Split list text into trimmed item fragments, dropping short ones."""
    fragments = [part.strip() for part in LIST_SEPARATOR.split(text)]
    return [part for part in fragments if len(part) >= MIN_FRAGMENT_LENGTH]


def _parse_single(text: str) -> List[MedicationRecord]:
    record = parse_medication_from_text(text)
    if record.name or record.dosage or record.frequency:
        return [record]
    return []


def parse_multiple_medications(text: str) -> ParsedBatch:
    """
    Parse every medication found in the text.

    A single label yields at most one record. In a list, each fragment
    must produce a name plus a dosage, frequency or route to be kept; if
    none does, the whole text is parsed as a single label instead.

    Args:
        text: Recognized text

    Returns:
        Records in the order they appear in the text
    """
    text = (text or "").replace("\r\n", "\n")

    if detect_layout(text) == LAYOUT_SINGLE:
        logger.debug("Detected single medication label")
        return _parse_single(text)

    logger.debug("Detected medication list")
    medications = []
    for fragment in split_fragments(text):
        record = parse_medication_from_text(fragment)
        if record.name and (record.dosage or record.frequency or record.route):
            medications.append(record)

    if medications:
        return medications

    logger.debug("No list items parsed, treating text as a single label")
    return _parse_single(text)

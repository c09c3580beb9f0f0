"""
Medication Field Parser

Deterministic, heuristic extraction of medication fields from the text of
a single pharmacy label. Every field is optional: whatever cannot be
found stays None. Parsing never raises.
"""

from typing import List, Optional
import logging
import re

from ...domain.entities.medication import MedicationRecord
from .rules import (
    first_match,
    DOSAGE_RULES,
    FREQUENCY_RULES,
    ROUTE_RULES,
    PRESCRIBER_RULES,
    QUANTITY_RULES,
    REFILLS_RULES,
    INSTRUCTION_RULES,
    MIXED_CASE_NAME,
    COMMONLY_KNOWN_AS,
    DRUG_SUFFIX,
    BARE_TABLETS,
    INSTRUCTION_WORDS,
    ALL_CAPS_LINE,
    DOSAGE_FORM_TAIL,
    NAME_LINE_EXCLUSIONS,
)


logger = logging.getLogger(__name__)

NAME_LINE_MIN = 3
NAME_LINE_MAX = 40


def is_common_false_positive(candidate: str, record: MedicationRecord) -> bool:
    """
    Check whether a name candidate is label boilerplate rather than a drug.

    Pharmacy branding and a bare "TABLETS" are always rejected. A
    candidate with a typical drug-name ending is then trusted even if the
    same word appears in the directions. Otherwise a candidate that is
    part of an already-found frequency, route or instruction text is
    rejected.

    Args:
        candidate: Possible medication name
        record: Fields found so far

    Returns:
        True if the candidate should not be used as the name
    """
    lower = candidate.lower()
    if "cvshealth" in lower or "pharmacy" in lower:
        return True
    if BARE_TABLETS.match(candidate):
        return True

    if DRUG_SUFFIX.search(candidate):
        return False

    for claimed in (record.frequency, record.route, record.instructions):
        if claimed and lower in claimed.lower():
            return True
    return False


def _name_from_mixed_case(text: str, record: MedicationRecord) -> Optional[str]:
    match = MIXED_CASE_NAME.search(text)
    if match:
        candidate = match.group(1).strip()
        if not is_common_false_positive(candidate, record):
            return candidate
    return None


def _name_near_dosage(text: str, dosage_match: "re.Match", record: MedicationRecord) -> Optional[str]:
    """Text in front of the dosage on its line, else the line above it."""
    raw_lines = text.split("\n")
    line_index = text.count("\n", 0, dosage_match.start())
    line = raw_lines[line_index]
    line_start = text.rfind("\n", 0, dosage_match.start()) + 1
    before = line[:dosage_match.start() - line_start].strip()

    if len(before) > 3 and not INSTRUCTION_WORDS.search(before):
        if not is_common_false_positive(before, record):
            return before
        logger.debug(f"Rejected '{before}' as a false positive")
        return None

    for previous in reversed(raw_lines[:line_index]):
        previous = previous.strip()
        if not previous:
            continue
        if len(previous) > 3 and not is_common_false_positive(previous, record):
            return previous
        logger.debug(f"Rejected '{previous}' as a false positive")
        return None
    return None


def _score_name_line(line: str) -> int:
    score = 0
    if DRUG_SUFFIX.search(line):
        score += 5
    if ALL_CAPS_LINE.match(line):
        score += 2
    if "TABLET" in line or "CAPSULE" in line:
        score += 1

    if " " in line:
        score -= 1
    if BARE_TABLETS.match(line):
        score -= 10
    if line.lower().startswith("tablets"):
        score -= 5
    return score


def _name_from_line_scan(lines: List[str], record: MedicationRecord) -> Optional[str]:
    """Pick the line that looks most like a drug name."""
    best_candidate = None
    best_score = 0

    for line in lines:
        if len(line) < NAME_LINE_MIN or len(line) > NAME_LINE_MAX:
            continue
        if any(p.search(line) for p in NAME_LINE_EXCLUSIONS):
            continue

        # A line that is little more than the dosage is not a name
        if record.dosage and record.dosage in line:
            if len(line.replace(record.dosage, "", 1).strip()) < 3:
                continue

        score = _score_name_line(line)
        if score > best_score:
            best_score = score
            best_candidate = line

    if best_candidate is None:
        return None

    name = DOSAGE_FORM_TAIL.sub("", best_candidate)
    name = re.sub(r",\s*$", "", name).strip()
    return name or None


def _name_from_commonly_known(text: str) -> Optional[str]:
    match = COMMONLY_KNOWN_AS.search(text)
    return match.group(1) if match else None


def parse_medication_from_text(text: str) -> MedicationRecord:
    """
    Parse the fields of one medication from label text.

    Args:
        text: Recognized text of one label (or one list item)

    Returns:
        MedicationRecord with whatever fields were found. Confidence is
        left at 0; see ``get_medication_confidence``.
    """
    text = (text or "").replace("\r\n", "\n")
    single_line = text.replace("\n", " ")
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    record = MedicationRecord()

    dosage_match = None
    found = first_match(DOSAGE_RULES, text)
    if found:
        record.dosage, dosage_match, _ = found

    found = first_match(FREQUENCY_RULES, single_line)
    if found:
        record.frequency = found[0]

    found = first_match(ROUTE_RULES, single_line)
    if found:
        record.route = found[0]

    found = first_match(PRESCRIBER_RULES, text)
    if found:
        record.prescriber = found[0]

    found = first_match(QUANTITY_RULES, text)
    if found:
        record.quantity = found[0]

    found = first_match(REFILLS_RULES, text)
    if found:
        record.refills = found[0]

    found = first_match(INSTRUCTION_RULES, text)
    if found:
        record.instructions = found[0]

    record.name = _name_from_mixed_case(text, record)
    if not record.name and dosage_match is not None:
        record.name = _name_near_dosage(text, dosage_match, record)
    if not record.name:
        record.name = _name_from_line_scan(lines, record)
    if not record.name:
        record.name = _name_from_commonly_known(text)

    logger.debug(f"Parsed {record}")
    return record

"""
Field Rules

Ordered pattern tables used by the medication field parser. For every
field the rules are tried top to bottom and the first accepted match
wins, so the order of each table is part of its behaviour.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple
import re


@dataclass(frozen=True)
class FieldRule:
    """
    One way of finding a field in label text.

    Attributes:
        name: Short identifier, used in debug logs
        pattern: Compiled regular expression
        extract: Builds the field value from a match
        accept: Optional filter; rejected matches are skipped and the
            scan continues with the next match of the same pattern
    """

    name: str
    pattern: "re.Pattern"
    extract: Callable[["re.Match"], str]
    accept: Optional[Callable[["re.Match"], bool]] = None


def first_match(rules: Sequence[FieldRule], text: str) -> Optional[Tuple[str, "re.Match", FieldRule]]:
    """
    Apply rules in order.

    Returns:
        (value, match, rule) for the first accepted match, or None
    """
    for rule in rules:
        for match in rule.pattern.finditer(text):
            if rule.accept is not None and not rule.accept(match):
                continue
            value = rule.extract(match)
            if value:
                return value, match, rule
    return None


def _collapse(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


# -----------------------------------------------------------------------------
# Dosage
# -----------------------------------------------------------------------------

DOSAGE_RULES = (
    FieldRule(
        "parenthesized",
        re.compile(r"\((\d+(?:\.\d+)?)\s*(mg|mcg|g|ml|units?)\)", re.IGNORECASE),
        lambda m: f"{m.group(1)} {m.group(2)}",
    ),
    FieldRule(
        "bare",
        re.compile(r"(?<!\d)(\d+(?:\.\d+)?)\s*(mg|mcg|g|ml|units?)\b", re.IGNORECASE),
        lambda m: f"{m.group(1)} {m.group(2)}",
    ),
)


# -----------------------------------------------------------------------------
# Frequency (searched with newlines folded to spaces)
# -----------------------------------------------------------------------------

FREQUENCY_RULES = (
    FieldRule(
        "spelled-out",
        re.compile(
            r"\b(?:once|twice|three times?|four times?|two times?)\s+"
            r"(?:daily|per day|a day|in the morning|in the evening)",
            re.IGNORECASE,
        ),
        lambda m: m.group(0).strip(),
    ),
    FieldRule(
        "latin",
        re.compile(r"\b(?:QD|BID|TID|QID|Q\d+H)\b", re.IGNORECASE),
        lambda m: m.group(0).strip(),
    ),
    FieldRule(
        "time-of-day",
        re.compile(r"(?:in the|every)\s+(?:morning|evening|afternoon|night)", re.IGNORECASE),
        lambda m: m.group(0).strip(),
    ),
)


# -----------------------------------------------------------------------------
# Route (searched with newlines folded to spaces)
# -----------------------------------------------------------------------------

ROUTE_RULES = (
    FieldRule(
        "by-phrase",
        re.compile(r"by\s+(?:mouth|injection|inhalation)", re.IGNORECASE),
        lambda m: m.group(0),
    ),
    FieldRule(
        "keyword",
        re.compile(
            r"\b(?:oral|topical|injection|IV|IM|sublingual|transdermal|inhalation|ophthalmic|otic)\b",
            re.IGNORECASE,
        ),
        lambda m: m.group(0).strip(),
    ),
)


# -----------------------------------------------------------------------------
# Prescriber
# -----------------------------------------------------------------------------

def _plausible_prescriber(match: "re.Match") -> bool:
    whole = match.group(0).upper()
    if "AUTH REQUIRED" in whole or "REFILLS" in whole or "DR. AUTH" in whole:
        return False
    captured = match.group(match.lastindex or 0).strip().upper()
    return captured != "AUTH"


def _prescriber_value(match: "re.Match") -> str:
    value = re.sub(r"^Prescriber:\s*", "", match.group(0), flags=re.IGNORECASE)
    return _collapse(value)


PRESCRIBER_RULES = (
    FieldRule(
        "doctor-full-name",
        re.compile(r"\b(?:Dr\.|Doctor)\s+([A-Z]\.\s*)?([A-Z][a-z]+\s+[A-Z][a-z]+)", re.IGNORECASE),
        _prescriber_value,
        _plausible_prescriber,
    ),
    FieldRule(
        "doctor-caps",
        re.compile(r"\b(?:Dr\.|Doctor)\s+([A-Z]\s+)?([A-Z]+)", re.IGNORECASE),
        _prescriber_value,
        _plausible_prescriber,
    ),
    FieldRule(
        "md-suffix",
        re.compile(r"(?<![A-Za-z])([A-Z][a-z]+\s+[A-Z]\.?\s+[A-Z][a-z]+)(?:\s*,?\s*MD|\s+MD)", re.IGNORECASE),
        _prescriber_value,
        _plausible_prescriber,
    ),
    FieldRule(
        "labelled",
        re.compile(r"Prescriber:[ \t]*([A-Za-z \t.]+)", re.IGNORECASE),
        _prescriber_value,
        _plausible_prescriber,
    ),
)


# -----------------------------------------------------------------------------
# Quantity and refills
# -----------------------------------------------------------------------------

QUANTITY_RULES = (
    FieldRule(
        "labelled",
        re.compile(r"(?:qty|quantity)\s*:?\s*(\d+)", re.IGNORECASE),
        lambda m: m.group(1),
    ),
    FieldRule(
        "count-of-units",
        re.compile(r"^(\d+)\s+(?:tablets|capsules|pills)", re.IGNORECASE | re.MULTILINE),
        lambda m: m.group(1),
    ),
)

REFILLS_RULES = (
    FieldRule(
        "labelled",
        re.compile(r"(?:refills?|no refills)\s*:?\s*(\d+|remaining)", re.IGNORECASE),
        lambda m: m.group(1),
    ),
)


# -----------------------------------------------------------------------------
# Instructions
# -----------------------------------------------------------------------------

INSTRUCTION_RULES = (
    FieldRule(
        "take-or-use",
        re.compile(
            r"(?:Take|Use)\s+(?:one|two|three|\d+)\s+(?:tablet|capsule|pill|application).+?(?:\.|$)",
            re.IGNORECASE | re.DOTALL,
        ),
        lambda m: _collapse(m.group(0)),
    ),
)


# -----------------------------------------------------------------------------
# Name
# -----------------------------------------------------------------------------

# Mixed-case brand spellings such as "amLODIPine"
MIXED_CASE_NAME = re.compile(r"\b([a-z]+[A-Z][A-Za-z]+)\b")

COMMONLY_KNOWN_AS = re.compile(r"commonly\s+known\s+as\s+([A-Za-z]+)", re.IGNORECASE)

DRUG_SUFFIX = re.compile(r"(?:ine|ide|zol|pam|in|vir|mycin|cillin|statin|zil)$", re.IGNORECASE)

BARE_TABLETS = re.compile(r"^tablets?,?\s*$", re.IGNORECASE)

INSTRUCTION_WORDS = re.compile(r"take|use|qty", re.IGNORECASE)

ALL_CAPS_LINE = re.compile(r"^[A-Z\s]+$")

DOSAGE_FORM_TAIL = re.compile(r"\b(?:TABLETS?|CAPSULES?|Pills)\b.*", re.IGNORECASE)

# Lines that are never the medication name
NAME_LINE_EXCLUSIONS = (
    re.compile(r"pharmacy", re.IGNORECASE),
    re.compile(r"hospital", re.IGNORECASE),
    re.compile(r"research", re.IGNORECASE),
    re.compile(r"children", re.IGNORECASE),
    re.compile(r"jude", re.IGNORECASE),
    re.compile(r"\d{3}[-\s]?\d{3}[-\s]?\d{4}"),
    re.compile(r"^\d+\s+[A-Z][a-z]+\s+(?:Place|Street|Road|Ave|Dr)", re.IGNORECASE),
    re.compile(r"Rx\s*[:#]?\s*\d+", re.IGNORECASE),
    re.compile(r"written", re.IGNORECASE),
    re.compile(r"filled", re.IGNORECASE),
    re.compile(r"\btest\b", re.IGNORECASE),
    re.compile(r"patient", re.IGNORECASE),
    re.compile(r"discard", re.IGNORECASE),
    re.compile(r"commonly\s+known", re.IGNORECASE),
    re.compile(r"no\s+refills", re.IGNORECASE),
    re.compile(r"^take\s+(?:\d+|one|two)", re.IGNORECASE),
    re.compile(r"^by\s+mouth", re.IGNORECASE),
    re.compile(r"MRN", re.IGNORECASE),
    re.compile(r"Health", re.IGNORECASE),
    re.compile(r"Non-Drowsy", re.IGNORECASE),
    re.compile(r"Questions\?", re.IGNORECASE),
    re.compile(r"TABLETS?,?\s*\d+", re.IGNORECASE),
)


# -----------------------------------------------------------------------------
# Layout
# -----------------------------------------------------------------------------

RX_NUMBER = re.compile(r"Rx\s*[:#]?\s*(\d{5,})", re.IGNORECASE)

BULLET_LINE = re.compile(r"^[*•]\s", re.MULTILINE)

NUMBERED_LINE = re.compile(r"^\d+\.\s+[A-Z]", re.MULTILINE)

# Separators between list items; markers are consumed, item text is kept
LIST_SEPARATOR = re.compile(
    r"\n\s*\n\s*\n"
    r"|^[ \t]*\d+\.\s+(?=[A-Z])"
    r"|^[ \t]*[*•]\s+",
    re.MULTILINE,
)

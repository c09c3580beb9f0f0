"""
Medication Record Entity

A partially filled medication record parsed from label text.
"""

from dataclasses import dataclass, fields, replace
from typing import Optional, Dict, Any, List


# Fields the parser may fill, in display order
MEDICATION_FIELDS = (
    "name",
    "dosage",
    "frequency",
    "route",
    "prescriber",
    "quantity",
    "refills",
    "instructions",
)


@dataclass
class MedicationRecord:
    """
    Partial medication information.

    Every field is independently optional; None means the parser did not
    find it, never that parsing failed.

    Attributes:
        name: Medication name
        dosage: Strength, formatted "<number> <unit>"
        frequency: How often to take it
        route: Administration route
        prescriber: Prescribing clinician
        quantity: Dispensed quantity
        refills: Refills remaining
        instructions: Directions sentence
        confidence: Completeness score, 0-100
        image: Optional source image reference (preview data URL)
    """

    name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    prescriber: Optional[str] = None
    quantity: Optional[str] = None
    refills: Optional[str] = None
    instructions: Optional[str] = None
    confidence: int = 0
    image: Optional[str] = None

    @property
    def found_fields(self) -> List[str]:
        """Names of the fields that were found."""
        return [f for f in MEDICATION_FIELDS if getattr(self, f)]

    @property
    def is_empty(self) -> bool:
        return not self.found_fields

    def with_confidence(self, confidence: int) -> "MedicationRecord":
        """Copy of this record with the confidence set."""
        return replace(self, confidence=confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, leaving out fields that were not found."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[f.name] = value
        return data

    def __str__(self) -> str:
        parts = [f"{f}={getattr(self, f)!r}" for f in self.found_fields]
        return f"MedicationRecord({', '.join(parts)}, confidence={self.confidence})"


# Ordered records in the order they were found in the text
ParsedBatch = List[MedicationRecord]

"""
Confidence Scorer

Completeness score for a parsed medication record.
"""

from typing import Iterable, List

from ...domain.entities.medication import MedicationRecord


# Refills and prescriber are informational and carry no weight
WEIGHTS = {
    "name": 30,
    "dosage": 25,
    "frequency": 20,
    "route": 10,
    "quantity": 10,
    "instructions": 5,
}


def get_medication_confidence(record: MedicationRecord) -> int:
    """
    Sum the weights of the fields that were found.

    Returns:
        0 for an empty record, 100 when every weighted field is present
    """
    return sum(weight for field_name, weight in WEIGHTS.items() if getattr(record, field_name))


def score_batch(records: Iterable[MedicationRecord]) -> List[MedicationRecord]:
    """Return copies of the records with confidence filled in."""
    return [r.with_confidence(get_medication_confidence(r)) for r in records]

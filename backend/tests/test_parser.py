"""
Tests for the medication field parser.
"""

import time

from rxlabel.domain.entities.medication import MedicationRecord
from rxlabel.infrastructure.extraction.rules import DOSAGE_RULES, PRESCRIBER_RULES, first_match
from rxlabel.infrastructure.extraction.medication_parser import (
    parse_medication_from_text,
    is_common_false_positive,
)

from conftest import LISINOPRIL_LABEL


def test_lisinopril_label():
    record = parse_medication_from_text(LISINOPRIL_LABEL)

    assert record.dosage == "10 mg"
    assert "mouth" in record.route
    assert "once" in record.frequency.lower()
    assert "daily" in record.frequency.lower()
    assert record.name == "Lisinopril"
    assert record.instructions == "Take 1 tablet by mouth once daily"
    assert record.prescriber is None
    assert record.quantity is None


def test_windows_line_endings_are_normalized():
    assert parse_medication_from_text(LISINOPRIL_LABEL.replace("\n", "\r\n")) == parse_medication_from_text(LISINOPRIL_LABEL)


def test_parenthesized_dosage_wins():
    record = parse_medication_from_text("Amoxicillin 250 capsule (500mg)")
    assert record.dosage == "500 mg"


def test_dosage_keeps_unit_as_printed():
    record = parse_medication_from_text("amLODIPine 5 MG TABS")

    assert record.dosage == "5 MG"
    assert record.name == "amLODIPine"


def test_frequency_split_across_lines():
    record = parse_medication_from_text("Take 1 capsule\nTWO TIMES\nA DAY")
    assert record.frequency == "TWO TIMES A DAY"


def test_latin_frequency():
    record = parse_medication_from_text("Metoprolol 25mg BID")
    assert record.frequency == "BID"


def test_time_of_day_frequency():
    record = parse_medication_from_text("Simvastatin 20 mg\nTake at night every evening")
    assert record.frequency == "every evening"


def test_route_keyword():
    record = parse_medication_from_text("Hydrocortisone cream 1%\nFor topical use only")
    assert record.route == "topical"


def test_prescriber_with_doctor_title():
    record = parse_medication_from_text("Prescriber: Dr. Jane Smith\nIbuprofen 800 mg")
    assert record.prescriber == "Dr. Jane Smith"


def test_prescriber_skips_auth_required():
    record = parse_medication_from_text("DR. AUTH REQUIRED\nPatrick K Campbell, MD\nIbuprofen 800 mg")
    assert record.prescriber == "Patrick K Campbell, MD"


def test_prescriber_label_stays_on_its_line():
    record = parse_medication_from_text("Prescriber: Smith\nQty 30")
    assert record.prescriber == "Smith"


def test_quantity_and_refills():
    record = parse_medication_from_text("Lisinopril 10mg\nQty: 30\nRefills: 2")

    assert record.quantity == "30"
    assert record.refills == "2"


def test_quantity_from_count_line():
    record = parse_medication_from_text("Atorvastatin 40 mg\n90 TABLETS")
    assert record.quantity == "90"


def test_refills_remaining():
    record = parse_medication_from_text("Metformin 500 mg\nNo refills remaining")
    assert record.refills == "remaining"


def test_instructions_stop_at_period():
    record = parse_medication_from_text("Take one tablet\nby mouth daily. Do not crush.")
    assert record.instructions == "Take one tablet by mouth daily."


def test_name_from_previous_line():
    record = parse_medication_from_text("IBUPROFEN\n800 mg\nTake 1 tablet by mouth")
    assert record.name == "IBUPROFEN"


def test_name_from_line_scan():
    record = parse_medication_from_text("WALGREENS\nATORVASTATIN\nQty: 30")
    assert record.name == "ATORVASTATIN"


def test_line_scan_strips_dosage_form():
    record = parse_medication_from_text("LISINOPRIL TABLETS\nQty: 30")
    assert record.name == "LISINOPRIL"


def test_name_from_commonly_known_as():
    record = parse_medication_from_text("Take as directed\ncommonly known as Tylenol")
    assert record.name == "Tylenol"


def test_false_positive_rejections():
    empty = MedicationRecord()

    assert is_common_false_positive("CVSHealth", empty)
    assert is_common_false_positive("TABLETS,", empty)
    assert is_common_false_positive("Walgreens Pharmacy", empty)
    assert not is_common_false_positive("Amoxicillin", empty)


def test_false_positive_when_claimed_by_another_field():
    record = MedicationRecord(route="by mouth", instructions="take metformin with food")

    assert is_common_false_positive("mouth", record)
    # A drug-name ending overrides the claim
    assert not is_common_false_positive("Metformin", record)


def test_parsing_never_raises():
    for text in ["", "   ", "((((", "Rx#", "\n\n\n", "0" * 500, None]:
        record = parse_medication_from_text(text)
        assert isinstance(record, MedicationRecord)

    assert parse_medication_from_text("").is_empty


def test_prescriber_after_long_letter_run_is_found_quickly():
    text = "x" * 50_000 + " John A Smith MD"

    started = time.perf_counter()
    value, _, rule = first_match(PRESCRIBER_RULES, text)

    assert time.perf_counter() - started < 1.0
    assert rule.name == "md-suffix"
    assert value == "John A Smith MD"


def test_dosage_after_long_digit_run_is_found_quickly():
    text = "1" * 50_000 + " 5 mg"

    started = time.perf_counter()
    value, _, _ = first_match(DOSAGE_RULES, text)

    assert time.perf_counter() - started < 1.0
    assert value == "5 mg"

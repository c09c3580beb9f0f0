"""
Tests for NDC formats and the barcode lookup clients.

The HTTP session is replaced by a fake, so no network is used.
"""

import requests

from rxlabel.config.settings import LookupConfig
from rxlabel.infrastructure.lookup import (
    convert_to_ndc_formats,
    OpenFDAClient,
    fda_to_medication,
    UPCLookupClient,
    upc_variants,
)


class FakeResponse:
    def __init__(self, payload=None, ok=True):
        self.payload = payload
        self.ok = ok

    def json(self):
        return self.payload


class FakeSession:
    """Answers GETs from a handler and records every call."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        return self.handler(url, params)


# -----------------------------------------------------------------------------
# NDC formats
# -----------------------------------------------------------------------------

def test_eleven_digit_barcode():
    formats = convert_to_ndc_formats("00071015523")

    assert formats[:3] == ["0007-1015", "00071-015", "00071-0155"]
    assert len(formats) == len(set(formats))
    assert all(f.count("-") == 1 for f in formats)


def test_upc_a_barcode_drops_number_system_and_check_digit():
    formats = convert_to_ndc_formats("300710155230")

    assert formats[:3] == ["0071-0155", "00710-155", "00710-1552"]
    assert "00071-0155" in formats
    assert "0007-1015" in formats
    assert all(f.count("-") == 1 for f in formats)


def test_leading_zeros_stripped_from_long_codes():
    formats = convert_to_ndc_formats("0012345678901")

    assert formats == ["1234-5678", "12345-678"]


def test_hyphenated_code_is_tried_first():
    formats = convert_to_ndc_formats("0071-0155-23")

    assert formats[0] == "0071-0155"
    assert "0071-0155-23" not in formats


def test_eight_digit_code():
    assert convert_to_ndc_formats("12345678") == ["1234-5678", "12345-678"]


def test_unusable_code():
    assert convert_to_ndc_formats("") == []
    assert convert_to_ndc_formats(None) == []


# -----------------------------------------------------------------------------
# openFDA
# -----------------------------------------------------------------------------

LIPITOR = {
    "brand_name": "Lipitor",
    "generic_name": "atorvastatin calcium",
    "active_ingredients": [{"name": "ATORVASTATIN CALCIUM", "strength": "10 mg/1"}],
    "route": ["ORAL"],
    "dosage_form": "TABLET, FILM COATED",
}


def test_openfda_lookup_skips_failed_requests():
    def handler(url, params):
        if params["search"] == 'product_ndc:"0071-0155"':
            raise requests.ConnectionError("connection reset")
        return FakeResponse({"results": [LIPITOR]})

    session = FakeSession(handler)
    data = OpenFDAClient(session=session, base_url="http://fda.test/ndc.json").lookup_by_ndc("0071-0155-23")

    assert data == LIPITOR
    assert [params["search"] for _, params in session.calls] == [
        'product_ndc:"0071-0155"',
        'product_ndc:"0007-1015"',
    ]
    assert session.calls[0][1]["limit"] == 1


def test_openfda_lookup_not_found():
    session = FakeSession(lambda url, params: FakeResponse({"error": "not found"}, ok=False))

    assert OpenFDAClient(session=session).lookup_by_ndc("12345678") is None
    assert len(session.calls) == 2


def test_fda_to_medication():
    record = fda_to_medication(LIPITOR)

    assert record.name == "Lipitor"
    assert record.dosage == "10 mg/1"
    assert record.route == "ORAL"
    assert record.frequency == "Once daily"
    assert record.instructions == "TABLET, FILM COATED"
    assert record.confidence == 75


def test_fda_to_medication_defaults():
    record = fda_to_medication({})

    assert record.name == "Unknown Medication"
    assert record.dosage is None
    assert record.route == "Oral"
    assert record.instructions == "Medication"


# -----------------------------------------------------------------------------
# UPC
# -----------------------------------------------------------------------------

def test_upc_variants():
    assert upc_variants("012345678905") == [
        "012345678905",
        "12345678905",
        "0012345678905",
        "00012345678905",
    ]


def test_upc_found_in_openfoodfacts():
    product = {
        "product_name": "Vitamin D3",
        "brands": "Nature Made, Pharmavite",
        "categories_tags": ["en:supplements", "en:vitamins"],
        "image_front_small_url": "http://img.test/d3.jpg",
    }
    session = FakeSession(lambda url, params: FakeResponse({"status": 1, "product": product}))
    client = UPCLookupClient(session=session, openfoodfacts_url="http://off.test/product/")

    info = client.lookup_by_upc("012345678905")

    assert session.calls[0] == ("http://off.test/product/012345678905.json", None)
    assert info.title == "Vitamin D3"
    assert info.brand == "Nature Made"
    assert info.categories == ["supplements", "vitamins"]
    assert info.image_url == "http://img.test/d3.jpg"
    assert info.source == "openfoodfacts"


def test_upc_falls_back_to_upcitemdb():
    def handler(url, params):
        if url.startswith("http://off.test"):
            return FakeResponse({"status": 0})
        if params["upc"] == "12345678905":
            return FakeResponse({"items": [{"title": "Ibuprofen 200mg", "brand": "Advil", "category": "Pain"}]})
        return FakeResponse({"items": []})

    session = FakeSession(handler)
    client = UPCLookupClient(
        session=session,
        openfoodfacts_url="http://off.test/product",
        upcitemdb_url="http://upc.test/lookup",
    )

    info = client.lookup_by_upc("012345678905")

    assert info.upc == "12345678905"
    assert info.source == "upcitemdb"
    assert info.brand == "Advil"
    assert info.categories == ["Pain"]
    # Every variant goes to the first database before the second is asked
    assert [url for url, _ in session.calls[:4]] == [
        f"http://off.test/product/{v}.json" for v in upc_variants("012345678905")
    ]
    assert session.calls[4] == ("http://upc.test/lookup", {"upc": "012345678905"})


def test_short_upc_is_not_looked_up():
    session = FakeSession(lambda url, params: FakeResponse({}))

    assert UPCLookupClient(session=session).lookup_by_upc("1234") is None
    assert session.calls == []


def test_clients_from_config():
    config = LookupConfig(openfda_url="http://fda.test/ndc.json", upcitemdb_url="http://upc.test/lookup", timeout=3)
    session = FakeSession(lambda url, params: FakeResponse({}))

    fda = OpenFDAClient.from_config(config, session=session)
    upc = UPCLookupClient.from_config(config, session=session)

    assert (fda.base_url, fda.timeout, fda.session) == ("http://fda.test/ndc.json", 3, session)
    assert upc.upcitemdb_url == "http://upc.test/lookup"
    assert upc.openfoodfacts_url == "https://world.openfoodfacts.org/api/v2/product"

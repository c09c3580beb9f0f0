"""
openFDA Client

Looks up a scanned package barcode in the openFDA NDC directory.
"""

from typing import Any, Dict, Optional
import logging

import requests

from ...config.settings import LookupConfig
from ...cross_cutting.error_handling import ErrorHandler
from ...domain.entities.medication import MedicationRecord
from .ndc import convert_to_ndc_formats


DEFAULT_OPENFDA_URL = "https://api.fda.gov/drug/ndc.json"

# Confidence assigned to records built from directory data
FDA_RECORD_CONFIDENCE = 75


class OpenFDAClient:
    """
    Client for the openFDA ``drug/ndc`` endpoint.

    Usage:
        client = OpenFDAClient()
        data = client.lookup_by_ndc("0071-0155-23")
        if data:
            record = fda_to_medication(data)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = DEFAULT_OPENFDA_URL,
        timeout: float = 10
    ):
        self.session = session or requests.Session()
        self.base_url = base_url
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(cls, config: LookupConfig, session: Optional[requests.Session] = None) -> "OpenFDAClient":
        return cls(session=session, base_url=config.openfda_url, timeout=config.timeout)

    def lookup_by_ndc(self, code: str) -> Optional[Dict[str, Any]]:
        """
        Find the product record for a barcode.

        Every candidate NDC format is tried in order; a failing request is
        logged and the next format is tried.

        Args:
            code: Scanned barcode or NDC

        Returns:
            First matching openFDA result, or None
        """
        formats = convert_to_ndc_formats(code)
        self.logger.info(f"Searching openFDA for {code} using formats {formats}")

        for ndc_format in formats:
            with ErrorHandler(self.logger, context=f"ndc {ndc_format}", suppress=True,
                              level=logging.WARNING) as handler:
                response = self.session.get(
                    self.base_url,
                    params={"search": f'product_ndc:"{ndc_format}"', "limit": 1},
                    timeout=self.timeout
                )
                data = response.json() if response.ok else None

            if handler.has_error or not data:
                continue

            results = data.get("results") or []
            if results:
                self.logger.info(f"Found medication with format {ndc_format}")
                return results[0]

        self.logger.info(f"No medication found for {code}")
        return None


def fda_to_medication(data: Dict[str, Any]) -> MedicationRecord:
    """
    Convert an openFDA NDC result into a medication record.

    Fields the directory does not carry get the usual defaults: oral
    route, once daily.
    """
    ingredients = data.get("active_ingredients") or []
    routes = data.get("route") or []

    return MedicationRecord(
        name=data.get("brand_name") or data.get("generic_name") or "Unknown Medication",
        dosage=(ingredients[0].get("strength") if ingredients else None) or None,
        route=routes[0] if routes else "Oral",
        frequency="Once daily",
        instructions=data.get("dosage_form") or "Medication",
        confidence=FDA_RECORD_CONFIDENCE,
    )

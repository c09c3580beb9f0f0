"""
UPC Client

Retail product lookup for barcodes that are not in the NDC directory
(over-the-counter packaging, supplements).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import re

import requests

from ...config.settings import LookupConfig
from ...cross_cutting.error_handling import ErrorHandler


DEFAULT_OPENFOODFACTS_URL = "https://world.openfoodfacts.org/api/v2/product"
DEFAULT_UPCITEMDB_URL = "https://api.upcitemdb.com/prod/trial/lookup"

MIN_UPC_DIGITS = 8


@dataclass(frozen=True)
class ProductInfo:
    """
    Retail product found for a UPC.

    Attributes:
        upc: The code variant that matched
        title: Product name
        brand: First listed brand
        categories: Category names
        image_url: Small product image, if any
        source: Database that answered
    """

    upc: str
    title: Optional[str] = None
    brand: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    source: Optional[str] = None


def upc_variants(digits: str) -> List[str]:
    """As scanned, without the leading digit, and zero-padded to 13 and 14."""
    return list(dict.fromkeys([
        digits,
        digits[1:],
        digits.zfill(13),
        digits.zfill(14),
    ]))


class UPCLookupClient:
    """
    Client that asks OpenFoodFacts, then UPCItemDB.

    Every variant is tried against the first database before moving on
    to the second.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        openfoodfacts_url: str = DEFAULT_OPENFOODFACTS_URL,
        upcitemdb_url: str = DEFAULT_UPCITEMDB_URL,
        timeout: float = 10
    ):
        self.session = session or requests.Session()
        self.openfoodfacts_url = openfoodfacts_url.rstrip("/")
        self.upcitemdb_url = upcitemdb_url
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _get_json(self, url: str, context: str, params: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
        with ErrorHandler(self.logger, context=context, suppress=True, level=logging.WARNING) as handler:
            response = self.session.get(url, params=params, timeout=self.timeout)
            data = response.json() if response.ok else None
        if handler.has_error:
            return None
        return data

    def _from_openfoodfacts(self, variant: str) -> Optional[ProductInfo]:
        data = self._get_json(f"{self.openfoodfacts_url}/{variant}.json", f"openfoodfacts {variant}")
        if not data or not data.get("product") or data.get("status") != 1:
            return None

        product = data["product"]
        brand = (product.get("brands") or "").split(",")[0].strip()
        return ProductInfo(
            upc=variant,
            title=product.get("product_name") or product.get("generic_name") or None,
            brand=brand or None,
            categories=[c.replace("en:", "") for c in product.get("categories_tags") or []],
            image_url=product.get("image_front_small_url") or product.get("image_small_url") or None,
            source="openfoodfacts",
        )

    def _from_upcitemdb(self, variant: str) -> Optional[ProductInfo]:
        data = self._get_json(self.upcitemdb_url, f"upcitemdb {variant}", params={"upc": variant})
        items = (data or {}).get("items") or []
        if not items:
            return None

        item = items[0]
        images = item.get("images") or []
        return ProductInfo(
            upc=variant,
            title=item.get("title") or item.get("description"),
            brand=item.get("brand"),
            categories=[item["category"]] if item.get("category") else [],
            image_url=images[0] if images else None,
            source="upcitemdb",
        )

    @classmethod
    def from_config(cls, config: LookupConfig, session: Optional[requests.Session] = None) -> "UPCLookupClient":
        """Build a client from the lookup section of AppConfig."""
        return cls(
            session=session,
            openfoodfacts_url=config.openfoodfacts_url,
            upcitemdb_url=config.upcitemdb_url,
            timeout=config.timeout
        )

    def lookup_by_upc(self, upc: str) -> Optional[ProductInfo]:
        """
        Find a retail product for a UPC.

        Args:
            upc: Scanned code

        Returns:
            ProductInfo, or None when the code is too short or unknown
        """
        digits = re.sub(r"\D", "", upc or "")
        if len(digits) < MIN_UPC_DIGITS:
            self.logger.info(f"UPC too short: {digits!r}")
            return None

        variants = upc_variants(digits)
        self.logger.info(f"Trying UPC lookup with variants {variants}")

        for lookup in (self._from_openfoodfacts, self._from_upcitemdb):
            for variant in variants:
                product = lookup(variant)
                if product is not None:
                    self.logger.info(f"Found product {product.title!r} in {product.source}")
                    return product

        self.logger.info(f"No product found for {upc}")
        return None

"""
Barcode Lookup

NDC directory and retail UPC lookups for scanned package barcodes.
These make network calls and are never used by the image pipeline.
"""

from .ndc import convert_to_ndc_formats
from .openfda_client import OpenFDAClient, fda_to_medication
from .upc_client import UPCLookupClient, ProductInfo, upc_variants

__all__ = [
    "convert_to_ndc_formats",
    "OpenFDAClient",
    "fda_to_medication",
    "UPCLookupClient",
    "ProductInfo",
    "upc_variants",
]

"""
NDC Formats

Candidate National Drug Code product codes for a scanned barcode.

openFDA's ``product_ndc`` is the two-segment labeler-product code, while a
package barcode carries the digits without hyphens (UPC-A adds a number
system digit and a check digit). The labeler/product split is ambiguous
(4-4, 5-3 or 5-4), so every plausible split is produced and the lookup
tries them in turn.
"""

from typing import List
import re


def _product_code(digits: str, labeler: int, product: int) -> str:
    return f"{digits[:labeler]}-{digits[labeler:labeler + product]}"


def _splits(digits: str, *shapes) -> List[str]:
    return [_product_code(digits, labeler, product) for labeler, product in shapes]


ALL_SHAPES = ((4, 4), (5, 3), (5, 4))


def convert_to_ndc_formats(code: str) -> List[str]:
    """
    Build candidate labeler-product codes for a barcode or typed code.

    Args:
        code: Scanned barcode, with or without hyphens

    Returns:
        De-duplicated candidates in the order they should be tried
    """
    code = code or ""
    digits = re.sub(r"\D", "", code)
    formats: List[str] = []

    if "-" in code:
        segments = code.split("-")
        if len(segments) >= 2:
            formats.append(f"{segments[0]}-{segments[1]}")

    if len(digits) == 12:
        # UPC-A: number system digit, 10-digit NDC, check digit
        ndc11 = digits[1:12]
        ndc10 = digits[1:11]
        formats += _splits(ndc11, *ALL_SHAPES)
        formats += _splits(ndc10, *ALL_SHAPES)
        formats += [f"0{ndc10[:4]}-{ndc10[4:8]}", f"0{ndc10[:3]}-{ndc10[3:7]}"]

    elif len(digits) == 11:
        formats += _splits(digits, *ALL_SHAPES)
        formats += _splits(digits[:10], (4, 4), (5, 3))

    elif len(digits) == 10:
        formats += _splits("0" + digits, *ALL_SHAPES)
        formats += _splits(digits, (4, 4), (5, 3))

    elif len(digits) == 9:
        formats += _splits(digits, (5, 4))

    elif len(digits) == 8:
        formats += _splits(digits, (4, 4))

    no_leading_zeros = digits.lstrip("0")
    if len(no_leading_zeros) >= 8:
        formats += _splits(no_leading_zeros, (4, 4), (5, 3))

    return list(dict.fromkeys(formats))

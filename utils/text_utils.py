"""
Text utilities for uploaded label files.

Labels come from Turkish printers as often as from UTF-8 editors, so
decoding tries UTF-8 first and falls back to the Turkish code page.
"""

from typing import Optional

# Tried in order; Windows-1254 covers ğ, ş, ı, İ from legacy label software
LABEL_ENCODINGS = ("utf-8-sig", "cp1254")


def decode_label_bytes(raw: bytes) -> str:
    """
    Decode uploaded label content.

    - "Renk/Color: Lacivert".encode("utf-8") → "Renk/Color: Lacivert"
    - b"\\xef\\xbb\\xbfBarcode: 1" (UTF-8 BOM) → "Barcode: 1"
    - "Bakım".encode("cp1254") → "Bakım"

    Args:
        raw: File content as uploaded

    Returns:
        Decoded text

    Raises:
        UnicodeDecodeError: If no known encoding fits
    """
    last_error: Optional[UnicodeDecodeError] = None
    for encoding in LABEL_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError as e:
            last_error = e
    raise last_error


def clean_cell(value: object) -> str:
    """
    Normalize a spreadsheet cell to a trimmed string.

    - None / NaN → ""
    - "  Shirt " → "Shirt"
    - 12.0 → "12"

    Args:
        value: Raw cell value from pandas

    Returns:
        Cell value as string
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()

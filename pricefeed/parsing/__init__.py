"""Free-form text parsing: shopping list lines and receipt OCR output."""

from .quantity import extract_glyph_fraction, extract_quantity
from .receipt import ReceiptParser
from .shopping_list import ShoppingListParser
from .units import UNIT_SYNONYMS, extract_unit, normalize_unit

__all__ = [
    "ShoppingListParser",
    "ReceiptParser",
    "extract_quantity",
    "extract_glyph_fraction",
    "extract_unit",
    "normalize_unit",
    "UNIT_SYNONYMS",
]

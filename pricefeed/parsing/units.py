"""Unit vocabulary and unit extraction for shopping list lines."""

from __future__ import annotations

import re

# Unit spelling → canonical long form
UNIT_SYNONYMS: dict[str, str] = {
    # Volume - small
    "teaspoon": "teaspoon",
    "teaspoons": "teaspoon",
    "tsp": "teaspoon",
    "tablespoon": "tablespoon",
    "tablespoons": "tablespoon",
    "tbsp": "tablespoon",
    "tbs": "tablespoon",
    "fluid ounce": "fluid ounce",
    "fluid ounces": "fluid ounce",
    "fl oz": "fluid ounce",
    "floz": "fluid ounce",
    # Volume - medium
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "pint": "pint",
    "pints": "pint",
    "pt": "pint",
    "quart": "quart",
    "quarts": "quart",
    "qt": "quart",
    # Volume - large
    "gallon": "gallon",
    "gallons": "gallon",
    "gal": "gallon",
    "liter": "liter",
    "liters": "liter",
    "litre": "liter",
    "litres": "liter",
    "l": "liter",
    "milliliter": "milliliter",
    "milliliters": "milliliter",
    "ml": "milliliter",
    # Weight
    "ounce": "ounce",
    "ounces": "ounce",
    "oz": "ounce",
    "pound": "pound",
    "pounds": "pound",
    "lb": "pound",
    "lbs": "pound",
    "gram": "gram",
    "grams": "gram",
    "g": "gram",
    "kilogram": "kilogram",
    "kilograms": "kilogram",
    "kg": "kilogram",
    # Count
    "piece": "piece",
    "pieces": "piece",
    "pc": "piece",
    "pcs": "piece",
    "count": "count",
    "ct": "count",
    "each": "each",
    "ea": "each",
    "pack": "pack",
    "packs": "pack",
    "pk": "pack",
    "package": "package",
    "packages": "package",
    "pkg": "package",
    "bunch": "bunch",
    "bunches": "bunch",
    "head": "head",
    "heads": "head",
    "clove": "clove",
    "cloves": "clove",
    "sprig": "sprig",
    "sprigs": "sprig",
    "stalk": "stalk",
    "stalks": "stalk",
    "slice": "slice",
    "slices": "slice",
    "can": "can",
    "cans": "can",
    "jar": "jar",
    "jars": "jar",
    "bag": "bag",
    "bags": "bag",
    "box": "box",
    "boxes": "box",
    "bottle": "bottle",
    "bottles": "bottle",
    "stick": "stick",
    "sticks": "stick",
    "dash": "dash",
    "dashes": "dash",
    "pinch": "pinch",
    "pinches": "pinch",
}

# Longest spellings first so "fl oz" wins over "floz"/"fl" and "gallons" over "gal"
_UNIT_PATTERN = re.compile(
    r"^("
    + "|".join(
        r"\s+".join(re.escape(part) for part in u.split())
        for u in sorted(UNIT_SYNONYMS, key=len, reverse=True)
    )
    + r")\b\.?\s*",
    re.IGNORECASE,
)


def normalize_unit(unit: str) -> str:
    """Map a unit spelling to its canonical form ("" if unknown)."""
    key = " ".join(unit.lower().split())
    return UNIT_SYNONYMS.get(key, "")


def extract_unit(text: str) -> tuple[str, str]:
    """Consume a leading unit word from ``text``.

    Returns:
        (remaining text, canonical unit). The unit is "" and nothing is
        consumed when the text does not start with a known unit.
    """
    s = text.strip()
    m = _UNIT_PATTERN.match(s)
    if not m:
        return s, ""
    return s[m.end():].strip(), normalize_unit(m.group(1))

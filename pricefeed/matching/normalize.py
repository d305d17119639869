"""Item name normalization applied before fuzzy catalog lookup."""

from __future__ import annotations

# Grocery/receipt shorthand → full word. Applied as plain substring
# replacements, so overlapping entries interact (e.g. "ea" also rewrites
# the "ea" inside "bread"). See _ABBREVIATION_ORDER.
ABBREVIATIONS: dict[str, str] = {
    "org ": "organic ",
    "whl ": "whole ",
    "chkn": "chicken",
    "brst": "breast",
    "bnls": "boneless",
    "sknls": "skinless",
    "gal": "gallon",
    "qt": "quart",
    "pt": "pint",
    "oz": "ounce",
    "lb": "pound",
    "lbs": "pounds",
    "pkg": "package",
    "btl": "bottle",
    "cn": "can",
    "bx": "box",
    "bg": "bag",
    "ea": "each",
    "ct": "count",
    "pc": "piece",
    "pcs": "pieces",
    "lrg": "large",
    "med": "medium",
    "sml": "small",
    "frsh": "fresh",
    "frzn": "frozen",
    "slf": "self",
    "rsg": "rising",
    "flr": "flour",
    "veg": "vegetable",
    "vegs": "vegetables",
    "frt": "fruit",
    "jce": "juice",
    "mlk": "milk",
    "chse": "cheese",
    "brd": "bread",
    "wht": "white",
    "brn": "brown",
    "grn": "green",
    "red": "red",
    "yel": "yellow",
    "blu": "blue",
    "blk": "black",
}

# Shortest abbreviation first, then lexicographic. Short keys run before
# the expansions of longer keys exist, so "ea" cannot rewrite the "ea"
# produced by "brst" -> "breast".
_ABBREVIATION_ORDER: list[tuple[str, str]] = sorted(
    ABBREVIATIONS.items(), key=lambda kv: (len(kv[0]), kv[0])
)

# Tax-flag / price-column letters OCR leaves at the end of a name
_OCR_SUFFIXES: tuple[str, ...] = (" f", " t", " n", " @")


def normalize_item_name(name: str) -> str:
    """Lower-case, expand shorthand, and strip trailing OCR artifacts."""
    name = name.lower()

    for abbrev, full in _ABBREVIATION_ORDER:
        name = name.replace(abbrev, full)

    for suffix in _OCR_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]

    return " ".join(name.split())

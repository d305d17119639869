"""Quantity extraction for shopping list lines.

Handles ranges ("2.5 - 3"), mixed numbers ("1 1/2", "1 ½"), Unicode vulgar
fractions ("½"), superscript/subscript fractions ("¹/₂", "¹⁄₂"), plain ASCII
fractions ("3/4") and decimals.
"""

from __future__ import annotations

import re

DEFAULT_QUANTITY = 1.0

# Unicode vulgar fractions
_VULGAR_FRACTIONS: dict[str, float] = {
    "\u00bc": 0.25,  # ¼
    "\u00bd": 0.5,  # ½
    "\u00be": 0.75,  # ¾
    "\u2150": 1 / 7,  # ⅐
    "\u2151": 1 / 9,  # ⅑
    "\u2152": 0.1,  # ⅒
    "\u2153": 1 / 3,  # ⅓
    "\u2154": 2 / 3,  # ⅔
    "\u2155": 0.2,  # ⅕
    "\u2156": 0.4,  # ⅖
    "\u2157": 0.6,  # ⅗
    "\u2158": 0.8,  # ⅘
    "\u2159": 1 / 6,  # ⅙
    "\u215a": 5 / 6,  # ⅚
    "\u215b": 0.125,  # ⅛
    "\u215c": 0.375,  # ⅜
    "\u215d": 0.625,  # ⅝
    "\u215e": 0.875,  # ⅞
}

_SUPERSCRIPT_DIGITS: dict[str, int] = {
    "⁰": 0, "¹": 1, "²": 2, "³": 3, "⁴": 4,
    "⁵": 5, "⁶": 6, "⁷": 7, "⁸": 8, "⁹": 9,
}

_SUBSCRIPT_DIGITS: dict[str, int] = {
    "₀": 0, "₁": 1, "₂": 2, "₃": 3, "₄": 4,
    "₅": 5, "₆": 6, "₇": 7, "₈": 8, "₉": 9,
}

# "/" or U+2044 FRACTION SLASH between a superscript and subscript run
_FRACTION_SLASHES = ("/", "\u2044")

_RANGE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*")
_WHOLE_PATTERN = re.compile(r"^(\d+)\s+")
_WHOLE_AND_FRACTION_PATTERN = re.compile(r"^(\d+)\s+(\d+)/(\d+)\s*")
_FRACTION_PATTERN = re.compile(r"^(\d+)/(\d+)\s*")
_NUMBER_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*")


def extract_quantity(text: str) -> tuple[str, float]:
    """Consume a leading quantity from ``text``.

    Args:
        text: e.g. "2 cups flour", "1 1/2 cups sugar", "½ gallon milk"

    Returns:
        (remaining text, quantity). Quantity is 1.0 and nothing is consumed
        when no numeric token leads the text.
    """
    s = text.strip()

    m = _RANGE_PATTERN.match(s)
    if m:
        low, high = float(m.group(1)), float(m.group(2))
        return s[m.end():].strip(), (low + high) / 2

    m = _WHOLE_PATTERN.match(s)
    if m:
        rest, fraction = extract_glyph_fraction(s[m.end():])
        if fraction > 0:
            return rest, float(m.group(1)) + fraction

    m = _WHOLE_AND_FRACTION_PATTERN.match(s)
    if m:
        whole, num, denom = (float(g) for g in m.groups())
        quantity = whole + num / denom if denom else DEFAULT_QUANTITY
        return s[m.end():].strip(), quantity

    rest, fraction = extract_glyph_fraction(s)
    if fraction > 0:
        return rest, fraction

    m = _FRACTION_PATTERN.match(s)
    if m:
        num, denom = float(m.group(1)), float(m.group(2))
        quantity = num / denom if denom else DEFAULT_QUANTITY
        return s[m.end():].strip(), quantity

    m = _NUMBER_PATTERN.match(s)
    if m:
        return s[m.end():].strip(), float(m.group(1))

    return s, DEFAULT_QUANTITY


def extract_glyph_fraction(text: str) -> tuple[str, float]:
    """Consume a vulgar fraction or superscript/subscript fraction.

    Scans characters against the fixed code-point tables rather than a
    regex character class. Returns (text, 0.0) unchanged when the text
    does not start with one.
    """
    s = text.lstrip()
    if not s:
        return text, 0.0

    if s[0] in _VULGAR_FRACTIONS:
        return s[1:].strip(), _VULGAR_FRACTIONS[s[0]]

    numerator = _read_digits(s, 0, _SUPERSCRIPT_DIGITS)
    if numerator is None:
        return text, 0.0
    value, idx = numerator

    if idx >= len(s) or s[idx] not in _FRACTION_SLASHES:
        return text, 0.0

    denominator = _read_digits(s, idx + 1, _SUBSCRIPT_DIGITS)
    if denominator is None or denominator[0] == 0:
        return text, 0.0
    denom, idx = denominator

    return s[idx:].strip(), value / denom


def _read_digits(
    s: str, start: int, table: dict[str, int]
) -> tuple[int, int] | None:
    """Read a run of digits from ``table`` starting at ``start``.

    Returns (value, index after the run), or None if the run is empty.
    """
    idx = start
    value = 0
    while idx < len(s) and s[idx] in table:
        value = value * 10 + table[s[idx]]
        idx += 1
    if idx == start:
        return None
    return value, idx

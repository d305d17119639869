"""Markdown shopping list parsing (Mealie-style ``- [ ] 2 cups flour`` lines)."""

from __future__ import annotations

import re
from collections.abc import Iterator

from ..models import ParsedLine
from .quantity import extract_quantity
from .units import extract_unit

# "- [ ] item", "- [x] item", "- [] item"
_CHECKBOX_PATTERN = re.compile(r"^\s*-\s*\[[ xX]?\]\s*(.+)$")
_PAREN_PATTERN = re.compile(r"\(([^)]+)\)")
_SPACE_PATTERN = re.compile(r"\s+")

_TRAILING_PUNCTUATION = ".,;:-_"


class ShoppingListParser:
    """Parses checklist text into ParsedLine values.

    Holds no per-call state; one instance can be shared across requests.
    """

    def parse(self, content: str) -> list[ParsedLine]:
        """Parse every checkbox line in ``content``.

        Non-checkbox and blank lines are skipped. Line numbers count emitted
        items only, starting at 0.
        """
        return list(self.iter_lines(content))

    def iter_lines(self, content: str) -> Iterator[ParsedLine]:
        line_number = 0
        for raw in content.splitlines():
            line = raw.strip()
            if not line:
                continue

            m = _CHECKBOX_PATTERN.match(line)
            if not m:
                continue

            yield self.parse_line(m.group(1).strip(), line_number, raw_text=line)
            line_number += 1

    def parse_line(
        self, line: str, line_number: int, *, raw_text: str | None = None
    ) -> ParsedLine:
        """Split one item line into quantity, unit, notes and name."""
        remaining, quantity = extract_quantity(line)
        remaining, unit = extract_unit(remaining)
        before_notes = remaining
        remaining, notes = self._extract_notes(remaining)
        name = self._clean_name(remaining)

        if not name:
            # Keep the remainder verbatim rather than emitting an empty name
            name = self._clean_name(before_notes) or before_notes.strip() or line.strip()

        return ParsedLine(
            raw_text=raw_text if raw_text is not None else line,
            line_number=line_number,
            quantity=quantity,
            unit=unit,
            name=name,
            notes=notes,
        )

    @staticmethod
    def _extract_notes(text: str) -> tuple[str, str]:
        """Pull out parenthesized text and anything after the first comma."""
        notes: list[str] = []

        for m in _PAREN_PATTERN.finditer(text):
            notes.append(m.group(1).strip())
        text = _PAREN_PATTERN.sub("", text)

        idx = text.find(",")
        if idx >= 0:
            after = text[idx + 1:].strip()
            if after:
                notes.append(after)
            text = text[:idx]

        return text.strip(), "; ".join(notes)

    @staticmethod
    def _clean_name(text: str) -> str:
        name = text.strip().rstrip(_TRAILING_PUNCTUATION)
        return _SPACE_PATTERN.sub(" ", name).strip()

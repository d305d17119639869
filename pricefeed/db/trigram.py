"""Trigram similarity, registered as the ``similarity()`` SQL function.

Follows PostgreSQL pg_trgm: each alphanumeric word is lower-cased and padded
with two spaces in front and one behind, and the score is the number of
shared trigrams over the number of distinct trigrams in either string.
"""

from __future__ import annotations

import re

_WORD_PATTERN = re.compile(r"[^\W_]+")


def trigrams(text: str) -> set[str]:
    result: set[str] = set()
    for word in _WORD_PATTERN.findall(text.lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            result.add(padded[i:i + 3])
    return result


def trigram_similarity(a: str | None, b: str | None) -> float:
    """Return a similarity score in [0, 1]; 0.0 if either side is empty."""
    if not a or not b:
        return 0.0
    ta, tb = trigrams(a), trigrams(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)

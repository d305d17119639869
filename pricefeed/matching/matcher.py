"""Fuzzy matching of parsed item names against the product catalog."""

from __future__ import annotations

import logging
import sqlite3
from typing import Protocol

from ..models import (
    MatchCandidate,
    MatchedLine,
    MatchedReceiptItem,
    ParsedLine,
    ReceiptItem,
    sort_candidates,
)
from .normalize import normalize_item_name

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5
LIST_IMPORT_THRESHOLD = 0.6
RECEIPT_THRESHOLD = 0.5


class CatalogUnavailableError(RuntimeError):
    """The catalog store could not answer a similarity lookup."""


class CatalogStore(Protocol):
    def find_similar_items(
        self, normalized_name: str, limit: int
    ) -> list[MatchCandidate]: ...


def confidence_level(confidence: float) -> str:
    """Human-readable bucket for a match confidence."""
    if confidence >= 0.9:
        return "high"
    if confidence >= 0.7:
        return "medium"
    if confidence >= 0.5:
        return "low"
    return "none"


class ItemMatcher:
    """Ranks catalog items against free-text names."""

    def __init__(self, catalog: CatalogStore) -> None:
        self._catalog = catalog

    def find_matches(
        self, name: str, limit: int = DEFAULT_SUGGESTION_LIMIT
    ) -> list[MatchCandidate]:
        """Normalize ``name`` and return up to ``limit`` ranked candidates.

        Raises:
            CatalogUnavailableError: If the store lookup fails.
        """
        if limit <= 0:
            return []
        normalized = normalize_item_name(name)
        if not normalized:
            return []
        candidates = self._catalog.find_similar_items(normalized, limit)
        return sort_candidates(candidates)[:limit]

    def match_lines(
        self,
        lines: list[ParsedLine],
        threshold: float = LIST_IMPORT_THRESHOLD,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> list[MatchedLine]:
        """Match each parsed line independently, preserving input order.

        A failed lookup leaves that line unmatched with no suggestions.
        """
        results: list[MatchedLine] = []
        for line in lines:
            suggestions = self._safe_find(line.name, limit)
            results.append(
                MatchedLine(
                    parsed_line=line,
                    best_match=_best_match(suggestions, threshold),
                    suggestions=suggestions,
                )
            )
        return results

    def match_receipt_items(
        self,
        items: list[ReceiptItem],
        threshold: float = RECEIPT_THRESHOLD,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> list[MatchedReceiptItem]:
        """Receipt counterpart of match_lines (lower acceptance threshold)."""
        results: list[MatchedReceiptItem] = []
        for item in items:
            suggestions = self._safe_find(item.name, limit)
            results.append(
                MatchedReceiptItem(
                    item=item,
                    best_match=_best_match(suggestions, threshold),
                    suggestions=suggestions,
                )
            )
        return results

    def _safe_find(self, name: str, limit: int) -> list[MatchCandidate]:
        try:
            return self.find_matches(name, limit)
        except (CatalogUnavailableError, sqlite3.Error, OSError) as e:
            logger.warning("Catalog lookup failed for %r: %s", name, e)
            return []


def _best_match(
    suggestions: list[MatchCandidate], threshold: float
) -> MatchCandidate | None:
    if suggestions and suggestions[0].confidence >= threshold:
        return suggestions[0]
    return None

"""Shopping list import: parse checklist text and match every line."""

from __future__ import annotations

import logging

from .matching import (
    DEFAULT_SUGGESTION_LIMIT,
    LIST_IMPORT_THRESHOLD,
    ItemMatcher,
)
from .models import ImportResult
from .parsing import ShoppingListParser

logger = logging.getLogger(__name__)


class ImportListError(ValueError):
    """The submitted list is empty or has no checkbox lines."""


class ListImporter:
    def __init__(
        self,
        matcher: ItemMatcher,
        parser: ShoppingListParser | None = None,
        *,
        threshold: float = LIST_IMPORT_THRESHOLD,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> None:
        self._matcher = matcher
        self._parser = parser or ShoppingListParser()
        self._threshold = threshold
        self._limit = limit

    def import_list(self, content: str) -> ImportResult:
        """Parse ``content`` and match each item against the catalog.

        Raises:
            ImportListError: If content is empty or contains no checkbox items.
        """
        if not content or not content.strip():
            raise ImportListError("content is required")

        parsed = self._parser.parse(content)
        if not parsed:
            raise ImportListError("no items found in shopping list")

        items = self._matcher.match_lines(
            parsed, threshold=self._threshold, limit=self._limit
        )
        matched = sum(1 for i in items if i.is_matched)

        logger.info("Imported %d list items, %d matched", len(items), matched)
        return ImportResult(
            items=items,
            total_parsed=len(parsed),
            matched_count=matched,
            unmatched_count=len(parsed) - matched,
        )

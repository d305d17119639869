"""Name normalization and fuzzy catalog matching."""

from .matcher import (
    DEFAULT_SUGGESTION_LIMIT,
    LIST_IMPORT_THRESHOLD,
    RECEIPT_THRESHOLD,
    CatalogStore,
    CatalogUnavailableError,
    ItemMatcher,
    confidence_level,
)
from .normalize import ABBREVIATIONS, normalize_item_name

__all__ = [
    "ItemMatcher",
    "CatalogStore",
    "CatalogUnavailableError",
    "confidence_level",
    "normalize_item_name",
    "ABBREVIATIONS",
    "DEFAULT_SUGGESTION_LIMIT",
    "LIST_IMPORT_THRESHOLD",
    "RECEIPT_THRESHOLD",
]

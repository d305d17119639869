"""SQLite storage for the catalog, store prices and receipts."""

from .catalog import DEFAULT_DB_PATH, SIMILARITY_FLOOR, CatalogDB
from .receipts import DEFAULT_RECEIPT_TTL_DAYS, ReceiptDB
from .schema import ensure_schema, transaction
from .trigram import trigram_similarity

__all__ = [
    "CatalogDB",
    "ReceiptDB",
    "ensure_schema",
    "transaction",
    "trigram_similarity",
    "DEFAULT_DB_PATH",
    "DEFAULT_RECEIPT_TTL_DAYS",
    "SIMILARITY_FLOOR",
]

"""Shopping list import, receipt ingestion and store price reconciliation."""

from .config import (
    DatabaseConfig,
    MatchingConfig,
    OCRConfig,
    PriceFeedConfig,
    ReceiptsConfig,
    load_config,
)
from .db import CatalogDB, ReceiptDB
from .importer import ImportListError, ListImporter
from .matching import ItemMatcher, confidence_level, normalize_item_name
from .models import (
    DispositionAction,
    DispositionError,
    ImportResult,
    MatchCandidate,
    MatchedLine,
    ParsedLine,
    ReceiptLineDisposition,
    ReconciliationResult,
)
from .ocr import OCRBackend, OCRResult, create_backend
from .parsing import ReceiptParser, ShoppingListParser
from .pipeline import ReceiptPipeline
from .reconcile import ReceiptNotFoundError, ReceiptReconciler, ReconciliationError

__all__ = [
    "ShoppingListParser",
    "ReceiptParser",
    "ParsedLine",
    "normalize_item_name",
    "ItemMatcher",
    "MatchCandidate",
    "MatchedLine",
    "confidence_level",
    "ListImporter",
    "ImportListError",
    "ImportResult",
    "ReceiptReconciler",
    "ReceiptLineDisposition",
    "DispositionAction",
    "DispositionError",
    "ReconciliationResult",
    "ReconciliationError",
    "ReceiptNotFoundError",
    "ReceiptPipeline",
    "OCRBackend",
    "OCRResult",
    "create_backend",
    "CatalogDB",
    "ReceiptDB",
    "PriceFeedConfig",
    "DatabaseConfig",
    "MatchingConfig",
    "OCRConfig",
    "ReceiptsConfig",
    "load_config",
]

"""TOML configuration loader for pricefeed."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .db import DEFAULT_DB_PATH, DEFAULT_RECEIPT_TTL_DAYS
from .matching import (
    DEFAULT_SUGGESTION_LIMIT,
    LIST_IMPORT_THRESHOLD,
    RECEIPT_THRESHOLD,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class MatchingConfig:
    list_threshold: float = LIST_IMPORT_THRESHOLD
    receipt_threshold: float = RECEIPT_THRESHOLD
    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT


@dataclass
class ClaudeOCRConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class TesseractOCRConfig:
    language: str = "eng"
    page_segmentation_mode: int = 6


@dataclass
class OCRConfig:
    backend: str = "claude"
    claude: ClaudeOCRConfig = field(default_factory=ClaudeOCRConfig)
    tesseract: TesseractOCRConfig = field(default_factory=TesseractOCRConfig)


@dataclass
class ReceiptsConfig:
    ttl_days: int = DEFAULT_RECEIPT_TTL_DAYS
    cleanup_schedule: str = "0 3 * * *"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class PriceFeedConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    receipts: ReceiptsConfig = field(default_factory=ReceiptsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> PriceFeedConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The API key and database path can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dbs = raw.get("database", {})
    mtc = raw.get("matching", {})
    ocr = raw.get("ocr", {})
    rcp = raw.get("receipts", {})
    lgg = raw.get("logging", {})

    claude_cfg = ocr.get("claude", {})
    tesseract_cfg = ocr.get("tesseract", {})

    # Resolve API key: config file → environment variable
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    # Database path: environment variable → config file
    db_path = os.environ.get("PRICEFEED_DB_PATH", "") or dbs.get(
        "path", DEFAULT_DB_PATH
    )

    return PriceFeedConfig(
        database=DatabaseConfig(path=db_path),
        matching=MatchingConfig(
            list_threshold=mtc.get("list_threshold", LIST_IMPORT_THRESHOLD),
            receipt_threshold=mtc.get("receipt_threshold", RECEIPT_THRESHOLD),
            suggestion_limit=mtc.get("suggestion_limit", DEFAULT_SUGGESTION_LIMIT),
        ),
        ocr=OCRConfig(
            backend=ocr.get("backend", "claude"),
            claude=ClaudeOCRConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            tesseract=TesseractOCRConfig(
                language=tesseract_cfg.get("language", "eng"),
                page_segmentation_mode=tesseract_cfg.get("page_segmentation_mode", 6),
            ),
        ),
        receipts=ReceiptsConfig(
            ttl_days=rcp.get("ttl_days", DEFAULT_RECEIPT_TTL_DAYS),
            cleanup_schedule=rcp.get("cleanup_schedule", "0 3 * * *"),
        ),
        logging=LoggingConfig(level=lgg.get("level", "INFO")),
    )

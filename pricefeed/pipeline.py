"""Receipt ingestion: OCR → parse → match → store lines for review."""

from __future__ import annotations

import logging
import sqlite3

from .db import ReceiptDB
from .matching import DEFAULT_SUGGESTION_LIMIT, RECEIPT_THRESHOLD, ItemMatcher
from .models import LineMatchStatus, MatchedReceiptItem, ReceiptStatus
from .ocr import OCRBackend
from .parsing import ReceiptParser

logger = logging.getLogger(__name__)


class ReceiptPipeline:
    """Turns a receipt image (or its OCR text) into stored, matched lines.

    Stored lines stay unconfirmed until the user submits dispositions
    through :class:`~pricefeed.reconcile.ReceiptReconciler`.
    """

    def __init__(
        self,
        db: ReceiptDB,
        matcher: ItemMatcher,
        ocr: OCRBackend | None = None,
        parser: ReceiptParser | None = None,
        *,
        threshold: float = RECEIPT_THRESHOLD,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> None:
        self._db = db
        self._matcher = matcher
        self._ocr = ocr
        self._parser = parser or ReceiptParser()
        self._threshold = threshold
        self._limit = limit

    async def ingest_image(
        self, receipt_id: int, image_path: str
    ) -> list[MatchedReceiptItem]:
        """Run OCR on ``image_path`` and ingest the resulting text.

        Raises:
            ValueError: If the pipeline was built without an OCR backend.
            Exception: Whatever the OCR backend raised; the receipt is
                marked failed with the error message first.
        """
        if self._ocr is None:
            raise ValueError("no OCR backend configured")

        self._db.update_status(receipt_id, ReceiptStatus.PROCESSING)
        try:
            result = await self._ocr.extract_text(image_path)
        except Exception as e:
            logger.warning("OCR failed for receipt %d: %s", receipt_id, e)
            self._db.update_status(
                receipt_id, ReceiptStatus.FAILED, error_message=str(e)
            )
            raise

        logger.info(
            "OCR for receipt %d: %d chars (confidence %.2f)",
            receipt_id,
            len(result.text),
            result.confidence,
        )
        self._db.update_status(
            receipt_id, ReceiptStatus.COMPLETED, ocr_text=result.text
        )
        return self.ingest_text(receipt_id, result.text)

    def ingest_text(self, receipt_id: int, text: str) -> list[MatchedReceiptItem]:
        """Parse OCR text, record date/total and persist every matched line."""
        parsed = self._parser.parse(text)
        self._db.update_metadata(receipt_id, parsed.receipt_date, parsed.total)

        matched = self._matcher.match_receipt_items(
            parsed.items, threshold=self._threshold, limit=self._limit
        )

        stored: list[MatchedReceiptItem] = []
        for m in matched:
            try:
                if m.best_match is not None:
                    m.line_id = self._db.create_receipt_item(
                        receipt_id,
                        m.item,
                        matched_item_id=m.best_match.catalog_item_id,
                        match_confidence=m.best_match.confidence,
                        match_status=LineMatchStatus.MATCHED,
                    )
                else:
                    m.line_id = self._db.create_receipt_item(receipt_id, m.item)
            except sqlite3.Error as e:
                logger.warning(
                    "Could not store receipt %d line %r: %s",
                    receipt_id,
                    m.item.raw_text,
                    e,
                )
                continue
            stored.append(m)

        logger.info(
            "Receipt %d: %d items parsed, %d stored, %d matched",
            receipt_id,
            len(parsed.items),
            len(stored),
            sum(1 for m in stored if m.is_matched),
        )
        return stored

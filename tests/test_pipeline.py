"""Tests for ReceiptPipeline (fake OCR backend, real SQLite store)."""

from datetime import date
from decimal import Decimal

import pytest

from pricefeed.db import CatalogDB, ReceiptDB
from pricefeed.matching import ItemMatcher
from pricefeed.ocr import OCRBackend, OCRResult
from pricefeed.pipeline import ReceiptPipeline

RECEIPT_TEXT = """\
01/15/24 10:32 AM
BANANAS 0.58 F
LIGHTBULBS 4PK 6.97
TOTAL 7.55
"""


class FakeOCR(OCRBackend):
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def extract_text(self, image_path):
        self.calls.append(image_path)
        if self.error is not None:
            raise self.error
        return OCRResult(text=self.text, confidence=0.9)


@pytest.fixture
def receipts(tmp_path):
    db = ReceiptDB(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def catalog(receipts):
    db = CatalogDB(conn=receipts.connection)
    db.create_item("Bananas")
    return db


def test_ingest_text_stores_matched_and_pending_lines(receipts, catalog):
    receipt_id = receipts.create_receipt(1)
    pipeline = ReceiptPipeline(receipts, ItemMatcher(catalog))

    items = pipeline.ingest_text(receipt_id, RECEIPT_TEXT)

    assert [m.item.name for m in items] == ["BANANAS", "LIGHTBULBS 4PK"]
    assert all(m.line_id is not None for m in items)
    assert items[0].is_matched
    assert items[0].best_match.name == "Bananas"
    assert not items[1].is_matched

    lines = receipts.get_receipt_items(receipt_id)
    assert [l["match_status"] for l in lines] == ["matched", "pending"]
    assert lines[0]["matched_item_id"] == items[0].best_match.catalog_item_id
    assert lines[0]["match_confidence"] == 1.0
    assert lines[1]["matched_item_id"] is None

    receipt = receipts.get_receipt(receipt_id)
    assert receipt["receipt_date"] == date(2024, 1, 15).isoformat()
    assert receipt["receipt_total"] == Decimal("7.55")


@pytest.mark.asyncio
async def test_ingest_image(receipts, catalog):
    receipt_id = receipts.create_receipt(1, image_key="receipts/1.jpg")
    ocr = FakeOCR(text=RECEIPT_TEXT)
    pipeline = ReceiptPipeline(receipts, ItemMatcher(catalog), ocr=ocr)

    items = await pipeline.ingest_image(receipt_id, "/tmp/receipt.jpg")

    assert ocr.calls == ["/tmp/receipt.jpg"]
    assert len(items) == 2
    receipt = receipts.get_receipt(receipt_id)
    assert receipt["status"] == "completed"
    assert receipt["ocr_text"] == RECEIPT_TEXT
    assert receipt["processed_at"] is not None


@pytest.mark.asyncio
async def test_ingest_image_ocr_failure_marks_failed(receipts, catalog):
    receipt_id = receipts.create_receipt(1)
    pipeline = ReceiptPipeline(
        receipts, ItemMatcher(catalog), ocr=FakeOCR(error=RuntimeError("timeout"))
    )

    with pytest.raises(RuntimeError, match="timeout"):
        await pipeline.ingest_image(receipt_id, "/tmp/receipt.jpg")

    receipt = receipts.get_receipt(receipt_id)
    assert receipt["status"] == "failed"
    assert receipt["error_message"] == "timeout"
    assert receipts.get_receipt_items(receipt_id) == []


@pytest.mark.asyncio
async def test_ingest_image_requires_backend(receipts, catalog):
    pipeline = ReceiptPipeline(receipts, ItemMatcher(catalog))
    with pytest.raises(ValueError, match="OCR backend"):
        await pipeline.ingest_image(1, "/tmp/receipt.jpg")


def test_line_store_failure_skips_line(receipts, catalog):
    # Lines for a receipt that does not exist violate the foreign key
    pipeline = ReceiptPipeline(receipts, ItemMatcher(catalog))
    items = pipeline.ingest_text(999, RECEIPT_TEXT)
    assert items == []

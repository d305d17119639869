"""Tests for ReceiptDB receipt and line storage."""

from datetime import date
from decimal import Decimal

import pytest

from pricefeed.db import CatalogDB, ReceiptDB
from pricefeed.models import LineMatchStatus, ReceiptItem, ReceiptStatus


@pytest.fixture
def db(tmp_path):
    """Create a temporary ReceiptDB."""
    receipts = ReceiptDB(db_path=tmp_path / "test.db")
    yield receipts
    receipts.close()


def _item(name="BANANAS", price="0.58", line_number=0):
    return ReceiptItem(
        raw_text=f"{name} {price} F",
        name=name,
        price=Decimal(price),
        line_number=line_number,
    )


def test_create_receipt(db):
    receipt_id = db.create_receipt(1, image_key="receipts/1.jpg", original_filename="1.jpg")
    receipt = db.get_receipt(receipt_id)

    assert receipt["user_id"] == 1
    assert receipt["status"] == "pending"
    assert receipt["image_key"] == "receipts/1.jpg"
    assert receipt["expires_at"] > receipt["created_at"]
    assert receipt["receipt_total"] is None


def test_get_missing_receipt(db):
    assert db.get_receipt(42) is None


def test_update_status_keeps_previous_text(db):
    receipt_id = db.create_receipt(1)
    db.update_status(receipt_id, ReceiptStatus.PROCESSING)
    assert db.get_receipt(receipt_id)["processed_at"] is None

    db.update_status(receipt_id, ReceiptStatus.COMPLETED, ocr_text="BANANAS 0.58 F")
    db.update_status(receipt_id, ReceiptStatus.COMPLETED)

    receipt = db.get_receipt(receipt_id)
    assert receipt["status"] == "completed"
    assert receipt["ocr_text"] == "BANANAS 0.58 F"
    assert receipt["processed_at"] is not None


def test_update_status_failed_records_error(db):
    receipt_id = db.create_receipt(1)
    db.update_status(receipt_id, ReceiptStatus.FAILED, error_message="blurry image")
    receipt = db.get_receipt(receipt_id)
    assert receipt["status"] == "failed"
    assert receipt["error_message"] == "blurry image"


def test_update_metadata(db):
    receipt_id = db.create_receipt(1)
    db.update_metadata(receipt_id, date(2024, 1, 15), Decimal("4.44"))
    receipt = db.get_receipt(receipt_id)
    assert receipt["receipt_date"] == "2024-01-15"
    assert receipt["receipt_total"] == Decimal("4.44")


def test_receipt_items_round_trip(db):
    receipt_id = db.create_receipt(1)
    db.create_receipt_item(receipt_id, _item("MILK", "3.28", 1))
    db.create_receipt_item(receipt_id, _item("BANANAS", "0.58", 0))

    lines = db.get_receipt_items(receipt_id)
    assert [l["extracted_name"] for l in lines] == ["BANANAS", "MILK"]
    assert lines[0]["extracted_price"] == Decimal("0.58")
    assert lines[0]["match_status"] == "pending"
    assert lines[0]["is_confirmed"] is False


def test_receipt_item_with_match(tmp_path):
    receipts = ReceiptDB(tmp_path / "test.db")
    catalog = CatalogDB(conn=receipts.connection)
    item_id = catalog.create_item("Bananas")
    receipt_id = receipts.create_receipt(1)

    line_id = receipts.create_receipt_item(
        receipt_id,
        _item(),
        matched_item_id=item_id,
        match_confidence=1.0,
        match_status=LineMatchStatus.MATCHED,
    )
    line = receipts.get_receipt_item(line_id)
    assert line["matched_item_id"] == item_id
    assert line["match_status"] == "matched"
    receipts.close()


def test_line_updates(db):
    receipt_id = db.create_receipt(1)
    skip_id = db.create_receipt_item(receipt_id, _item("BAG FEE", "0.10"))
    db.mark_line_skipped(skip_id)

    line = db.get_receipt_item(skip_id)
    assert line["match_status"] == "skipped"
    assert line["is_confirmed"] is True


def test_cleanup_expired(db):
    old = db.create_receipt(1, image_key="receipts/old.jpg", ttl_days=-1)
    db.create_receipt_item(old, _item())
    no_image = db.create_receipt(1, ttl_days=-1)
    fresh = db.create_receipt(1, image_key="receipts/new.jpg")

    keys = db.cleanup_expired()

    assert keys == ["receipts/old.jpg"]
    assert db.get_receipt(old) is None
    assert db.get_receipt(no_image) is None
    assert db.get_receipt(fresh) is not None
    assert db.get_receipt_items(old) == []


def test_cleanup_nothing_expired(db):
    db.create_receipt(1, image_key="receipts/new.jpg")
    assert db.cleanup_expired() == []

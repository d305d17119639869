"""Receipt and receipt line storage."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path

from ..models import LineMatchStatus, ReceiptItem, ReceiptStatus
from .catalog import DEFAULT_DB_PATH
from .schema import ensure_schema, transaction

DEFAULT_RECEIPT_TTL_DAYS = 90


class ReceiptDB:
    """Manages the receipts and receipt_items tables."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        self._db_path = db_path
        self._conn = conn
        self._owns_conn = conn is None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._get_conn()

    def close(self) -> None:
        if self._conn is not None and self._owns_conn:
            self._conn.close()
            self._conn = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with transaction(self._get_conn()) as conn:
            yield conn

    # --- receipts -------------------------------------------------------

    def create_receipt(
        self,
        user_id: int,
        *,
        image_key: str = "",
        original_filename: str | None = None,
        store_id: int | None = None,
        ttl_days: int = DEFAULT_RECEIPT_TTL_DAYS,
    ) -> int:
        """Insert a pending receipt that expires after ``ttl_days``."""
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO receipts
               (user_id, store_id, image_key, original_filename, status, expires_at)
               VALUES (?, ?, ?, ?, ?, datetime('now', 'localtime', ?))""",
            (
                user_id,
                store_id,
                image_key,
                original_filename,
                ReceiptStatus.PENDING.value,
                f"{ttl_days:+d} days",
            ),
        )
        return cur.lastrowid

    def get_receipt(self, receipt_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM receipts WHERE id = ?", (receipt_id,)
        ).fetchone()
        if row is None:
            return None
        d = dict(row)
        if d["receipt_total"] is not None:
            d["receipt_total"] = Decimal(d["receipt_total"])
        return d

    def update_status(
        self,
        receipt_id: int,
        status: ReceiptStatus,
        *,
        ocr_text: str | None = None,
        error_message: str | None = None,
    ) -> None:
        """Move a receipt to ``status``; OCR text / error are kept if not given."""
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipts
               SET status = ?,
                   ocr_text = COALESCE(?, ocr_text),
                   error_message = COALESCE(?, error_message),
                   processed_at = CASE
                       WHEN ? IN ('completed', 'failed') THEN datetime('now', 'localtime')
                       ELSE processed_at
                   END,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (status.value, ocr_text, error_message, status.value, receipt_id),
        )

    def update_metadata(
        self,
        receipt_id: int,
        receipt_date: date | None,
        total: Decimal | None,
    ) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipts
               SET receipt_date = ?, receipt_total = ?,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (
                receipt_date.isoformat() if receipt_date else None,
                str(total) if total is not None else None,
                receipt_id,
            ),
        )

    def mark_confirmed(self, receipt_id: int, store_id: int, confirmed_at: str) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipts
               SET store_id = ?, status = ?, confirmed_at = ?,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (store_id, ReceiptStatus.CONFIRMED.value, confirmed_at, receipt_id),
        )

    def cleanup_expired(self) -> list[str]:
        """Delete receipts past their expiry.

        Returns:
            Image keys of the deleted receipts, for removal from object storage.
        """
        with self.transaction() as conn:
            rows = conn.execute(
                """SELECT image_key FROM receipts
                   WHERE expires_at < datetime('now', 'localtime')"""
            ).fetchall()
            conn.execute(
                "DELETE FROM receipts WHERE expires_at < datetime('now', 'localtime')"
            )
        return [r["image_key"] for r in rows if r["image_key"]]

    # --- receipt lines --------------------------------------------------

    def create_receipt_item(
        self,
        receipt_id: int,
        item: ReceiptItem,
        *,
        matched_item_id: int | None = None,
        match_confidence: float | None = None,
        match_status: LineMatchStatus = LineMatchStatus.PENDING,
    ) -> int:
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO receipt_items
               (receipt_id, raw_text, extracted_name, extracted_price,
                extracted_quantity, matched_item_id, match_confidence,
                match_status, line_number)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                receipt_id,
                item.raw_text,
                item.name,
                str(item.price),
                item.quantity,
                matched_item_id,
                match_confidence,
                match_status.value,
                item.line_number,
            ),
        )
        return cur.lastrowid

    def get_receipt_items(self, receipt_id: int) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM receipt_items WHERE receipt_id = ? ORDER BY line_number, id",
            (receipt_id,),
        ).fetchall()
        return [_line_row(r) for r in rows]

    def get_receipt_item(self, line_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM receipt_items WHERE id = ?", (line_id,)
        ).fetchone()
        return _line_row(row) if row else None

    def mark_line_skipped(self, line_id: int) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipt_items
               SET match_status = ?, is_confirmed = 1,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (LineMatchStatus.SKIPPED.value, line_id),
        )

    def link_created_item(self, line_id: int, item_id: int) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipt_items
               SET created_item_id = ?, match_status = ?,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (item_id, LineMatchStatus.NEW_ITEM.value, line_id),
        )

    def confirm_line(self, line_id: int, item_id: int, price: Decimal) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE receipt_items
               SET confirmed_item_id = ?, confirmed_price = ?, is_confirmed = 1,
                   match_status = ?, updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (item_id, str(price), LineMatchStatus.MATCHED.value, line_id),
        )


def _line_row(row: sqlite3.Row) -> dict:
    d = dict(row)
    for key in ("extracted_price", "confirmed_price"):
        if d[key] is not None:
            d[key] = Decimal(d[key])
    d["is_confirmed"] = bool(d["is_confirmed"])
    return d

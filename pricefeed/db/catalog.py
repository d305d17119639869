"""Product catalog and store price operations."""

from __future__ import annotations

import sqlite3
from decimal import Decimal
from pathlib import Path

from ..matching.matcher import CatalogUnavailableError
from ..models import MatchCandidate, MatchType
from .schema import ensure_schema

DEFAULT_DB_PATH = "~/.config/pricefeed/pricefeed.db"

# Minimum trigram similarity for a catalog row to be a candidate at all
SIMILARITY_FLOOR = 0.2


class CatalogDB:
    """Manages the items, stores and store_prices tables."""

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

    def find_similar_items(
        self, normalized_name: str, limit: int
    ) -> list[MatchCandidate]:
        """Return catalog items whose name is trigram-similar to the input.

        Raises:
            CatalogUnavailableError: If the database cannot be queried.
        """
        try:
            conn = self._get_conn()
            rows = conn.execute(
                """SELECT id, name, brand,
                          similarity(LOWER(name), LOWER(?)) AS confidence
                   FROM items
                   WHERE similarity(LOWER(name), LOWER(?)) > ?
                   ORDER BY confidence DESC, id ASC
                   LIMIT ?""",
                (normalized_name, normalized_name, SIMILARITY_FLOOR, limit),
            ).fetchall()
        except (sqlite3.Error, OSError) as e:
            raise CatalogUnavailableError(str(e)) from e

        return [
            MatchCandidate(
                catalog_item_id=row["id"],
                name=row["name"],
                brand=row["brand"],
                confidence=float(row["confidence"]),
                match_type=MatchType.FUZZY,
            )
            for row in rows
        ]

    def create_item(
        self,
        name: str,
        owner_id: int | None = None,
        *,
        brand: str | None = None,
        size: float | None = None,
        unit: str | None = None,
        description: str | None = None,
    ) -> int:
        """Insert a catalog item and return its ID."""
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO items (name, brand, size, unit, description, created_by)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (name.strip(), brand, size, unit, description, owner_id),
        )
        return cur.lastrowid

    def get_item(self, item_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM items WHERE id = ?", (item_id,)).fetchone()
        return dict(row) if row else None

    def list_items(self) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute("SELECT * FROM items ORDER BY id").fetchall()
        return [dict(r) for r in rows]

    def create_store(self, name: str, **address: str) -> int:
        """Insert a store. ``address`` may carry street_address/city/state/zip_code/chain."""
        allowed = ("street_address", "city", "state", "zip_code", "chain")
        unknown = set(address) - set(allowed)
        if unknown:
            raise ValueError(f"Unknown store fields: {sorted(unknown)}")
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO stores (name, street_address, city, state, zip_code, chain)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (name, *(address.get(k) for k in allowed)),
        )
        return cur.lastrowid

    def upsert_store_price(
        self, store_id: int, item_id: int, price: Decimal, user_id: int | None
    ) -> int:
        """Insert or update the price row for (store_id, item_id).

        An existing row gets the new price and attribution. If the database
        rejects the upsert statement, falls back to a plain insert.

        Returns:
            The store_prices row ID.
        """
        conn = self._get_conn()
        params = (store_id, item_id, str(price), user_id)
        try:
            conn.execute(
                """INSERT INTO store_prices (store_id, item_id, price, user_id, is_shared)
                   VALUES (?, ?, ?, ?, 1)
                   ON CONFLICT(store_id, item_id) DO UPDATE SET
                     price=excluded.price,
                     user_id=excluded.user_id,
                     updated_at=datetime('now', 'localtime')""",
                params,
            )
        except sqlite3.OperationalError:
            cur = conn.execute(
                """INSERT INTO store_prices (store_id, item_id, price, user_id, is_shared)
                   VALUES (?, ?, ?, ?, 1)""",
                params,
            )
            return cur.lastrowid

        row = conn.execute(
            "SELECT id FROM store_prices WHERE store_id = ? AND item_id = ?",
            (store_id, item_id),
        ).fetchone()
        return row["id"]

    def get_store_price(self, store_id: int, item_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM store_prices WHERE store_id = ? AND item_id = ?",
            (store_id, item_id),
        ).fetchone()
        return _price_row(row) if row else None

    def list_store_prices(self, store_id: int | None = None) -> list[dict]:
        conn = self._get_conn()
        if store_id is None:
            rows = conn.execute("SELECT * FROM store_prices ORDER BY id").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM store_prices WHERE store_id = ? ORDER BY id",
                (store_id,),
            ).fetchall()
        return [_price_row(r) for r in rows]


def _price_row(row: sqlite3.Row) -> dict:
    d = dict(row)
    d["price"] = Decimal(d["price"])
    return d

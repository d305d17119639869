"""All-or-nothing commit of user-confirmed receipt line dispositions."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime

from .db import CatalogDB, ReceiptDB
from .models import (
    DispositionAction,
    DispositionError,
    LineOutcome,
    ReceiptLineDisposition,
    ReceiptStatus,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)


class ReconciliationError(RuntimeError):
    """A confirmation failed part-way and every write of the call was rolled back."""


class ReceiptNotFoundError(LookupError):
    pass


class UnitOfWork:
    """Collects the planned writes of one confirmation and applies them together.

    Nothing touches the database until :meth:`commit`, which runs every step
    inside a single transaction and rolls all of them back on any error.
    """

    def __init__(self, receipts: ReceiptDB) -> None:
        self._receipts = receipts
        self._steps: list[Callable[[], LineOutcome | None]] = []

    def add(self, step: Callable[[], LineOutcome | None]) -> None:
        self._steps.append(step)

    def __len__(self) -> int:
        return len(self._steps)

    def commit(self) -> list[LineOutcome]:
        outcomes: list[LineOutcome] = []
        with self._receipts.transaction():
            for step in self._steps:
                outcome = step()
                if outcome is not None:
                    outcomes.append(outcome)
        return outcomes


class ReceiptReconciler:
    """Turns confirmed receipt lines into catalog items and store prices."""

    def __init__(self, receipts: ReceiptDB, catalog: CatalogDB | None = None) -> None:
        if catalog is None:
            catalog = CatalogDB(conn=receipts.connection)
        elif catalog.connection is not receipts.connection:
            raise ValueError("catalog and receipts must share one connection")
        self._receipts = receipts
        self._catalog = catalog

    def confirm_receipt(
        self,
        receipt_id: int,
        store_id: int,
        user_id: int,
        dispositions: list[ReceiptLineDisposition],
    ) -> ReconciliationResult:
        """Apply every disposition and mark the receipt confirmed, atomically.

        Raises:
            DispositionError: A disposition is malformed or names a line that
                does not belong to the receipt. Nothing is written.
            ReceiptNotFoundError: The receipt does not exist.
            ReconciliationError: A write failed; all writes were rolled back.
        """
        for disposition in dispositions:
            disposition.validate()

        if self._receipts.get_receipt(receipt_id) is None:
            raise ReceiptNotFoundError(f"receipt {receipt_id} not found")

        self._check_lines_belong(receipt_id, dispositions)

        confirmed_at = datetime.now().isoformat(sep=" ", timespec="seconds")
        uow = UnitOfWork(self._receipts)
        for disposition in dispositions:
            uow.add(self._plan_line(disposition, store_id, user_id))
        uow.add(
            lambda: self._receipts.mark_confirmed(receipt_id, store_id, confirmed_at)
        )

        try:
            outcomes = uow.commit()
        except sqlite3.Error as e:
            logger.warning(
                "Confirmation of receipt %d rolled back: %s", receipt_id, e
            )
            raise ReconciliationError(
                f"failed to confirm receipt {receipt_id}: {e}"
            ) from e

        committed = sum(1 for o in outcomes if o.price_committed)
        logger.info(
            "Receipt %d confirmed: %d lines, %d prices committed",
            receipt_id,
            len(outcomes),
            committed,
        )
        return ReconciliationResult(
            receipt_id=receipt_id,
            status=ReceiptStatus.CONFIRMED,
            confirmed_at=confirmed_at,
            lines=outcomes,
        )

    def _check_lines_belong(
        self, receipt_id: int, dispositions: list[ReceiptLineDisposition]
    ) -> None:
        known = {row["id"] for row in self._receipts.get_receipt_items(receipt_id)}
        for disposition in dispositions:
            if disposition.line_id not in known:
                raise DispositionError(
                    f"line {disposition.line_id} does not belong to receipt {receipt_id}"
                )

    def _plan_line(
        self, disposition: ReceiptLineDisposition, store_id: int, user_id: int
    ) -> Callable[[], LineOutcome]:
        def step() -> LineOutcome:
            line_id = disposition.line_id
            outcome = LineOutcome(line_id=line_id)

            if disposition.action is DispositionAction.SKIP:
                self._receipts.mark_line_skipped(line_id)
                outcome.skipped = True
                return outcome

            if disposition.action is DispositionAction.CREATE_NEW:
                item_id = self._catalog.create_item(
                    disposition.new_item_name, owner_id=user_id
                )
                self._receipts.link_created_item(line_id, item_id)
            else:
                item_id = disposition.catalog_item_id
            outcome.catalog_item_id = item_id

            # Without a price the line stays unconfirmed
            if disposition.price is None:
                return outcome

            outcome.price_id = self._catalog.upsert_store_price(
                store_id, item_id, disposition.price, user_id
            )
            self._receipts.confirm_line(line_id, item_id, disposition.price)
            return outcome

        return step

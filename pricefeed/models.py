"""Data models for parsed list lines, match results, and receipt reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CONFIRMED = "confirmed"


class LineMatchStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    NEW_ITEM = "new_item"
    SKIPPED = "skipped"


class MatchType(str, Enum):
    FUZZY = "fuzzy"


class DispositionAction(str, Enum):
    CONFIRM_MATCH = "confirm_match"
    CREATE_NEW = "create_new"
    SKIP = "skip"


class DispositionError(ValueError):
    """A receipt line disposition is missing the field its action requires."""


@dataclass
class ParsedLine:
    """A single checklist line split into quantity, unit, name and notes."""

    raw_text: str
    line_number: int
    quantity: float = 1.0
    unit: str = ""
    name: str = ""
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "raw_text": self.raw_text,
            "line_number": self.line_number,
            "quantity": self.quantity,
            "unit": self.unit,
            "name": self.name,
            "notes": self.notes,
        }


@dataclass
class MatchCandidate:
    """A catalog item suggested for a parsed name."""

    catalog_item_id: int
    name: str
    brand: str | None = None
    confidence: float = 0.0  # 0.0-1.0
    match_type: MatchType = MatchType.FUZZY

    def to_dict(self) -> dict:
        return {
            "item_id": self.catalog_item_id,
            "name": self.name,
            "brand": self.brand,
            "confidence": self.confidence,
            "match_type": self.match_type.value,
        }


def sort_candidates(candidates: list[MatchCandidate]) -> list[MatchCandidate]:
    """Order by descending confidence, ties broken by ascending item id."""
    return sorted(candidates, key=lambda c: (-c.confidence, c.catalog_item_id))


@dataclass
class MatchedLine:
    """A parsed line together with its ranked catalog suggestions."""

    parsed_line: ParsedLine
    best_match: MatchCandidate | None = None
    suggestions: list[MatchCandidate] = field(default_factory=list)

    @property
    def is_matched(self) -> bool:
        return self.best_match is not None

    def to_dict(self) -> dict:
        return {
            "parsed_item": self.parsed_line.to_dict(),
            "best_match": self.best_match.to_dict() if self.best_match else None,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "is_matched": self.is_matched,
        }


@dataclass
class ImportResult:
    items: list[MatchedLine]
    total_parsed: int
    matched_count: int
    unmatched_count: int

    def to_dict(self) -> dict:
        return {
            "items": [i.to_dict() for i in self.items],
            "total_parsed": self.total_parsed,
            "matched_count": self.matched_count,
            "unmatched_count": self.unmatched_count,
        }


@dataclass
class ReceiptItem:
    """An item/price line recognized in receipt OCR text."""

    raw_text: str
    name: str
    price: Decimal
    quantity: int = 1
    line_number: int = 0


@dataclass
class ParsedReceipt:
    items: list[ReceiptItem] = field(default_factory=list)
    total: Decimal | None = None
    receipt_date: date | None = None


@dataclass
class MatchedReceiptItem:
    """A receipt item with match results (acceptance threshold 0.5)."""

    item: ReceiptItem
    best_match: MatchCandidate | None = None
    suggestions: list[MatchCandidate] = field(default_factory=list)
    line_id: int | None = None  # receipt_items row once stored

    @property
    def is_matched(self) -> bool:
        return self.best_match is not None


@dataclass
class ReceiptLineDisposition:
    """The user's decision for one stored receipt line."""

    line_id: int
    action: DispositionAction
    catalog_item_id: int | None = None
    new_item_name: str | None = None
    price: Decimal | None = None

    def validate(self) -> None:
        """Raise DispositionError if the action lacks (or mixes) its target."""
        if self.action is DispositionAction.SKIP:
            return
        if self.action is DispositionAction.CONFIRM_MATCH:
            if self.catalog_item_id is None:
                raise DispositionError(
                    f"line {self.line_id}: confirm_match requires catalog_item_id"
                )
            if self.new_item_name:
                raise DispositionError(
                    f"line {self.line_id}: confirm_match cannot set new_item_name"
                )
        elif self.action is DispositionAction.CREATE_NEW:
            if not (self.new_item_name and self.new_item_name.strip()):
                raise DispositionError(
                    f"line {self.line_id}: create_new requires new_item_name"
                )
            if self.catalog_item_id is not None:
                raise DispositionError(
                    f"line {self.line_id}: create_new cannot set catalog_item_id"
                )
        if self.price is not None:
            if not self.price.is_finite():
                raise DispositionError(f"line {self.line_id}: price must be a number")
            if self.price <= 0:
                raise DispositionError(f"line {self.line_id}: price must be positive")

    @classmethod
    def from_dict(cls, data: dict) -> ReceiptLineDisposition:
        price = data.get("price")
        if price is not None:
            try:
                price = Decimal(str(price))
            except InvalidOperation as e:
                raise DispositionError(f"invalid price {price!r}") from e
        return cls(
            line_id=int(data["line_id"]),
            action=DispositionAction(data["action"]),
            catalog_item_id=data.get("catalog_item_id"),
            new_item_name=data.get("new_item_name"),
            price=price,
        )


@dataclass
class LineOutcome:
    line_id: int
    catalog_item_id: int | None = None
    price_id: int | None = None
    skipped: bool = False

    @property
    def price_committed(self) -> bool:
        return self.price_id is not None

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "catalog_item_id": self.catalog_item_id,
            "price_committed": self.price_committed,
            "skipped": self.skipped,
        }


@dataclass
class ReconciliationResult:
    """Outcome of one confirmation call. Not persisted on its own."""

    receipt_id: int
    status: ReceiptStatus
    confirmed_at: str
    lines: list[LineOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "receipt_id": self.receipt_id,
            "status": self.status.value,
            "confirmed_at": self.confirmed_at,
            "lines": [line.to_dict() for line in self.lines],
        }

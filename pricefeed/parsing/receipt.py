"""Receipt OCR text parsing: item/price lines, purchase date and total."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from ..models import ParsedReceipt, ReceiptItem

_MAX_ITEM_PRICE = Decimal("9999")

# Patterns tried in order; 2 groups = (name, price), 3 groups = (qty, name, price)
_PRICE_PATTERNS: list[re.Pattern[str]] = [
    # Commissary format: ITEM NAME 00034000004409 $1.18 F
    re.compile(r"^(.+?)\s+\d{11,14}\s+\$?(\d{1,3}\.\d{2})\s*[FNT]?\s*$"),
    # ITEM NAME    $X.XX
    re.compile(r"^(.+?)\s+\$?(\d{1,3}\.\d{2})\s*$"),
    # ITEM NAME @ X.XX EA
    re.compile(r"^(.+?)\s+@\s*\$?(\d{1,3}\.\d{2})\s*(?:EA|EACH)?"),
    # QTY x ITEM PRICE
    re.compile(r"^(\d+)\s*[xX@]\s*(.+?)\s+\$?(\d{1,3}\.\d{2})"),
    # ITEM    PRICE F (tax flag)
    re.compile(r"^(.+?)\s+\$?(\d{1,3}\.\d{2})\s*[FNT]?\s*$"),
]

_EXCLUDE_KEYWORDS: list[str] = [
    "TAX", "SUBTOTAL", r"SUB\s*TOTAL", "TOTAL", r"GRAND\s*TOTAL", "BALANCE",
    "CHANGE", "CASH", "CREDIT", "DEBIT", "CARD", "VISA", "MASTERCARD", "AMEX",
    "DISCOVER", "SAVINGS", "DISCOUNT", "COUPON", "MEMBER", "LOYALTY",
    "POINTS", "REWARD", r"THANK\s*YOU", r"HAVE\s*A", r"STORE\s*#", "CASHIER",
    "TRANS", "REG", "DATE", "TIME", "TEL", "PHONE", "ADDRESS", "RECEIPT",
    "RETURN", "REFUND", "VOID", "SURCHARGE", r"SOLD\s*ITEMS?", "PAID",
    "PURCHASE",
]

# Department headers printed between item groups
_SECTION_HEADERS: list[str] = [
    r"BREAD\s*(?:AND|&)\s*SNACKS", "DAIRY", r"PACKAGE\s*FOOD",
    r"PRE\s*PACKAGED\s*MEAT", "PRODUCE", r"SPECIALTY\s*FOODS?",
    r"FROZEN\s*FOODS?", "BEVERAGES?", "DELI", "BAKERY", "MEAT", "SEAFOOD",
    "GROCERY", r"HEALTH\s*(?:AND|&)\s*BEAUTY", "HOUSEHOLD", r"PET\s*SUPPLIES?",
]

_EXCLUDE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^\s*(?:" + "|".join(_EXCLUDE_KEYWORDS) + r")\b", re.IGNORECASE),
    re.compile(r"^\s*[-=*]+\s*$"),
    re.compile(r"^\s*\d{2}[/-]\d{2}[/-]\d{2,4}\s*$"),
    re.compile(r"^\s*\d{1,2}:\d{2}\s*(?:AM|PM)?\s*$", re.IGNORECASE),
    re.compile(r"^\s*(?:" + "|".join(_SECTION_HEADERS) + r")\s*$", re.IGNORECASE),
    # Weight/quantity detail lines: "2 @ $2.79 EACH", "2.96 lb @ $0.99 / lb"
    re.compile(
        r"^\s*\d+\.?\d*\s*(?:lb|oz|kg|g)?\s*@\s*\$?\d+\.\d{2}\s*"
        r"(?:/\s*(?:lb|oz|kg|g)|EACH|EA)?\s*$",
        re.IGNORECASE,
    ),
]

_ISO_DATE_PATTERN = re.compile(r"(\d{4})[/-](\d{1,2})[/-](\d{1,2})")
_US_DATE_PATTERN = re.compile(r"(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})")

_TOTAL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:TOTAL|GRAND\s*TOTAL|BALANCE\s*DUE|AMOUNT\s*DUE)\s*:?\s*\$?(\d+\.\d{2})",
        re.IGNORECASE,
    ),
    re.compile(r"^\s*TOTAL\s+\$?(\d+\.\d{2})", re.IGNORECASE),
]

_SPACE_PATTERN = re.compile(r"\s+")


class ReceiptParser:
    """Extracts priced item lines from plain receipt OCR text."""

    def parse(self, ocr_text: str) -> ParsedReceipt:
        lines = ocr_text.splitlines()
        result = ParsedReceipt(
            receipt_date=self.extract_date(lines),
            total=self.extract_total(lines),
        )

        line_number = 0
        for raw in lines:
            line = raw.strip()
            if not line or self._should_exclude(line):
                continue

            item = self.parse_line(line, line_number)
            if item is not None:
                result.items.append(item)
                line_number += 1

        return result

    def parse_line(self, line: str, line_number: int = 0) -> ReceiptItem | None:
        """Parse one receipt line, or return None if it carries no item price."""
        line = self._clean_line(line)

        for pattern in _PRICE_PATTERNS:
            m = pattern.match(line)
            if not m:
                continue

            quantity = 1
            if pattern.groups == 3:
                qty_str, name, price_str = m.groups()
                quantity = int(qty_str)
            else:
                name, price_str = m.group(1), m.group(2)

            try:
                price = Decimal(price_str)
            except InvalidOperation:
                continue

            name = self._clean_item_name(name)
            if not name:
                continue

            # Likely a phone number or other stray figure
            if price <= 0 or price > _MAX_ITEM_PRICE:
                continue

            return ReceiptItem(
                raw_text=line,
                name=name,
                price=price,
                quantity=quantity,
                line_number=line_number,
            )

        return None

    @staticmethod
    def _should_exclude(line: str) -> bool:
        for pattern in _EXCLUDE_PATTERNS:
            if pattern.search(line):
                return True
        return False

    @staticmethod
    def _clean_line(line: str) -> str:
        line = _SPACE_PATTERN.sub(" ", line)
        # Common OCR artifacts
        line = line.replace("|", "").replace("\\", "")
        return line.strip()

    @staticmethod
    def _clean_item_name(name: str) -> str:
        name = name.strip().rstrip(".,;:-_")
        for prefix in ("@", "#", "*"):
            if name.startswith(prefix):
                name = name[len(prefix):]
        return name.strip()

    @staticmethod
    def extract_date(lines: list[str]) -> date | None:
        """Return the first valid date found (YYYY-MM-DD or MM/DD/YY[YY])."""
        for line in lines:
            m = _ISO_DATE_PATTERN.search(line)
            if m:
                year, month, day = (int(g) for g in m.groups())
            else:
                m = _US_DATE_PATTERN.search(line)
                if not m:
                    continue
                month, day, year = (int(g) for g in m.groups())
                if year < 100:
                    year += 1900 if year > 50 else 2000

            try:
                return date(year, month, day)
            except ValueError:
                continue
        return None

    @staticmethod
    def extract_total(lines: list[str]) -> Decimal | None:
        """Return the receipt total, searching from the bottom up."""
        for line in reversed(lines):
            for pattern in _TOTAL_PATTERNS:
                m = pattern.search(line)
                if not m:
                    continue
                total = Decimal(m.group(1))
                if total > 0:
                    return total
        return None

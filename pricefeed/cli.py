"""CLI entry point for pricefeed."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import load_config
from .db import CatalogDB, ReceiptDB
from .importer import ImportListError, ListImporter
from .matching import ItemMatcher, confidence_level
from .models import ReceiptLineDisposition, ReceiptStatus
from .reconcile import ReceiptNotFoundError, ReceiptReconciler, ReconciliationError


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pricefeed",
        description="Match shopping lists and receipts against a product catalog",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # import
    import_parser = sub.add_parser("import", help="Import a markdown shopping list")
    import_parser.add_argument("file", type=str, help="Checklist file (- [ ] item)")
    import_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # receipt
    receipt_parser = sub.add_parser("receipt", help="Ingest a receipt for review")
    receipt_parser.add_argument("image", type=str, nargs="?", help="Receipt image")
    receipt_parser.add_argument(
        "--text", type=str, default=None, metavar="FILE",
        help="Use already transcribed receipt text instead of running OCR",
    )
    receipt_parser.add_argument("--user", type=int, default=1, help="Uploading user ID")
    receipt_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # confirm
    confirm_parser = sub.add_parser("confirm", help="Confirm reviewed receipt lines")
    confirm_parser.add_argument("receipt_id", type=int)
    confirm_parser.add_argument("--store", type=int, required=True, help="Store ID")
    confirm_parser.add_argument("--user", type=int, required=True, help="User ID")
    confirm_parser.add_argument(
        "--dispositions", type=str, required=True, metavar="FILE",
        help="JSON list of line dispositions",
    )

    # catalog maintenance
    item_parser = sub.add_parser("add-item", help="Add a catalog item")
    item_parser.add_argument("name", type=str)
    item_parser.add_argument("--brand", type=str, default=None)
    item_parser.add_argument("--size", type=float, default=None)
    item_parser.add_argument("--unit", type=str, default=None)

    store_parser = sub.add_parser("add-store", help="Add a store")
    store_parser.add_argument("name", type=str)
    store_parser.add_argument("--city", type=str, default=None)
    store_parser.add_argument("--state", type=str, default=None)

    # cleanup / schedule
    sub.add_parser("cleanup", help="Delete expired receipts now")
    sub.add_parser("schedule", help="Run the expired receipt cleanup on its cron schedule")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    match args.command:
        case "import":
            _cmd_import(config, args)
        case "receipt":
            asyncio.run(_cmd_receipt(config, args))
        case "confirm":
            _cmd_confirm(config, args)
        case "add-item":
            _cmd_add_item(config, args)
        case "add-store":
            _cmd_add_store(config, args)
        case "cleanup":
            _cmd_cleanup(config)
        case "schedule":
            asyncio.run(_cmd_schedule(config))


def _cmd_import(config, args) -> None:
    content = _read_text(args.file)

    catalog = CatalogDB(config.database.path)
    try:
        importer = ListImporter(
            ItemMatcher(catalog),
            threshold=config.matching.list_threshold,
            limit=config.matching.suggestion_limit,
        )
        try:
            result = importer.import_list(content)
        except ImportListError as e:
            print(f"Import failed: {e}", file=sys.stderr)
            sys.exit(1)
    finally:
        catalog.close()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    print(
        f"{result.total_parsed} items, {result.matched_count} matched, "
        f"{result.unmatched_count} unmatched"
    )
    for m in result.items:
        line = m.parsed_line
        qty = f"{line.quantity:g} {line.unit}".strip()
        if m.best_match:
            level = confidence_level(m.best_match.confidence)
            target = (
                f"→ {m.best_match.name} (#{m.best_match.catalog_item_id}, "
                f"{m.best_match.confidence:.0%} {level})"
            )
        else:
            target = "→ no match"
        print(f"  {line.line_number:>3}. {qty:<12} {line.name:<24} {target}")


async def _cmd_receipt(config, args) -> None:
    from .ocr import create_backend
    from .pipeline import ReceiptPipeline

    if not args.image and not args.text:
        print("Either IMAGE or --text FILE is required.", file=sys.stderr)
        sys.exit(1)

    text = _read_text(args.text) if args.text else None

    receipts = ReceiptDB(config.database.path)
    try:
        catalog = CatalogDB(conn=receipts.connection)
        source = args.image or args.text
        receipt_id = receipts.create_receipt(
            args.user,
            image_key=args.image or "",
            original_filename=Path(source).name,
            ttl_days=config.receipts.ttl_days,
        )

        if text is not None:
            pipeline = ReceiptPipeline(
                receipts,
                ItemMatcher(catalog),
                threshold=config.matching.receipt_threshold,
                limit=config.matching.suggestion_limit,
            )
            receipts.update_status(receipt_id, ReceiptStatus.COMPLETED, ocr_text=text)
            lines = pipeline.ingest_text(receipt_id, text)
        else:
            pipeline = ReceiptPipeline(
                receipts,
                ItemMatcher(catalog),
                ocr=create_backend(config),
                threshold=config.matching.receipt_threshold,
                limit=config.matching.suggestion_limit,
            )
            print("🔍 Reading receipt...")
            try:
                lines = await pipeline.ingest_image(receipt_id, args.image)
            except (ImportError, ValueError, FileNotFoundError) as e:
                print(f"OCR failed: {e}", file=sys.stderr)
                sys.exit(1)

        receipt = receipts.get_receipt(receipt_id)
    finally:
        receipts.close()

    if args.json:
        data = {
            "receipt_id": receipt_id,
            "receipt_date": receipt["receipt_date"],
            "receipt_total": (
                str(receipt["receipt_total"])
                if receipt["receipt_total"] is not None
                else None
            ),
            "items": [
                {
                    "line_id": m.line_id,
                    "raw_text": m.item.raw_text,
                    "name": m.item.name,
                    "price": str(m.item.price),
                    "quantity": m.item.quantity,
                    "best_match": m.best_match.to_dict() if m.best_match else None,
                    "suggestions": [s.to_dict() for s in m.suggestions],
                }
                for m in lines
            ],
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print(f"Receipt #{receipt_id}: {len(lines)} items")
    if receipt["receipt_date"]:
        print(f"  Date:  {receipt['receipt_date']}")
    if receipt["receipt_total"] is not None:
        print(f"  Total: ${receipt['receipt_total']}")
    for m in lines:
        match = f"→ {m.best_match.name}" if m.best_match else "→ ?"
        print(f"  [{m.line_id}] {m.item.name:<28} ${m.item.price:>7} {match}")


def _cmd_confirm(config, args) -> None:
    try:
        raw = json.loads(_read_text(args.dispositions))
        if not isinstance(raw, list) or not all(isinstance(d, dict) for d in raw):
            raise ValueError("expected a JSON list of disposition objects")
        dispositions = [ReceiptLineDisposition.from_dict(d) for d in raw]
        for disposition in dispositions:
            disposition.validate()
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Invalid dispositions file: {e}", file=sys.stderr)
        sys.exit(1)

    receipts = ReceiptDB(config.database.path)
    try:
        receipt = receipts.get_receipt(args.receipt_id)
        if receipt is not None and receipt["status"] == ReceiptStatus.CONFIRMED.value:
            print(
                f"Receipt {args.receipt_id} is already confirmed.", file=sys.stderr
            )
            sys.exit(1)

        reconciler = ReceiptReconciler(receipts)
        try:
            result = reconciler.confirm_receipt(
                args.receipt_id, args.store, args.user, dispositions
            )
        except (ValueError, ReceiptNotFoundError, ReconciliationError) as e:
            print(f"Confirmation failed: {e}", file=sys.stderr)
            sys.exit(1)
    finally:
        receipts.close()

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


def _cmd_add_item(config, args) -> None:
    catalog = CatalogDB(config.database.path)
    try:
        item_id = catalog.create_item(
            args.name, brand=args.brand, size=args.size, unit=args.unit
        )
    finally:
        catalog.close()
    print(f"Added item #{item_id}: {args.name}")


def _cmd_add_store(config, args) -> None:
    address = {k: v for k, v in (("city", args.city), ("state", args.state)) if v}
    catalog = CatalogDB(config.database.path)
    try:
        store_id = catalog.create_store(args.name, **address)
    finally:
        catalog.close()
    print(f"Added store #{store_id}: {args.name}")


def _cmd_cleanup(config) -> None:
    receipts = ReceiptDB(config.database.path)
    try:
        keys = receipts.cleanup_expired()
    finally:
        receipts.close()
    print(f"Removed expired receipts ({len(keys)} stored images to delete)")
    for key in keys:
        print(f"  {key}")


async def _cmd_schedule(config) -> None:
    from .scheduler import CleanupScheduler

    scheduler = CleanupScheduler(config)
    scheduler.start()
    for job in scheduler.get_jobs():
        print(f"  {job['id']}: next run {job['next_run']}")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


def _read_text(path: str) -> str:
    p = Path(path)
    if not p.exists():
        print(f"File not found: {p}", file=sys.stderr)
        sys.exit(1)
    return p.read_text(encoding="utf-8")

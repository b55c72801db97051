"""Backfill legacy order documents into the order desk.

Reads a JSON file holding either a list of order documents or a mapping
of document id to document (the shape of a document-store export) and
imports each one through ImportOrder. Events raised by the backfill run at
a lowered processing priority so live traffic is not held up behind it.

Usage:
    python scripts/backfill_orders.py exports/orders.json
    python scripts/backfill_orders.py exports/orders.json --priority bulk --batch-size 500
"""

import argparse
import json
import sys
import time
from pathlib import Path

# Add src/ to path so we can import domain modules
sys.path.insert(0, "src")


def load_documents(path: Path) -> list[tuple[str | None, dict]]:
    """Return (document id, document) pairs from a list or id-keyed export."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        return [(doc_id, doc) for doc_id, doc in data.items() if isinstance(doc, dict)]
    if isinstance(data, list):
        return [(doc.get("id"), doc) for doc in data if isinstance(doc, dict)]
    raise ValueError(f"{path} holds neither a list nor a mapping of order documents")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Backfill legacy order documents")
    parser.add_argument("export", type=Path, help="JSON export of order documents")
    parser.add_argument(
        "--priority", choices=["bulk", "low", "normal"], default="low", help="Processing priority (default: low)"
    )
    parser.add_argument("--batch-size", type=int, default=100, help="Print progress every N records (default: 100)")
    args = parser.parse_args(argv)

    from protean.utils.processing import Priority, processing_priority

    priority = {
        "bulk": Priority.BULK,
        "low": Priority.LOW,
        "normal": Priority.NORMAL,
    }[args.priority]

    from orderdesk.domain import orderdesk
    from orderdesk.order.intake import ImportOrder

    orderdesk.init()
    documents = load_documents(args.export)
    print(f"Backfilling {len(documents):,} orders from {args.export} at {args.priority.upper()} priority")

    imported = 0
    errors = 0
    start = time.monotonic()

    with orderdesk.domain_context(), processing_priority(priority):
        for index, (doc_id, document) in enumerate(documents, start=1):
            try:
                orderdesk.process(
                    ImportOrder(order_id=doc_id, document=json.dumps(document, default=str), source="backfill"),
                    asynchronous=False,
                )
                imported += 1
            except Exception as e:
                errors += 1
                if errors <= 5:
                    print(f"  [ERROR] {doc_id or f'record {index}'}: {e}")
                elif errors == 6:
                    print("  [ERROR] Suppressing further error messages...")

            if index % args.batch_size == 0:
                rate = index / (time.monotonic() - start)
                print(f"  Imported {index:,}/{len(documents):,} ({rate:.1f} rec/sec, {errors} errors)")

    elapsed = time.monotonic() - start
    print(f"Done in {elapsed:.1f}s: {imported:,} imported, {errors:,} failed")
    return 0 if errors == 0 else 1


if __name__ == "__main__":
    sys.exit(main())

"""
Seed the catalog and ledger from the inventory workbook.

Usage:
    python -m stockdb.scripts.import_workbook inventory_data.xlsx [--create-schema]

The target database comes from DATABASE_URL unless --database-url is given.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from stockdb.apps.inventory import importer
from stockdb.database import StorageContext, read_url_from_env, write_url_from_env
from stockdb.exceptions import InventoryError


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import products, inward and dispatch rows from an .xlsx workbook.")
    parser.add_argument("workbook", help="Path to the workbook (e.g. inventory_data.xlsx).")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL; defaults to DATABASE_URL.")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before importing (use Alembic for managed databases).",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.database_url:
        storage = StorageContext(args.database_url)
    else:
        storage = StorageContext(write_url_from_env(), read_url_from_env())

    try:
        if args.create_schema:
            storage.create_schema()
        summaries = importer.import_workbook(storage, args.workbook)
    except InventoryError as exc:
        print(f"Import failed: {exc.message}", file=sys.stderr)
        return 1
    finally:
        storage.dispose()

    for summary in summaries:
        print(f"{summary.sheet}: {summary.imported} imported, {summary.skipped} skipped")
        for issue in summary.issues:
            print(f"  row {issue.row_number}: {issue.reason}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

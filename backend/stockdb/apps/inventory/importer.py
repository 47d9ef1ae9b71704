"""
One-time bulk import of the inventory workbook.

The workbook has three sheets:

- ``FD NAME MASTER``: one header row, product names in column A.
- ``Inward Qty`` / ``Despatch Qty``: two header rows, then
  SR_No, DateTime, FD_NAME, Pouch_Date, Num_Pouches, Qty_GM, Remarks.

Blank and malformed rows are skipped and reported; they never fail the
import. Storage failures do.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from stockdb.database import StorageContext
from stockdb.exceptions import DuplicateProduct, InvalidInput, InventoryError, UnknownProduct
from . import models, schemas, services

logger = logging.getLogger(__name__)

PRODUCTS_SHEET = "FD NAME MASTER"
INWARD_SHEET = "Inward Qty"
OUTWARD_SHEET = "Despatch Qty"

PRODUCTS_HEADER_ROWS = 1
MOVEMENT_HEADER_ROWS = 2
MOVEMENT_COLUMNS = ("SR_No", "DateTime", "FD_NAME", "Pouch_Date", "Num_Pouches", "Qty_GM", "Remarks")

MovementRow = Tuple[Any, Any, Any, Any, Any, Any, Any]


@dataclass
class WorkbookRows:
    products: List[Tuple[Any, ...]] = field(default_factory=list)
    inward: List[MovementRow] = field(default_factory=list)
    outward: List[MovementRow] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Cell normalisation
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _cell_text(value: Any, *, date_only: bool = False) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d" if date_only else "%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _cell_serial(value: Any) -> Optional[int]:
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def _cell_number(value: Any, label: str) -> float:
    if _is_blank(value):
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"{label} is not a number")
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} is not a number: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"{label} is not a finite number: {value!r}")
    return number


def _cell_count(value: Any) -> int:
    number = _cell_number(value, "Num_Pouches")
    if not number.is_integer():
        raise ValueError(f"Num_Pouches is not a whole number: {value!r}")
    return int(number)


def movement_from_row(row: Sequence[Any]) -> schemas.MovementCreate:
    """Build a movement from a ``(serial, timestamp, product, batch_date, pouches, grams, remarks)`` row."""
    padded = list(row)[: len(MOVEMENT_COLUMNS)]
    padded += [None] * (len(MOVEMENT_COLUMNS) - len(padded))
    serial, occurred_at, product, batch_date, pouches, grams, remarks = padded
    return schemas.MovementCreate(
        sequence_no=_cell_serial(serial),
        occurred_at=_cell_text(occurred_at),
        product_name=_cell_text(product),
        pouch_batch_date=_cell_text(batch_date, date_only=True),
        pouch_count=_cell_count(pouches),
        weight_grams=_cell_number(grams, "Qty_GM"),
        remarks=_cell_text(remarks),
    )


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def import_products(
    catalog: services.Catalog,
    rows: Iterable[Sequence[Any]],
    *,
    sheet: str = PRODUCTS_SHEET,
    first_row: int = PRODUCTS_HEADER_ROWS + 1,
) -> schemas.ImportSummary:
    summary = schemas.ImportSummary(sheet=sheet)
    for offset, row in enumerate(rows):
        row_number = first_row + offset
        if isinstance(row, str):
            row = (row,)
        name = _cell_text(row[0]) if row else None
        if not name:
            summary.skipped += 1
            continue
        try:
            catalog.register(name)
        except DuplicateProduct:
            summary.skipped += 1
            summary.issues.append(schemas.ImportIssue(row_number=row_number, reason=f"{name!r} already registered"))
            continue
        summary.imported += 1
    logger.info("Imported %s: %s products, %s rows skipped", sheet, summary.imported, summary.skipped)
    return summary


def import_movements(
    ledger: services.Ledger,
    rows: Iterable[Sequence[Any]],
    direction: models.MovementDirectionEnum,
    *,
    sheet: str,
    first_row: int = MOVEMENT_HEADER_ROWS + 1,
) -> schemas.ImportSummary:
    summary = schemas.ImportSummary(sheet=sheet)
    for offset, row in enumerate(rows):
        row_number = first_row + offset
        try:
            record = movement_from_row(row)
            entry_id = ledger.append(record, direction)
        except (ValueError, InvalidInput, UnknownProduct) as exc:
            reason = exc.message if isinstance(exc, InventoryError) else str(exc)
            logger.warning("Skipped %s row %s: %s", sheet, row_number, reason)
            summary.skipped += 1
            summary.issues.append(schemas.ImportIssue(row_number=row_number, reason=reason))
            continue
        if entry_id is None:
            # Blank product name.
            summary.skipped += 1
            continue
        summary.imported += 1
        serial = row[0] if row else None
        if record.sequence_no is None and not _is_blank(serial):
            reason = f"SR_No {serial!r} is not a whole number; imported without it"
            logger.warning("%s row %s: %s", sheet, row_number, reason)
            summary.issues.append(schemas.ImportIssue(row_number=row_number, reason=reason))
    logger.info("Imported %s: %s movements, %s rows skipped", sheet, summary.imported, summary.skipped)
    return summary


def read_workbook(path: Union[str, Path]) -> WorkbookRows:
    """Load the three sheets as plain row tuples. Fails before any write if a sheet is missing."""
    import pandas as pd

    path = Path(path)
    if not path.exists():
        raise InvalidInput(f"Workbook not found: {path}")

    with pd.ExcelFile(path) as book:
        missing = [
            name for name in (PRODUCTS_SHEET, INWARD_SHEET, OUTWARD_SHEET) if name not in book.sheet_names
        ]
        if missing:
            raise InvalidInput(f"Sheet {missing[0]!r} not found.")

        def _rows(sheet: str, header_rows: int, width: int) -> List[Tuple[Any, ...]]:
            df = book.parse(sheet, header=None, skiprows=header_rows, dtype=object)
            df = df.reindex(columns=range(width))
            df = df.astype(object).where(pd.notna(df), None)
            return [tuple(row) for row in df.itertuples(index=False, name=None)]

        return WorkbookRows(
            products=_rows(PRODUCTS_SHEET, PRODUCTS_HEADER_ROWS, 1),
            inward=_rows(INWARD_SHEET, MOVEMENT_HEADER_ROWS, len(MOVEMENT_COLUMNS)),
            outward=_rows(OUTWARD_SHEET, MOVEMENT_HEADER_ROWS, len(MOVEMENT_COLUMNS)),
        )


def import_rows(storage: StorageContext, rows: WorkbookRows) -> List[schemas.ImportSummary]:
    """Seed the catalog, then the inward and outward ledgers. Movement rows may register products."""
    catalog = services.Catalog(storage)
    ledger = services.Ledger(storage, policy=services.UnknownProductPolicy.REGISTER)
    return [
        import_products(catalog, rows.products),
        import_movements(ledger, rows.inward, models.MovementDirectionEnum.INWARD, sheet=INWARD_SHEET),
        import_movements(ledger, rows.outward, models.MovementDirectionEnum.OUTWARD, sheet=OUTWARD_SHEET),
    ]


def import_workbook(storage: StorageContext, path: Union[str, Path]) -> List[schemas.ImportSummary]:
    return import_rows(storage, read_workbook(path))

from __future__ import annotations

import enum
import logging
import math
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockdb.database import StorageContext
from stockdb.exceptions import DuplicateProduct, InvalidInput, UnknownProduct
from . import models, schemas

logger = logging.getLogger(__name__)


class UnknownProductPolicy(str, enum.Enum):
    """What the ledger does with a movement naming an unregistered product."""

    REJECT = "reject"
    REGISTER = "register"


def policy_from_env() -> UnknownProductPolicy:
    raw = (os.getenv("STOCKDB_UNKNOWN_PRODUCT_POLICY") or UnknownProductPolicy.REJECT.value).strip().lower()
    try:
        return UnknownProductPolicy(raw)
    except ValueError:
        raise RuntimeError(f"STOCKDB_UNKNOWN_PRODUCT_POLICY must be 'reject' or 'register', got {raw!r}.")


def _normalize_name(name: Optional[str]) -> str:
    return (name or "").strip()


def _get_product(db: Session, name: str) -> Optional[models.Product]:
    return db.query(models.Product).filter(models.Product.name == name).first()


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Catalog:
    """Registry of known product names."""

    def __init__(self, storage: StorageContext) -> None:
        self.storage = storage

    def register(self, name: Optional[str]) -> models.Product:
        clean_name = _normalize_name(name)
        if not clean_name:
            raise InvalidInput("FD_NAME is required and must be non-empty.")

        with self.storage.writing() as db:
            if _get_product(db, clean_name):
                raise DuplicateProduct(clean_name)
            product = models.Product(name=clean_name)
            db.add(product)
            try:
                db.flush()
            except IntegrityError:
                # Another process won the unique index.
                raise DuplicateProduct(clean_name)
        logger.info("Registered product %r (id=%s)", clean_name, product.id)
        return product

    def ensure(self, name: Optional[str]) -> models.Product:
        """Return the product called ``name``, registering it if needed."""
        clean_name = _normalize_name(name)
        if not clean_name:
            raise InvalidInput("FD_NAME is required and must be non-empty.")
        with self.storage.writing() as db:
            return _ensure_product(db, clean_name)

    def list(self) -> List[str]:
        with self.storage.reading() as db:
            names = [name for (name,) in db.query(models.Product.name).all()]
        # Code point order, independent of the database collation.
        return sorted(names)

    def exists(self, name: Optional[str]) -> bool:
        clean_name = _normalize_name(name)
        if not clean_name:
            return False
        with self.storage.reading() as db:
            return _get_product(db, clean_name) is not None


def _ensure_product(db: Session, name: str) -> models.Product:
    product = _get_product(db, name)
    if product:
        return product
    product = models.Product(name=name)
    db.add(product)
    db.flush()
    logger.info("Registered product %r on first reference", name)
    return product


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


def _validate_quantities(record: schemas.MovementCreate) -> None:
    pouch_count = record.pouch_count
    if isinstance(pouch_count, bool) or not isinstance(pouch_count, int):
        raise InvalidInput("Num_Pouches must be a whole number.")
    if pouch_count < 0:
        raise InvalidInput("Num_Pouches must not be negative.")
    weight = record.weight_grams
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
        raise InvalidInput("Qty_GM must be a finite number.")
    if weight < 0:
        raise InvalidInput("Qty_GM must not be negative.")


def _sort_key_desc(column):
    # NULL timestamps compare as "", i.e. after every present one in DESC order.
    return func.coalesce(column, "").desc()


class Ledger:
    """Append-only store of inward and outward movement records."""

    def __init__(
        self,
        storage: StorageContext,
        *,
        policy: UnknownProductPolicy = UnknownProductPolicy.REJECT,
    ) -> None:
        self.storage = storage
        self.policy = policy

    def append(
        self,
        record: schemas.MovementCreate,
        direction: models.MovementDirectionEnum,
    ) -> Optional[int]:
        """
        Append one movement and return its ledger id.

        Blank product names are dropped without error and return ``None``.
        """
        direction = models.MovementDirectionEnum(direction)
        _validate_quantities(record)
        product_name = _normalize_name(record.product_name)
        if not product_name:
            logger.debug("Skipped %s movement with blank product name", direction.value)
            return None

        with self.storage.writing() as db:
            if self.policy == UnknownProductPolicy.REGISTER:
                _ensure_product(db, product_name)
            elif _get_product(db, product_name) is None:
                raise UnknownProduct(product_name)

            entry = models.MovementLedger(
                direction=direction,
                sequence_no=record.sequence_no,
                occurred_at=record.occurred_at,
                product_name=product_name,
                pouch_batch_date=record.pouch_batch_date,
                pouch_count=record.pouch_count,
                weight_grams=float(record.weight_grams),
                remarks=record.remarks,
            )
            db.add(entry)
            db.flush()
            entry_id = entry.id

        logger.info(
            "Recorded %s movement id=%s product=%r pouches=%s grams=%s",
            direction.value,
            entry_id,
            product_name,
            record.pouch_count,
            record.weight_grams,
        )
        return entry_id

    def list_direction(self, direction: models.MovementDirectionEnum) -> List[models.MovementLedger]:
        with self.storage.reading() as db:
            return (
                db.query(models.MovementLedger)
                .filter(models.MovementLedger.direction == models.MovementDirectionEnum(direction))
                .order_by(
                    _sort_key_desc(models.MovementLedger.occurred_at),
                    models.MovementLedger.id.desc(),
                )
                .all()
            )

    def list_inward(self) -> List[models.MovementLedger]:
        return self.list_direction(models.MovementDirectionEnum.INWARD)

    def list_outward(self) -> List[models.MovementLedger]:
        return self.list_direction(models.MovementDirectionEnum.OUTWARD)

    def list_all(self) -> List[models.MovementLedger]:
        with self.storage.reading() as db:
            return db.query(models.MovementLedger).order_by(models.MovementLedger.id.asc()).all()


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Balance:
    product_name: str
    inward_pouches: int
    inward_grams: float
    outward_pouches: int
    outward_grams: float

    @property
    def net_pouches(self) -> int:
        return self.inward_pouches - self.outward_pouches

    @property
    def net_grams(self) -> float:
        return self.inward_grams - self.outward_grams


def fold_balances(names: Iterable[str], records: Iterable[models.MovementLedger]) -> List[Balance]:
    """
    Sum movements per product and direction.

    Every name in ``names`` gets a balance, all zero when it has no
    movements. Records for names outside ``names`` are ignored. Grams are
    summed with ``math.fsum`` so the result does not depend on row order.
    """
    pouches: Dict[str, Dict[models.MovementDirectionEnum, int]] = {}
    grams: Dict[str, Dict[models.MovementDirectionEnum, List[float]]] = {}
    for name in names:
        pouches[name] = {direction: 0 for direction in models.MovementDirectionEnum}
        grams[name] = {direction: [] for direction in models.MovementDirectionEnum}

    for record in records:
        if record.product_name not in pouches:
            continue
        direction = models.MovementDirectionEnum(record.direction)
        pouches[record.product_name][direction] += int(record.pouch_count or 0)
        grams[record.product_name][direction].append(float(record.weight_grams or 0.0))

    inward = models.MovementDirectionEnum.INWARD
    outward = models.MovementDirectionEnum.OUTWARD
    return [
        Balance(
            product_name=name,
            inward_pouches=pouches[name][inward],
            inward_grams=math.fsum(grams[name][inward]),
            outward_pouches=pouches[name][outward],
            outward_grams=math.fsum(grams[name][outward]),
        )
        for name in sorted(pouches)
    ]


class BalanceAggregator:
    """Derives per-product balances from the catalog and the full ledger."""

    def __init__(self, storage: StorageContext) -> None:
        self.storage = storage

    def compute_all(self) -> List[Balance]:
        with self.storage.reading() as db:
            names = [name for (name,) in db.query(models.Product.name).all()]
            records = db.query(models.MovementLedger).order_by(models.MovementLedger.id.asc()).all()
        return fold_balances(names, records)

    def compute_one(self, name: Optional[str]) -> Balance:
        clean_name = _normalize_name(name)
        with self.storage.reading() as db:
            if not clean_name or _get_product(db, clean_name) is None:
                raise UnknownProduct(clean_name)
            records = (
                db.query(models.MovementLedger)
                .filter(models.MovementLedger.product_name == clean_name)
                .order_by(models.MovementLedger.id.asc())
                .all()
            )
        return fold_balances([clean_name], records)[0]

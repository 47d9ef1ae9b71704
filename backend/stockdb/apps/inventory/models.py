from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from stockdb.database import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class MovementDirectionEnum(str, enum.Enum):
    INWARD = "INWARD"
    OUTWARD = "OUTWARD"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class MovementLedger(Base):
    """
    Append-only log of inward (receipt) and outward (dispatch) movements.

    Rows are never updated or deleted. ``id`` is assigned on insert and is
    the ordering tie-break; AUTOINCREMENT keeps SQLite from reusing ids.
    """

    __tablename__ = "movement_ledger"
    __table_args__ = (
        CheckConstraint("pouch_count >= 0", name="ck_movement_ledger_pouch_count"),
        CheckConstraint("weight_grams >= 0", name="ck_movement_ledger_weight_grams"),
        Index("ix_movement_ledger_direction_date", "direction", "occurred_at"),
        Index("ix_movement_ledger_product", "product_name", "direction"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    direction = Column(
        SAEnum(MovementDirectionEnum, name="movement_direction_enum", native_enum=False),
        nullable=False,
        index=True,
    )

    sequence_no = Column(Integer, nullable=True)
    # Free-form client text (e.g. "2025-05-30 11:30:00"); sorted as text.
    occurred_at = Column(String(64), nullable=True)
    product_name = Column(
        String(255),
        ForeignKey("products.name", ondelete="RESTRICT"),
        nullable=False,
    )
    pouch_batch_date = Column(String(32), nullable=True)
    pouch_count = Column(Integer, nullable=False, default=0)
    weight_grams = Column(Float, nullable=False, default=0.0)
    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

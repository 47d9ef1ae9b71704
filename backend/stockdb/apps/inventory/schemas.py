from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from . import models

# Field aliases are the keys of the legacy HTTP API and spreadsheet
# headers (FD_NAME, Num_Pouches, ...); Python code uses the field names.


class ProductCreate(BaseModel):
    name: Optional[str] = Field(default=None, alias="FD_NAME")

    class Config:
        populate_by_name = True


class ProductRead(BaseModel):
    id: int
    name: str = Field(alias="FD_NAME")

    class Config:
        from_attributes = True
        populate_by_name = True


class MovementCreate(BaseModel):
    sequence_no: Optional[int] = Field(default=None, alias="SR_No")
    occurred_at: Optional[str] = Field(default=None, alias="DateTime")
    product_name: Optional[str] = Field(default=None, alias="FD_NAME")
    pouch_batch_date: Optional[str] = Field(default=None, alias="Pouch_Date")
    pouch_count: int = Field(default=0, alias="Num_Pouches", strict=True)
    weight_grams: float = Field(default=0.0, alias="Qty_GM", strict=True)
    remarks: Optional[str] = Field(default=None, alias="Remarks")

    class Config:
        populate_by_name = True

    @field_validator("occurred_at", "pouch_batch_date", "remarks", mode="before")
    @classmethod
    def stringify_numbers(cls, value: Any) -> Any:
        # Epoch timestamps and numeric remarks are stored as their text.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class MovementRead(MovementCreate):
    id: int
    direction: models.MovementDirectionEnum
    product_name: str = Field(alias="FD_NAME")

    class Config:
        from_attributes = True
        populate_by_name = True


class MovementCreated(BaseModel):
    success: bool = True
    id: Optional[int] = None
    skipped: bool = False


class BalanceRead(BaseModel):
    product_name: str = Field(alias="FD_NAME")
    inward_pouches: int = Field(alias="Inward_Pouches")
    inward_grams: float = Field(alias="Inward_GM")
    outward_pouches: int = Field(alias="Used_Pouches")
    outward_grams: float = Field(alias="Used_GM")
    net_pouches: int = Field(alias="Bal_Pouches")
    net_grams: float = Field(alias="Bal_GM")

    class Config:
        from_attributes = True
        populate_by_name = True


class ImportIssue(BaseModel):
    row_number: int
    reason: str


class ImportSummary(BaseModel):
    sheet: str
    imported: int = 0
    skipped: int = 0
    issues: List[ImportIssue] = Field(default_factory=list)

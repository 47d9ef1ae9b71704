from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from stockdb.database import StorageContext, get_storage
from stockdb.exceptions import (
    DuplicateProduct,
    InvalidInput,
    InventoryError,
    StorageUnavailable,
    UnknownProduct,
)

from . import models, schemas, services

router = APIRouter(prefix="", tags=["inventory"])


def _http_error(exc: InventoryError, *, unknown_status: int = status.HTTP_404_NOT_FOUND) -> HTTPException:
    if isinstance(exc, InvalidInput):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, DuplicateProduct):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, UnknownProduct):
        status_code = unknown_status
    elif isinstance(exc, StorageUnavailable):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": exc.message or "Inventory error."},
    )


def get_ledger(request: Request, storage: StorageContext = Depends(get_storage)) -> services.Ledger:
    policy = getattr(request.app.state, "unknown_product_policy", services.UnknownProductPolicy.REJECT)
    return services.Ledger(storage, policy=policy)


# ---------------------------------------------------------------------------
# PRODUCTS
# ---------------------------------------------------------------------------


@router.get("/products", response_model=List[str])
def list_products(storage: StorageContext = Depends(get_storage)):
    try:
        return services.Catalog(storage).list()
    except InventoryError as exc:
        raise _http_error(exc)


@router.post(
    "/products",
    response_model=schemas.ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def register_product(
    payload: schemas.ProductCreate,
    storage: StorageContext = Depends(get_storage),
):
    try:
        return services.Catalog(storage).register(payload.name)
    except InventoryError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# MOVEMENTS
# ---------------------------------------------------------------------------


def _record_movement(
    ledger: services.Ledger,
    payload: schemas.MovementCreate,
    direction: models.MovementDirectionEnum,
    response: Response,
) -> schemas.MovementCreated:
    try:
        entry_id = ledger.append(payload, direction)
    except InventoryError as exc:
        raise _http_error(exc, unknown_status=status.HTTP_422_UNPROCESSABLE_ENTITY)
    if entry_id is None:
        response.status_code = status.HTTP_200_OK
        return schemas.MovementCreated(success=True, id=None, skipped=True)
    return schemas.MovementCreated(success=True, id=entry_id)


@router.get("/inward", response_model=List[schemas.MovementRead])
def list_inward(ledger: services.Ledger = Depends(get_ledger)):
    try:
        return ledger.list_inward()
    except InventoryError as exc:
        raise _http_error(exc)


@router.post(
    "/inward",
    response_model=schemas.MovementCreated,
    status_code=status.HTTP_201_CREATED,
)
def record_inward(
    payload: schemas.MovementCreate,
    response: Response,
    ledger: services.Ledger = Depends(get_ledger),
):
    return _record_movement(ledger, payload, models.MovementDirectionEnum.INWARD, response)


@router.get("/dispatch", response_model=List[schemas.MovementRead])
def list_dispatch(ledger: services.Ledger = Depends(get_ledger)):
    try:
        return ledger.list_outward()
    except InventoryError as exc:
        raise _http_error(exc)


@router.post(
    "/dispatch",
    response_model=schemas.MovementCreated,
    status_code=status.HTTP_201_CREATED,
)
def record_dispatch(
    payload: schemas.MovementCreate,
    response: Response,
    ledger: services.Ledger = Depends(get_ledger),
):
    return _record_movement(ledger, payload, models.MovementDirectionEnum.OUTWARD, response)


# ---------------------------------------------------------------------------
# BALANCES
# ---------------------------------------------------------------------------


@router.get("/balance", response_model=List[schemas.BalanceRead])
def list_balances(storage: StorageContext = Depends(get_storage)):
    try:
        balances = services.BalanceAggregator(storage).compute_all()
    except InventoryError as exc:
        raise _http_error(exc)
    return [schemas.BalanceRead.model_validate(balance) for balance in balances]


@router.get("/balance/{product_name}", response_model=schemas.BalanceRead)
def get_balance(product_name: str, storage: StorageContext = Depends(get_storage)):
    try:
        balance = services.BalanceAggregator(storage).compute_one(product_name)
    except InventoryError as exc:
        raise _http_error(exc)
    return schemas.BalanceRead.model_validate(balance)

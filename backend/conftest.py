from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.pop("DATABASE_READ_URL", None)
os.environ.pop("STOCKDB_UNKNOWN_PRODUCT_POLICY", None)

from stockdb.database import StorageContext  # noqa: E402
from stockdb.apps.inventory import services as inventory_services  # noqa: E402


@pytest.fixture()
def storage():
    ctx = StorageContext("sqlite+pysqlite:///:memory:")
    ctx.create_schema()
    try:
        yield ctx
    finally:
        ctx.dispose()


@pytest.fixture()
def catalog(storage):
    return inventory_services.Catalog(storage)


@pytest.fixture()
def ledger(storage):
    return inventory_services.Ledger(storage)


@pytest.fixture()
def aggregator(storage):
    return inventory_services.BalanceAggregator(storage)

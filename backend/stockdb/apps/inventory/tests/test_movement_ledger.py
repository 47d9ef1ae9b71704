from __future__ import annotations

import pytest

from stockdb.apps.inventory import models, services
from stockdb.apps.inventory.schemas import MovementCreate
from stockdb.exceptions import InvalidInput, StorageUnavailable, UnknownProduct

INWARD = models.MovementDirectionEnum.INWARD
OUTWARD = models.MovementDirectionEnum.OUTWARD


def _movement(name="Amla", *, pouches=1, grams=100.0, at=None, **extra) -> MovementCreate:
    return MovementCreate(
        product_name=name,
        pouch_count=pouches,
        weight_grams=grams,
        occurred_at=at,
        **extra,
    )


def test_append_assigns_increasing_ids_across_directions(catalog, ledger):
    catalog.register("Amla")
    first = ledger.append(_movement(), INWARD)
    second = ledger.append(_movement(), OUTWARD)
    third = ledger.append(_movement(), INWARD)
    assert first < second < third


def test_append_keeps_all_fields(catalog, ledger):
    catalog.register("Amla")
    entry_id = ledger.append(
        _movement(
            " Amla ",
            pouches=3,
            grams=300,
            at="2025-05-30 11:30:00",
            sequence_no=6,
            pouch_batch_date="2025-03-04",
            remarks="nil",
        ),
        INWARD,
    )

    (entry,) = ledger.list_inward()
    assert entry.id == entry_id
    assert entry.direction == INWARD
    assert entry.sequence_no == 6
    assert entry.occurred_at == "2025-05-30 11:30:00"
    assert entry.product_name == "Amla"
    assert entry.pouch_batch_date == "2025-03-04"
    assert entry.pouch_count == 3
    assert entry.weight_grams == 300
    assert entry.remarks == "nil"


@pytest.mark.parametrize(
    "pouches, grams",
    [(-1, 100.0), (1, -0.5), (1, float("inf")), (1, float("nan"))],
)
def test_append_rejects_bad_quantities(catalog, ledger, pouches, grams):
    catalog.register("Amla")
    with pytest.raises(InvalidInput):
        ledger.append(_movement(pouches=pouches, grams=grams), INWARD)
    assert ledger.list_all() == []


def test_append_drops_blank_product_name(ledger):
    assert ledger.append(_movement("   "), INWARD) is None
    assert ledger.append(_movement(None), OUTWARD) is None
    assert ledger.list_all() == []


def test_append_rejects_unknown_product_by_default(catalog, ledger):
    with pytest.raises(UnknownProduct) as excinfo:
        ledger.append(_movement("Ghost"), INWARD)
    assert excinfo.value.code == "unknown_product"
    assert ledger.list_all() == []
    assert not catalog.exists("Ghost")


def test_register_policy_creates_product_on_first_reference(storage, catalog):
    ledger = services.Ledger(storage, policy=services.UnknownProductPolicy.REGISTER)
    entry_id = ledger.append(_movement("Giloy"), INWARD)
    assert entry_id is not None
    assert catalog.list() == ["Giloy"]


def test_repeated_submission_creates_repeated_records(catalog, ledger):
    catalog.register("Amla")
    payload = _movement(pouches=2, grams=200, at="2025-06-05 14:30:00")
    first = ledger.append(payload, INWARD)
    second = ledger.append(payload, INWARD)
    assert first != second
    assert len(ledger.list_inward()) == 2


def test_listing_orders_by_timestamp_then_id_descending(catalog, ledger):
    catalog.register("Amla")
    early = ledger.append(_movement(at="2025-05-01 09:00:00"), INWARD)
    tie_a = ledger.append(_movement(at="2025-05-30 11:30:00"), INWARD)
    tie_b = ledger.append(_movement(at="2025-05-30 11:30:00"), INWARD)
    missing = ledger.append(_movement(at=None), INWARD)
    late = ledger.append(_movement(at="2025-06-05 14:30:00"), INWARD)
    ledger.append(_movement(at="2099-01-01 00:00:00"), OUTWARD)

    ids = [entry.id for entry in ledger.list_inward()]
    assert ids == [late, tie_b, tie_a, early, missing]


def test_list_outward_only_returns_dispatches(catalog, ledger):
    catalog.register("Amla")
    ledger.append(_movement(), INWARD)
    dispatched = ledger.append(_movement(), OUTWARD)
    assert [entry.id for entry in ledger.list_outward()] == [dispatched]


def test_list_all_is_in_append_order(catalog, ledger):
    catalog.register("Amla")
    ids = [ledger.append(_movement(at=at), INWARD) for at in ["b", "a", "c"]]
    assert [entry.id for entry in ledger.list_all()] == ids


def test_storage_failure_surfaces_as_storage_unavailable(storage, catalog, ledger):
    catalog.register("Amla")
    models.MovementLedger.__table__.drop(storage.write_engine)

    with pytest.raises(StorageUnavailable) as excinfo:
        ledger.append(_movement(), INWARD)
    assert excinfo.value.code == "storage_unavailable"
    assert "movement_ledger" not in excinfo.value.message

    with pytest.raises(StorageUnavailable):
        ledger.list_inward()


def test_policy_from_env(monkeypatch):
    monkeypatch.delenv("STOCKDB_UNKNOWN_PRODUCT_POLICY", raising=False)
    assert services.policy_from_env() == services.UnknownProductPolicy.REJECT

    monkeypatch.setenv("STOCKDB_UNKNOWN_PRODUCT_POLICY", " Register ")
    assert services.policy_from_env() == services.UnknownProductPolicy.REGISTER

    monkeypatch.setenv("STOCKDB_UNKNOWN_PRODUCT_POLICY", "ignore")
    with pytest.raises(RuntimeError):
        services.policy_from_env()

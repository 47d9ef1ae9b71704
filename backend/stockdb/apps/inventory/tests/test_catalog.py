from __future__ import annotations

import pytest

from stockdb.exceptions import DuplicateProduct, InvalidInput


def test_register_trims_and_assigns_id(catalog):
    product = catalog.register("  Amla  ")
    assert product.id is not None
    assert product.name == "Amla"
    assert catalog.exists("Amla")


@pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
def test_register_rejects_blank_names(catalog, name):
    with pytest.raises(InvalidInput):
        catalog.register(name)
    assert catalog.list() == []


def test_register_twice_is_duplicate(catalog):
    catalog.register("Bael")
    with pytest.raises(DuplicateProduct) as excinfo:
        catalog.register(" Bael ")
    assert excinfo.value.code == "duplicate_product"
    assert catalog.list() == ["Bael"]


def test_names_are_case_sensitive(catalog):
    catalog.register("amla")
    catalog.register("Amla")
    assert catalog.exists("amla")
    assert catalog.exists("Amla")
    assert not catalog.exists("AMLA")


def test_list_is_sorted_by_code_point_regardless_of_registration_order(catalog):
    for name in ["banana", "Éclair", "apple", "Bael", "Apple – Green", "Apple"]:
        catalog.register(name)

    expected = ["Apple", "Apple – Green", "Bael", "apple", "banana", "Éclair"]
    assert catalog.list() == expected
    # Restartable: a second read yields the same sequence.
    assert catalog.list() == expected


def test_exists_trims_input(catalog):
    catalog.register("Jamun")
    assert catalog.exists("  Jamun ")
    assert not catalog.exists("")
    assert not catalog.exists(None)


def test_ensure_registers_once(catalog):
    first = catalog.ensure("Karela")
    second = catalog.ensure(" Karela ")
    assert first.id == second.id
    assert catalog.list() == ["Karela"]

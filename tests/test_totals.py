import pytest

from facturier.core.totals import Totals, compute_totals
from facturier.models.invoice import InvoiceItem


def test_empty_items_give_zero_totals():
    assert compute_totals([], 18, 0) == Totals(0, 0, 0)


def test_vat_19_25_on_single_line():
    totals = compute_totals([{"quantity": 2, "unit_price": 5000}], 19.25, 0)
    assert totals.total_ht == pytest.approx(10000)
    assert totals.total_vat == pytest.approx(1925)
    assert totals.total_ttc == pytest.approx(11925)


def test_labor_cost_is_part_of_taxable_base():
    items = [InvoiceItem("Widget", 3, 1000)]
    assert compute_totals(items, 18) == Totals(3000, 540, 3540)
    totals = compute_totals(items, 18, labor_cost=500)
    assert totals.total_ht == pytest.approx(3500)
    assert totals.total_vat == pytest.approx(630)
    assert totals.total_ttc == pytest.approx(4130)


@pytest.mark.parametrize("vat", [0, 5.5, 18, 19.25])
def test_invariants(vat):
    items = [InvoiceItem("A", 1.5, 333.33), {"quantity": 4, "unit_price": 12.5}]
    totals = compute_totals(items, vat, labor_cost=7)
    assert totals.total_ttc == pytest.approx(totals.total_ht + totals.total_vat)
    assert totals.total_vat == pytest.approx(totals.total_ht * vat / 100)
    assert totals.total_ht >= 0


def test_negative_values_are_not_rejected():
    totals = compute_totals([{"quantity": -1, "unit_price": 100}], 10)
    assert totals.total_ht == pytest.approx(-100)

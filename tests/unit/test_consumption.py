"""Tests for per-item consumption aggregation."""

from decimal import Decimal

from src.mm_ledger.domain.consumption import aggregate_consumption, item_key
from src.mm_ledger.domain.models import BazaarItem


def _item(name: str, qty: str, unit_price: int, unit: str = "kg") -> BazaarItem:
    quantity = Decimal(qty)
    return BazaarItem(
        item_name=name,
        quantity=quantity,
        unit=unit,
        unit_price_cents=unit_price,
        total_price_cents=int(quantity * unit_price),
    )


def test_item_key_normalises_case_and_whitespace() -> None:
    assert item_key("  Rice ") == "rice"


def test_groups_by_normalised_name() -> None:
    rates = aggregate_consumption([_item("Rice", "5", 6000), _item(" rice", "5", 7000)])
    assert len(rates) == 1
    rice = rates[0]
    assert rice.item_name == "rice"
    assert rice.total_quantity == Decimal("10")
    assert rice.total_cost_cents == 65000
    assert rice.average_unit_price_cents == 6500
    assert rice.purchase_count == 2


def test_sorted_by_total_cost_then_name() -> None:
    rates = aggregate_consumption(
        [
            _item("Oil", "1", 20000, unit="l"),
            _item("Rice", "5", 6000),
            _item("Dal", "2", 10000),
        ]
    )
    assert [r.item_name for r in rates] == ["rice", "dal", "oil"]


def test_average_rounds_half_up() -> None:
    rates = aggregate_consumption(
        [
            BazaarItem("egg", Decimal("3"), "pcs", 0, 100),
            BazaarItem("egg", Decimal("1"), "pcs", 0, 2),
        ]
    )
    # 102 / 4 = 25.5 -> 26
    assert rates[0].average_unit_price_cents == 26


def test_unit_taken_from_first_line() -> None:
    rates = aggregate_consumption([_item("Milk", "1", 9000, unit="l"), _item("milk", "2", 9000, unit="pack")])
    assert rates[0].unit == "l"


def test_empty_input() -> None:
    assert aggregate_consumption([]) == []

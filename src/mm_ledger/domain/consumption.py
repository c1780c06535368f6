"""Per-item consumption figures derived from bazaar lines."""

from decimal import ROUND_HALF_UP, Decimal

from src.mm_ledger.domain.models import BazaarItem, ConsumptionRate


def item_key(name: str) -> str:
    """'  Rice ' and 'rice' are the same item."""
    return name.strip().lower()


def aggregate_consumption(items: list[BazaarItem]) -> list[ConsumptionRate]:
    """Group lines by normalised name. The unit is taken from the first line seen."""
    groups: dict[str, ConsumptionRate] = {}
    for item in items:
        key = item_key(item.item_name)
        rate = groups.get(key)
        if rate is None:
            rate = ConsumptionRate(
                item_name=key,
                unit=item.unit,
                total_quantity=Decimal(0),
                total_cost_cents=0,
                average_unit_price_cents=0,
                purchase_count=0,
            )
            groups[key] = rate
        rate.total_quantity += item.quantity
        rate.total_cost_cents += item.total_price_cents
        rate.purchase_count += 1

    for rate in groups.values():
        if rate.total_quantity > 0:
            avg = (Decimal(rate.total_cost_cents) / rate.total_quantity).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
            rate.average_unit_price_cents = int(avg)

    return sorted(groups.values(), key=lambda r: (-r.total_cost_cents, r.item_name))

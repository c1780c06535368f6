"""Integer arithmetic utilities for minor-unit money.

All amounts and balances are int minor units (1/100 of the currency unit,
named ``*_cents`` throughout). Rates and shares are rounded half-up to whole
minor units for display; totals that are shared out between members are
split with allocate_cents so the parts add back up to the whole. Quantities
may be fractional Decimals but never money.
"""

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOL = "৳"


def validate_amount(amount_cents: int) -> None:
    """Validate that a money amount is a strictly positive integer."""
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
        raise ValueError(f"Amount must be a positive whole number of cents, got {amount_cents!r}")


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 75000 -> '৳750.00', -25000 -> '-৳250.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-{CURRENCY_SYMBOL}{abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"{CURRENCY_SYMBOL}{cents // 100:,}.{cents % 100:02d}"


def div_round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero.

    A zero denominator yields 0: an empty divisor means nothing to share.
    """
    if denominator == 0:
        return 0
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    if numerator >= 0:
        return (2 * numerator + denominator) // (2 * denominator)
    return -((2 * -numerator + denominator) // (2 * denominator))


def line_total_cents(quantity: Decimal, unit_price_cents: int) -> int:
    """Price one bazaar line: quantity x unit price, rounded half-up to a cent."""
    total = (quantity * unit_price_cents).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(total)


def allocate_cents(total_cents: int, weights: dict[str, int]) -> dict[str, int]:
    """Split ``total_cents`` across keys in proportion to their weights.

    Each key first gets the floor of its exact share. The cents left over go
    one each to the keys with the largest fractional remainders, earlier keys
    first on a tie, so the parts always add up to ``total_cents``. Keys with
    weight 0 get 0; an all-zero weight map allocates nothing.

        >>> allocate_cents(100_000, {"a": 1, "b": 1, "c": 1})
        {'a': 33334, 'b': 33333, 'c': 33333}
    """
    total_weight = sum(weights.values())
    if total_weight == 0:
        return {key: 0 for key in weights}
    shares = {key: total_cents * w // total_weight for key, w in weights.items()}
    leftover = total_cents - sum(shares.values())
    by_remainder = sorted(
        weights,
        key=lambda key: -((total_cents * weights[key]) % total_weight),
    )
    for key in by_remainder[:leftover]:
        shares[key] += 1
    return shares

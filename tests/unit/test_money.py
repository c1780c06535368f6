"""Tests for mm_common.money: integer minor-unit arithmetic."""

from decimal import Decimal

import pytest

from src.mm_common.money import (
    allocate_cents,
    cents_to_display,
    div_round_half_up,
    line_total_cents,
    validate_amount,
)


class TestValidateAmount:
    def test_positive_ok(self) -> None:
        validate_amount(1)
        validate_amount(10_000_000)

    @pytest.mark.parametrize("bad", [0, -1, 1.5, True, "100"])
    def test_rejects_non_positive_or_non_int(self, bad: object) -> None:
        with pytest.raises(ValueError, match="positive whole number"):
            validate_amount(bad)  # type: ignore[arg-type]


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(75000) == "৳750.00"

    def test_negative(self) -> None:
        assert cents_to_display(-25000) == "-৳250.00"

    def test_thousands_separator(self) -> None:
        assert cents_to_display(123456789) == "৳1,234,567.89"

    def test_zero(self) -> None:
        assert cents_to_display(0) == "৳0.00"


class TestDivRoundHalfUp:
    def test_exact(self) -> None:
        assert div_round_half_up(1_000_000, 40) == 25000

    def test_half_rounds_up(self) -> None:
        assert div_round_half_up(5, 2) == 3
        assert div_round_half_up(1, 2) == 1

    def test_below_half_rounds_down(self) -> None:
        assert div_round_half_up(10, 3) == 3

    def test_negative_half_rounds_away_from_zero(self) -> None:
        assert div_round_half_up(-5, 2) == -3

    def test_negative_denominator(self) -> None:
        assert div_round_half_up(5, -2) == -3

    def test_zero_denominator_is_zero(self) -> None:
        assert div_round_half_up(123, 0) == 0


class TestLineTotal:
    def test_whole_quantity(self) -> None:
        assert line_total_cents(Decimal("2"), 6000) == 12000

    def test_fractional_quantity_rounds_half_up(self) -> None:
        # 1.5 kg at 33 cents = 49.5 -> 50
        assert line_total_cents(Decimal("1.5"), 33) == 50

    def test_fraction_below_half(self) -> None:
        assert line_total_cents(Decimal("0.333"), 100) == 33


class TestAllocateCents:
    def test_even_weights_leftover_to_earliest(self) -> None:
        assert allocate_cents(100_000, {"a": 1, "b": 1, "c": 1}) == {
            "a": 33_334, "b": 33_333, "c": 33_333,
        }

    def test_largest_remainder_wins(self) -> None:
        # exact: 14.29, 57.14, 28.57
        assert allocate_cents(100, {"a": 1, "b": 4, "c": 2}) == {"a": 14, "b": 57, "c": 29}

    def test_zero_weight_gets_nothing(self) -> None:
        assert allocate_cents(10, {"a": 0, "b": 3}) == {"a": 0, "b": 10}

    def test_all_zero_weights(self) -> None:
        assert allocate_cents(500, {"a": 0, "b": 0}) == {"a": 0, "b": 0}

    @pytest.mark.parametrize("total", [0, 1, 99, 1_000_001, 7_777_777])
    def test_parts_sum_to_total(self, total: int) -> None:
        parts = allocate_cents(total, {"a": 7, "b": 5, "c": 1, "d": 13})
        assert sum(parts.values()) == total

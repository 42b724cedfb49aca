"""Unit tests for cents formatting and per-mille pricing."""

import pytest

from src.smm_common.cents import PER_MILLE, cents_to_display, per_mille_total


class TestCentsToDisplay:
    def test_default_symbol(self) -> None:
        assert cents_to_display(650000) == "₼6,500.00"

    def test_custom_symbol(self) -> None:
        assert cents_to_display(1999, symbol="$") == "$19.99"

    def test_zero(self) -> None:
        assert cents_to_display(0, symbol="$") == "$0.00"

    def test_negative(self) -> None:
        assert cents_to_display(-1200, symbol="$") == "-$12.00"

    def test_single_cent(self) -> None:
        assert cents_to_display(1, symbol="$") == "$0.01"


class TestPerMilleTotal:
    def test_exact_thousand(self) -> None:
        assert per_mille_total(500, 1000) == 500

    def test_scales_linearly(self) -> None:
        # 5.00 per 1000, 4000 units -> 20.00
        assert per_mille_total(500, 4000) == 2000

    def test_rounds_half_up(self) -> None:
        # 150 * 3 / 1000 = 0.45 -> 0 ; 500 * 1 / 1000 = 0.5 -> 1
        assert per_mille_total(150, 3) == 0
        assert per_mille_total(500, 1) == 1

    def test_rounds_fractional_cents(self) -> None:
        # 1234 * 7 = 8638 -> 8.638 -> 9
        assert per_mille_total(1234, 7) == 9
        assert per_mille_total(1001, 1) == 1

    def test_tiny_order_rounds_to_zero(self) -> None:
        assert per_mille_total(100, 4) == 0

    def test_zero_quantity(self) -> None:
        assert per_mille_total(500, 0) == 0

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            per_mille_total(-1, 10)
        with pytest.raises(ValueError):
            per_mille_total(10, -1)

    def test_per_mille_constant(self) -> None:
        assert PER_MILLE == 1000

from decimal import Decimal

import pytest

from stoneledger.shared.utils.money import (
    format_compact_currency,
    format_full_currency,
    format_indian_number,
    format_quantity,
    round_money,
    to_decimal,
)


class TestRoundMoney:
    """Tests for round_money function."""

    def test_round_half_up(self):
        assert round_money(10.125) == Decimal("10.13")
        assert round_money(10.124) == Decimal("10.12")
        assert round_money(Decimal("99.999")) == Decimal("100.00")

    def test_from_string_and_none(self):
        assert round_money("0.001") == Decimal("0.00")
        assert round_money(None) == Decimal("0.00")

    def test_negative_numbers(self):
        assert round_money(-10.125) == Decimal("-10.12")
        assert round_money(-10.126) == Decimal("-10.13")

    def test_precision(self):
        assert str(round_money(10)) == "10.00"
        assert str(round_money(10.1)) == "10.10"


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")


class TestIndianGrouping:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, "0"),
            (999, "999"),
            (1000, "1,000"),
            (100000, "1,00,000"),
            (1234567, "12,34,567"),
            (Decimal("1234567.50"), "12,34,567.5"),
            (Decimal("9999999.99"), "99,99,999.99"),
            (Decimal("-150000.25"), "-1,50,000.25"),
        ],
    )
    def test_grouping(self, value, expected):
        assert format_indian_number(value) == expected


class TestCompactBands:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("999"), "999"),
            (Decimal("1000"), "1 K"),
            (Decimal("1500"), "2 K"),
            (Decimal("99999"), "100 K"),
            (Decimal("100000"), "1.0 L"),
            (Decimal("250000"), "2.5 L"),
            (Decimal("9999999"), "100.0 L"),
            (Decimal("10000000"), "1.00 Cr"),
            (Decimal("12345678"), "1.23 Cr"),
            (Decimal("100000000"), "10.0 Cr"),
            (Decimal("250000000"), "25.0 Cr"),
        ],
    )
    def test_thresholds(self, value, expected):
        assert format_compact_currency(value) == expected

    def test_negative_keeps_sign(self):
        assert format_compact_currency(Decimal("-250000")) == "-2.5 L"
        assert format_compact_currency(Decimal("-500")) == "-500"


class TestFullBands:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("220.00"), "220"),
            (Decimal("100.50"), "100.5"),
            (Decimal("9999999"), "99,99,999"),
            (Decimal("10000000"), "1.00 Cr"),
            (Decimal("150000000"), "15.0 Cr"),
            (Decimal("1500000000"), "150.00 Cr"),
            (Decimal("15000000000"), "1500.0 Cr"),
        ],
    )
    def test_thresholds(self, value, expected):
        assert format_full_currency(value) == expected


class TestQuantity:
    @pytest.mark.parametrize(
        "value, expected",
        [(Decimal("3"), "3"), (Decimal("3.50"), "3.5"), (Decimal("0"), "0"), (Decimal("2.25"), "2.25")],
    )
    def test_format(self, value, expected):
        assert format_quantity(value) == expected

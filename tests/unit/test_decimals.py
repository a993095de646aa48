"""Tests for pf_common.decimals — broker amount parsing and rounding."""

from decimal import Decimal

import pytest

from src.pf_common.decimals import (
    parse_decimal,
    round2,
    safe_percent,
    to_amount_scale,
    to_quantity_scale,
)


class TestParseDecimal:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1,234.50", Decimal("1234.50")),
            (" 10 ", Decimal("10")),
            ("-3.5", Decimal("-3.5")),
            ("0", Decimal("0")),
        ],
    )
    def test_numbers(self, raw: str, expected: Decimal) -> None:
        assert parse_decimal(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_none(self, raw: str | None) -> None:
        assert parse_decimal(raw) is None

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", "1.2.3"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_decimal(raw)


class TestRound2:
    def test_half_up(self) -> None:
        assert round2(Decimal("1.005")) == Decimal("1.01")
        assert round2(Decimal("-1.005")) == Decimal("-1.01")

    def test_pads(self) -> None:
        assert str(round2(Decimal(7))) == "7.00"


class TestSafePercent:
    def test_regular(self) -> None:
        assert safe_percent(Decimal(25), Decimal(200)) == Decimal("12.5")

    def test_zero_denominator(self) -> None:
        assert safe_percent(Decimal(25), Decimal(0)) == Decimal(0)


class TestColumnScale:
    def test_quantity_six_places(self) -> None:
        assert str(to_quantity_scale(Decimal("10.1234565"))) == "10.123457"

    def test_amount_four_places_away_from_zero(self) -> None:
        assert to_amount_scale(Decimal("1523.45678")) == Decimal("1523.4568")
        assert to_amount_scale(Decimal("-100.12345")) == Decimal("-100.1235")

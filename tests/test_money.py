"""Tests for money helpers"""
from decimal import Decimal

import pytest

from storefront.money import format_money, parse_money, round_money, to_decimal, to_float


def test_to_decimal_from_float():
    assert to_decimal(0.1) == Decimal("0.1")


def test_to_decimal_invalid():
    assert to_decimal("abc") == Decimal("0")
    assert to_decimal(None) == Decimal("0")


def test_round_money_half_up():
    assert round_money("2.345") == Decimal("2.35")
    assert round_money("2.5", to_int=True) == Decimal("3")


def test_to_float():
    assert to_float(Decimal("1300.00")) == 1300.0


def test_format_money():
    assert format_money(Decimal("1300"), "USD") == "$1,300.00"
    assert format_money(Decimal("1299.6"), "INR") == "1,300 ₹"
    assert format_money(5, "CHF") == "5.00 CHF"


def test_format_money_defaults_to_rupees():
    assert format_money(Decimal("1300")) == "1,300 ₹"


def test_parse_money():
    assert parse_money("0.333") == Decimal("0.333")
    assert parse_money(5) == Decimal("5")
    assert parse_money(Decimal("1.005")) == Decimal("1.005")


@pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", "-Infinity", None, True, [1]])
def test_parse_money_rejects_non_amounts(value):
    with pytest.raises(ValueError):
        parse_money(value)

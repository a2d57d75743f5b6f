"""Tests for amount parsing and rounding."""

from decimal import Decimal

import pytest

from ctengine.domain.errors import InvalidInputError
from ctengine.utils.amount_parser import parse_amount, round_money, to_decimal, to_non_negative, to_pence


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("£1,234.56", Decimal("1234.56")),
        ("$99", Decimal("99")),
        ("(250.00)", Decimal("-250.00")),
        ("  42.10  ", Decimal("42.10")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects(text):
    with pytest.raises(InvalidInputError):
        parse_amount(text)


def test_to_decimal_float_goes_through_str():
    """Test 0.1 becomes exactly Decimal('0.1')."""
    assert to_decimal(0.1, "amount") == Decimal("0.1")


def test_to_decimal_none_is_zero():
    assert to_decimal(None, "amount") == Decimal("0")


@pytest.mark.parametrize("value", [True, False, [1], object()])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(InvalidInputError, match="amount"):
        to_decimal(value, "amount")


def test_to_non_negative():
    assert to_non_negative("£10", "fee") == Decimal("10")
    with pytest.raises(InvalidInputError, match="fee cannot be negative"):
        to_non_negative(Decimal("-0.01"), "fee")


def test_to_pence():
    assert to_pence("10.50", "fee") == Decimal("10.50")
    assert to_pence(Decimal("7.100"), "fee") == Decimal("7.1")
    with pytest.raises(InvalidInputError, match="fee has more than two decimal places"):
        to_pence(Decimal("10.555"), "fee")
    with pytest.raises(InvalidInputError, match="fee cannot be negative"):
        to_pence("-1", "fee")


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("2.345"), Decimal("2.35")),
        (Decimal("2.344"), Decimal("2.34")),
        (Decimal("-2.345"), Decimal("-2.35")),
        (Decimal("0.005"), Decimal("0.01")),
    ],
)
def test_round_money_half_up(amount, expected):
    assert round_money(amount) == expected


def test_domain_package_reexports_errors():
    """Test the error types are importable from the domain package."""
    import ctengine.domain

    assert ctengine.domain.InvalidInputError is InvalidInputError
    assert "InvalidInputError" in ctengine.domain.__all__

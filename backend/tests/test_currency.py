"""Currency and number input formatting tests."""

from decimal import Decimal

import pytest

from ventas.currency import format_currency, strip_input_separators
from ventas.validation import ValidationError, coerce_amount


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0, "$ 0"),
        (500, "$ 500"),
        (1000, "$ 1.000"),
        (100000, "$ 100.000"),
        (1234567, "$ 1.234.567"),
        (-5000, "-$ 5.000"),
        (None, "$ 0"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_rounds_half_up_without_decimals():
    assert format_currency(Decimal("1234.5")) == "$ 1.235"


def test_format_currency_with_decimals():
    assert format_currency(Decimal("1234.5"), decimals=2) == "$ 1.234,50"


def test_format_currency_rejects_garbage():
    with pytest.raises(ValueError):
        format_currency("abc")


@pytest.mark.parametrize(
    "typed,expected",
    [
        ("1'234'567", "1234567"),
        (" 12'000 ", "12000"),
        ("500", "500"),
        ("", ""),
    ],
)
def test_strip_input_separators(typed, expected):
    assert strip_input_separators(typed) == expected


def test_typed_amounts_are_accepted():
    assert coerce_amount("amount", "1'234'567") == 1234567


@pytest.mark.parametrize("typed", ["1'234.5", "1.234", "1e3", "'"])
def test_typed_amounts_stay_whole_pesos(typed):
    with pytest.raises(ValidationError):
        coerce_amount("amount", typed)

"""Unit tests for commission arithmetic"""

import pytest
from decimal import Decimal
from receivables_exchange.domain.commission import calculate_purchase_amounts, to_money
from receivables_exchange.domain.exceptions import ValidationError


def test_one_percent_on_both_sides():
    """1000.00 -> commission 10.00, investor pays 1010.00, merchant gets 990.00"""
    amounts = calculate_purchase_amounts(Decimal("1000.00"), Decimal("0.01"))

    assert amounts.commission == Decimal("10.00")
    assert amounts.total_amount == Decimal("1010.00")
    assert amounts.merchant_proceeds == Decimal("990.00")


def test_commission_rounds_half_up_to_cents():
    amounts = calculate_purchase_amounts(Decimal("1234.50"), Decimal("0.01"))

    # 12.345 -> 12.35
    assert amounts.commission == Decimal("12.35")
    assert amounts.total_amount == Decimal("1246.85")
    assert amounts.merchant_proceeds == Decimal("1222.15")


def test_total_and_proceeds_are_symmetric_around_value():
    amounts = calculate_purchase_amounts(Decimal("777.77"), Decimal("0.01"))

    assert amounts.total_amount - amounts.total_value == amounts.total_value - amounts.merchant_proceeds


def test_zero_rate_leaves_value_untouched():
    amounts = calculate_purchase_amounts(Decimal("250.00"), Decimal("0"))

    assert amounts.commission == Decimal("0.00")
    assert amounts.total_amount == amounts.merchant_proceeds == Decimal("250.00")


@pytest.mark.parametrize("value", [Decimal("0"), Decimal("-5.00")])
def test_non_positive_value_rejected(value):
    with pytest.raises(ValidationError):
        calculate_purchase_amounts(value, Decimal("0.01"))


def test_rate_out_of_range_rejected():
    with pytest.raises(ValidationError):
        calculate_purchase_amounts(Decimal("100.00"), Decimal("1.5"))


def test_to_money_accepts_strings_and_ints():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(3) == Decimal("3.00")

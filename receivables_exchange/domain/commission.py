"""Commission arithmetic for marketplace purchases"""

from decimal import Decimal, ROUND_HALF_UP
from receivables_exchange.domain.exceptions import ValidationError
from receivables_exchange.domain.models import PurchaseAmounts

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce to a 2-dp Decimal, rounding half up"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_purchase_amounts(total_value: Decimal, commission_rate: Decimal) -> PurchaseAmounts:
    """
    Split a purchase into the investor charge and the merchant proceeds.

    The same commission is taken on both sides of the trade:
    - investor pays total_value + commission
    - merchant is credited total_value - commission

    Example:
        1000.00 at 1% -> commission 10.00, investor pays 1010.00, merchant gets 990.00
    """
    value = to_money(total_value)
    if value <= 0:
        raise ValidationError("Security value must be positive")
    if commission_rate < 0 or commission_rate >= 1:
        raise ValidationError("Commission rate must be in [0, 1)")

    commission = to_money(value * commission_rate)

    return PurchaseAmounts(
        total_value=value,
        commission=commission,
        total_amount=value + commission,
        merchant_proceeds=value - commission,
    )

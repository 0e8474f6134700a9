"""Payment gateway client used at purchase time"""

import secrets
import string
import time
from decimal import Decimal
from receivables_exchange.domain.models import PaymentMethod, PaymentResult
from receivables_exchange.config import settings

_ALPHABET = string.ascii_lowercase + string.digits


class SimulatedPaymentGateway:
    """
    Stand-in for a card/bank gateway.

    Always succeeds and returns a reference shaped like a real gateway's
    (`txn_<epoch ms>_<9 random chars>`), so transaction records and
    notifications carry something an operator can search for.
    """

    def __init__(self, reference_prefix: str | None = None):
        self.reference_prefix = reference_prefix or settings.payment_reference_prefix

    def new_reference(self) -> str:
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
        return f"{self.reference_prefix}_{int(time.time() * 1000)}_{suffix}"

    def charge(self, amount: Decimal, commission: Decimal, method: PaymentMethod) -> PaymentResult:
        """Charge the investor amount (already including commission)"""
        transaction_id = self.new_reference()
        return PaymentResult(
            transaction_id=transaction_id,
            success=True,
            gateway_response={
                "success": True,
                "transactionId": transaction_id,
                "amount": str(amount),
                "commission": str(commission),
                "paymentMethod": PaymentMethod(method).value,
            },
        )

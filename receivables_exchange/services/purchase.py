"""Purchase workflow: single-security and watchlist batch purchases"""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from receivables_exchange.config import settings
from receivables_exchange.domain.access import require_role
from receivables_exchange.domain.commission import calculate_purchase_amounts
from receivables_exchange.domain.exceptions import (
    AlreadyPurchasedError,
    NotFoundError,
    SecurityNotAvailableError,
)
from receivables_exchange.domain.lifecycle import LifecycleEvent
from receivables_exchange.domain.models import (
    PaymentMethod,
    Principal,
    PurchaseOutcome,
    Role,
    SecurityStatus,
    WatchlistPurchaseOutcome,
)
from receivables_exchange.infrastructure.clients.payment import SimulatedPaymentGateway
from receivables_exchange.infrastructure.database.models import Security, utc_now
from receivables_exchange.infrastructure.database.repositories import (
    ReceivableRepository,
    SecurityRepository,
    TransactionRepository,
    UserRepository,
    WatchlistRepository,
)
from receivables_exchange.infrastructure.database.session import transaction
from receivables_exchange.services.base import guarded_transition
from receivables_exchange.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class PurchaseService:
    """
    Buys listed securities on behalf of investors.

    Every purchase hinges on one guarded UPDATE (listed -> purchased). Only the
    caller whose update affects a row goes on to record the transaction, move
    the receivable to sold, credit the merchant and notify both parties; all
    of that happens in the same database transaction.
    """

    def __init__(
        self,
        db: Session,
        gateway: Optional[SimulatedPaymentGateway] = None,
        full_watchlist_bookkeeping: Optional[bool] = None,
    ):
        self.db = db
        self.gateway = gateway or SimulatedPaymentGateway()
        self.full_watchlist_bookkeeping = (
            settings.watchlist_full_bookkeeping
            if full_watchlist_bookkeeping is None
            else full_watchlist_bookkeeping
        )
        self.users = UserRepository(db)
        self.receivables = ReceivableRepository(db)
        self.securities = SecurityRepository(db)
        self.transactions = TransactionRepository(db)
        self.watchlist = WatchlistRepository(db)
        self.notifications = NotificationService(db)

    def purchase_security(
        self,
        principal: Principal,
        security_id: str,
        payment_method: PaymentMethod,
    ) -> PurchaseOutcome:
        require_role(principal, Role.INVESTOR, "Only investors can purchase securities")

        with transaction(self.db):
            security = self.securities.get(security_id)
            if security is None:
                raise NotFoundError("Security not found")
            return self._buy(principal.user_id, security, PaymentMethod(payment_method))

    def purchase_watchlist(
        self,
        principal: Principal,
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
    ) -> WatchlistPurchaseOutcome:
        """
        Buy every still-listed security on the investor's watchlist.

        Items that are no longer available or lose their race are skipped, not
        fatal. The whole watchlist is cleared afterwards, skipped items included.
        """
        require_role(principal, Role.INVESTOR, "Only investors can purchase securities")

        purchased = []
        outcomes = []
        skipped = []
        with transaction(self.db):
            for entry in self.watchlist.get_current(principal.user_id):
                security = self.securities.get(entry.security_id)
                try:
                    if self.full_watchlist_bookkeeping:
                        outcome = self._buy(principal.user_id, security, PaymentMethod(payment_method))
                        purchased.append(outcome.security)
                        outcomes.append(outcome)
                    else:
                        purchased.append(self._transfer(principal.user_id, security))
                except (AlreadyPurchasedError, SecurityNotAvailableError) as e:
                    logger.info(
                        "Skipping watchlist item",
                        extra={"user_id": principal.user_id, "security_id": entry.security_id, "reason": str(e)},
                    )
                    skipped.append(entry.security_id)

            self.watchlist.clear(principal.user_id)

        return WatchlistPurchaseOutcome(purchased=purchased, skipped_security_ids=skipped, outcomes=outcomes)

    def _buy(self, investor_id: str, security: Security, payment_method: PaymentMethod) -> PurchaseOutcome:
        self._ensure_listed(security)
        amounts = calculate_purchase_amounts(security.total_value, settings.commission_rate)

        # Losers of the ownership race stop here with nothing written
        purchased = self._transfer(investor_id, security)

        payment = self.gateway.charge(amounts.total_amount, amounts.commission, payment_method)
        record = self.transactions.create_transaction(
            security_id=security.id,
            buyer_id=investor_id,
            seller_id=security.merchant_id,
            amount=amounts.total_value,
            currency=security.currency,
            commission_amount=amounts.commission,
            payment_method=payment_method.value,
            status="completed",
            transaction_id=payment.transaction_id,
            gateway_response=payment.gateway_response,
        )
        purchased.payment_method = payment_method.value
        purchased.payment_status = "completed"
        purchased.transaction_id = payment.transaction_id
        purchased.commission_amount = amounts.commission
        self.db.flush()

        # Seller pays the same commission as the buyer
        self.users.credit_wallet(security.merchant_id, amounts.merchant_proceeds)

        self.notifications.notify_purchase(purchased, investor_id, amounts, payment.transaction_id)

        return PurchaseOutcome(
            security=purchased,
            transaction=record,
            commission=amounts.commission,
            total_amount=amounts.total_amount,
        )

    def _transfer(self, investor_id: str, security: Security) -> Security:
        """Status side of a purchase: security -> purchased, receivable -> sold"""
        self._ensure_listed(security)

        purchased = guarded_transition(
            self.db,
            self.securities,
            security,
            LifecycleEvent.PURCHASE,
            conflict_error=AlreadyPurchasedError,
            purchased_by=investor_id,
            purchased_at=utc_now(),
        )

        # Receivable follows its security; a mismatch here aborts the whole unit of work
        receivable = self.receivables.get(purchased.receivable_id)
        guarded_transition(self.db, self.receivables, receivable, LifecycleEvent.PURCHASE)
        return purchased

    @staticmethod
    def _ensure_listed(security: Optional[Security]) -> None:
        if security is None or security.status != SecurityStatus.LISTED.value:
            raise SecurityNotAvailableError("Security not available for purchase")

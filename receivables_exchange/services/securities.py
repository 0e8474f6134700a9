"""Security listing, marketplace queries and merchant-side lifecycle operations"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from receivables_exchange.domain.access import require_owner, require_role
from receivables_exchange.domain.exceptions import ForbiddenError, NotFoundError
from receivables_exchange.domain.lifecycle import LifecycleEvent
from receivables_exchange.domain.models import Principal, Role, SecurityStatus
from receivables_exchange.infrastructure.database.models import Security, Transaction, utc_now
from receivables_exchange.infrastructure.database.repositories import (
    ReceivableRepository,
    SecurityRepository,
    TransactionRepository,
)
from receivables_exchange.infrastructure.database.session import transaction
from receivables_exchange.services.base import guarded_transition
from receivables_exchange.services.notifications import NotificationService


class SecurityService:
    def __init__(self, db: Session):
        self.db = db
        self.securities = SecurityRepository(db)
        self.receivables = ReceivableRepository(db)
        self.transactions = TransactionRepository(db)
        self.notifications = NotificationService(db)

    def get_owned(self, principal: Principal, security_id: str) -> Security:
        security = self.securities.get(security_id)
        if security is None:
            raise NotFoundError("Security not found")
        require_owner(principal, security.merchant_id, "security")
        return security

    def list_own(self, principal: Principal) -> List[Security]:
        require_role(principal, Role.MERCHANT, "Only merchants can access securities")
        return self.securities.get_by_merchant(principal.user_id)

    def list_security(self, principal: Principal, security_id: str) -> Security:
        """Put a securitized instrument on the marketplace"""
        require_role(principal, Role.MERCHANT, "Only merchants can list securities")
        with transaction(self.db):
            security = self.get_owned(principal, security_id)
            listed = guarded_transition(
                self.db, self.securities, security, LifecycleEvent.LIST, listed_at=utc_now()
            )
            receivable = self.receivables.get(security.receivable_id)
            guarded_transition(self.db, self.receivables, receivable, LifecycleEvent.LIST)
        return listed

    def flag_payment_due(self, principal: Principal, security_id: str) -> Security:
        """Tell the investor the underlying receivable has fallen due"""
        require_role(principal, Role.MERCHANT, "Only merchants can flag payments as due")
        with transaction(self.db):
            security = self.get_owned(principal, security_id)
            flagged = guarded_transition(self.db, self.securities, security, LifecycleEvent.FLAG_PAYMENT_DUE)
            if flagged.purchased_by:
                self.notifications.notify_payment_due(flagged, flagged.purchased_by)
        return flagged

    def cancel_security(self, principal: Principal, security_id: str) -> Security:
        """Withdraw an unsold security; watchlist entries drop out through the listed filter"""
        require_role(principal, Role.MERCHANT, "Only merchants can cancel securities")
        with transaction(self.db):
            security = self.get_owned(principal, security_id)
            cancelled = guarded_transition(self.db, self.securities, security, LifecycleEvent.CANCEL)
            receivable = self.receivables.get(security.receivable_id)
            guarded_transition(self.db, self.receivables, receivable, LifecycleEvent.CANCEL)
        return cancelled

    def marketplace(
        self,
        risk_grade: Optional[str] = None,
        currency: Optional[str] = None,
        min_value: Optional[Decimal] = None,
        max_value: Optional[Decimal] = None,
    ) -> List[Security]:
        return self.securities.get_listed(
            risk_grade=risk_grade, currency=currency, min_value=min_value, max_value=max_value
        )

    def get_public(self, security_id: str) -> Security:
        """Public detail view; anything not listed is reported as missing"""
        security = self.securities.get(security_id)
        if security is None or security.status != SecurityStatus.LISTED.value:
            raise NotFoundError("Security not found")
        return security

    def portfolio(self, principal: Principal) -> List[Security]:
        require_role(principal, Role.INVESTOR, "Only investors can access purchased securities")
        return self.securities.get_purchased_by(principal.user_id)

    def transactions_for_user(self, principal: Principal) -> List[Transaction]:
        return self.transactions.get_by_user(principal.user_id)

    def transactions_for_security(self, principal: Principal, security_id: str) -> List[Transaction]:
        security = self.securities.get(security_id)
        if security is None:
            raise NotFoundError("Security not found")
        if principal.user_id not in (security.merchant_id, security.purchased_by):
            raise ForbiddenError("Only the parties to a trade can view its transactions")
        return self.transactions.get_by_security(security_id)

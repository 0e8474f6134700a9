"""Settlement workflow: merchant marks a purchased security as paid"""

from sqlalchemy.orm import Session
from receivables_exchange.domain.access import require_owner, require_role
from receivables_exchange.domain.exceptions import NotFoundError
from receivables_exchange.domain.lifecycle import LifecycleEvent
from receivables_exchange.domain.models import Principal, Role
from receivables_exchange.infrastructure.database.models import Security, utc_now
from receivables_exchange.infrastructure.database.repositories import SecurityRepository, UserRepository
from receivables_exchange.infrastructure.database.session import transaction
from receivables_exchange.services.base import guarded_transition
from receivables_exchange.services.notifications import NotificationService


class SettlementService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.securities = SecurityRepository(db)
        self.notifications = NotificationService(db)

    def mark_security_paid(self, principal: Principal, security_id: str) -> Security:
        """
        Settle a purchased (or payment-due) security.

        The investor, if any, is credited the full face value; commission was
        already taken at purchase time. The parent receivable keeps its sold
        status. A security that is already paid fails the lifecycle guard, so
        the investor is never credited twice.
        """
        require_role(principal, Role.MERCHANT, "Only merchants can mark securities as paid")

        with transaction(self.db):
            security = self.securities.get(security_id)
            if security is None:
                raise NotFoundError("Security not found")
            require_owner(principal, security.merchant_id, "security")

            paid = guarded_transition(
                self.db, self.securities, security, LifecycleEvent.MARK_PAID, paid_at=utc_now()
            )

            if paid.purchased_by:
                self.users.credit_wallet(paid.purchased_by, paid.total_value)
                self.notifications.notify_payment_received(paid, paid.purchased_by)

            self.notifications.notify_payment_processed(paid)

        return paid

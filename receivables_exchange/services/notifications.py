"""Notification sink: append-only per-user event log"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from receivables_exchange.config import settings
from receivables_exchange.domain.exceptions import NotFoundError
from receivables_exchange.domain.models import NotificationType, PurchaseAmounts
from receivables_exchange.infrastructure.database.models import Notification, Security
from receivables_exchange.infrastructure.database.repositories import NotificationRepository
from receivables_exchange.infrastructure.database.session import transaction


def format_money(amount: Decimal) -> str:
    return f"${Decimal(amount):,.2f}"


class NotificationService:
    """Workflows append through notify_*; users read and prune their own feed"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository(db)

    def notify(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Append a notification inside the caller's unit of work"""
        return self.repository.create_notification(
            user_id=user_id,
            type=NotificationType(type).value,
            title=title,
            message=message,
            data=data,
        )

    def notify_purchase(
        self,
        security: Security,
        investor_id: str,
        amounts: PurchaseAmounts,
        transaction_id: str,
    ) -> List[Notification]:
        """One notice to the seller, one confirmation to the buyer"""
        merchant_notice = self.notify(
            user_id=security.merchant_id,
            type=NotificationType.SECURITY_PURCHASED,
            title="Security Purchased!",
            message=(
                f'Your security "{security.title}" has been purchased for '
                f"{format_money(amounts.total_value)}. Commission: {format_money(amounts.commission)}"
            ),
            data={
                "securityId": security.id,
                "securityTitle": security.title,
                "amount": str(amounts.total_value),
                "commission": str(amounts.commission),
                "transactionId": transaction_id,
            },
        )
        investor_notice = self.notify(
            user_id=investor_id,
            type=NotificationType.SECURITY_PURCHASED,
            title="Purchase Successful!",
            message=f'You have successfully purchased "{security.title}" for {format_money(amounts.total_amount)}.',
            data={
                "securityId": security.id,
                "securityTitle": security.title,
                "amount": str(amounts.total_amount),
                "commission": str(amounts.commission),
                "transactionId": transaction_id,
            },
        )
        return [merchant_notice, investor_notice]

    def notify_payment_received(self, security: Security, investor_id: str) -> Notification:
        return self.notify(
            user_id=investor_id,
            type=NotificationType.PAYMENT_RECEIVED,
            title="Payment Received!",
            message=(
                f"Payment of {format_money(security.total_value)} has been received "
                f'for security "{security.title}".'
            ),
            data=_security_payload(security),
        )

    def notify_payment_processed(self, security: Security) -> Notification:
        return self.notify(
            user_id=security.merchant_id,
            type=NotificationType.PAYMENT_RECEIVED,
            title="Payment Processed",
            message=f'You have successfully marked security "{security.title}" as paid.',
            data=_security_payload(security),
        )

    def notify_payment_due(self, security: Security, investor_id: str) -> Notification:
        return self.notify(
            user_id=investor_id,
            type=NotificationType.PAYMENT_DUE,
            title="Payment Due",
            message=f'Repayment of {format_money(security.total_value)} for "{security.title}" is now due.',
            data=_security_payload(security),
        )

    def list_for_user(self, user_id: str) -> List[Notification]:
        """Newest first"""
        return self.repository.get_by_user(user_id, limit=settings.notifications_page_size)

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        with transaction(self.db):
            notification = self._owned(user_id, notification_id)
            self.repository.mark_read(notification)
        return notification

    def delete(self, user_id: str, notification_id: str) -> None:
        with transaction(self.db):
            self.repository.delete(self._owned(user_id, notification_id))

    def clear(self, user_id: str) -> int:
        with transaction(self.db):
            return self.repository.clear_for_user(user_id)

    def _owned(self, user_id: str, notification_id: str) -> Notification:
        notification = self.repository.get_for_user(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification


def _security_payload(security: Security) -> Dict[str, Any]:
    return {
        "securityId": security.id,
        "securityTitle": security.title,
        "amount": str(security.total_value),
    }

"""Integration tests for wallet and notification storage"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.orm import Session
from receivables_exchange.domain.exceptions import InsufficientFundsError, NotFoundError
from receivables_exchange.domain.models import NotificationType
from receivables_exchange.infrastructure.database.models import Notification
from receivables_exchange.infrastructure.database.repositories import UserRepository
from receivables_exchange.services.notifications import NotificationService, format_money


def test_credit_wallet_adds_at_the_store(db: Session, investor, other_session: Session):
    users = UserRepository(db)
    users.credit_wallet(investor.user_id, Decimal("100.00"))
    db.commit()

    # A second writer working from its own (stale) view still adds, never overwrites
    UserRepository(other_session).credit_wallet(investor.user_id, Decimal("25.50"))
    other_session.commit()

    assert users._reload(investor.user_id).wallet_balance == Decimal("125.50")


def test_credit_unknown_user(db: Session):
    with pytest.raises(NotFoundError):
        UserRepository(db).credit_wallet("ghost", Decimal("1.00"))


def test_debit_never_goes_negative(db: Session, investor):
    users = UserRepository(db)
    users.credit_wallet(investor.user_id, Decimal("50.00"))

    with pytest.raises(InsufficientFundsError):
        users.debit_wallet(investor.user_id, Decimal("50.01"))

    assert users.debit_wallet(investor.user_id, Decimal("50.00")).wallet_balance == Decimal("0.00")


def test_format_money():
    assert format_money(Decimal("1010")) == "$1,010.00"
    assert format_money(Decimal("9.5")) == "$9.50"


def _notify(service: NotificationService, user_id: str, title: str, created_at: datetime) -> Notification:
    notification = service.notify(user_id, NotificationType.SECURITY_PURCHASED, title, title)
    notification.created_at = created_at
    return notification


def test_notifications_newest_first(db: Session, investor):
    service = NotificationService(db)
    now = datetime.now(timezone.utc)
    _notify(service, investor.user_id, "older", now - timedelta(minutes=5))
    _notify(service, investor.user_id, "newest", now)
    _notify(service, investor.user_id, "oldest", now - timedelta(hours=1))
    db.commit()

    assert [n.title for n in service.list_for_user(investor.user_id)] == ["newest", "older", "oldest"]


def test_notification_actions_are_scoped_to_owner(db: Session, investor, other_investor):
    service = NotificationService(db)
    mine = service.notify(investor.user_id, NotificationType.PAYMENT_DUE, "Payment Due", "due")
    theirs = service.notify(other_investor.user_id, NotificationType.PAYMENT_DUE, "Payment Due", "due")
    db.commit()

    assert service.mark_read(investor.user_id, mine.id).read is True

    with pytest.raises(NotFoundError):
        service.mark_read(investor.user_id, theirs.id)
    with pytest.raises(NotFoundError):
        service.delete(investor.user_id, theirs.id)

    assert service.clear(investor.user_id) == 1
    assert service.list_for_user(investor.user_id) == []
    assert [n.id for n in service.list_for_user(other_investor.user_id)] == [theirs.id]

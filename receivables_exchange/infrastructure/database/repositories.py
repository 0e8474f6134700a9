"""Data access layer for marketplace entities"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from receivables_exchange.infrastructure.database.models import (
    Notification,
    Receivable,
    Security,
    Transaction,
    User,
    WatchlistEntry,
    utc_now,
)
from receivables_exchange.domain.exceptions import InsufficientFundsError, NotFoundError
from receivables_exchange.domain.models import SecurityStatus


class BaseRepository:
    """Shared plumbing: every repository works inside the caller's session"""

    model = None

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: str):
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def add(self, entity):
        self.db.add(entity)
        self.db.flush()  # Get ID without committing
        return entity

    def conditional_update(self, entity_id: str, expected_statuses: Iterable[str], values: Dict[str, Any]) -> int:
        """
        UPDATE ... WHERE id = :id AND status IN (:expected)

        Returns the number of rows affected; zero means another writer moved the
        row first (or it never was in an expected state).
        """
        values = dict(values, updated_at=utc_now())
        return (
            self.db.query(self.model)
            .filter(self.model.id == entity_id, self.model.status.in_(list(expected_statuses)))
            .update(values, synchronize_session=False)
        )


class UserRepository(BaseRepository):
    """Repository for users and their wallets"""

    model = User

    def create_user(
        self,
        user_id: str,
        role: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        return self.add(
            User(
                id=user_id,
                role=role,
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
                wallet_balance=Decimal("0.00"),
            )
        )

    def update_profile(self, user: User, fields: Dict[str, Any]) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        self.db.flush()
        return user

    def credit_wallet(self, user_id: str, amount: Decimal) -> User:
        """Atomic increment at the store: balance = balance + amount"""
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update(
                {User.wallet_balance: User.wallet_balance + amount, User.updated_at: utc_now()},
                synchronize_session=False,
            )
        )
        if updated == 0:
            raise NotFoundError(f"User {user_id} not found")
        return self._reload(user_id)

    def debit_wallet(self, user_id: str, amount: Decimal) -> User:
        """Atomic guarded decrement; refuses to take the balance below zero"""
        updated = (
            self.db.query(User)
            .filter(User.id == user_id, User.wallet_balance >= amount)
            .update(
                {User.wallet_balance: User.wallet_balance - amount, User.updated_at: utc_now()},
                synchronize_session=False,
            )
        )
        if updated == 0:
            if self.get(user_id) is None:
                raise NotFoundError(f"User {user_id} not found")
            raise InsufficientFundsError(f"Wallet balance is below {amount}")
        return self._reload(user_id)

    def _reload(self, user_id: str) -> User:
        return self.db.get(User, user_id, populate_existing=True)


class ReceivableRepository(BaseRepository):
    """Repository for receivables"""

    model = Receivable

    def create_receivable(self, merchant_id: str, **fields) -> Receivable:
        return self.add(Receivable(merchant_id=merchant_id, **fields))

    def get_by_merchant(self, merchant_id: str) -> List[Receivable]:
        return (
            self.db.query(Receivable)
            .filter(Receivable.merchant_id == merchant_id)
            .order_by(Receivable.created_at.desc())
            .all()
        )

    def update_fields(self, receivable: Receivable, fields: Dict[str, Any]) -> Receivable:
        for name, value in fields.items():
            setattr(receivable, name, value)
        self.db.flush()
        return receivable

    def delete(self, receivable: Receivable) -> None:
        self.db.delete(receivable)
        self.db.flush()


class SecurityRepository(BaseRepository):
    """Repository for securities"""

    model = Security

    def create_security(self, security: Security) -> Security:
        return self.add(security)

    def get_by_merchant(self, merchant_id: str) -> List[Security]:
        return (
            self.db.query(Security)
            .filter(Security.merchant_id == merchant_id)
            .order_by(Security.created_at.desc())
            .all()
        )

    def get_listed(
        self,
        risk_grade: Optional[str] = None,
        currency: Optional[str] = None,
        min_value: Optional[Decimal] = None,
        max_value: Optional[Decimal] = None,
    ) -> List[Security]:
        """Marketplace view: listed securities, newest listing first"""
        query = self.db.query(Security).filter(Security.status == SecurityStatus.LISTED.value)
        if risk_grade:
            query = query.filter(Security.risk_grade == risk_grade)
        if currency:
            query = query.filter(Security.currency == currency)
        if min_value is not None:
            query = query.filter(Security.total_value >= min_value)
        if max_value is not None:
            query = query.filter(Security.total_value <= max_value)
        return query.order_by(Security.listed_at.desc()).all()

    def get_purchased_by(self, investor_id: str) -> List[Security]:
        return (
            self.db.query(Security)
            .filter(Security.purchased_by == investor_id)
            .order_by(Security.purchased_at.desc())
            .all()
        )


class TransactionRepository(BaseRepository):
    """Repository for the purchase audit trail"""

    model = Transaction

    def create_transaction(self, **fields) -> Transaction:
        return self.add(Transaction(**fields))

    def get_by_user(self, user_id: str) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(or_(Transaction.buyer_id == user_id, Transaction.seller_id == user_id))
            .order_by(Transaction.created_at.desc())
            .all()
        )

    def get_by_security(self, security_id: str) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.security_id == security_id)
            .order_by(Transaction.created_at.desc())
            .all()
        )


class NotificationRepository(BaseRepository):
    """Repository for per-user notifications"""

    model = Notification

    def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        return self.add(
            Notification(user_id=user_id, type=type, title=title, message=message, data=data, read=False)
        )

    def get_by_user(self, user_id: str, limit: int = 100) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    def mark_read(self, notification: Notification) -> Notification:
        notification.read = True
        self.db.flush()
        return notification

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.flush()

    def clear_for_user(self, user_id: str) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )


class WatchlistRepository(BaseRepository):
    """Repository for investor watchlists"""

    model = WatchlistEntry

    def find(self, user_id: str, security_id: str) -> Optional[WatchlistEntry]:
        return (
            self.db.query(WatchlistEntry)
            .filter(WatchlistEntry.user_id == user_id, WatchlistEntry.security_id == security_id)
            .first()
        )

    def add_entry(self, user_id: str, security_id: str) -> WatchlistEntry:
        return self.add(WatchlistEntry(user_id=user_id, security_id=security_id))

    def get_current(self, user_id: str) -> List[WatchlistEntry]:
        """Entries whose security is still listed; stale entries are filtered, not deleted"""
        return (
            self.db.query(WatchlistEntry)
            .join(Security, Security.id == WatchlistEntry.security_id)
            .filter(
                WatchlistEntry.user_id == user_id,
                Security.status == SecurityStatus.LISTED.value,
            )
            .order_by(WatchlistEntry.added_at.asc())
            .all()
        )

    def remove(self, user_id: str, security_id: str) -> int:
        return (
            self.db.query(WatchlistEntry)
            .filter(WatchlistEntry.user_id == user_id, WatchlistEntry.security_id == security_id)
            .delete(synchronize_session=False)
        )

    def clear(self, user_id: str) -> int:
        return (
            self.db.query(WatchlistEntry)
            .filter(WatchlistEntry.user_id == user_id)
            .delete(synchronize_session=False)
        )

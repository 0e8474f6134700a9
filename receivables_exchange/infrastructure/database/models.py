"""SQLAlchemy ORM models for the marketplace entities"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Date, ForeignKey, Numeric, Text, JSON, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Marketplace participant with a wallet"""

    __tablename__ = "users"

    id = Column(Text, primary_key=True, default=_new_id)
    email = Column(Text, unique=True, nullable=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    profile_image_url = Column(Text, nullable=True)
    role = Column(String(16), nullable=True)  # merchant | investor, set once at registration
    wallet_balance = Column(Numeric(12, 2), nullable=False, default=0)
    phone_number = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)


class Receivable(Base):
    """Merchant's claim against a debtor"""

    __tablename__ = "receivables"

    id = Column(Text, primary_key=True, default=_new_id)
    merchant_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    debtor_name = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    due_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Text, nullable=True)
    risk_level = Column(Text, nullable=True)
    due_diligence = Column(JSON, nullable=True)  # order photos, legal documents, debtor contact, order details
    status = Column(String(16), nullable=False, default="draft", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    securities = relationship("Security", back_populates="receivable")


class Security(Base):
    """Tradeable instrument securitized from exactly one receivable"""

    __tablename__ = "securities"

    id = Column(Text, primary_key=True, default=_new_id)
    receivable_id = Column(Text, ForeignKey("receivables.id"), nullable=False, index=True)
    merchant_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    total_value = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    expected_return = Column(Numeric(5, 2), nullable=True)  # percentage
    risk_grade = Column(String(2), nullable=True)
    duration = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="draft", index=True)
    listed_at = Column(DateTime(timezone=True), nullable=True)
    purchased_by = Column(Text, ForeignKey("users.id"), nullable=True, index=True)
    purchased_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(Text, nullable=True)
    payment_status = Column(Text, nullable=True)
    transaction_id = Column(Text, nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    receivable = relationship("Receivable", back_populates="securities")


class Transaction(Base):
    """Append-only audit record of a completed purchase"""

    __tablename__ = "transactions"

    id = Column(Text, primary_key=True, default=_new_id)
    security_id = Column(Text, ForeignKey("securities.id"), nullable=False, index=True)
    buyer_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    commission_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="completed")
    transaction_id = Column(Text, nullable=False, unique=True)
    gateway_response = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class Notification(Base):
    """Per-user event record; only the read flag changes after creation"""

    __tablename__ = "notifications"

    id = Column(Text, primary_key=True, default=_new_id)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class WatchlistEntry(Base):
    """Investor's saved-for-later security"""

    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_id", "security_id", name="uq_watchlist_user_security"),)

    id = Column(Text, primary_key=True, default=_new_id)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False, index=True)
    security_id = Column(Text, ForeignKey("securities.id"), nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    security = relationship("Security")

"""Integration tests for single-security purchases against the database"""

import threading
import pytest
from decimal import Decimal
from typing import Generator
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from receivables_exchange.domain.exceptions import (
    AlreadyPurchasedError,
    ForbiddenError,
    NotFoundError,
    SecurityNotAvailableError,
)
from receivables_exchange.domain.models import PaymentMethod
from receivables_exchange.infrastructure.database.models import (
    Notification,
    Receivable,
    Security,
    Transaction,
    User,
)
from receivables_exchange.services.purchase import PurchaseService


def _balance(db: Session, user_id: str) -> Decimal:
    return db.get(User, user_id, populate_existing=True).wallet_balance


def test_purchase_moves_money_and_statuses(db: Session, merchant, investor, make_security):
    """V=1000.00 -> commission 10.00, merchant credited 990.00, investor charged 1010.00"""
    security = make_security(merchant, value="1000.00")

    outcome = PurchaseService(db).purchase_security(investor, security.id, PaymentMethod.BANK_TRANSFER)

    assert outcome.commission == Decimal("10.00")
    assert outcome.total_amount == Decimal("1010.00")
    assert _balance(db, merchant.user_id) == Decimal("990.00")
    assert _balance(db, investor.user_id) == Decimal("0.00")

    purchased = db.get(Security, security.id, populate_existing=True)
    assert purchased.status == "purchased"
    assert purchased.purchased_by == investor.user_id
    assert purchased.purchased_at is not None
    assert purchased.payment_method == "bank_transfer"
    assert purchased.commission_amount == Decimal("10.00")

    receivable = db.get(Receivable, purchased.receivable_id, populate_existing=True)
    assert receivable.status == "sold"


def test_purchase_writes_one_transaction_record(db: Session, merchant, investor, make_security):
    security = make_security(merchant, value="500.00")

    outcome = PurchaseService(db).purchase_security(investor, security.id, PaymentMethod.CREDIT_CARD)

    records = db.query(Transaction).all()
    assert len(records) == 1
    record = records[0]
    assert record.id == outcome.transaction.id
    assert record.buyer_id == investor.user_id
    assert record.seller_id == merchant.user_id
    assert record.amount == Decimal("500.00")
    assert record.commission_amount == Decimal("5.00")
    assert record.status == "completed"
    assert record.transaction_id.startswith("txn_")
    assert record.gateway_response["success"] is True
    assert record.gateway_response["amount"] == "505.00"


def test_purchase_notifies_both_parties(db: Session, merchant, investor, make_security):
    security = make_security(merchant, value="1000.00", title="Initech Q3")

    PurchaseService(db).purchase_security(investor, security.id, PaymentMethod.CREDIT_CARD)

    notifications = db.query(Notification).all()
    assert len(notifications) == 2
    by_user = {n.user_id: n for n in notifications}
    assert by_user[merchant.user_id].title == "Security Purchased!"
    assert "Commission: $10.00" in by_user[merchant.user_id].message
    assert by_user[investor.user_id].title == "Purchase Successful!"
    assert "$1,010.00" in by_user[investor.user_id].message
    assert all(n.type == "security_purchased" for n in notifications)
    assert by_user[merchant.user_id].data["securityId"] == security.id


def test_stale_read_loses_to_committed_purchase(db: Session, other_session: Session, merchant, investor, other_investor, make_security):
    """
    Two requests race for one security. The loser read it as listed, so only
    the guarded update can stop it.
    """
    security = make_security(merchant, value="1000.00")

    # Loser's request has already read the listed security
    stale = db.get(Security, security.id)
    assert stale.status == "listed"

    # Winner completes on its own connection
    PurchaseService(other_session).purchase_security(other_investor, security.id, PaymentMethod.CREDIT_CARD)

    with pytest.raises(AlreadyPurchasedError):
        PurchaseService(db).purchase_security(investor, security.id, PaymentMethod.CREDIT_CARD)

    winner = db.get(Security, security.id, populate_existing=True)
    assert winner.purchased_by == other_investor.user_id
    assert db.query(Transaction).count() == 1
    assert db.query(Notification).count() == 2
    assert _balance(db, merchant.user_id) == Decimal("990.00")


@pytest.fixture
def racing_sessions(db: Session) -> Generator[sessionmaker, None, None]:
    """Sessions for requests on other threads; each write transaction takes the database lock up front"""
    racing_engine = create_engine(db.get_bind().url, connect_args={"check_same_thread": False, "timeout": 30})

    @event.listens_for(racing_engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(racing_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    try:
        yield sessionmaker(bind=racing_engine, autoflush=False, expire_on_commit=False)
    finally:
        racing_engine.dispose()


def test_concurrent_purchases_sell_once(db: Session, racing_sessions, merchant, investor, other_investor, make_security):
    """Two investors on two threads both see the security listed; exactly one buys it"""
    security_id = make_security(merchant, value="1000.00").id
    start = threading.Barrier(2)
    results = {}

    def buy(principal):
        session = racing_sessions()
        try:
            seen = session.get(Security, security_id)
            assert seen.status == "listed"
            session.commit()
            start.wait(timeout=10)
            PurchaseService(session).purchase_security(principal, security_id, PaymentMethod.CREDIT_CARD)
            results[principal.user_id] = "purchased"
        except AlreadyPurchasedError:
            results[principal.user_id] = "conflict"
        finally:
            session.close()

    threads = [threading.Thread(target=buy, args=(p,)) for p in (investor, other_investor)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(results.values()) == ["conflict", "purchased"]
    winner = next(user_id for user_id, result in results.items() if result == "purchased")

    sold = db.get(Security, security_id, populate_existing=True)
    assert sold.status == "purchased"
    assert sold.purchased_by == winner
    assert db.query(Transaction).count() == 1
    assert db.query(Notification).count() == 2
    assert _balance(db, merchant.user_id) == Decimal("990.00")


def test_purchase_of_unlisted_security_rejected(db: Session, merchant, investor, make_security):
    security = make_security(merchant, listed=False)

    with pytest.raises(SecurityNotAvailableError):
        PurchaseService(db).purchase_security(investor, security.id, PaymentMethod.CREDIT_CARD)

    assert db.get(Security, security.id, populate_existing=True).status == "securitized"
    assert db.query(Transaction).count() == 0
    assert db.query(Notification).count() == 0


def test_purchase_of_missing_security(db: Session, investor):
    with pytest.raises(NotFoundError):
        PurchaseService(db).purchase_security(investor, "does-not-exist", PaymentMethod.CREDIT_CARD)


def test_merchant_cannot_purchase(db: Session, merchant, make_security):
    security = make_security(merchant)

    with pytest.raises(ForbiddenError):
        PurchaseService(db).purchase_security(merchant, security.id, PaymentMethod.CREDIT_CARD)


def test_failure_after_ownership_rolls_everything_back(db: Session, merchant, investor, make_security, monkeypatch):
    """Ledger failure must not leave a half-sold security behind"""
    security = make_security(merchant, value="1000.00")
    service = PurchaseService(db)

    def broken_credit(user_id, amount):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(service.users, "credit_wallet", broken_credit)

    with pytest.raises(RuntimeError):
        service.purchase_security(investor, security.id, PaymentMethod.CREDIT_CARD)

    restored = db.get(Security, security.id, populate_existing=True)
    assert restored.status == "listed"
    assert restored.purchased_by is None
    assert db.get(Receivable, restored.receivable_id, populate_existing=True).status == "listed"
    assert db.query(Transaction).count() == 0
    assert db.query(Notification).count() == 0

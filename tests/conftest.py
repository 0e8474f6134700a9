"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from receivables_exchange.api.main import create_app
from receivables_exchange.infrastructure.database.models import Base
from receivables_exchange.infrastructure.database.repositories import UserRepository
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.domain.models import Principal, ReceivableDraft, Role, SecurityDraft, RiskGrade
from receivables_exchange.services.receivables import ReceivableService
from receivables_exchange.services.securities import SecurityService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def other_session(db: Session) -> Generator[Session, None, None]:
    """Second, independent session against the same database (a concurrent request)"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_user(db: Session) -> Callable[..., Principal]:
    """Register a user directly in the store and return their principal"""

    def _make_user(user_id: str, role: Role) -> Principal:
        UserRepository(db).create_user(
            user_id=user_id,
            role=role.value,
            email=f"{user_id}@example.com",
            first_name=user_id.capitalize(),
        )
        db.commit()
        return Principal(user_id=user_id, role=role)

    return _make_user


@pytest.fixture
def merchant(make_user) -> Principal:
    return make_user("merchant_acme", Role.MERCHANT)


@pytest.fixture
def investor(make_user) -> Principal:
    return make_user("investor_alice", Role.INVESTOR)


@pytest.fixture
def other_investor(make_user) -> Principal:
    return make_user("investor_bob", Role.INVESTOR)


@pytest.fixture
def make_receivable(db: Session) -> Callable:
    def _make_receivable(merchant: Principal, amount: str = "1000.00", debtor_name: str = "Globex Corp"):
        draft = ReceivableDraft(
            debtor_name=debtor_name,
            amount=Decimal(amount),
            due_date=date.today() + timedelta(days=90),
            description="Net-90 invoice for wholesale order",
            category="Services",
            risk_level="Medium",
        )
        return ReceivableService(db).create(merchant, draft)

    return _make_receivable


@pytest.fixture
def make_security(db: Session, make_receivable) -> Callable:
    """Receivable -> securitized security, optionally listed"""

    def _make_security(merchant: Principal, value: str = "1000.00", listed: bool = True, title: str = "Globex Net-90"):
        receivable = make_receivable(merchant, amount=value)
        security = ReceivableService(db).securitize(
            merchant,
            receivable.id,
            SecurityDraft(
                title=title,
                total_value=Decimal(value),
                duration="90 days",
                expected_return=Decimal("8.50"),
                risk_grade=RiskGrade.B_PLUS,
            ),
        )
        if listed:
            security = SecurityService(db).list_security(merchant, security.id)
        return security

    return _make_security

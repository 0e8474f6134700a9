"""Integration tests for registration"""

import pytest
from sqlalchemy.orm import Session
from receivables_exchange.domain.exceptions import ConflictError, PreconditionFailedError
from receivables_exchange.domain.models import Role
from receivables_exchange.infrastructure.database.models import User
from receivables_exchange.services.accounts import AccountService


def test_register_creates_user_with_role(db: Session):
    user = AccountService(db).register("merchant_acme", Role.MERCHANT, email="ops@acme.test")

    assert user.role == "merchant"
    assert user.email == "ops@acme.test"


def test_register_twice_keeps_first_role(db: Session):
    service = AccountService(db)
    service.register("merchant_acme", Role.MERCHANT)

    with pytest.raises(PreconditionFailedError):
        service.register("merchant_acme", Role.INVESTOR)

    assert db.get(User, "merchant_acme", populate_existing=True).role == "merchant"


def test_register_with_taken_email_conflicts(db: Session):
    service = AccountService(db)
    service.register("merchant_acme", Role.MERCHANT, email="shared@example.com")

    with pytest.raises(ConflictError, match="Email already registered"):
        service.register("investor_alice", Role.INVESTOR, email="shared@example.com")

    # Session is usable again after the rollback
    assert db.get(User, "investor_alice") is None
    assert service.register("investor_alice", Role.INVESTOR, email="alice@example.com").role == "investor"


def test_users_without_email_do_not_clash(db: Session):
    service = AccountService(db)
    service.register("merchant_acme", Role.MERCHANT)
    service.register("investor_alice", Role.INVESTOR)

    assert db.query(User).count() == 2

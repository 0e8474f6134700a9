"""Unit tests for the receivable/security state machine"""

import pytest
from receivables_exchange.domain.exceptions import PreconditionFailedError
from receivables_exchange.domain.lifecycle import (
    RECEIVABLE_LIFECYCLE,
    SECURITY_LIFECYCLE,
    LifecycleEvent,
    apply_transition,
    ensure_receivable_editable,
)
from receivables_exchange.domain.models import ReceivableStatus, SecurityStatus
from receivables_exchange.infrastructure.database.models import Receivable, Security


def test_security_happy_path():
    """draft -> securitized -> listed -> purchased -> payment_due -> paid"""
    security = Security(status="draft")

    for event, expected in [
        (LifecycleEvent.SECURITIZE, "securitized"),
        (LifecycleEvent.LIST, "listed"),
        (LifecycleEvent.PURCHASE, "purchased"),
        (LifecycleEvent.FLAG_PAYMENT_DUE, "payment_due"),
        (LifecycleEvent.MARK_PAID, "paid"),
    ]:
        apply_transition(security, event)
        assert security.status == expected


def test_receivable_happy_path():
    receivable = Receivable(status="active")

    apply_transition(receivable, LifecycleEvent.SECURITIZE)
    apply_transition(receivable, LifecycleEvent.LIST)
    apply_transition(receivable, LifecycleEvent.PURCHASE)

    assert receivable.status == "sold"


@pytest.mark.parametrize("status", ["purchased", "payment_due"])
def test_mark_paid_accepts_purchased_and_payment_due(status):
    assert SECURITY_LIFECYCLE.target(status, LifecycleEvent.MARK_PAID) is SecurityStatus.PAID


def test_reapplying_transition_fails_and_leaves_entity_unchanged():
    security = Security(status="listed")

    with pytest.raises(PreconditionFailedError):
        apply_transition(security, LifecycleEvent.LIST)

    assert security.status == "listed"


def test_mark_paid_twice_rejected():
    with pytest.raises(PreconditionFailedError):
        SECURITY_LIFECYCLE.target("paid", LifecycleEvent.MARK_PAID)


def test_cannot_purchase_unlisted_security():
    for status in ["draft", "securitized", "purchased", "paid", "cancelled"]:
        assert not SECURITY_LIFECYCLE.can(status, LifecycleEvent.PURCHASE)


def test_cannot_securitize_twice():
    with pytest.raises(PreconditionFailedError, match="securitized"):
        RECEIVABLE_LIFECYCLE.target("securitized", LifecycleEvent.SECURITIZE)


def test_settlement_does_not_move_receivable():
    """Receivables stop at sold; there is no receivable-side mark-paid"""
    with pytest.raises(PreconditionFailedError):
        RECEIVABLE_LIFECYCLE.target("sold", LifecycleEvent.MARK_PAID)


def test_cancel_only_before_sale():
    assert SECURITY_LIFECYCLE.can("listed", LifecycleEvent.CANCEL)
    assert not SECURITY_LIFECYCLE.can("purchased", LifecycleEvent.CANCEL)
    assert RECEIVABLE_LIFECYCLE.target("listed", LifecycleEvent.CANCEL) is ReceivableStatus.CANCELLED


def test_apply_transition_rejects_unknown_entity():
    class Invoice:
        status = "draft"

    with pytest.raises(TypeError):
        apply_transition(Invoice(), LifecycleEvent.LIST)


@pytest.mark.parametrize("status", ["draft", "active"])
def test_editable_receivable_states(status):
    ensure_receivable_editable(status)


@pytest.mark.parametrize("status", ["securitized", "listed", "sold"])
def test_receivable_locked_after_securitization(status):
    with pytest.raises(PreconditionFailedError):
        ensure_receivable_editable(status)

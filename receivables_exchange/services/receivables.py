"""Receivable management and securitization"""

from dataclasses import asdict
from typing import Any, Dict, List
from sqlalchemy.orm import Session
from receivables_exchange.domain.access import require_owner, require_role
from receivables_exchange.domain.commission import to_money
from receivables_exchange.domain.exceptions import NotFoundError, ValidationError
from receivables_exchange.domain.lifecycle import LifecycleEvent, apply_transition, ensure_receivable_editable
from receivables_exchange.domain.models import Principal, ReceivableDraft, ReceivableStatus, Role, SecurityDraft, SecurityStatus
from receivables_exchange.infrastructure.database.models import Receivable, Security
from receivables_exchange.infrastructure.database.repositories import ReceivableRepository, SecurityRepository
from receivables_exchange.infrastructure.database.session import transaction
from receivables_exchange.services.base import guarded_transition

EDITABLE_FIELDS = (
    "debtor_name",
    "amount",
    "currency",
    "due_date",
    "description",
    "category",
    "risk_level",
    "due_diligence",
)


class ReceivableService:
    def __init__(self, db: Session):
        self.db = db
        self.receivables = ReceivableRepository(db)
        self.securities = SecurityRepository(db)

    def create(self, principal: Principal, draft: ReceivableDraft) -> Receivable:
        require_role(principal, Role.MERCHANT, "Only merchants can create receivables")
        fields = asdict(draft)
        fields["amount"] = _positive_money(fields["amount"], "Amount")
        with transaction(self.db):
            return self.receivables.create_receivable(
                principal.user_id, status=ReceivableStatus.DRAFT.value, **fields
            )

    def list_own(self, principal: Principal) -> List[Receivable]:
        require_role(principal, Role.MERCHANT, "Only merchants can access receivables")
        return self.receivables.get_by_merchant(principal.user_id)

    def get_own(self, principal: Principal, receivable_id: str) -> Receivable:
        require_role(principal, Role.MERCHANT, "Only merchants can access receivables")
        receivable = self.receivables.get(receivable_id)
        if receivable is None:
            raise NotFoundError("Receivable not found")
        require_owner(principal, receivable.merchant_id, "receivable")
        return receivable

    def update(self, principal: Principal, receivable_id: str, fields: Dict[str, Any]) -> Receivable:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "amount" in fields:
            fields["amount"] = _positive_money(fields["amount"], "Amount")

        with transaction(self.db):
            receivable = self.get_own(principal, receivable_id)
            ensure_receivable_editable(receivable.status)
            return self.receivables.update_fields(receivable, fields)

    def delete(self, principal: Principal, receivable_id: str) -> None:
        with transaction(self.db):
            receivable = self.get_own(principal, receivable_id)
            ensure_receivable_editable(receivable.status)
            self.receivables.delete(receivable)

    def securitize(self, principal: Principal, receivable_id: str, draft: SecurityDraft) -> Security:
        """
        Convert a draft/active receivable into a security.

        The security is born in draft and immediately moved to securitized; the
        parent receivable is moved to securitized under a status guard so two
        concurrent calls cannot both produce a security.
        """
        require_role(principal, Role.MERCHANT, "Only merchants can securitize receivables")
        total_value = _positive_money(draft.total_value, "Total value")

        with transaction(self.db):
            receivable = self.get_own(principal, receivable_id)
            guarded_transition(self.db, self.receivables, receivable, LifecycleEvent.SECURITIZE)

            security = Security(
                receivable_id=receivable.id,
                merchant_id=principal.user_id,
                title=draft.title,
                description=draft.description,
                total_value=total_value,
                currency=receivable.currency,
                expected_return=draft.expected_return,
                risk_grade=draft.risk_grade.value if draft.risk_grade else None,
                duration=draft.duration,
                status=SecurityStatus.DRAFT.value,
            )
            apply_transition(security, LifecycleEvent.SECURITIZE)
            return self.securities.create_security(security)


def _positive_money(value, label: str):
    try:
        amount = to_money(value)
    except ArithmeticError as e:
        raise ValidationError(f"{label} must be a valid number") from e
    if amount <= 0:
        raise ValidationError(f"{label} must be positive")
    return amount

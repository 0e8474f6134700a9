"""Lifecycle state machine for receivables and securities"""

from enum import Enum
from typing import Dict, FrozenSet, Tuple, Type
from receivables_exchange.domain.exceptions import PreconditionFailedError
from receivables_exchange.domain.models import ReceivableStatus, SecurityStatus


class LifecycleEvent(str, Enum):
    SECURITIZE = "securitize"
    LIST = "list"
    PURCHASE = "purchase"
    FLAG_PAYMENT_DUE = "flag_payment_due"
    MARK_PAID = "mark_paid"
    CANCEL = "cancel"


class StateMachine:
    """
    Transition table for one entity kind.

    Each event maps to (allowed source states, target state). Anything not in
    the table is an illegal transition and raises PreconditionFailedError
    without touching the entity.
    """

    def __init__(
        self,
        kind: str,
        status_type: Type[Enum],
        transitions: Dict[LifecycleEvent, Tuple[FrozenSet[Enum], Enum]],
    ):
        self.kind = kind
        self.status_type = status_type
        self.transitions = transitions

    def sources(self, event: LifecycleEvent) -> FrozenSet[Enum]:
        """States from which event may fire"""
        if event not in self.transitions:
            raise PreconditionFailedError(f"{self.kind} does not support '{event.value}'")
        return self.transitions[event][0]

    def target(self, current, event: LifecycleEvent) -> Enum:
        """Validate the transition and return the resulting state"""
        allowed = self.sources(event)
        status = self.status_type(current)
        if status not in allowed:
            raise PreconditionFailedError(
                f"{self.kind.capitalize()} cannot {event.value.replace('_', ' ')} "
                f"in its current status ({status.value})"
            )
        return self.transitions[event][1]

    def can(self, current, event: LifecycleEvent) -> bool:
        return event in self.transitions and self.status_type(current) in self.transitions[event][0]

    def apply(self, entity, event: LifecycleEvent):
        """Move entity.status along event; entity is left untouched on failure"""
        new_status = self.target(entity.status, event)
        entity.status = new_status.value
        return entity


RECEIVABLE_LIFECYCLE = StateMachine(
    "receivable",
    ReceivableStatus,
    {
        LifecycleEvent.SECURITIZE: (
            frozenset({ReceivableStatus.DRAFT, ReceivableStatus.ACTIVE}),
            ReceivableStatus.SECURITIZED,
        ),
        LifecycleEvent.LIST: (frozenset({ReceivableStatus.SECURITIZED}), ReceivableStatus.LISTED),
        # Receivable side of a security purchase; settlement does not touch the receivable
        LifecycleEvent.PURCHASE: (frozenset({ReceivableStatus.LISTED}), ReceivableStatus.SOLD),
        LifecycleEvent.CANCEL: (
            frozenset({ReceivableStatus.SECURITIZED, ReceivableStatus.LISTED}),
            ReceivableStatus.CANCELLED,
        ),
    },
)

SECURITY_LIFECYCLE = StateMachine(
    "security",
    SecurityStatus,
    {
        LifecycleEvent.SECURITIZE: (frozenset({SecurityStatus.DRAFT}), SecurityStatus.SECURITIZED),
        LifecycleEvent.LIST: (frozenset({SecurityStatus.SECURITIZED}), SecurityStatus.LISTED),
        LifecycleEvent.PURCHASE: (frozenset({SecurityStatus.LISTED}), SecurityStatus.PURCHASED),
        LifecycleEvent.FLAG_PAYMENT_DUE: (frozenset({SecurityStatus.PURCHASED}), SecurityStatus.PAYMENT_DUE),
        LifecycleEvent.MARK_PAID: (
            frozenset({SecurityStatus.PURCHASED, SecurityStatus.PAYMENT_DUE}),
            SecurityStatus.PAID,
        ),
        # Withdrawal before any sale, so cancelled securities never carry purchased_by
        LifecycleEvent.CANCEL: (
            frozenset({SecurityStatus.SECURITIZED, SecurityStatus.LISTED}),
            SecurityStatus.CANCELLED,
        ),
    },
)

# Receivables may only be edited or deleted before securitization
EDITABLE_RECEIVABLE_STATES = frozenset({ReceivableStatus.DRAFT, ReceivableStatus.ACTIVE})


def machine_for(entity) -> StateMachine:
    """Pick the lifecycle table by entity kind"""
    kind = type(entity).__name__.lower()
    if kind == "security":
        return SECURITY_LIFECYCLE
    if kind == "receivable":
        return RECEIVABLE_LIFECYCLE
    raise TypeError(f"No lifecycle defined for {type(entity).__name__}")


def apply_transition(entity, event: LifecycleEvent):
    """Single entry point for status changes on receivables and securities"""
    return machine_for(entity).apply(entity, event)


def ensure_receivable_editable(status) -> None:
    if ReceivableStatus(status) not in EDITABLE_RECEIVABLE_STATES:
        raise PreconditionFailedError("Receivable can only be changed while in draft or active status")

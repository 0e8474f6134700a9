"""Helpers shared by the workflow services"""

from typing import Type
from sqlalchemy.orm import Session
from receivables_exchange.domain.exceptions import ConflictError
from receivables_exchange.domain.lifecycle import LifecycleEvent, machine_for
from receivables_exchange.infrastructure.database.repositories import BaseRepository


def guarded_transition(
    db: Session,
    repository: BaseRepository,
    entity,
    event: LifecycleEvent,
    conflict_error: Type[ConflictError] = ConflictError,
    **values,
):
    """
    Apply a lifecycle event as one state-guarded UPDATE.

    The transition table is checked against the status we read (raises
    PreconditionFailedError), then the write only lands if the row is still in
    one of the event's source states. Zero rows affected means a concurrent
    writer got there first and raises conflict_error.
    """
    machine = machine_for(entity)
    target = machine.target(entity.status, event)
    expected = [status.value for status in machine.sources(event)]

    updated = repository.conditional_update(entity.id, expected, dict(values, status=target.value))
    if updated == 0:
        raise conflict_error(f"{machine.kind.capitalize()} {entity.id} changed state concurrently")

    return db.get(type(entity), entity.id, populate_existing=True)

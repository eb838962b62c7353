"""
ORM-Level Immutability Enforcement.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires mapper events before UPDATE/DELETE statements for ORM
objects reach the database.  The listeners below inspect the pending change
and raise ImmutabilityViolationError, which aborts the flush:

    session.flush()
         |
         v
    [before_update] --> _check_*() --> ImmutabilityViolationError
         |
         v
    [before_delete] --> _check_*() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Core statements (``session.execute(update(...))``) bypass mapper events.
StatusTransitionEngine performs its compare-and-set that way on purpose,
after validating the move itself.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity            | Rule
------------------|-----------------------------------------------------------
StatusTransition  | ALWAYS immutable; never updated, never deleted
Contract.status   | Through the ORM, may only move to the immediate successor

===============================================================================
USAGE
===============================================================================

Called once from contract_kernel.runtime.bootstrap():

    from contract_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

Tests that need to corrupt history on purpose:

    unregister_immutability_listeners()
    # ... forbidden operation ...
    register_immutability_listeners()
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from contract_kernel.domain.status import ContractStatus
from contract_kernel.exceptions import ImmutabilityViolationError
from contract_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _blocked(entity_type: str, entity_id, operation: str, reason: str):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_status_transition_update(mapper, connection, target):
    """Status transitions are append-only."""
    raise _blocked(
        "StatusTransition",
        target.id,
        "UPDATE",
        "Status transitions are immutable and cannot be modified",
    )


def _check_status_transition_delete(mapper, connection, target):
    raise _blocked(
        "StatusTransition",
        target.id,
        "DELETE",
        "Status transitions cannot be deleted",
    )


def _check_contract_status_progression(mapper, connection, target):
    """
    Reject ORM writes that move a contract anywhere but one step forward.

    Only the status attribute is inspected; other columns stay editable.
    Plain ints and names are resolved the same way the column stores them;
    a value outside the sequence is rejected.
    """
    history = get_history(target, "status")
    if not history.added or not history.deleted:
        return

    previous = ContractStatus.coerce(history.deleted[0])
    if previous is None:
        return

    requested = ContractStatus.coerce(history.added[0])
    if requested is not None and previous.can_advance_to(requested):
        return

    shown = requested.name if requested is not None else repr(history.added[0])
    raise _blocked(
        "Contract",
        target.id,
        "UPDATE",
        f"Status cannot move from {previous.name} to {shown}",
    )


def _listeners():
    from contract_kernel.models.contract import Contract
    from contract_kernel.models.status_transition import StatusTransition

    return (
        (StatusTransition, "before_update", _check_status_transition_update),
        (StatusTransition, "before_delete", _check_status_transition_delete),
        (Contract, "before_update", _check_contract_status_progression),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Safe to call more than once; already registered listeners are skipped.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)

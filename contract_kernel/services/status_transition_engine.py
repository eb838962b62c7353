"""
StatusTransitionEngine -- forward-only lifecycle moves with an audit trail.

Responsibility:
    Validates a requested status against the contract's current status and,
    in one transaction, advances the contract and appends exactly one
    StatusTransition row.

Architecture position:
    Kernel > Services -- imperative shell.  Generic over any OrderedStatus
    subclass stored on the model's ``status`` column.

Invariants enforced:
    - Only ``current.next()`` is accepted.  Same status, skipped steps,
      backward moves and values outside the enum are InvalidStatusError.
    - The contract row is read FOR UPDATE and the status write is a
      compare-and-set (``WHERE status = :current``).  Of two racing
      transitions from the same status, at most one commits.
    - The audit row and the status update commit or roll back together.
    - A call without an acting user is a no-op (SKIPPED); nothing is read
      or written.

Failure modes:
    - ContractNotFoundError -> NOT_FOUND.  Existence is checked before the
      requested status is resolved.
    - InvalidStatusError -> INVALID_STATUS (also when a concurrent
      transition won the compare-and-set).
    - Anything else -> DEPENDENCY_FAILURE, see TransactionalService._run.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from contract_kernel.domain.clock import Clock
from contract_kernel.domain.dtos import ContractInfo
from contract_kernel.domain.status import ContractStatus, OrderedStatus
from contract_kernel.exceptions import ContractNotFoundError, InvalidStatusError
from contract_kernel.logging_config import LogContext, get_logger
from contract_kernel.models.contract import Contract
from contract_kernel.models.status_transition import StatusTransition
from contract_kernel.selectors.contract_selector import ContractSelector
from contract_kernel.services.base import LifecycleResult, TransactionalService

logger = get_logger("services.status_transition")

TRANSITION_FAILED_MESSAGE = "Some dependency failed while updating contract status"


class StatusTransitionEngine(TransactionalService):
    """
    Applies single-step status transitions to contracts.

    Example:
        engine = StatusTransitionEngine(session_factory)
        result = engine.transition(contract_id, ContractStatus.CONFIRMED, user.id)
        if result.is_success:
            ...
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        status_enum: type[OrderedStatus] = ContractStatus,
    ):
        super().__init__(session_factory, clock)
        self._status_enum = status_enum

    def transition(
        self,
        contract_id: UUID,
        new_status: object,
        acting_user_id: UUID | None,
    ) -> LifecycleResult[ContractInfo]:
        """
        Move a contract to ``new_status``.

        ``new_status`` may be a status member, its integer value or its
        name; anything that does not resolve is INVALID_STATUS.
        """
        if acting_user_id is None:
            logger.info(
                "transition_skipped",
                extra={"contract_id": str(contract_id), "reason": "no_acting_user"},
            )
            return LifecycleResult.skipped()

        with LogContext.bind(contract_id=contract_id, actor_id=acting_user_id):
            return self._run(
                "status_transition",
                TRANSITION_FAILED_MESSAGE,
                lambda session: self._apply(
                    session, contract_id, new_status, acting_user_id
                ),
            )

    def _lock_contract(self, session: Session, contract_id: UUID):
        """Read the current status under a row lock (no-op lock on SQLite)."""
        return session.execute(
            select(Contract.status)
            .where(Contract.id == contract_id)
            .with_for_update()
        ).scalar_one_or_none()

    def _apply(
        self,
        session: Session,
        contract_id: UUID,
        new_status: object,
        acting_user_id: UUID,
    ) -> ContractInfo:
        current = self._lock_contract(session, contract_id)
        if current is None:
            raise ContractNotFoundError(str(contract_id))

        requested = self._status_enum.coerce(new_status)
        if requested is None:
            logger.warning(
                "transition_rejected",
                extra={
                    "current_status": current.name,
                    "requested_status": repr(new_status),
                    "reason": "unknown_status",
                },
            )
            raise InvalidStatusError(new_status, current)

        if not current.can_advance_to(requested):
            logger.warning(
                "transition_rejected",
                extra={
                    "current_status": current.name,
                    "requested_status": requested.name,
                    "reason": "not_next_status",
                },
            )
            raise InvalidStatusError(requested, current)

        updated = session.execute(
            update(Contract)
            .where(Contract.id == contract_id, Contract.status == current)
            .values(status=requested)
            .execution_options(synchronize_session=False)
        )
        if updated.rowcount != 1:
            logger.warning(
                "transition_rejected",
                extra={
                    "current_status": current.name,
                    "requested_status": requested.name,
                    "reason": "concurrent_transition",
                },
            )
            raise InvalidStatusError(requested, current)

        session.add(
            StatusTransition(
                who=acting_user_id,
                contract_id=contract_id,
                initial_status=current,
                final_status=requested,
                created_at=self._clock.now(),
            )
        )
        session.flush()

        logger.info(
            "status_transitioned",
            extra={"initial_status": current.name, "final_status": requested.name},
        )
        return ContractSelector(session).get_contract(contract_id)

"""
ContractCreationOrchestrator -- atomic creation of a contract and its links.

Responsibility:
    Creates a contract together with its attachment links, school links and
    expected metrics and, when the payload names a draft, promotes that
    draft: records a DRAFT -> SENT transition and deletes the draft.  All of
    it happens in one transaction.

Architecture position:
    Kernel > Services -- imperative shell.  Extends TransactionalService,
    which owns the transaction and the failure normalization.

Protocol (one transaction):
    1. Insert the contract with status SENT, whatever the payload says.
    2. Link attachments.           3. Link schools.
    4. Insert one expected metric per (metric, value).
    5. If draft_id: lock the draft (DraftNotFoundError when missing), append
       the DRAFT -> SENT transition capturing the draft's id and creation
       time, delete the draft.
    6. Commit and return the persisted contract read back from storage.

Failure modes:
    - DraftNotFoundError -> NOT_FOUND, nothing persisted.
    - Unknown school, metric or attachment ids surface as IntegrityError
      from the foreign keys -> DEPENDENCY_FAILURE, nothing persisted.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from contract_kernel.domain.dtos import ContractCreation, ContractInfo
from contract_kernel.domain.status import ContractStatus
from contract_kernel.exceptions import DraftNotFoundError
from contract_kernel.logging_config import LogContext, get_logger
from contract_kernel.models.contract import (
    Contract,
    ExpectedMetric,
    contract_attachments,
    contract_schools,
)
from contract_kernel.models.draft import Draft
from contract_kernel.models.status_transition import StatusTransition
from contract_kernel.selectors.contract_selector import ContractSelector
from contract_kernel.services.base import LifecycleResult, TransactionalService

logger = get_logger("services.contract_creation")

CREATION_FAILED_MESSAGE = "Some dependency failed while creating contract"


class ContractCreationOrchestrator(TransactionalService):
    """
    Creates contracts atomically.

    Example:
        orchestrator = ContractCreationOrchestrator(session_factory)
        result = orchestrator.create_contract(payload, acting_user_id=user.id)
        contract = result.unwrap()
    """

    def create_contract(
        self,
        payload: ContractCreation,
        acting_user_id: UUID | None = None,
    ) -> LifecycleResult[ContractInfo]:
        """
        Create a contract from ``payload``.

        ``acting_user_id`` is recorded as ``who`` on the draft promotion
        transition; it defaults to ``payload.created_by``.
        """
        actor = acting_user_id or payload.created_by
        with LogContext.bind(actor_id=actor, draft_id=payload.draft_id):
            return self._run(
                "create_contract",
                CREATION_FAILED_MESSAGE,
                lambda session: self._create(session, payload, actor),
            )

    def _create(
        self,
        session: Session,
        payload: ContractCreation,
        actor: UUID,
    ) -> ContractInfo:
        if payload.status is not None and payload.status != ContractStatus.SENT:
            logger.debug(
                "payload_status_ignored",
                extra={"requested_status": payload.status},
            )

        contract = Contract(
            id=uuid4(),
            name=payload.name,
            country_id=payload.country_id,
            currency_id=payload.currency_id,
            frequency_id=payload.frequency_id,
            isp_id=payload.isp_id,
            lta_id=payload.lta_id,
            budget=payload.budget,
            government_behalf=payload.government_behalf,
            start_date=payload.start_date,
            end_date=payload.end_date,
            created_by=payload.created_by,
            status=ContractStatus.SENT,
        )
        session.add(contract)
        session.flush()

        self._link(session, contract_attachments, "attachment_id", contract.id, payload.attachment_ids)
        self._link(session, contract_schools, "school_id", contract.id, payload.school_ids)

        session.add_all(
            [
                ExpectedMetric(
                    contract_id=contract.id,
                    metric_id=expected.metric_id,
                    value=expected.value,
                )
                for expected in payload.expected_metrics
            ]
        )
        session.flush()

        if payload.draft_id is not None:
            self._promote_draft(session, payload.draft_id, contract.id, actor)

        logger.info(
            "contract_created",
            extra={
                "contract_id": str(contract.id),
                "schools": len(payload.school_ids),
                "expected_metrics": len(payload.expected_metrics),
                "attachments": len(payload.attachment_ids),
                "from_draft": payload.draft_id is not None,
            },
        )
        return ContractSelector(session).get_contract(contract.id)

    def _link(self, session: Session, table, column: str, contract_id: UUID, ids) -> None:
        """Bulk-insert association rows; duplicate ids are linked once."""
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return
        session.execute(
            insert(table),
            [{"contract_id": contract_id, column: linked_id} for linked_id in unique_ids],
        )

    def _promote_draft(
        self,
        session: Session,
        draft_id: UUID,
        contract_id: UUID,
        actor: UUID,
    ) -> None:
        draft = session.execute(
            select(Draft).where(Draft.id == draft_id).with_for_update()
        ).scalar_one_or_none()
        if draft is None:
            raise DraftNotFoundError(str(draft_id))

        session.add(
            StatusTransition(
                who=actor,
                contract_id=contract_id,
                initial_status=ContractStatus.DRAFT,
                final_status=ContractStatus.SENT,
                data={
                    "draft_id": str(draft.id),
                    "draft_creation": draft.created_at.isoformat(),
                },
                created_at=self._clock.now(),
            )
        )
        session.delete(draft)
        session.flush()

        logger.info("draft_promoted", extra={"contract_id": str(contract_id)})

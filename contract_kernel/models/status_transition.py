"""
Module: contract_kernel.models.status_transition
Responsibility: The append-only ledger of contract lifecycle changes.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/status.py only.

Invariants enforced:
    - Rows are inserted once and never updated or deleted
      (db/immutability.py raises ImmutabilityViolationError on both).
    - Every committed status change of a contract has exactly one row here,
      written in the same transaction as the change.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_kernel.db.base import Base, OrderedStatusType, UUIDString
from contract_kernel.domain.status import ContractStatus

if TYPE_CHECKING:
    from contract_kernel.domain.dtos import StatusTransitionInfo
    from contract_kernel.models.contract import Contract


class StatusTransition(Base):
    __tablename__ = "status_transitions"

    __table_args__ = (Index("idx_status_transition_contract", "contract_id"),)

    who: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("contracts.id"), nullable=False
    )
    initial_status: Mapped[ContractStatus] = mapped_column(
        OrderedStatusType(ContractStatus), nullable=False
    )
    final_status: Mapped[ContractStatus] = mapped_column(
        OrderedStatusType(ContractStatus), nullable=False
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    contract: Mapped[Contract] = relationship()

    def __repr__(self) -> str:
        return (
            f"<StatusTransition {self.contract_id} "
            f"{self.initial_status.name}->{self.final_status.name}>"
        )

    def to_dto(self) -> StatusTransitionInfo:
        from contract_kernel.domain.dtos import StatusTransitionInfo

        return StatusTransitionInfo(
            id=self.id,
            contract_id=self.contract_id,
            who=self.who,
            initial_status=self.initial_status,
            final_status=self.final_status,
            data=dict(self.data) if self.data is not None else None,
            created_at=self.created_at,
        )

"""
Module: contract_kernel.models.contract
Responsibility: ORM persistence for contracts, their expected metrics,
    payments, and the school/attachment association tables.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/status.py only.

Invariants enforced:
    - status only moves forward one step at a time; enforced by
      StatusTransitionEngine, never by direct assignment elsewhere.
    - One expected metric per (contract, metric)
      (uq_expected_metric_contract_metric).
    - Contracts own their expected metrics (delete-orphan); schools and
      attachments are shared and only linked through association rows.

Failure modes:
    - IntegrityError when an association row points at an unknown school or
      attachment, or an expected metric at an unknown metric.  The creation
      orchestrator turns these into DependencyFailureError after rollback.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_kernel.db.base import Base, OrderedStatusType, TrackedBase, UUIDString
from contract_kernel.domain.status import ContractStatus
from contract_kernel.models.reference import (
    Attachment,
    Country,
    Currency,
    Frequency,
    Isp,
    Lta,
    School,
)

if TYPE_CHECKING:
    from contract_kernel.models.status_transition import StatusTransition


contract_schools = Table(
    "contract_schools",
    Base.metadata,
    Column("contract_id", UUIDString(), ForeignKey("contracts.id"), primary_key=True),
    Column("school_id", UUIDString(), ForeignKey("schools.id"), primary_key=True),
)

contract_attachments = Table(
    "contract_attachments",
    Base.metadata,
    Column("contract_id", UUIDString(), ForeignKey("contracts.id"), primary_key=True),
    Column(
        "attachment_id", UUIDString(), ForeignKey("attachments.id"), primary_key=True
    ),
)


class Contract(TrackedBase):
    """
    A funded agreement connecting schools to an ISP.

    ``budget`` is kept as the decimal string the caller supplied so that the
    stored value is never subject to float or scale conversion.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        Index("idx_contract_country_status", "country_id", "status"),
        Index("idx_contract_lta", "lta_id"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    country_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("countries.id"), nullable=False
    )
    currency_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("currencies.id"), nullable=False
    )
    frequency_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("frequencies.id"), nullable=False
    )
    isp_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("isps.id"), nullable=False
    )
    lta_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("ltas.id"), nullable=True
    )
    budget: Mapped[str] = mapped_column(String(64), nullable=False)
    government_behalf: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_by: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    status: Mapped[ContractStatus] = mapped_column(
        OrderedStatusType(ContractStatus),
        default=ContractStatus.SENT,
        nullable=False,
    )

    country: Mapped[Country] = relationship()
    currency: Mapped[Currency] = relationship()
    frequency: Mapped[Frequency] = relationship()
    isp: Mapped[Isp] = relationship()
    lta: Mapped[Lta | None] = relationship()

    schools: Mapped[list[School]] = relationship(secondary=contract_schools)
    attachments: Mapped[list[Attachment]] = relationship(secondary=contract_attachments)
    expected_metrics: Mapped[list[ExpectedMetric]] = relationship(
        back_populates="contract",
        cascade="all, delete-orphan",
    )
    payments: Mapped[list[Payment]] = relationship(back_populates="contract")
    status_transitions: Mapped[list[StatusTransition]] = relationship(
        order_by="StatusTransition.created_at",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Contract {self.name}: {self.status.name}>"


class ExpectedMetric(TrackedBase):
    """Target value of one metric for every school of a contract."""

    __tablename__ = "expected_metrics"

    __table_args__ = (
        UniqueConstraint(
            "contract_id", "metric_id", name="uq_expected_metric_contract_metric"
        ),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("contracts.id"), nullable=False
    )
    metric_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("metrics.id"), nullable=False
    )
    value: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    contract: Mapped[Contract] = relationship(back_populates="expected_metrics")


class Payment(TrackedBase):
    """A payment made against a contract; summed as spend."""

    __tablename__ = "payments"

    __table_args__ = (Index("idx_payment_contract", "contract_id"),)

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("contracts.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    contract: Mapped[Contract] = relationship(back_populates="payments")

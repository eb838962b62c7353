"""
Module: contract_kernel.models.draft
Responsibility: ORM persistence for contract drafts -- pre-contract staging
    rows with a subset of contract attributes and no status.
Architecture position: Kernel > Models.  May import from db/base.py only.

A draft is consumed exactly once: ContractCreationOrchestrator records a
DRAFT -> SENT transition capturing the draft id and creation time, then
deletes the row in the same transaction.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_kernel.db.base import TrackedBase, UUIDString
from contract_kernel.models.reference import Country, Isp, Lta


class Draft(TrackedBase):
    __tablename__ = "drafts"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    country_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("countries.id"), nullable=True
    )
    isp_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("isps.id"), nullable=True
    )
    lta_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("ltas.id"), nullable=True
    )
    government_behalf: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    budget: Mapped[str | None] = mapped_column(String(64), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Placeholder shaped like {"schools": [{"id": "..."}]}
    schools: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    country: Mapped[Country | None] = relationship()
    isp: Mapped[Isp | None] = relationship()
    lta: Mapped[Lta | None] = relationship()

    @property
    def number_of_schools(self) -> int | None:
        if not self.schools:
            return None
        return len(self.schools.get("schools") or [])

    def __repr__(self) -> str:
        return f"<Draft {self.name}>"

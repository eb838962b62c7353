"""
Module: contract_kernel.models.measure
Responsibility: Observed connectivity values per school and metric.
Architecture position: Kernel > Models.  May import from db/base.py only.

Measures are written by an external ingestion process.  The kernel only
reads them, averaged per (school, metric), for connectivity classification.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from contract_kernel.db.base import Base, UUIDString


class Measure(Base):
    __tablename__ = "measures"

    __table_args__ = (Index("idx_measure_school_metric", "school_id", "metric_id"),)

    school_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("schools.id"), nullable=False
    )
    metric_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("metrics.id"), nullable=False
    )
    value: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    measured_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

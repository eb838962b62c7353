"""
Module: contract_kernel.models.reference
Responsibility: ORM persistence for the reference data contracts point at --
    countries, currencies, payment frequencies, ISPs, LTAs, schools, metrics
    and attachments.
Architecture position: Kernel > Models.  May import from db/base.py only.

The kernel reads these rows and links them to contracts; it never changes
their own fields.  Their CRUD belongs to the surrounding application.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_kernel.db.base import Base, TrackedBase, UUIDString


lta_isps = Table(
    "lta_isps",
    Base.metadata,
    Column("lta_id", UUIDString(), ForeignKey("ltas.id"), primary_key=True),
    Column("isp_id", UUIDString(), ForeignKey("isps.id"), primary_key=True),
)


class Country(Base):
    __tablename__ = "countries"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(3), nullable=False, unique=True)
    flag_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Country {self.code}>"


class Currency(Base):
    __tablename__ = "currencies"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(3), nullable=False, unique=True)


class Frequency(Base):
    __tablename__ = "frequencies"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class Isp(Base):
    __tablename__ = "isps"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    country_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("countries.id"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Isp {self.name}>"


class Lta(Base):
    """Long-term agreement grouping contracts and drafts for presentation."""

    __tablename__ = "ltas"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    country_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("countries.id"), nullable=True
    )

    isps: Mapped[list[Isp]] = relationship(secondary=lta_isps, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Lta {self.name}>"


class School(Base):
    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("countries.id"), nullable=True
    )


class Metric(Base):
    __tablename__ = "metrics"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)


class Attachment(TrackedBase):
    """Opaque file reference; storage is owned by the attachment collaborator."""

    __tablename__ = "attachments"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)

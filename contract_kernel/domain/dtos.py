"""
Data Transfer Objects for the contract kernel.

Responsibility:
    Frozen dataclasses that cross layer boundaries: creation payloads going
    into services, persisted-contract snapshots coming out of them, and the
    read rows selectors hand to the presentation builder.  Services never
    return ORM instances.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from contract_kernel.domain.connectivity import ExpectedMetricSpec
from contract_kernel.domain.status import ContractStatus


# =============================================================================
# Write side
# =============================================================================


@dataclass(frozen=True)
class ContractCreation:
    """
    Everything needed to create a contract in one transaction.

    ``status`` is accepted for payload compatibility and ignored: creation
    always yields SENT.  ``budget`` stays a string end to end; it only has
    to parse as a Decimal.
    """

    name: str
    country_id: UUID
    currency_id: UUID
    frequency_id: UUID
    isp_id: UUID
    budget: str
    start_date: date
    end_date: date
    created_by: UUID
    government_behalf: bool = False
    lta_id: UUID | None = None
    school_ids: tuple[UUID, ...] = ()
    expected_metrics: tuple[ExpectedMetricSpec, ...] = ()
    attachment_ids: tuple[UUID, ...] = ()
    draft_id: UUID | None = None
    status: int | None = None

    def __post_init__(self) -> None:
        try:
            Decimal(self.budget)
        except (InvalidOperation, TypeError):
            raise ValueError(
                f"budget must be a decimal string, got {self.budget!r}"
            ) from None
        # Accept lists from callers but keep the DTO hashable
        object.__setattr__(self, "school_ids", tuple(self.school_ids))
        object.__setattr__(self, "expected_metrics", tuple(self.expected_metrics))
        object.__setattr__(self, "attachment_ids", tuple(self.attachment_ids))


@dataclass(frozen=True)
class ContractInfo:
    """Snapshot of a persisted contract."""

    id: UUID
    name: str
    country_id: UUID
    currency_id: UUID
    frequency_id: UUID
    isp_id: UUID
    lta_id: UUID | None
    budget: str
    government_behalf: bool
    start_date: date
    end_date: date
    created_by: UUID
    status: ContractStatus
    school_ids: tuple[UUID, ...] = ()
    expected_metrics: tuple[ExpectedMetricSpec, ...] = ()
    attachment_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class StatusTransitionInfo:
    """One entry of a contract's lifecycle ledger."""

    id: UUID
    contract_id: UUID
    who: UUID
    initial_status: ContractStatus
    final_status: ContractStatus
    data: dict[str, Any] | None
    created_at: datetime


# =============================================================================
# Read side
# =============================================================================


@dataclass(frozen=True)
class CountrySummary:
    name: str
    code: str
    flag_url: str | None = None


@dataclass(frozen=True)
class ContractRow:
    """A visible contract with the relations the list view needs."""

    id: UUID
    name: str
    isp_name: str | None
    status: ContractStatus
    country: CountrySummary | None
    lta_id: UUID | None
    budget: str
    total_spend: Decimal
    school_ids: tuple[UUID, ...]
    expected_metrics: tuple[ExpectedMetricSpec, ...]


@dataclass(frozen=True)
class DraftRow:
    id: UUID
    name: str
    isp_name: str | None
    country: CountrySummary | None
    lta_id: UUID | None
    number_of_schools: int | None


@dataclass(frozen=True)
class LtaRow:
    id: UUID
    name: str


@dataclass(frozen=True)
class StatusCountRow:
    status: ContractStatus
    count: int


@dataclass(frozen=True)
class ContractListRows:
    """Everything a list view is built from, already access-scoped."""

    contracts: tuple[ContractRow, ...] = ()
    drafts: tuple[DraftRow, ...] = ()
    ltas: tuple[LtaRow, ...] = ()
    school_averages: dict[UUID, dict[UUID, Decimal]] = field(default_factory=dict)

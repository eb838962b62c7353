"""
Presentation builder -- list and count views over scoped contract data.

Responsibility:
    Pure assembly of view models from selector rows and school measure
    averages.  All grouping is keyed by stable ids (LTA id, school id);
    names are resolved only when a view is rendered with ``as_dict()``.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Fed by ContractSelector via
    ContractViewService.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from contract_kernel.domain.connectivity import ConnectivityTally
from contract_kernel.domain.dtos import (
    ContractListRows,
    ContractRow,
    CountrySummary,
    DraftRow,
    StatusCountRow,
)
from contract_kernel.domain.status import ContractStatus


def percentage(total: Decimal | int, part: Decimal | int) -> int:
    """Whole-number percentage of ``part`` in ``total``, 0 when either is 0."""
    if part == 0 or total == 0:
        return 0
    ratio = Decimal(part) / Decimal(total) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# List view
# =============================================================================


@dataclass(frozen=True)
class SchoolsConnection:
    """Connectivity buckets with counts and their share of the schools."""

    without_connection: int
    at_least_one_below_average: int
    all_at_or_above_average: int
    without_connection_pct: int
    at_least_one_below_average_pct: int
    all_at_or_above_average_pct: int

    @classmethod
    def from_tally(cls, tally: ConnectivityTally) -> SchoolsConnection:
        total = tally.total
        return cls(
            without_connection=tally.without_connection,
            at_least_one_below_average=tally.at_least_one_below_average,
            all_at_or_above_average=tally.all_at_or_above_average,
            without_connection_pct=percentage(total, tally.without_connection),
            at_least_one_below_average_pct=percentage(
                total, tally.at_least_one_below_average
            ),
            all_at_or_above_average_pct=percentage(
                total, tally.all_at_or_above_average
            ),
        )


@dataclass(frozen=True)
class BudgetSummary:
    budget: str
    total_spend: Decimal
    spend_pct: int


@dataclass(frozen=True)
class ContractListEntry:
    """One line of the list view -- a contract or a draft."""

    id: UUID
    name: str
    isp: str | None
    status: str
    country: CountrySummary | None
    number_of_schools: int | None
    lta_id: UUID | None
    schools_connection: SchoolsConnection | None = None
    budget: BudgetSummary | None = None

    @property
    def is_draft(self) -> bool:
        return self.status == ContractStatus.DRAFT.label


@dataclass(frozen=True)
class LtaBucket:
    lta_id: UUID
    name: str
    entries: tuple[ContractListEntry, ...] = ()


@dataclass(frozen=True)
class ContractListView:
    """Flat entries plus one bucket per visible LTA (possibly empty)."""

    contracts: tuple[ContractListEntry, ...]
    ltas: tuple[LtaBucket, ...]

    def bucket(self, lta_id: UUID) -> LtaBucket | None:
        for bucket in self.ltas:
            if bucket.lta_id == lta_id:
                return bucket
        return None

    def as_dict(self) -> dict[str, Any]:
        """Render with LTA buckets keyed by name."""
        return {
            "ltas": {
                bucket.name: [_entry_dict(e) for e in bucket.entries]
                for bucket in self.ltas
            },
            "contracts": [_entry_dict(e) for e in self.contracts],
        }


def _entry_dict(entry: ContractListEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": str(entry.id),
        "name": entry.name,
        "isp": entry.isp,
        "status": entry.status,
        "country": (
            {
                "name": entry.country.name,
                "code": entry.country.code,
                "flag_url": entry.country.flag_url,
            }
            if entry.country
            else None
        ),
        "number_of_schools": entry.number_of_schools,
        "lta_id": str(entry.lta_id) if entry.lta_id else None,
    }
    if entry.schools_connection is not None:
        sc = entry.schools_connection
        data["schools_connection"] = {
            "without_connection": sc.without_connection,
            "at_least_one_below_average": sc.at_least_one_below_average,
            "all_at_or_above_average": sc.all_at_or_above_average,
            "without_connection_pct": sc.without_connection_pct,
            "at_least_one_below_average_pct": sc.at_least_one_below_average_pct,
            "all_at_or_above_average_pct": sc.all_at_or_above_average_pct,
        }
    if entry.budget is not None:
        data["budget"] = {
            "budget": entry.budget.budget,
            "total_spend": str(entry.budget.total_spend),
            "spend_pct": entry.budget.spend_pct,
        }
    return data


def _draft_entry(draft: DraftRow) -> ContractListEntry:
    return ContractListEntry(
        id=draft.id,
        name=draft.name,
        isp=draft.isp_name,
        status=ContractStatus.DRAFT.label,
        country=draft.country,
        number_of_schools=draft.number_of_schools,
        lta_id=draft.lta_id,
    )


def _contract_entry(
    contract: ContractRow,
    school_averages: dict[UUID, dict[UUID, Decimal]],
) -> ContractListEntry:
    tally = ConnectivityTally.for_schools(
        contract.school_ids, school_averages, contract.expected_metrics
    )
    try:
        budget = Decimal(contract.budget)
    except InvalidOperation:
        budget = Decimal(0)
    if not budget.is_finite():
        budget = Decimal(0)
    return ContractListEntry(
        id=contract.id,
        name=contract.name,
        isp=contract.isp_name,
        status=contract.status.label,
        country=contract.country,
        number_of_schools=len(contract.school_ids),
        lta_id=contract.lta_id,
        schools_connection=SchoolsConnection.from_tally(tally),
        budget=BudgetSummary(
            budget=contract.budget,
            total_spend=contract.total_spend,
            spend_pct=percentage(budget, contract.total_spend),
        ),
    )


def build_list_view(rows: ContractListRows) -> ContractListView:
    """
    Assemble the list view: drafts first, then contracts.

    Entries with an LTA go into that LTA's bucket; an entry whose LTA is
    not among the visible LTAs is left out of the view.
    """
    flat: list[ContractListEntry] = []
    buckets: dict[UUID, list[ContractListEntry]] = {lta.id: [] for lta in rows.ltas}

    entries = [_draft_entry(d) for d in rows.drafts] + [
        _contract_entry(c, rows.school_averages) for c in rows.contracts
    ]
    for entry in entries:
        if entry.lta_id is None:
            flat.append(entry)
        elif entry.lta_id in buckets:
            buckets[entry.lta_id].append(entry)

    return ContractListView(
        contracts=tuple(flat),
        ltas=tuple(
            LtaBucket(lta_id=lta.id, name=lta.name, entries=tuple(buckets[lta.id]))
            for lta in rows.ltas
        ),
    )


# =============================================================================
# Count view
# =============================================================================


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int


@dataclass(frozen=True)
class ContractCountView:
    counts: tuple[StatusCount, ...] = field(default_factory=tuple)
    total_count: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "counts": [{"status": c.status, "count": c.count} for c in self.counts],
            "total_count": self.total_count,
        }


def build_count_view(
    status_counts: Sequence[StatusCountRow],
    draft_count: int,
) -> ContractCountView:
    """Contract counts per status plus a synthetic Draft bucket."""
    counts = [StatusCount(status=row.status.label, count=row.count) for row in status_counts]
    counts.append(StatusCount(status=ContractStatus.DRAFT.label, count=draft_count))
    return ContractCountView(
        counts=tuple(counts),
        total_count=sum(row.count for row in status_counts) + draft_count,
    )

"""
Module: contract_kernel.selectors.contract_selector
Responsibility: Read-only, access-scoped queries over contracts, drafts,
    LTAs and school measures.  Converts ORM rows into the frozen DTOs the
    presentation builder consumes.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.  MUST NOT import from services/.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Every list/count query is filtered by the caller's AccessScope; the
      SQL criteria built here mirror AccessScope.permits_* exactly.
    - Measure averages are computed in a single grouped query per view and
      keyed by school id, then metric id.

Failure modes:
    - Returns None or empty collections when nothing matches (never raises
      on absence of data).
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import false, func, select
from sqlalchemy.orm import Session, selectinload

from contract_kernel.domain.access_scope import AccessScope
from contract_kernel.domain.connectivity import ExpectedMetricSpec
from contract_kernel.domain.dtos import (
    ContractInfo,
    ContractListRows,
    ContractRow,
    CountrySummary,
    DraftRow,
    LtaRow,
    StatusCountRow,
    StatusTransitionInfo,
)
from contract_kernel.models.contract import Contract, Payment
from contract_kernel.models.draft import Draft
from contract_kernel.models.measure import Measure
from contract_kernel.models.reference import Country, Isp, Lta
from contract_kernel.models.status_transition import StatusTransition
from contract_kernel.selectors.base import BaseSelector


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # SQLite hands back floats for aggregates; go through str to keep the
    # shortest repr instead of the binary expansion.
    return Decimal(str(value))


def _country_summary(country: Country | None) -> CountrySummary | None:
    if country is None:
        return None
    return CountrySummary(name=country.name, code=country.code, flag_url=country.flag_url)


def contract_to_info(contract: Contract) -> ContractInfo:
    """Snapshot a loaded Contract with its collections."""
    return ContractInfo(
        id=contract.id,
        name=contract.name,
        country_id=contract.country_id,
        currency_id=contract.currency_id,
        frequency_id=contract.frequency_id,
        isp_id=contract.isp_id,
        lta_id=contract.lta_id,
        budget=contract.budget,
        government_behalf=contract.government_behalf,
        start_date=contract.start_date,
        end_date=contract.end_date,
        created_by=contract.created_by,
        status=contract.status,
        school_ids=tuple(sorted((s.id for s in contract.schools), key=str)),
        expected_metrics=tuple(
            ExpectedMetricSpec(metric_id=em.metric_id, value=em.value)
            for em in contract.expected_metrics
        ),
        attachment_ids=tuple(sorted((a.id for a in contract.attachments), key=str)),
    )


class ContractSelector(BaseSelector[Contract]):
    """
    Selector for contract list, count and history queries.

    Contract:
        Constructed with the caller's session and the AccessScope of the
        user the results are for.  ``AccessScope.everything()`` disables
        filtering (used for read-back after writes).
    """

    def __init__(self, session: Session, scope: AccessScope | None = None):
        super().__init__(session)
        self.scope = scope or AccessScope.everything()

    # -------------------------------------------------------------------------
    # Scope -> SQL criteria
    # -------------------------------------------------------------------------

    def _country_criterion(self, column):
        if self.scope.country_id is None:
            return false()
        return column == self.scope.country_id

    def _contract_criteria(self) -> list:
        if self.scope.unrestricted:
            return []
        criteria = [self._country_criterion(Contract.country_id)]
        if self.scope.government_behalf_only:
            criteria.append(Contract.government_behalf.is_(True))
        if self.scope.isp_name is not None:
            criteria.append(Contract.isp.has(Isp.name == self.scope.isp_name))
        return criteria

    def _draft_criteria(self) -> list:
        if self.scope.unrestricted:
            return []
        criteria = [self._country_criterion(Draft.country_id)]
        if self.scope.government_behalf_only:
            criteria.append(Draft.government_behalf.is_(True))
        if self.scope.isp_name is not None:
            criteria.append(Draft.isp.has(Isp.name == self.scope.isp_name))
        return criteria

    def _lta_criteria(self) -> list:
        if self.scope.unrestricted:
            return []
        criteria = [self._country_criterion(Lta.country_id)]
        if self.scope.isp_name is not None:
            criteria.append(Lta.isps.any(Isp.name == self.scope.isp_name))
        return criteria

    # -------------------------------------------------------------------------
    # Single contract
    # -------------------------------------------------------------------------

    def get_contract(self, contract_id: UUID) -> ContractInfo | None:
        """
        Load one contract with its collections, bypassing any stale copy in
        the session's identity map.
        """
        contract = self.session.execute(
            select(Contract)
            .where(Contract.id == contract_id, *self._contract_criteria())
            .options(
                selectinload(Contract.schools),
                selectinload(Contract.attachments),
                selectinload(Contract.expected_metrics),
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if contract is None:
            return None
        return contract_to_info(contract)

    def contract_exists(self, contract_id: UUID) -> bool:
        return (
            self.session.execute(
                select(Contract.id).where(Contract.id == contract_id)
            ).scalar_one_or_none()
            is not None
        )

    # -------------------------------------------------------------------------
    # List view rows
    # -------------------------------------------------------------------------

    def contract_rows(self) -> tuple[ContractRow, ...]:
        contracts = self.session.execute(
            select(Contract)
            .where(*self._contract_criteria())
            .options(
                selectinload(Contract.isp),
                selectinload(Contract.country),
                selectinload(Contract.schools),
                selectinload(Contract.expected_metrics),
            )
            .order_by(Contract.created_at, Contract.id)
        ).scalars().all()

        spend = self.total_spend([c.id for c in contracts])

        return tuple(
            ContractRow(
                id=c.id,
                name=c.name,
                isp_name=c.isp.name if c.isp else None,
                status=c.status,
                country=_country_summary(c.country),
                lta_id=c.lta_id,
                budget=c.budget,
                total_spend=spend.get(c.id, Decimal("0")),
                school_ids=tuple(sorted((s.id for s in c.schools), key=str)),
                expected_metrics=tuple(
                    ExpectedMetricSpec(metric_id=em.metric_id, value=em.value)
                    for em in c.expected_metrics
                ),
            )
            for c in contracts
        )

    def draft_rows(self) -> tuple[DraftRow, ...]:
        drafts = self.session.execute(
            select(Draft)
            .where(*self._draft_criteria())
            .options(selectinload(Draft.isp), selectinload(Draft.country))
            .order_by(Draft.created_at, Draft.id)
        ).scalars().all()

        return tuple(
            DraftRow(
                id=d.id,
                name=d.name,
                isp_name=d.isp.name if d.isp else None,
                country=_country_summary(d.country),
                lta_id=d.lta_id,
                number_of_schools=d.number_of_schools,
            )
            for d in drafts
        )

    def lta_rows(self) -> tuple[LtaRow, ...]:
        rows = self.session.execute(
            select(Lta.id, Lta.name).where(*self._lta_criteria()).order_by(Lta.name, Lta.id)
        ).all()
        return tuple(LtaRow(id=row.id, name=row.name) for row in rows)

    def total_spend(self, contract_ids: list[UUID]) -> dict[UUID, Decimal]:
        """Sum of payments per contract."""
        if not contract_ids:
            return {}
        rows = self.session.execute(
            select(Payment.contract_id, func.sum(Payment.amount))
            .where(Payment.contract_id.in_(contract_ids))
            .group_by(Payment.contract_id)
        ).all()
        return {contract_id: _to_decimal(total) for contract_id, total in rows}

    def school_metric_averages(
        self, school_ids: set[UUID]
    ) -> dict[UUID, dict[UUID, Decimal]]:
        """
        Average measured value per (school, metric).

        Schools without any measure are absent from the result.
        """
        if not school_ids:
            return {}
        rows = self.session.execute(
            select(Measure.school_id, Measure.metric_id, func.avg(Measure.value))
            .where(Measure.school_id.in_(sorted(school_ids, key=str)))
            .group_by(Measure.school_id, Measure.metric_id)
        ).all()

        averages: dict[UUID, dict[UUID, Decimal]] = {}
        for school_id, metric_id, average in rows:
            averages.setdefault(school_id, {})[metric_id] = _to_decimal(average)
        return averages

    def list_rows(self) -> ContractListRows:
        """Everything the list view needs, already scoped."""
        contracts = self.contract_rows()
        school_ids = {school_id for c in contracts for school_id in c.school_ids}
        return ContractListRows(
            contracts=contracts,
            drafts=self.draft_rows(),
            ltas=self.lta_rows(),
            school_averages=self.school_metric_averages(school_ids),
        )

    # -------------------------------------------------------------------------
    # Count view rows
    # -------------------------------------------------------------------------

    def status_counts(self) -> tuple[StatusCountRow, ...]:
        rows = self.session.execute(
            select(Contract.status, func.count(Contract.id))
            .where(*self._contract_criteria())
            .group_by(Contract.status)
            .order_by(Contract.status)
        ).all()
        return tuple(StatusCountRow(status=status, count=count) for status, count in rows)

    def draft_count(self) -> int:
        return self.session.execute(
            select(func.count(Draft.id)).where(*self._draft_criteria())
        ).scalar_one()

    # -------------------------------------------------------------------------
    # Lifecycle ledger
    # -------------------------------------------------------------------------

    def transition_history(self, contract_id: UUID) -> list[StatusTransitionInfo]:
        transitions = self.session.execute(
            select(StatusTransition)
            .where(StatusTransition.contract_id == contract_id)
            .order_by(StatusTransition.created_at, StatusTransition.final_status)
        ).scalars().all()
        return [t.to_dto() for t in transitions]

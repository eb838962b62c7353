"""
Contract creation: atomicity, draft promotion and failure normalization.
"""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from contract_kernel.domain.connectivity import ExpectedMetricSpec
from contract_kernel.domain.dtos import ContractCreation
from contract_kernel.domain.status import ContractStatus
from contract_kernel.exceptions import DependencyFailureError, DraftNotFoundError
from contract_kernel.models import (
    Contract,
    Draft,
    ExpectedMetric,
    StatusTransition,
    contract_attachments,
    contract_schools,
)
from contract_kernel.services import LifecycleStatus


def _row_counts(session) -> dict[str, int]:
    return {
        "contracts": session.scalar(select(func.count()).select_from(Contract)),
        "expected_metrics": session.scalar(select(func.count()).select_from(ExpectedMetric)),
        "contract_schools": session.scalar(select(func.count()).select_from(contract_schools)),
        "contract_attachments": session.scalar(
            select(func.count()).select_from(contract_attachments)
        ),
        "status_transitions": session.scalar(
            select(func.count()).select_from(StatusTransition)
        ),
    }


NOTHING = {
    "contracts": 0,
    "expected_metrics": 0,
    "contract_schools": 0,
    "contract_attachments": 0,
    "status_transitions": 0,
}


class TestCreateContract:
    def test_contract_1_scenario(self, orchestrator, make_payload, session):
        result = orchestrator.create_contract(make_payload(name="Contract 1", budget="1000"))

        assert result.status is LifecycleStatus.SUCCESS
        contract = result.contract
        assert contract.name == "Contract 1"
        assert contract.budget == "1000"
        assert contract.status is ContractStatus.SENT
        assert contract.status == 1
        assert len(contract.school_ids) == 1
        assert len(contract.expected_metrics) == 4

        persisted = session.get(Contract, contract.id)
        assert persisted.status is ContractStatus.SENT
        assert len(persisted.schools) == 1
        assert len(persisted.expected_metrics) == 4

    def test_status_in_payload_is_ignored(self, orchestrator, make_payload):
        for requested in (ContractStatus.DRAFT, ContractStatus.COMPLETED, 3):
            result = orchestrator.create_contract(make_payload(status=int(requested)))

            assert result.unwrap().status is ContractStatus.SENT

    def test_links_attachments_and_all_collections(self, orchestrator, make_payload, reference):
        payload = make_payload(
            school_ids=reference.school_ids,
            attachment_ids=reference.attachment_ids,
            lta_id=reference.lta_id,
            government_behalf=True,
        )

        contract = orchestrator.create_contract(payload).unwrap()

        assert set(contract.school_ids) == set(reference.school_ids)
        assert set(contract.attachment_ids) == set(reference.attachment_ids)
        assert {m.metric_id for m in contract.expected_metrics} == set(reference.metric_ids)
        assert all(m.value == Decimal("10") for m in contract.expected_metrics)
        assert contract.lta_id == reference.lta_id
        assert contract.government_behalf is True

    def test_no_transition_row_without_draft(self, orchestrator, make_payload, session):
        orchestrator.create_contract(make_payload())

        assert _row_counts(session)["status_transitions"] == 0

    def test_empty_collections(self, orchestrator, make_payload):
        contract = orchestrator.create_contract(
            make_payload(school_ids=[], expected_metrics=[])
        ).unwrap()

        assert contract.school_ids == ()
        assert contract.expected_metrics == ()

    def test_invalid_budget_rejected_by_payload(self, make_payload):
        with pytest.raises(ValueError, match="budget"):
            make_payload(budget="a lot")

    def test_logs_contract_created(self, orchestrator, make_payload, captured_logs):
        contract = orchestrator.create_contract(make_payload()).unwrap()

        records = [r for r in captured_logs() if r["message"] == "contract_created"]
        assert len(records) == 1
        assert records[0]["contract_id"] == str(contract.id)
        assert records[0]["expected_metrics"] == 4


class TestDraftPromotion:
    def test_draft_is_consumed_exactly_once(
        self, orchestrator, make_payload, make_draft, session, test_actor_id, deterministic_clock
    ):
        draft_id = make_draft()
        draft_created_at = session.get(Draft, draft_id).created_at
        session.rollback()

        result = orchestrator.create_contract(make_payload(draft_id=draft_id))

        assert result.is_success
        contract = result.contract
        assert session.get(Draft, draft_id) is None

        transitions = session.scalars(
            select(StatusTransition).where(StatusTransition.contract_id == contract.id)
        ).all()
        assert len(transitions) == 1
        transition = transitions[0]
        assert transition.initial_status is ContractStatus.DRAFT
        assert transition.final_status is ContractStatus.SENT
        assert transition.who == test_actor_id
        assert transition.data["draft_id"] == str(draft_id)
        assert datetime.fromisoformat(transition.data["draft_creation"]) == draft_created_at
        assert transition.created_at.replace(tzinfo=None) == deterministic_clock.now().replace(
            tzinfo=None
        )

    def test_acting_user_overrides_creator_on_transition(
        self, orchestrator, make_payload, make_draft, session
    ):
        actor = uuid4()
        draft_id = make_draft()

        contract = orchestrator.create_contract(
            make_payload(draft_id=draft_id), acting_user_id=actor
        ).unwrap()

        transition = session.scalars(
            select(StatusTransition).where(StatusTransition.contract_id == contract.id)
        ).one()
        assert transition.who == actor

    def test_second_promotion_of_same_draft_is_not_found(
        self, orchestrator, make_payload, make_draft, session
    ):
        draft_id = make_draft()
        assert orchestrator.create_contract(make_payload(draft_id=draft_id)).is_success

        second = orchestrator.create_contract(make_payload(name="Again", draft_id=draft_id))

        assert second.status is LifecycleStatus.NOT_FOUND
        assert _row_counts(session)["contracts"] == 1
        assert _row_counts(session)["status_transitions"] == 1

    def test_missing_draft_is_not_found_and_nothing_persists(
        self, orchestrator, make_payload, reference, session
    ):
        payload = make_payload(
            draft_id=uuid4(),
            school_ids=reference.school_ids,
            attachment_ids=reference.attachment_ids,
        )

        result = orchestrator.create_contract(payload)

        assert result.status is LifecycleStatus.NOT_FOUND
        assert isinstance(result.error, DraftNotFoundError)
        assert result.error.message == "Draft not found"
        assert result.error.code == "NOT_FOUND"
        assert _row_counts(session) == NOTHING

    def test_unwrap_raises_draft_not_found_verbatim(self, orchestrator, make_payload):
        result = orchestrator.create_contract(make_payload(draft_id=uuid4()))

        with pytest.raises(DraftNotFoundError) as exc_info:
            result.unwrap()
        assert exc_info.value is result.error


class TestAtomicity:
    @pytest.mark.parametrize("bad_reference", ["school", "metric", "attachment"])
    def test_invalid_reference_persists_nothing(
        self, orchestrator, make_payload, reference, session, bad_reference
    ):
        overrides = {
            "school": dict(school_ids=[*reference.school_ids, uuid4()]),
            "metric": dict(
                expected_metrics=[
                    ExpectedMetricSpec(reference.metric_ids[0], "10"),
                    ExpectedMetricSpec(uuid4(), "10"),
                ]
            ),
            "attachment": dict(attachment_ids=[reference.attachment_ids[0], uuid4()]),
        }[bad_reference]

        result = orchestrator.create_contract(make_payload(**overrides))

        assert result.status is LifecycleStatus.DEPENDENCY_FAILURE
        assert _row_counts(session) == NOTHING

    def test_dependency_failure_hides_cause(self, orchestrator, make_payload, captured_logs):
        result = orchestrator.create_contract(make_payload(school_ids=[uuid4()]))

        error = result.error
        assert isinstance(error, DependencyFailureError)
        assert error.code == "FAILED_DEPENDENCY"
        assert error.message == "Some dependency failed while creating contract"
        assert error.__cause__ is not None
        assert "IntegrityError" not in error.message

        failures = [r for r in captured_logs() if r["message"] == "dependency_failure"]
        assert len(failures) == 1
        assert failures[0]["operation"] == "create_contract"
        assert "traceback" in failures[0]

    def test_failed_promotion_keeps_draft(
        self, orchestrator, make_payload, make_draft, session
    ):
        draft_id = make_draft()

        result = orchestrator.create_contract(
            make_payload(draft_id=draft_id, attachment_ids=[uuid4()])
        )

        assert result.status is LifecycleStatus.DEPENDENCY_FAILURE
        assert session.get(Draft, draft_id) is not None
        assert _row_counts(session) == NOTHING

    def test_unknown_country_is_dependency_failure(self, orchestrator, make_payload, session):
        result = orchestrator.create_contract(make_payload(country_id=uuid4()))

        assert result.status is LifecycleStatus.DEPENDENCY_FAILURE
        assert _row_counts(session) == NOTHING

    def test_payload_is_a_frozen_dto(self, make_payload):
        payload = make_payload(school_ids=[uuid4()])

        assert isinstance(payload, ContractCreation)
        assert isinstance(payload.school_ids, tuple)
        with pytest.raises(AttributeError):
            payload.name = "changed"

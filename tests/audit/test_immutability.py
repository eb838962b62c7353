"""
Append-only lifecycle ledger and forward-only contract status.

Verifies:
- StatusTransition rows can never be updated or deleted through the ORM
- An ORM write may only move Contract.status one step forward
- Other contract columns stay editable
- Unregistering the listeners lifts the guard (tamper simulation)
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import select

from contract_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from contract_kernel.domain.status import ContractStatus
from contract_kernel.exceptions import ImmutabilityViolationError
from contract_kernel.models import Contract, StatusTransition


@contextmanager
def disabled_immutability():
    """Temporarily remove the ORM guards to simulate tampering."""
    unregister_immutability_listeners()
    try:
        yield
    finally:
        register_immutability_listeners()


@pytest.fixture
def transitioned_contract_id(orchestrator, transition_engine, make_payload, test_actor_id):
    contract = orchestrator.create_contract(make_payload()).unwrap()
    transition_engine.transition(contract.id, ContractStatus.CONFIRMED, test_actor_id).unwrap()
    return contract.id


def _transition(session, contract_id) -> StatusTransition:
    return session.scalars(
        select(StatusTransition).where(StatusTransition.contract_id == contract_id)
    ).one()


class TestStatusTransitionImmutability:
    def test_update_is_blocked(self, session, transitioned_contract_id, captured_logs):
        transition = _transition(session, transitioned_contract_id)
        transition.final_status = ContractStatus.COMPLETED

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "StatusTransition"
        assert exc_info.value.code == "IMMUTABILITY_VIOLATION"
        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked[0]["operation"] == "UPDATE"

    def test_data_update_is_blocked(self, session, transitioned_contract_id):
        transition = _transition(session, transitioned_contract_id)
        transition.data = {"tampered": True}

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_delete_is_blocked(self, session, transitioned_contract_id):
        session.delete(_transition(session, transitioned_contract_id))

        with pytest.raises(ImmutabilityViolationError, match="cannot be deleted"):
            session.flush()

    def test_guard_can_be_lifted_for_tamper_simulation(self, session, transitioned_contract_id):
        with disabled_immutability():
            session.delete(_transition(session, transitioned_contract_id))
            session.flush()

        assert session.scalars(
            select(StatusTransition).where(StatusTransition.contract_id == transitioned_contract_id)
        ).all() == []


class TestContractStatusProgression:
    def test_backward_orm_write_is_blocked(self, session, transitioned_contract_id):
        contract = session.get(Contract, transitioned_contract_id)
        contract.status = ContractStatus.SENT

        with pytest.raises(ImmutabilityViolationError, match="CONFIRMED to SENT"):
            session.flush()

    def test_skipping_orm_write_is_blocked(self, session, transitioned_contract_id):
        contract = session.get(Contract, transitioned_contract_id)
        contract.status = ContractStatus.COMPLETED

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_single_step_orm_write_is_allowed(self, session, transitioned_contract_id):
        contract = session.get(Contract, transitioned_contract_id)
        contract.status = ContractStatus.ONGOING
        session.flush()

        assert contract.status is ContractStatus.ONGOING

    def test_single_step_written_as_int_is_allowed(self, session, transitioned_contract_id):
        contract = session.get(Contract, transitioned_contract_id)
        contract.status = int(ContractStatus.ONGOING)
        session.commit()
        session.refresh(contract)

        assert contract.status is ContractStatus.ONGOING

    @pytest.mark.parametrize(
        "value, shown",
        [(int(ContractStatus.EXPIRED), "EXPIRED"), (1, "SENT"), (42, "42")],
    )
    def test_int_write_off_the_sequence_is_blocked(
        self, session, transitioned_contract_id, value, shown
    ):
        contract = session.get(Contract, transitioned_contract_id)
        contract.status = value

        with pytest.raises(ImmutabilityViolationError, match=f"CONFIRMED to {shown}"):
            session.flush()

    def test_other_columns_stay_editable(self, session, transitioned_contract_id):
        contract = session.get(Contract, transitioned_contract_id)
        contract.name = "Renamed"
        contract.budget = "2000"
        session.commit()

        assert session.get(Contract, transitioned_contract_id).name == "Renamed"

    def test_register_is_idempotent(self, session, transitioned_contract_id):
        register_immutability_listeners()
        register_immutability_listeners()

        with disabled_immutability():
            contract = session.get(Contract, transitioned_contract_id)
            contract.status = ContractStatus.SENT
            session.flush()

        assert contract.status is ContractStatus.SENT

"""
Tests for the contract lifecycle engine (``blueprint_kernel.domain.lifecycle``).

Pure domain tests -- no store, no I/O.

Invariants tested:
- The transition table is exactly the six documented edges
- advance moves exactly one step; fails without mutation on locked/revoked
- revoke succeeds iff status is created or sent
- Field values are frozen on locked/revoked contracts (silent drop)
- Field id set and slot kinds are fixed for the contract's lifetime
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from blueprint_kernel.domain import lifecycle
from blueprint_kernel.domain.blueprint import Blueprint, BlueprintField, Position
from blueprint_kernel.domain.contract import (
    Contract,
    ContractFieldValue,
    ContractStatus,
)
from blueprint_kernel.domain.field_types import FieldType, FlagValue, TextValue
from blueprint_kernel.domain.lifecycle import (
    CONTRACT_TRANSITIONS,
    REVOCABLE_STATUSES,
    STATUS_FLOW,
    TERMINAL_STATUSES,
    TransitionResult,
    can_revoke,
    is_editable,
    is_terminal,
    next_action,
    next_status,
    validate_transition,
)
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import (
    BlueprintNotFoundError,
    ContractNotFoundError,
    ContractValidationError,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=1)

SUCCESSORS = {
    ContractStatus.CREATED: ContractStatus.APPROVED,
    ContractStatus.APPROVED: ContractStatus.SENT,
    ContractStatus.SENT: ContractStatus.SIGNED,
    ContractStatus.SIGNED: ContractStatus.LOCKED,
    ContractStatus.LOCKED: None,
    ContractStatus.REVOKED: None,
}


@pytest.fixture
def blueprint():
    return Blueprint(
        id="bp-1",
        name="Employee Contract",
        description="",
        fields=(
            BlueprintField("emp_name", FieldType.TEXT, "Employee Name", Position(30, 20), True),
            BlueprintField("emp_start", FieldType.DATE, "Start Date", Position(280, 20)),
            BlueprintField("emp_nda", FieldType.CHECKBOX, "NDA", Position(30, 120), True),
            BlueprintField("emp_sign", FieldType.SIGNATURE, "Signature", Position(30, 220)),
        ),
        created_at=T0,
        updated_at=T0,
    )


@pytest.fixture
def state(blueprint):
    return AppSnapshot(blueprints=(blueprint,))


def _contract(status=ContractStatus.CREATED, values=None):
    return Contract(
        id="c-1",
        name="Jane",
        blueprint_id="bp-1",
        blueprint_name="Employee Contract",
        status=status,
        field_values=values
        if values is not None
        else (ContractFieldValue("name", ""), ContractFieldValue("agree", False)),
        created_at=T0,
        updated_at=T0,
    )


# =========================================================================
# Transition table
# =========================================================================


class TestTransitionTable:
    def test_status_flow_order(self):
        assert [s.value for s in STATUS_FLOW] == [
            "created", "approved", "sent", "signed", "locked",
        ]

    def test_exactly_six_edges(self):
        edges = {(t.from_status, t.to_status) for t in CONTRACT_TRANSITIONS}
        assert edges == {
            (ContractStatus.CREATED, ContractStatus.APPROVED),
            (ContractStatus.APPROVED, ContractStatus.SENT),
            (ContractStatus.SENT, ContractStatus.SIGNED),
            (ContractStatus.SIGNED, ContractStatus.LOCKED),
            (ContractStatus.CREATED, ContractStatus.REVOKED),
            (ContractStatus.SENT, ContractStatus.REVOKED),
        }

    def test_terminal_states_have_no_outgoing_edges(self):
        sources = {t.from_status for t in CONTRACT_TRANSITIONS}
        assert TERMINAL_STATUSES == {ContractStatus.LOCKED, ContractStatus.REVOKED}
        assert not (sources & TERMINAL_STATUSES)

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_next_status(self, status):
        assert next_status(status) == SUCCESSORS[status]

    def test_action_names(self):
        assert [next_action(s) for s in STATUS_FLOW] == [
            "approve", "send", "sign", "lock", None,
        ]
        assert next_action(ContractStatus.REVOKED) is None

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_can_revoke(self, status):
        assert can_revoke(status) == (status in {ContractStatus.CREATED, ContractStatus.SENT})
        assert (status in REVOCABLE_STATUSES) == can_revoke(status)

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_is_editable(self, status):
        assert is_editable(status) == (status not in TERMINAL_STATUSES)
        assert is_terminal(status) is not is_editable(status)

    def test_backward_transitions_invalid(self):
        assert not validate_transition(ContractStatus.SENT, ContractStatus.APPROVED)
        assert not validate_transition(ContractStatus.LOCKED, ContractStatus.SIGNED)
        assert not validate_transition(ContractStatus.APPROVED, ContractStatus.REVOKED)
        assert validate_transition(ContractStatus.SENT, ContractStatus.REVOKED)


# =========================================================================
# Contract-level rules
# =========================================================================


class TestInstantiate:
    def test_one_default_value_per_field(self, blueprint):
        contract = lifecycle.instantiate_contract(
            blueprint, "Jane", contract_id="c-1", now=T0
        )
        assert contract.field_values == (
            ContractFieldValue("emp_name", ""),
            ContractFieldValue("emp_start", ""),
            ContractFieldValue("emp_nda", False),
            ContractFieldValue("emp_sign", ""),
        )
        assert contract.status is ContractStatus.CREATED
        assert contract.blueprint_name == "Employee Contract"
        assert contract.created_at == contract.updated_at == T0

    def test_checkbox_default_is_flag(self, blueprint):
        contract = lifecycle.instantiate_contract(
            blueprint, "Jane", contract_id="c-1", now=T0
        )
        assert contract.value_of("emp_nda") == FlagValue(False)
        assert contract.value_of("emp_name") == TextValue("")

    def test_blank_name_rejected(self, blueprint):
        with pytest.raises(ContractValidationError):
            lifecycle.instantiate_contract(blueprint, "  ", contract_id="c-1", now=T0)

    @pytest.mark.parametrize("name", [None, 5, ["Jane"]])
    def test_non_string_name_rejected(self, blueprint, name):
        with pytest.raises(ContractValidationError):
            lifecycle.instantiate_contract(blueprint, name, contract_id="c-1", now=T0)


class TestAdvanceContract:
    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_single_step_or_no_mutation(self, status):
        contract = _contract(status)
        updated, result = lifecycle.advance_contract(contract, now=T1)

        expected = SUCCESSORS[status]
        if expected is None:
            assert result.success is False
            assert updated is contract
            assert result.to_status is None
        else:
            assert result.success is True
            assert updated.status is expected
            assert updated.updated_at == T1
            assert result.from_status is status
            assert result.to_status is expected

    def test_result_is_truthy_on_success(self):
        _, result = lifecycle.advance_contract(_contract(), now=T1)
        assert isinstance(result, TransitionResult)
        assert result
        assert result.action == "approve"

    def test_result_is_falsy_on_failure(self):
        _, result = lifecycle.advance_contract(_contract(ContractStatus.LOCKED), now=T1)
        assert not result
        assert "locked" in result.reason


class TestRevokeContract:
    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_revoke_only_from_created_or_sent(self, status):
        contract = _contract(status)
        updated, result = lifecycle.revoke_contract(contract, now=T1)
        if status in (ContractStatus.CREATED, ContractStatus.SENT):
            assert result.success
            assert updated.status is ContractStatus.REVOKED
            assert updated.updated_at == T1
        else:
            assert not result.success
            assert updated is contract

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_revoke_follows_the_transition_table(self, status):
        _, result = lifecycle.revoke_contract(_contract(status), now=T1)
        assert result.success == validate_transition(status, ContractStatus.REVOKED)
        assert result.action == "revoke"


class TestApplyFieldValues:
    def test_replaces_values_and_refreshes_updated_at(self):
        contract = _contract()
        updated = lifecycle.apply_field_values(
            contract, {"name": "Jane Doe", "agree": True}, now=T1
        )
        assert updated.value_of("name") == TextValue("Jane Doe")
        assert updated.value_of("agree") == FlagValue(True)
        assert updated.updated_at == T1

    def test_accepts_value_entries_and_pairs(self):
        contract = _contract()
        updated = lifecycle.apply_field_values(
            contract, [ContractFieldValue("agree", True), ("name", "X")], now=T1
        )
        assert updated.field_ids == ("agree", "name")

    @pytest.mark.parametrize("status", [ContractStatus.LOCKED, ContractStatus.REVOKED])
    def test_frozen_statuses_drop_edit_silently(self, status):
        contract = _contract(status)
        updated = lifecycle.apply_field_values(
            contract, {"name": "Changed", "agree": True}, now=T1
        )
        assert updated is contract

    @pytest.mark.parametrize("status", [ContractStatus.LOCKED, ContractStatus.REVOKED])
    def test_frozen_statuses_drop_even_malformed_edits(self, status):
        contract = _contract(status)
        assert lifecycle.apply_field_values(contract, {"bogus": 1.5}, now=T1) is contract

    @pytest.mark.parametrize(
        "status",
        [ContractStatus.CREATED, ContractStatus.APPROVED, ContractStatus.SENT, ContractStatus.SIGNED],
    )
    def test_editable_statuses(self, status):
        updated = lifecycle.apply_field_values(
            _contract(status), {"name": "A", "agree": True}, now=T1
        )
        assert updated.value_of("name") == TextValue("A")

    def test_missing_field_rejected(self):
        with pytest.raises(ContractValidationError) as exc_info:
            lifecycle.apply_field_values(_contract(), {"name": "A"}, now=T1)
        assert "missing=['agree']" in exc_info.value.reason

    def test_unknown_field_rejected(self):
        with pytest.raises(ContractValidationError):
            lifecycle.apply_field_values(
                _contract(), {"name": "A", "agree": True, "extra": "x"}, now=T1
            )

    def test_duplicate_field_rejected(self):
        with pytest.raises(ContractValidationError):
            lifecycle.apply_field_values(
                _contract(),
                [("name", "A"), ("name", "B"), ("agree", True)],
                now=T1,
            )

    def test_checkbox_cannot_take_text(self):
        with pytest.raises(ContractValidationError):
            lifecycle.apply_field_values(
                _contract(), {"name": "A", "agree": "yes"}, now=T1
            )

    def test_text_cannot_take_bool(self):
        with pytest.raises(ContractValidationError):
            lifecycle.apply_field_values(
                _contract(), {"name": False, "agree": True}, now=T1
            )

    def test_contract_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            _contract().status = ContractStatus.LOCKED


# =========================================================================
# Snapshot-level operations
# =========================================================================


class TestSnapshotOperations:
    def test_create_contract_adds_to_snapshot(self, state):
        new_state, contract = lifecycle.create_contract(
            state, "Jane", "bp-1", contract_id="c-9", now=T0
        )
        assert new_state.contracts == (contract,)
        assert state.contracts == ()

    def test_create_contract_unknown_blueprint(self, state):
        with pytest.raises(BlueprintNotFoundError) as exc_info:
            lifecycle.create_contract(state, "Jane", "missing", contract_id="c-9", now=T0)
        assert exc_info.value.blueprint_id == "missing"

    def test_failed_advance_returns_same_snapshot(self, state):
        state = state.adding_contract(_contract(ContractStatus.LOCKED))
        new_state, result = lifecycle.advance(state, "c-1", now=T1)
        assert new_state is state
        assert not result.success

    def test_dropped_edit_returns_same_snapshot(self, state):
        state = state.adding_contract(_contract(ContractStatus.REVOKED))
        new_state, contract = lifecycle.update_field_values(
            state, "c-1", {"name": "x", "agree": True}, now=T1
        )
        assert new_state is state
        assert contract.updated_at == T0

    @pytest.mark.parametrize(
        "operation",
        [
            lambda s: lifecycle.advance(s, "ghost", now=T1),
            lambda s: lifecycle.revoke(s, "ghost", now=T1),
            lambda s: lifecycle.update_field_values(s, "ghost", {}, now=T1),
            lambda s: lifecycle.delete_contract(s, "ghost"),
        ],
    )
    def test_unknown_contract(self, state, operation):
        with pytest.raises(ContractNotFoundError):
            operation(state)

    @pytest.mark.parametrize("status", list(ContractStatus))
    def test_delete_regardless_of_status(self, state, status):
        state = state.adding_contract(_contract(status))
        assert lifecycle.delete_contract(state, "c-1").contracts == ()

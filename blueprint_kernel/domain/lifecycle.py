"""
Contract lifecycle engine (``blueprint_kernel.domain.lifecycle``).

Responsibility
--------------
The contract status state machine and the rules for mutating a contract:
instantiation from a blueprint, field value replacement, one-step advance,
revoke and delete.

Architecture position
---------------------
**Kernel domain layer** -- pure functions over ``AppSnapshot``.  ZERO I/O.
Time and ids are passed in by the caller (``AppState``), which also owns
persistence and logging.

State machine
-------------

    created --approve--> approved --send--> sent --sign--> signed --lock--> locked
       |                                      |
       +---------------revoke-----------------+-------------> revoked

* Initial state ``created``; terminal states ``locked`` and ``revoked``.
* ``advance`` moves exactly one step along ``STATUS_FLOW``.
* ``revoke`` is permitted only from ``created`` and ``sent``.
* Invalid transitions return ``TransitionResult(success=False)``; they never
  raise.
* Field values are editable in every status except ``locked`` and
  ``revoked``.  Edits against those are dropped silently: the status may
  have moved while the edit was in flight.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime

from blueprint_kernel.domain.blueprint import Blueprint
from blueprint_kernel.domain.contract import (
    Contract,
    ContractFieldValue,
    ContractStatus,
)
from blueprint_kernel.domain.field_types import default_value
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import (
    BlueprintNotFoundError,
    ContractNotFoundError,
    ContractValidationError,
)


# =========================================================================
# Transition table
# =========================================================================


@dataclass(frozen=True)
class Transition:
    """A valid status transition, named by the action that fires it."""

    from_status: ContractStatus
    to_status: ContractStatus
    action: str


STATUS_FLOW: tuple[ContractStatus, ...] = (
    ContractStatus.CREATED,
    ContractStatus.APPROVED,
    ContractStatus.SENT,
    ContractStatus.SIGNED,
    ContractStatus.LOCKED,
)

REVOCABLE_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.CREATED,
    ContractStatus.SENT,
})

TERMINAL_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.LOCKED,
    ContractStatus.REVOKED,
})

CONTRACT_TRANSITIONS: tuple[Transition, ...] = (
    Transition(ContractStatus.CREATED, ContractStatus.APPROVED, "approve"),
    Transition(ContractStatus.APPROVED, ContractStatus.SENT, "send"),
    Transition(ContractStatus.SENT, ContractStatus.SIGNED, "sign"),
    Transition(ContractStatus.SIGNED, ContractStatus.LOCKED, "lock"),
    Transition(ContractStatus.CREATED, ContractStatus.REVOKED, "revoke"),
    Transition(ContractStatus.SENT, ContractStatus.REVOKED, "revoke"),
)

_FORWARD: dict[ContractStatus, Transition] = {
    t.from_status: t for t in CONTRACT_TRANSITIONS if t.action != "revoke"
}


def next_status(current: ContractStatus) -> ContractStatus | None:
    """Successor of ``current`` along ``STATUS_FLOW``; None when terminal."""
    transition = _FORWARD.get(current)
    return transition.to_status if transition else None


def next_action(current: ContractStatus) -> str | None:
    """Name of the forward action available from ``current`` (``approve`` ...)."""
    transition = _FORWARD.get(current)
    return transition.action if transition else None


def can_revoke(status: ContractStatus) -> bool:
    return status in REVOCABLE_STATUSES


def is_editable(status: ContractStatus) -> bool:
    return status not in TERMINAL_STATUSES


def is_terminal(status: ContractStatus) -> bool:
    return status in TERMINAL_STATUSES


def validate_transition(current: ContractStatus, target: ContractStatus) -> bool:
    """Check if a status transition is in the table."""
    return any(
        t.from_status == current and t.to_status == target
        for t in CONTRACT_TRANSITIONS
    )


# =========================================================================
# Transition Result
# =========================================================================


@dataclass(frozen=True)
class TransitionResult:
    """Result of an ``advance`` or ``revoke`` request."""

    success: bool
    contract_id: str
    from_status: ContractStatus
    to_status: ContractStatus | None = None
    action: str | None = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.success


# =========================================================================
# Contract-level rules
# =========================================================================


def initial_field_values(blueprint: Blueprint) -> tuple[ContractFieldValue, ...]:
    """One default value per blueprint field, in blueprint order."""
    return tuple(
        ContractFieldValue(field.id, default_value(field.type))
        for field in blueprint.fields
    )


def instantiate_contract(
    blueprint: Blueprint,
    name: str,
    *,
    contract_id: str,
    now: datetime,
) -> Contract:
    if not isinstance(name, str) or not name.strip():
        raise ContractValidationError(None, "name must be a non-empty string")
    return Contract(
        id=contract_id,
        name=name,
        blueprint_id=blueprint.id,
        blueprint_name=blueprint.name,
        status=ContractStatus.CREATED,
        field_values=initial_field_values(blueprint),
        created_at=now,
        updated_at=now,
    )


def normalize_field_values(
    values: Iterable[ContractFieldValue] | Mapping[str, object],
) -> tuple[ContractFieldValue, ...]:
    """Accept either ``ContractFieldValue`` entries or a ``{field_id: raw}`` map."""
    if isinstance(values, Mapping):
        return tuple(ContractFieldValue(fid, raw) for fid, raw in values.items())
    return tuple(
        v if isinstance(v, ContractFieldValue) else ContractFieldValue(*v)
        for v in values
    )


def apply_field_values(
    contract: Contract,
    values: Iterable[ContractFieldValue] | Mapping[str, object],
    *,
    now: datetime,
) -> Contract:
    """
    Replace the whole value sequence of an editable contract.

    Returns ``contract`` itself (unchanged) when the status is locked or
    revoked.

    Raises:
        ContractValidationError: the new values do not cover exactly the
            contract's field ids, or a slot would change kind.
    """
    if not is_editable(contract.status):
        return contract

    new_values = normalize_field_values(values)
    new_ids = [v.field_id for v in new_values]
    if len(set(new_ids)) != len(new_ids):
        raise ContractValidationError(contract.id, "duplicate field id in values")
    if set(new_ids) != set(contract.field_ids):
        missing = sorted(set(contract.field_ids) - set(new_ids))
        unknown = sorted(set(new_ids) - set(contract.field_ids))
        raise ContractValidationError(
            contract.id,
            f"field ids must match the contract (missing={missing}, unknown={unknown})",
        )
    for entry in new_values:
        current = contract.value_of(entry.field_id)
        if current is not None and current.domain is not entry.value.domain:
            raise ContractValidationError(
                contract.id,
                f"field {entry.field_id!r} holds {current.domain.value} values, "
                f"got {entry.value.domain.value}",
            )

    return replace(contract, field_values=new_values, updated_at=now)


def advance_contract(
    contract: Contract, *, now: datetime
) -> tuple[Contract, TransitionResult]:
    """Move one step along ``STATUS_FLOW``."""
    transition = _FORWARD.get(contract.status)
    if transition is None:
        return contract, TransitionResult(
            success=False,
            contract_id=contract.id,
            from_status=contract.status,
            reason=f"no status follows {contract.status.value}",
        )
    updated = replace(contract, status=transition.to_status, updated_at=now)
    return updated, TransitionResult(
        success=True,
        contract_id=contract.id,
        from_status=contract.status,
        to_status=transition.to_status,
        action=transition.action,
    )


def revoke_contract(
    contract: Contract, *, now: datetime
) -> tuple[Contract, TransitionResult]:
    """Abandon a contract that has not reached a committed stage."""
    if not validate_transition(contract.status, ContractStatus.REVOKED):
        return contract, TransitionResult(
            success=False,
            contract_id=contract.id,
            from_status=contract.status,
            action="revoke",
            reason=f"cannot revoke a {contract.status.value} contract",
        )
    updated = replace(contract, status=ContractStatus.REVOKED, updated_at=now)
    return updated, TransitionResult(
        success=True,
        contract_id=contract.id,
        from_status=contract.status,
        to_status=ContractStatus.REVOKED,
        action="revoke",
    )


# =========================================================================
# Snapshot-level operations
# =========================================================================


def _require_contract(state: AppSnapshot, contract_id: str) -> Contract:
    contract = state.find_contract(contract_id)
    if contract is None:
        raise ContractNotFoundError(contract_id)
    return contract


def create_contract(
    state: AppSnapshot,
    name: str,
    blueprint_id: str,
    *,
    contract_id: str,
    now: datetime,
) -> tuple[AppSnapshot, Contract]:
    """
    Instantiate a contract from a blueprint.

    Raises:
        BlueprintNotFoundError: ``blueprint_id`` is unknown; nothing created.
        ContractValidationError: blank contract name.
    """
    blueprint = state.find_blueprint(blueprint_id)
    if blueprint is None:
        raise BlueprintNotFoundError(blueprint_id)
    contract = instantiate_contract(blueprint, name, contract_id=contract_id, now=now)
    return state.adding_contract(contract), contract


def update_field_values(
    state: AppSnapshot,
    contract_id: str,
    values: Iterable[ContractFieldValue] | Mapping[str, object],
    *,
    now: datetime,
) -> tuple[AppSnapshot, Contract]:
    contract = _require_contract(state, contract_id)
    updated = apply_field_values(contract, values, now=now)
    if updated is contract:
        return state, contract
    return state.replacing_contract(updated), updated


def advance(
    state: AppSnapshot, contract_id: str, *, now: datetime
) -> tuple[AppSnapshot, TransitionResult]:
    contract = _require_contract(state, contract_id)
    updated, result = advance_contract(contract, now=now)
    if not result.success:
        return state, result
    return state.replacing_contract(updated), result


def revoke(
    state: AppSnapshot, contract_id: str, *, now: datetime
) -> tuple[AppSnapshot, TransitionResult]:
    contract = _require_contract(state, contract_id)
    updated, result = revoke_contract(contract, now=now)
    if not result.success:
        return state, result
    return state.replacing_contract(updated), result


def delete_contract(state: AppSnapshot, contract_id: str) -> AppSnapshot:
    """Remove a contract regardless of its status."""
    _require_contract(state, contract_id)
    return state.removing_contract(contract_id)

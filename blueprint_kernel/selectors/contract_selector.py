"""
Contract selector -- read-only queries over the application snapshot.

Responsibility:
    Status filtering, dashboard counts, recent activity and required-field
    presence checks.  Serves from the in-memory snapshot only.

Architecture position:
    Kernel > Selectors.  May import from domain/.  Selectors NEVER create,
    modify, or delete data.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from blueprint_kernel.domain.blueprint import Blueprint
from blueprint_kernel.domain.contract import Contract, ContractStatus
from blueprint_kernel.domain.lifecycle import TERMINAL_STATUSES
from blueprint_kernel.domain.state import AppSnapshot


class ContractGroup(str, Enum):
    """Named groups of statuses used by list views."""

    ALL = "all"
    ACTIVE = "active"    # not locked / revoked
    PENDING = "pending"  # created, approved, sent


PENDING_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.CREATED,
    ContractStatus.APPROVED,
    ContractStatus.SENT,
})

EXECUTED_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.SIGNED,
    ContractStatus.LOCKED,
})


@dataclass(frozen=True)
class ContractSummary:
    """Dashboard counts."""

    total_blueprints: int
    total_contracts: int
    pending: int
    signed: int     # signed or locked
    revoked: int
    by_status: Mapping[ContractStatus, int]


def _resolve_filter(status_filter: ContractStatus | ContractGroup | str):
    if isinstance(status_filter, (ContractStatus, ContractGroup)):
        return status_filter
    try:
        return ContractGroup(status_filter)
    except ValueError:
        return ContractStatus(status_filter)


class ContractSelector:
    """
    Read-only views of contracts in a snapshot.

    Guarantees:
        - Never returns a snapshot different from the one it was given.
        - Results are tuples of frozen domain objects.
    """

    def __init__(self, state: AppSnapshot):
        self.state = state

    def by_status(
        self, status_filter: ContractStatus | ContractGroup | str = ContractGroup.ALL
    ) -> tuple[Contract, ...]:
        """
        Contracts matching a single status or a named group.

        Raises:
            ValueError: ``status_filter`` names neither a status nor a group.
        """
        resolved = _resolve_filter(status_filter)
        contracts = self.state.contracts
        if resolved is ContractGroup.ALL:
            return contracts
        if resolved is ContractGroup.ACTIVE:
            return tuple(c for c in contracts if c.status not in TERMINAL_STATUSES)
        if resolved is ContractGroup.PENDING:
            return tuple(c for c in contracts if c.status in PENDING_STATUSES)
        return tuple(c for c in contracts if c.status is resolved)

    def for_blueprint(self, blueprint_id: str) -> tuple[Contract, ...]:
        return tuple(c for c in self.state.contracts if c.blueprint_id == blueprint_id)

    def summary(self) -> ContractSummary:
        by_status = {status: 0 for status in ContractStatus}
        for contract in self.state.contracts:
            by_status[contract.status] += 1
        return ContractSummary(
            total_blueprints=len(self.state.blueprints),
            total_contracts=len(self.state.contracts),
            pending=sum(by_status[s] for s in PENDING_STATUSES),
            signed=sum(by_status[s] for s in EXECUTED_STATUSES),
            revoked=by_status[ContractStatus.REVOKED],
            by_status=by_status,
        )

    def recent(self, limit: int = 5) -> tuple[Contract, ...]:
        """Most recently touched contracts first."""
        ordered = sorted(self.state.contracts, key=lambda c: c.updated_at, reverse=True)
        return tuple(ordered[:limit])


def missing_required_fields(contract: Contract, blueprint: Blueprint) -> tuple[str, ...]:
    """
    Ids of required fields that hold no value: blank text or an unticked box.

    Only fields the contract still carries are considered; fields added to
    the blueprint after the contract was created are not part of it.
    """
    missing = []
    for entry in contract.field_values:
        field = blueprint.field_by_id(entry.field_id)
        if field is not None and field.required and not entry.value.is_present:
            missing.append(entry.field_id)
    return tuple(missing)

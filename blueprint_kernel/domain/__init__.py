"""
Pure domain layer.

This module contains value objects and domain logic with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (times are passed in)
- I/O

All domain objects are immutable and deterministic.
"""

from blueprint_kernel.domain.blueprint import (
    Blueprint,
    BlueprintDraft,
    BlueprintField,
    Position,
)
from blueprint_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from blueprint_kernel.domain.contract import (
    Contract,
    ContractFieldValue,
    ContractStatus,
)
from blueprint_kernel.domain.field_types import (
    FieldType,
    FieldValue,
    FlagValue,
    TextValue,
    ValueDomain,
)
from blueprint_kernel.domain.identity import (
    IdFactory,
    SequentialIdFactory,
    UuidIdFactory,
)
from blueprint_kernel.domain.lifecycle import (
    CONTRACT_TRANSITIONS,
    STATUS_FLOW,
    TransitionResult,
    can_revoke,
    is_editable,
    next_status,
)
from blueprint_kernel.domain.state import AppSnapshot

__all__ = [
    "AppSnapshot",
    "Blueprint",
    "BlueprintDraft",
    "BlueprintField",
    "CONTRACT_TRANSITIONS",
    "Clock",
    "Contract",
    "ContractFieldValue",
    "ContractStatus",
    "DeterministicClock",
    "FieldType",
    "FieldValue",
    "FlagValue",
    "IdFactory",
    "Position",
    "STATUS_FLOW",
    "SequentialIdFactory",
    "SystemClock",
    "TextValue",
    "TransitionResult",
    "UuidIdFactory",
    "ValueDomain",
    "can_revoke",
    "is_editable",
    "next_status",
]

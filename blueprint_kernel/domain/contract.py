"""
Contract value objects (``blueprint_kernel.domain.contract``).

Responsibility
--------------
Frozen value objects for a filled instance of a blueprint: its lifecycle
status, its field values and the denormalized blueprint name it was created
from.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Transition
rules live in ``domain/lifecycle``; this module only defines the shapes.

Invariants enforced
-------------------
* ``field_values`` carries exactly one entry per field of the originating
  blueprint as it was at creation time.  The id set never changes.
* ``blueprint_name`` is a snapshot; later blueprint edits or deletion do not
  reach it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from blueprint_kernel.domain.field_types import FieldValue, wrap_value


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    CREATED = "created"
    APPROVED = "approved"
    SENT = "sent"
    SIGNED = "signed"
    LOCKED = "locked"      # Final, values frozen
    REVOKED = "revoked"    # Abandoned, values frozen


@dataclass(frozen=True)
class ContractFieldValue:
    """
    Value held by one contract slot.

    ``value`` accepts the wire form (``str`` / ``bool``) and stores the tagged
    form (``TextValue`` / ``FlagValue``).
    """

    field_id: str
    value: FieldValue

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", wrap_value(self.value, self.field_id))

    @property
    def raw(self) -> str | bool:
        return self.value.raw


@dataclass(frozen=True)
class Contract:
    """One instantiation of a blueprint moving through the lifecycle."""

    id: str
    name: str
    blueprint_id: str
    blueprint_name: str
    status: ContractStatus
    field_values: tuple[ContractFieldValue, ...]
    created_at: datetime
    updated_at: datetime

    @property
    def field_ids(self) -> tuple[str, ...]:
        return tuple(v.field_id for v in self.field_values)

    def value_of(self, field_id: str) -> FieldValue | None:
        for entry in self.field_values:
            if entry.field_id == field_id:
                return entry.value
        return None

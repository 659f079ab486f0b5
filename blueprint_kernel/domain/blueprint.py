"""
Blueprint value objects (``blueprint_kernel.domain.blueprint``).

Responsibility
--------------
Frozen value objects for reusable document templates: the positioned fields
a blueprint declares, the blueprint itself, and the draft a caller submits
to create one.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Field ``id`` is the field's identity; it never changes once created.
* Field ids are unique within a blueprint.
* A blueprint has a non-blank name and at least one field.
* ``position`` is advisory layout metadata with no lifecycle effect.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from blueprint_kernel.domain.field_types import FieldType, coerce_field_type
from blueprint_kernel.exceptions import BlueprintValidationError


@dataclass(frozen=True)
class Position:
    """Canvas coordinates of a field, in pixels from the top-left corner."""

    x: float = 0
    y: float = 0


@dataclass(frozen=True)
class BlueprintField:
    """A single typed, labelled input slot on a blueprint."""

    id: str
    type: FieldType
    label: str
    position: Position = Position()
    required: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise BlueprintValidationError("field id must not be empty", "fields")
        object.__setattr__(self, "type", coerce_field_type(self.type))


@dataclass(frozen=True)
class BlueprintDraft:
    """Caller-supplied content of a blueprint that does not exist yet."""

    name: str
    description: str
    fields: tuple[BlueprintField, ...]


@dataclass(frozen=True)
class Blueprint:
    """A named, reusable set of positioned fields."""

    id: str
    name: str
    description: str
    fields: tuple[BlueprintField, ...]
    created_at: datetime
    updated_at: datetime

    def field_by_id(self, field_id: str) -> BlueprintField | None:
        for field in self.fields:
            if field.id == field_id:
                return field
        return None

    @property
    def field_ids(self) -> tuple[str, ...]:
        return tuple(f.id for f in self.fields)


def validate_blueprint_content(name: str, fields: Iterable[BlueprintField]) -> None:
    """
    Check the structural rules shared by create and update.

    Raises:
        BlueprintValidationError: blank name, no fields, or a repeated field id.
    """
    if not isinstance(name, str):
        raise BlueprintValidationError(
            f"name must be a string, got {type(name).__name__}", "name"
        )
    if not name.strip():
        raise BlueprintValidationError("name must not be empty", "name")

    seen: set[str] = set()
    count = 0
    for field in fields:
        if not isinstance(field, BlueprintField):
            raise BlueprintValidationError(
                f"expected BlueprintField, got {type(field).__name__}", "fields"
            )
        if field.id in seen:
            raise BlueprintValidationError(
                f"duplicate field id {field.id!r}", "fields"
            )
        seen.add(field.id)
        count += 1

    if count == 0:
        raise BlueprintValidationError("at least one field is required", "fields")

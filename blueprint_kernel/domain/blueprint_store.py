"""
Blueprint store (``blueprint_kernel.domain.blueprint_store``).

Responsibility
--------------
Create, update, delete and look up blueprint definitions inside an
``AppSnapshot``, and seed the default template catalog once per store
lifetime.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.  Ids and timestamps
are supplied by the caller.

Invariants enforced
-------------------
* Every stored blueprint has a non-blank name, at least one field and
  unique field ids.  Failing input raises before any state changes.
* ``created_at`` and ``id`` are never changed by ``update``.
* Deleting a blueprint never touches contracts created from it.
* Seeding is guarded by ``AppSnapshot.initialized``, not by emptiness: a
  user may delete every blueprint afterwards and the catalog must not come
  back.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from blueprint_kernel.domain.blueprint import (
    Blueprint,
    BlueprintDraft,
    BlueprintField,
    validate_blueprint_content,
)
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import (
    BlueprintNotFoundError,
    BlueprintValidationError,
)

UPDATABLE_ATTRIBUTES: frozenset[str] = frozenset({"name", "description", "fields"})


def create_blueprint(
    state: AppSnapshot,
    name: str,
    description: str,
    fields: Iterable[BlueprintField],
    *,
    blueprint_id: str,
    now: datetime,
) -> tuple[AppSnapshot, Blueprint]:
    """
    Add a new blueprint.

    Raises:
        BlueprintValidationError: blank name, no fields, duplicate field ids.
    """
    fields = tuple(fields)
    validate_blueprint_content(name, fields)
    blueprint = Blueprint(
        id=blueprint_id,
        name=name,
        description=description or "",
        fields=fields,
        created_at=now,
        updated_at=now,
    )
    return state.adding_blueprints(blueprint), blueprint


def update_blueprint(
    state: AppSnapshot,
    blueprint_id: str,
    changes: dict[str, Any],
    *,
    now: datetime,
) -> tuple[AppSnapshot, Blueprint]:
    """
    Merge ``changes`` into an existing blueprint and refresh ``updated_at``.

    Raises:
        BlueprintNotFoundError: unknown ``blueprint_id``.
        BlueprintValidationError: unknown or immutable attribute, or the
            merged blueprint breaks the create rules.
    """
    blueprint = state.find_blueprint(blueprint_id)
    if blueprint is None:
        raise BlueprintNotFoundError(blueprint_id)

    rejected = sorted(set(changes) - UPDATABLE_ATTRIBUTES)
    if rejected:
        raise BlueprintValidationError(
            f"attributes cannot be updated: {', '.join(rejected)}", rejected[0]
        )

    merged = dict(changes)
    if "fields" in merged:
        merged["fields"] = tuple(merged["fields"])
    if merged.get("description") is None and "description" in merged:
        merged["description"] = ""

    updated = replace(blueprint, **merged, updated_at=now)
    validate_blueprint_content(updated.name, updated.fields)
    return state.replacing_blueprint(updated), updated


def delete_blueprint(state: AppSnapshot, blueprint_id: str) -> AppSnapshot:
    """Remove a blueprint.  Contracts created from it are left as they are."""
    if state.find_blueprint(blueprint_id) is None:
        raise BlueprintNotFoundError(blueprint_id)
    return state.removing_blueprint(blueprint_id)


def get_blueprint(state: AppSnapshot, blueprint_id: str) -> Blueprint | None:
    return state.find_blueprint(blueprint_id)


def list_blueprints(state: AppSnapshot) -> tuple[Blueprint, ...]:
    return state.blueprints


def initialize_defaults(
    state: AppSnapshot,
    catalog: Iterable[BlueprintDraft],
    *,
    new_id: Callable[[], str],
    now: datetime,
) -> AppSnapshot:
    """
    Seed the default catalog on the first ever initialization.

    Returns ``state`` unchanged when the store was already initialized.  A
    store that holds blueprints but was never flagged (data written before
    the flag existed) is flagged without seeding.
    """
    if state.initialized:
        return state
    if state.blueprints:
        return replace(state, initialized=True)

    seeded: list[Blueprint] = []
    for draft in catalog:
        fields = tuple(draft.fields)
        validate_blueprint_content(draft.name, fields)
        seeded.append(
            Blueprint(
                id=new_id(),
                name=draft.name,
                description=draft.description,
                fields=fields,
                created_at=now,
                updated_at=now,
            )
        )
    return replace(state.adding_blueprints(*seeded), initialized=True)

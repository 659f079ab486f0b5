"""
Snapshot codec (``blueprint_kernel.domain.snapshot``).

Responsibility
--------------
Convert an ``AppSnapshot`` to and from the persisted blob shape::

    {"blueprints": [...], "contracts": [...], "initialized": bool}

Keys are camelCase, timestamps are ISO-8601 strings and ids are opaque
strings, so that a blob written by an earlier deployment loads unchanged.

Architecture position
---------------------
**Kernel domain layer** -- pure functions, plain dicts in and out.  JSON
text encoding belongs to the snapshot store.

Failure modes
-------------
* Any structural problem in a stored blob raises ``SnapshotDecodeError``
  carrying the JSON path of the offending element.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from blueprint_kernel.domain.blueprint import Blueprint, BlueprintField, Position
from blueprint_kernel.domain.contract import (
    Contract,
    ContractFieldValue,
    ContractStatus,
)
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import SnapshotDecodeError, ValidationError

SNAPSHOT_SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_time(value: datetime) -> str:
    return value.isoformat()


def encode_field(field: BlueprintField) -> dict[str, Any]:
    return {
        "id": field.id,
        "type": field.type.value,
        "label": field.label,
        "position": {"x": field.position.x, "y": field.position.y},
        "required": field.required,
    }


def encode_blueprint(blueprint: Blueprint) -> dict[str, Any]:
    return {
        "id": blueprint.id,
        "name": blueprint.name,
        "description": blueprint.description,
        "fields": [encode_field(f) for f in blueprint.fields],
        "createdAt": _encode_time(blueprint.created_at),
        "updatedAt": _encode_time(blueprint.updated_at),
    }


def encode_contract(contract: Contract) -> dict[str, Any]:
    return {
        "id": contract.id,
        "name": contract.name,
        "blueprintId": contract.blueprint_id,
        "blueprintName": contract.blueprint_name,
        "status": contract.status.value,
        "fieldValues": [
            {"fieldId": v.field_id, "value": v.raw} for v in contract.field_values
        ],
        "createdAt": _encode_time(contract.created_at),
        "updatedAt": _encode_time(contract.updated_at),
    }


def encode_snapshot(state: AppSnapshot) -> dict[str, Any]:
    return {
        "blueprints": [encode_blueprint(bp) for bp in state.blueprints],
        "contracts": [encode_contract(c) for c in state.contracts],
        "initialized": state.initialized,
    }


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_time(raw: Any, path: str) -> datetime:
    if not isinstance(raw, str):
        raise SnapshotDecodeError(path, "expected an ISO-8601 string")
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise SnapshotDecodeError(path, str(exc)) from exc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _require(data: Any, key: str, path: str) -> Any:
    if not isinstance(data, dict):
        raise SnapshotDecodeError(path, "expected an object")
    if key not in data:
        raise SnapshotDecodeError(f"{path}.{key}", "missing")
    return data[key]


def _list(data: Any, path: str) -> list[Any]:
    if not isinstance(data, list):
        raise SnapshotDecodeError(path, "expected a list")
    return data


def _flag(raw: Any, path: str) -> bool:
    # "false" must not read as True
    if type(raw) is not bool:
        raise SnapshotDecodeError(path, "expected a boolean")
    return raw


def _coordinate(raw: Any, path: str) -> float:
    if type(raw) is bool or not isinstance(raw, (int, float)):
        raise SnapshotDecodeError(path, "expected a number")
    return raw


def decode_position(data: Any, path: str) -> Position:
    """Missing position or coordinates default to the origin."""
    if data is None:
        return Position()
    if not isinstance(data, dict):
        raise SnapshotDecodeError(path, "expected an object")
    return Position(
        x=_coordinate(data.get("x", 0), f"{path}.x"),
        y=_coordinate(data.get("y", 0), f"{path}.y"),
    )


def decode_field(data: Any, path: str) -> BlueprintField:
    if not isinstance(data, dict):
        raise SnapshotDecodeError(path, "expected an object")
    position = decode_position(data.get("position"), f"{path}.position")
    required = _flag(data.get("required", False), f"{path}.required")
    try:
        return BlueprintField(
            id=_require(data, "id", path),
            type=_require(data, "type", path),
            label=_require(data, "label", path),
            position=position,
            required=required,
        )
    except ValidationError as exc:
        raise SnapshotDecodeError(path, str(exc)) from exc


def decode_blueprint(data: Any, path: str) -> Blueprint:
    fields_path = f"{path}.fields"
    return Blueprint(
        id=_require(data, "id", path),
        name=_require(data, "name", path),
        description=data.get("description") or "",
        fields=tuple(
            decode_field(f, f"{fields_path}[{i}]")
            for i, f in enumerate(_list(_require(data, "fields", path), fields_path))
        ),
        created_at=_decode_time(_require(data, "createdAt", path), f"{path}.createdAt"),
        updated_at=_decode_time(_require(data, "updatedAt", path), f"{path}.updatedAt"),
    )


def decode_contract(data: Any, path: str) -> Contract:
    status_raw = _require(data, "status", path)
    try:
        status = ContractStatus(status_raw)
    except ValueError:
        raise SnapshotDecodeError(f"{path}.status", f"unknown status {status_raw!r}") from None

    values_path = f"{path}.fieldValues"
    values: list[ContractFieldValue] = []
    for i, entry in enumerate(_list(_require(data, "fieldValues", path), values_path)):
        entry_path = f"{values_path}[{i}]"
        try:
            values.append(
                ContractFieldValue(
                    _require(entry, "fieldId", entry_path),
                    _require(entry, "value", entry_path),
                )
            )
        except ValidationError as exc:
            raise SnapshotDecodeError(entry_path, str(exc)) from exc

    return Contract(
        id=_require(data, "id", path),
        name=_require(data, "name", path),
        blueprint_id=_require(data, "blueprintId", path),
        blueprint_name=_require(data, "blueprintName", path),
        status=status,
        field_values=tuple(values),
        created_at=_decode_time(_require(data, "createdAt", path), f"{path}.createdAt"),
        updated_at=_decode_time(_require(data, "updatedAt", path), f"{path}.updatedAt"),
    )


def decode_snapshot(data: Any) -> AppSnapshot:
    """
    Rebuild an ``AppSnapshot`` from a stored blob.

    Missing top-level collections are treated as empty (a store that has
    never been written).
    """
    if data is None:
        return AppSnapshot()
    if not isinstance(data, dict):
        raise SnapshotDecodeError("$", "expected an object")

    blueprints = tuple(
        decode_blueprint(bp, f"$.blueprints[{i}]")
        for i, bp in enumerate(_list(data.get("blueprints", []), "$.blueprints"))
    )
    contracts = tuple(
        decode_contract(c, f"$.contracts[{i}]")
        for i, c in enumerate(_list(data.get("contracts", []), "$.contracts"))
    )
    return AppSnapshot(
        blueprints=blueprints,
        contracts=contracts,
        initialized=_flag(data.get("initialized", False), "$.initialized"),
    )

"""
Snapshot stores -- durable home of the application state blob.

Responsibility:
    Read the full ``AppSnapshot`` once at startup and write it back in full
    after every successful mutation.  The kernel does not care about the
    medium; it only needs ``save`` to be durable before it returns and the
    blob to round-trip exactly.

Architecture position:
    Kernel > Services -- imperative shell.  Only ``AppState`` calls a store.

Invariants enforced:
    - Full-snapshot writes: ``save`` replaces the stored blob as a whole.
    - ``SqlSnapshotStore.save`` commits before returning (durability).
    - A store that has never been written loads as an empty, uninitialized
      snapshot.

Failure modes:
    - SnapshotDecodeError: stored payload is not valid JSON or has the wrong
      shape.
    - SQLAlchemy errors propagate from ``SqlSnapshotStore``; ``AppState``
      wraps them in ``SnapshotPersistError``.
"""

from __future__ import annotations

import json
from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.engine import Engine

from blueprint_kernel.db.engine import create_session_factory, session_scope
from blueprint_kernel.domain.clock import Clock, SystemClock
from blueprint_kernel.domain.snapshot import (
    SNAPSHOT_SCHEMA_VERSION,
    decode_snapshot,
    encode_snapshot,
)
from blueprint_kernel.domain.state import AppSnapshot
from blueprint_kernel.exceptions import SnapshotDecodeError
from blueprint_kernel.logging_config import get_logger
from blueprint_kernel.models.snapshot_record import AppStateSnapshotRecord

logger = get_logger("services.snapshot_store")

DEFAULT_STORAGE_KEY = "contract-management-storage"


@runtime_checkable
class SnapshotStore(Protocol):
    """Persistence boundary of the application state."""

    storage_key: str

    def load(self) -> AppSnapshot:
        """Return the stored snapshot (empty when nothing was saved yet)."""
        ...

    def save(self, state: AppSnapshot) -> None:
        """Durably replace the stored snapshot with ``state``."""
        ...


def dumps_snapshot(state: AppSnapshot) -> str:
    return json.dumps(encode_snapshot(state), sort_keys=True)


def loads_snapshot(payload: str | None) -> AppSnapshot:
    if payload is None:
        return AppSnapshot()
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise SnapshotDecodeError("$", f"invalid JSON: {exc.msg}") from exc
    return decode_snapshot(data)


class InMemorySnapshotStore:
    """
    Keeps the encoded blob in memory.

    The blob goes through the same JSON encoding as the SQL store, so tests
    exercise the real round trip.  ``save_count`` records every write.
    """

    def __init__(
        self,
        payload: str | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self.storage_key = storage_key
        self.payload = payload
        self.save_count = 0

    def load(self) -> AppSnapshot:
        return loads_snapshot(self.payload)

    def save(self, state: AppSnapshot) -> None:
        self.payload = dumps_snapshot(state)
        self.save_count += 1


class SqlSnapshotStore:
    """
    Stores the snapshot as one row of ``app_state_snapshots``.

    Contract:
        The engine must have had ``create_tables`` run against it.

    Guarantees:
        - ``save`` upserts the row for ``storage_key`` inside a single
          transaction and commits before returning.
        - ``load`` never writes.
    """

    def __init__(
        self,
        engine: Engine,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Clock | None = None,
    ):
        self.storage_key = storage_key
        self._factory = create_session_factory(engine)
        self._clock = clock or SystemClock()

    def load(self) -> AppSnapshot:
        with session_scope(self._factory) as session:
            record = session.execute(
                select(AppStateSnapshotRecord).where(
                    AppStateSnapshotRecord.storage_key == self.storage_key
                )
            ).scalar_one_or_none()
            payload = record.payload if record is not None else None

        state = loads_snapshot(payload)
        logger.info(
            "snapshot_loaded",
            extra={
                "storage_key": self.storage_key,
                "found": payload is not None,
                "blueprint_count": len(state.blueprints),
                "contract_count": len(state.contracts),
            },
        )
        return state

    def save(self, state: AppSnapshot) -> None:
        payload = dumps_snapshot(state)
        with session_scope(self._factory) as session:
            record = session.execute(
                select(AppStateSnapshotRecord).where(
                    AppStateSnapshotRecord.storage_key == self.storage_key
                )
            ).scalar_one_or_none()
            if record is None:
                record = AppStateSnapshotRecord(storage_key=self.storage_key)
                session.add(record)
            record.payload = payload
            record.schema_version = SNAPSHOT_SCHEMA_VERSION
            record.saved_at = self._clock.now()

        logger.debug(
            "snapshot_saved",
            extra={
                "storage_key": self.storage_key,
                "blueprint_count": len(state.blueprints),
                "contract_count": len(state.contracts),
                "bytes": len(payload),
            },
        )

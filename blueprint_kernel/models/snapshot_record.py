"""
Module: blueprint_kernel.models.snapshot_record
Responsibility: ORM persistence for the application state blob.  One row per
    storage key holds the full encoded snapshot (blueprints, contracts and the
    seeding flag) as JSON text.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - storage_key is unique (uq_snapshot_storage_key): a key maps to exactly
      one snapshot row.
    - payload is always the complete snapshot; rows are overwritten in full,
      never patched.

Failure modes:
    - IntegrityError on a duplicate storage_key (two writers inserting the
      first snapshot at once; unsupported, see the single-writer model).
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from blueprint_kernel.db.base import Base


class AppStateSnapshotRecord(Base):
    """Stored full-state snapshot for one storage key."""

    __tablename__ = "app_state_snapshots"

    __table_args__ = (
        UniqueConstraint("storage_key", name="uq_snapshot_storage_key"),
    )

    storage_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Logical name of the store (e.g. contract-management-storage)",
    )

    payload: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="JSON-encoded snapshot",
    )

    schema_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Version of the snapshot blob layout",
    )

    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Time of the last full write",
    )

    def __repr__(self) -> str:
        return f"<AppStateSnapshotRecord {self.storage_key} v{self.schema_version}>"

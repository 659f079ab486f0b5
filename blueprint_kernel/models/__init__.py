"""SQLAlchemy ORM models."""

from blueprint_kernel.models.snapshot_record import AppStateSnapshotRecord

__all__ = ["AppStateSnapshotRecord"]

"""Kernel services: the application state facade and its snapshot stores."""

from blueprint_kernel.services.app_state import AppState
from blueprint_kernel.services.snapshot_store import (
    DEFAULT_STORAGE_KEY,
    InMemorySnapshotStore,
    SnapshotStore,
    SqlSnapshotStore,
)

__all__ = [
    "AppState",
    "DEFAULT_STORAGE_KEY",
    "InMemorySnapshotStore",
    "SnapshotStore",
    "SqlSnapshotStore",
]

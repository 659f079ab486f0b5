"""Database layer - engine, session scope and base classes."""

from blueprint_kernel.db.base import UUID, Base, UUIDString
from blueprint_kernel.db.engine import (
    create_engine_from_url,
    create_session_factory,
    create_tables,
    drop_tables,
    session_scope,
)

__all__ = [
    "create_engine_from_url",
    "create_session_factory",
    "create_tables",
    "drop_tables",
    "session_scope",
    "Base",
    "UUIDString",
    "UUID",
]

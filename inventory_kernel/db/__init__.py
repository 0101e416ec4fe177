"""Database layer - engine, session scope and base classes."""

from inventory_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from inventory_kernel.db.engine import (
    Database,
    create_engine_from_url,
    create_tables,
    drop_tables,
    make_session_factory,
    session_scope,
)

__all__ = [
    "Database",
    "create_engine_from_url",
    "make_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
]

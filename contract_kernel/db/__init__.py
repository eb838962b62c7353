"""Database layer - engine, base classes, and append-only enforcement."""

from contract_kernel.db.base import UUID, Base, OrderedStatusType, TrackedBase, UUIDString
from contract_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    read_scope,
    reset_engine,
    transaction_scope,
)
from contract_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session_factory",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "read_scope",
    "transaction_scope",
    "register_immutability_listeners",
    "unregister_immutability_listeners",
    "Base",
    "TrackedBase",
    "OrderedStatusType",
    "UUIDString",
    "UUID",
]

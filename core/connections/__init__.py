"""Connection records and storage backends."""

from core.connections.store import (
    Connection,
    ConnectionStore,
    InMemoryConnectionStore,
    SqliteConnectionStore,
)

__all__ = [
    "Connection",
    "ConnectionStore",
    "InMemoryConnectionStore",
    "SqliteConnectionStore",
]

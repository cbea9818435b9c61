"""Connection storage.

A connection binds a provider config (e.g. "netsuite") in an environment to
one customer account: its credentials (used to build the sync client) and
free-form metadata (editable through the API).

Backends:
- InMemoryConnectionStore: For development/testing
- SqliteConnectionStore: For single-server deployments
"""

import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Connection:
    """Connection record."""
    connection_id: str
    provider_config_key: str
    environment_id: int
    connection_token: str
    credentials: Dict[str, Any] = field(default_factory=dict)  # access_token, account_id
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def access_token(self) -> Optional[str]:
        return self.credentials.get("access_token")

    @property
    def account_id(self) -> Optional[str]:
        return self.credentials.get("account_id") or self.metadata.get("accountId")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connection_id": self.connection_id,
            "provider_config_key": self.provider_config_key,
            "environment_id": self.environment_id,
            "connection_token": self.connection_token,
            "credentials": self.credentials,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(
            connection_id=data["connection_id"],
            provider_config_key=data["provider_config_key"],
            environment_id=int(data["environment_id"]),
            connection_token=data["connection_token"],
            credentials=data.get("credentials") or {},
            metadata=data.get("metadata") or {},
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else _utcnow(),
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else _utcnow(),
        )


class ConnectionStore(ABC):
    """Abstract base class for connection storage."""

    @abstractmethod
    async def save(self, connection: Connection) -> None:
        """Insert or replace a connection."""
        pass

    @abstractmethod
    async def get(
        self,
        connection_id: str,
        provider_config_key: str,
        environment_id: int,
    ) -> Optional[Connection]:
        """Retrieve one connection."""
        pass

    @abstractmethod
    async def get_by_tokens(self, connection_tokens: Sequence[str]) -> List[Connection]:
        """Retrieve the connections matching any of ``connection_tokens``."""
        pass

    async def get_by_ids(
        self,
        connection_ids: Sequence[str],
        provider_config_key: str,
        environment_id: int,
    ) -> List[Connection]:
        """Retrieve the connections matching any of ``connection_ids``."""
        found = []
        for connection_id in dict.fromkeys(connection_ids):
            connection = await self.get(connection_id, provider_config_key, environment_id)
            if connection:
                found.append(connection)
        return found

    async def update_metadata(self, connections: Sequence[Connection], metadata: Dict[str, Any]) -> None:
        """Replace the metadata of every connection."""
        for connection in connections:
            connection.metadata = dict(metadata)
            connection.updated_at = _utcnow()
            await self.save(connection)

    async def merge_metadata(self, connections: Sequence[Connection], metadata: Dict[str, Any]) -> None:
        """Merge ``metadata`` into the metadata of every connection."""
        for connection in connections:
            connection.metadata = {**connection.metadata, **metadata}
            connection.updated_at = _utcnow()
            await self.save(connection)


class InMemoryConnectionStore(ConnectionStore):
    """In-memory connection storage for development/testing.

    WARNING: Connections are lost on restart. Use only for development.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def _key(self, connection_id: str, provider_config_key: str, environment_id: int) -> str:
        return f"{environment_id}:{provider_config_key}:{connection_id}"

    async def save(self, connection: Connection) -> None:
        with self._lock:
            key = self._key(connection.connection_id, connection.provider_config_key, connection.environment_id)
            self._connections[key] = connection

    async def get(
        self,
        connection_id: str,
        provider_config_key: str,
        environment_id: int,
    ) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(self._key(connection_id, provider_config_key, environment_id))

    async def get_by_tokens(self, connection_tokens: Sequence[str]) -> List[Connection]:
        wanted = set(connection_tokens)
        with self._lock:
            return [c for c in self._connections.values() if c.connection_token in wanted]


class SqliteConnectionStore(ConnectionStore):
    """SQLite-backed connection storage."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS connections (
                    environment_id INTEGER NOT NULL,
                    provider_config_key TEXT NOT NULL,
                    connection_id TEXT NOT NULL,
                    connection_token TEXT NOT NULL UNIQUE,
                    data TEXT NOT NULL,
                    PRIMARY KEY (environment_id, provider_config_key, connection_id)
                )
            """)
            conn.commit()
        finally:
            conn.close()

    async def save(self, connection: Connection) -> None:
        with self._lock:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute("""
                    INSERT INTO connections
                        (environment_id, provider_config_key, connection_id, connection_token, data)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(environment_id, provider_config_key, connection_id) DO UPDATE SET
                        connection_token = excluded.connection_token,
                        data = excluded.data
                """, (
                    connection.environment_id,
                    connection.provider_config_key,
                    connection.connection_id,
                    connection.connection_token,
                    json.dumps(connection.to_dict()),
                ))
                conn.commit()
            finally:
                conn.close()

    async def get(
        self,
        connection_id: str,
        provider_config_key: str,
        environment_id: int,
    ) -> Optional[Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute("""
                SELECT data FROM connections
                WHERE environment_id = ? AND provider_config_key = ? AND connection_id = ?
            """, (environment_id, provider_config_key, connection_id)).fetchone()
        finally:
            conn.close()
        return Connection.from_dict(json.loads(row[0])) if row else None

    async def get_by_tokens(self, connection_tokens: Sequence[str]) -> List[Connection]:
        tokens = list(dict.fromkeys(connection_tokens))
        if not tokens:
            return []
        placeholders = ",".join("?" for _ in tokens)
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT data FROM connections WHERE connection_token IN ({placeholders})",
                tokens,
            ).fetchall()
        finally:
            conn.close()
        return [Connection.from_dict(json.loads(row[0])) for row in rows]

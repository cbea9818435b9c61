"""Record sinks for canonical records.

A sync hands each finished page to ``RecordSink.batch_save``. Sinks upsert
by canonical ``id`` within a model: a record replaces any earlier record
with the same id. Records are stored as canonical JSON (sorted keys), so
re-saving an unchanged record is detected by its content hash and leaves
the stored row untouched.
"""

import hashlib
import json
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


DB_PATH = Path(__file__).resolve().parents[1] / "netsuite_sync.db"


def canonical_json(record: Dict[str, Any]) -> str:
    """Serialize a record deterministically."""
    return json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _compute_sha256(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass
class SaveResult:
    """Outcome of one batch_save call."""
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.unchanged


class RecordSink(ABC):
    """Destination of finished record batches."""

    @abstractmethod
    async def batch_save(self, records: Sequence[Dict[str, Any]], model_name: str) -> SaveResult:
        """Upsert ``records`` of ``model_name`` keyed by their ``id``.

        Called once per page, including pages with no records.
        """
        pass


class InMemoryRecordSink(RecordSink):
    """Dict-backed sink for local runs and tests.

    ``batches`` keeps every call in order, empty batches included.
    """

    def __init__(self):
        self.records: Dict[str, Dict[str, str]] = {}
        self.batches: List[Tuple[str, List[Dict[str, Any]]]] = []

    async def batch_save(self, records: Sequence[Dict[str, Any]], model_name: str) -> SaveResult:
        self.batches.append((model_name, [dict(r) for r in records]))
        stored = self.records.setdefault(model_name, {})
        result = SaveResult()
        for record in records:
            payload = canonical_json(record)
            previous = stored.get(record["id"])
            if previous is None:
                result.inserted += 1
            elif previous == payload:
                result.unchanged += 1
            else:
                result.updated += 1
            stored[record["id"]] = payload
        return result

    def get_records(self, model_name: str) -> List[Dict[str, Any]]:
        return [json.loads(p) for p in self.records.get(model_name, {}).values()]

    def get_raw(self, model_name: str, record_id: str) -> Optional[str]:
        return self.records.get(model_name, {}).get(record_id)


class SqliteRecordSink(RecordSink):
    """SQLite-backed sink, one row per (connection, model, id)."""

    def __init__(self, connection_id: str, db_path: Path = DB_PATH):
        self.connection_id = connection_id
        self.db_path = Path(db_path)
        init_records_db(self.db_path)

    async def batch_save(self, records: Sequence[Dict[str, Any]], model_name: str) -> SaveResult:
        now = datetime.now(timezone.utc).isoformat()
        result = SaveResult()
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            for record in records:
                payload = canonical_json(record)
                content_hash = _compute_sha256(payload)
                cursor.execute("""
                    SELECT content_hash FROM synced_records
                    WHERE connection_id = ? AND model = ? AND record_id = ?
                """, (self.connection_id, model_name, record["id"]))
                row = cursor.fetchone()
                if row is not None and row[0] == content_hash:
                    result.unchanged += 1
                    continue
                if row is None:
                    result.inserted += 1
                else:
                    result.updated += 1
                cursor.execute("""
                    INSERT INTO synced_records
                        (connection_id, model, record_id, payload, content_hash, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(connection_id, model, record_id) DO UPDATE SET
                        payload = excluded.payload,
                        content_hash = excluded.content_hash,
                        updated_at = excluded.updated_at
                """, (self.connection_id, model_name, record["id"], payload, content_hash, now, now))
            conn.commit()
        finally:
            conn.close()
        return result

    def get_records(self, model_name: str) -> List[Dict[str, Any]]:
        """Return stored records of a model, ordered by id."""
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT payload FROM synced_records
                WHERE connection_id = ? AND model = ?
                ORDER BY record_id
            """, (self.connection_id, model_name))
            return [json.loads(row[0]) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_row(self, model_name: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Return the raw stored row (payload, hash, timestamps) for one record."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT payload, content_hash, created_at, updated_at FROM synced_records
                WHERE connection_id = ? AND model = ? AND record_id = ?
            """, (self.connection_id, model_name, record_id))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()


def init_records_db(db_path: Path = DB_PATH) -> None:
    """Create the synced_records table if it doesn't exist."""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS synced_records (
                connection_id TEXT NOT NULL,
                model TEXT NOT NULL,
                record_id TEXT NOT NULL,
                payload TEXT NOT NULL,
                content_hash TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (connection_id, model, record_id)
            )
        """)
        conn.commit()
    finally:
        conn.close()

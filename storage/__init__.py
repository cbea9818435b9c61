"""Record storage for synced canonical records."""

from storage.record_sink import (
    InMemoryRecordSink,
    RecordSink,
    SaveResult,
    SqliteRecordSink,
    canonical_json,
    init_records_db,
)

__all__ = [
    "InMemoryRecordSink",
    "RecordSink",
    "SaveResult",
    "SqliteRecordSink",
    "canonical_json",
    "init_records_db",
]

"""Activity definitions module."""

from activities.sync import (
    run_sync,
    execute_sync,
    SyncInput,
    SyncOutput,
)

__all__ = [
    "run_sync",
    "execute_sync",
    "SyncInput",
    "SyncOutput",
]

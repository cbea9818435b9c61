"""Application settings.

Read from environment variables; a ``.env`` file at the repo root is
loaded first if it exists.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]

env_path = REPO_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """Runtime settings for syncs, storage, logging and Temporal."""
    netsuite_base_url: Optional[str] = None
    sync_page_size: int = 100
    sync_retries: int = 3
    sync_confirm_short_page: bool = True
    http_timeout_seconds: int = 30

    records_db_path: Path = REPO_ROOT / "netsuite_sync.db"
    connections_db_path: Path = REPO_ROOT / "netsuite_sync.db"

    log_level: str = "INFO"
    log_json: bool = False

    temporal_endpoint: Optional[str] = None
    temporal_namespace: str = "default"
    temporal_api_key: Optional[str] = None
    temporal_task_queue: str = "netsuite-sync"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def load_settings() -> Settings:
    """Load settings from the environment."""
    defaults = Settings()
    return Settings(
        netsuite_base_url=os.getenv("NETSUITE_BASE_URL") or None,
        sync_page_size=_env_int("SYNC_PAGE_SIZE", defaults.sync_page_size),
        sync_retries=_env_int("SYNC_RETRIES", defaults.sync_retries),
        sync_confirm_short_page=_env_bool("SYNC_CONFIRM_SHORT_PAGE", defaults.sync_confirm_short_page),
        http_timeout_seconds=_env_int("HTTP_TIMEOUT_SECONDS", defaults.http_timeout_seconds),
        records_db_path=Path(os.getenv("RECORDS_DB_PATH") or defaults.records_db_path),
        connections_db_path=Path(os.getenv("CONNECTIONS_DB_PATH") or defaults.connections_db_path),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        log_json=_env_bool("LOG_JSON", defaults.log_json),
        temporal_endpoint=os.getenv("TEMPORAL_ENDPOINT") or None,
        temporal_namespace=os.getenv("TEMPORAL_NAMESPACE", defaults.temporal_namespace),
        temporal_api_key=os.getenv("TEMPORAL_API_KEY") or None,
        temporal_task_queue=os.getenv("TEMPORAL_TASK_QUEUE", defaults.temporal_task_queue),
    )

"""
Metrics Collection for the sync pipeline

Collects and exposes metrics for:
- Sync runs (started, completed, failed) per sync
- Records per canonical model (pages, listed, saved, skipped)
- Upstream fetch retries
- Run durations (average, p95)

Metrics are kept in-memory per process; the API exposes a summary.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Any
from urllib.parse import urlsplit
import statistics


# Prefix of absolute record API URLs (e.g. followed "next" links)
RECORD_API_PATH = "/services/rest/record/v1"


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class RunMetrics:
    """Metrics for sync runs."""
    started: int = 0
    completed: int = 0
    failed: int = 0
    in_progress: int = 0

    by_sync: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"started": 0, "completed": 0, "failed": 0}))


@dataclass
class RecordMetrics:
    """Metrics for records flowing to the sink."""
    pages: int = 0
    listed: int = 0
    saved: int = 0
    skipped: int = 0

    by_model: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"pages": 0, "listed": 0, "saved": 0, "skipped": 0}))


@dataclass
class TimingMetrics:
    """Run duration metrics."""
    max_samples: int = 1000
    by_stage: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def add_sample(self, duration_ms: float, stage: str):
        """Add a timing sample."""
        samples = self.by_stage[stage]
        samples.append(duration_ms)
        if len(samples) > self.max_samples:
            self.by_stage[stage] = samples[-self.max_samples:]

    def get_average(self, stage: str) -> float:
        """Get average duration."""
        samples = self.by_stage.get(stage, [])
        return statistics.mean(samples) if samples else 0.0

    def get_p95(self, stage: str) -> float:
        """Get 95th percentile duration."""
        samples = self.by_stage.get(stage, [])
        if not samples:
            return 0.0
        sorted_samples = sorted(samples)
        idx = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(idx, len(sorted_samples) - 1)]


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector for sync runs.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_sync_started("invoices")
        metrics.record_page("NetsuiteInvoice", listed=100, saved=98, skipped=2)
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = Lock()

    def __init__(self):
        self.runs = RunMetrics()
        self.records = RecordMetrics()
        self.timings = TimingMetrics()
        self.fetch_retries: Dict[str, int] = defaultdict(int)
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # =========================================================================
    # Runs
    # =========================================================================

    def record_sync_started(self, sync_name: str):
        with self._lock:
            self.runs.started += 1
            self.runs.in_progress += 1
            self.runs.by_sync[sync_name]["started"] += 1

    def record_sync_completed(self, sync_name: str, duration_ms: float = None):
        with self._lock:
            self.runs.completed += 1
            self.runs.in_progress = max(0, self.runs.in_progress - 1)
            self.runs.by_sync[sync_name]["completed"] += 1
            if duration_ms:
                self.timings.add_sample(duration_ms, f"sync.{sync_name}")

    def record_sync_failed(self, sync_name: str):
        with self._lock:
            self.runs.failed += 1
            self.runs.in_progress = max(0, self.runs.in_progress - 1)
            self.runs.by_sync[sync_name]["failed"] += 1

    # =========================================================================
    # Records
    # =========================================================================

    def record_page(self, model_name: str, listed: int, saved: int, skipped: int):
        """Record one page handed to the sink."""
        with self._lock:
            self.records.pages += 1
            self.records.listed += listed
            self.records.saved += saved
            self.records.skipped += skipped
            by_model = self.records.by_model[model_name]
            by_model["pages"] += 1
            by_model["listed"] += listed
            by_model["saved"] += saved
            by_model["skipped"] += skipped

    def record_fetch_retry(self, endpoint: str):
        """Record a retried upstream call, keyed by the endpoint's first path segment."""
        path = urlsplit(endpoint).path
        if path.startswith(RECORD_API_PATH):
            path = path[len(RECORD_API_PATH):]
        resource = path.strip("/").split("/")[0] or "/"
        with self._lock:
            self.fetch_retries[resource] += 1

    # =========================================================================
    # Timings
    # =========================================================================

    def get_timing_stats(self, stage: str) -> Dict[str, float]:
        with self._lock:
            return {
                "average_ms": self.timings.get_average(stage),
                "p95_ms": self.timings.get_p95(stage),
                "sample_count": len(self.timings.by_stage.get(stage, [])),
            }

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "runs": {
                    "started": self.runs.started,
                    "completed": self.runs.completed,
                    "failed": self.runs.failed,
                    "in_progress": self.runs.in_progress,
                    "by_sync": {k: dict(v) for k, v in self.runs.by_sync.items()},
                },
                "records": {
                    "pages": self.records.pages,
                    "listed": self.records.listed,
                    "saved": self.records.saved,
                    "skipped": self.records.skipped,
                    "by_model": {k: dict(v) for k, v in self.records.by_model.items()},
                },
                "fetch_retries": dict(self.fetch_retries),
                "timings": {
                    stage: {
                        "average_ms": self.timings.get_average(stage),
                        "p95_ms": self.timings.get_p95(stage),
                    }
                    for stage in self.timings.by_stage.keys()
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()


def record_sync_started(sync_name: str):
    get_metrics().record_sync_started(sync_name)


def record_sync_completed(sync_name: str, duration_ms: float = None):
    get_metrics().record_sync_completed(sync_name, duration_ms)


def record_sync_failed(sync_name: str):
    get_metrics().record_sync_failed(sync_name)


def record_page(model_name: str, listed: int, saved: int, skipped: int):
    get_metrics().record_page(model_name, listed, saved, skipped)


def record_fetch_retry(endpoint: str):
    get_metrics().record_fetch_retry(endpoint)

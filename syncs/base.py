"""Shared sync plumbing.

A sync walks one list endpoint page by page, assembles a canonical record
for every listed reference, and hands each page's records to the sink
before fetching the next page. Everything runs sequentially so that the
sink sees pages (and records within a page) in upstream order.
"""

import time
from dataclasses import dataclass, field, asdict
from typing import Any, Awaitable, Callable, Dict, List, Optional

from connectors.base import DEFAULT_RETRIES, Fetcher
from connectors.netsuite.ns_detail import DetailFetcher
from connectors.netsuite.ns_models import NSReference
from connectors.netsuite.ns_pagination import ListEndpoint, Paginator
from core.mapping.field_mapper import FieldMappingError
from core.models.canonical import CanonicalBase
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import (
    record_page,
    record_sync_completed,
    record_sync_failed,
    record_sync_started,
)
from storage.record_sink import RecordSink

logger = get_logger(__name__)


@dataclass
class SyncConfig:
    """Per-run sync behavior."""
    page_size: int = 100
    retries: int = DEFAULT_RETRIES
    confirm_short_page: bool = True


@dataclass
class SyncContext:
    """Collaborators of a sync run."""
    fetcher: Fetcher
    sink: RecordSink
    config: SyncConfig = field(default_factory=SyncConfig)
    connection_id: Optional[str] = None

    def detail_fetcher(self) -> DetailFetcher:
        return DetailFetcher(self.fetcher, retries=self.config.retries)

    def list_endpoint(self, path: str) -> ListEndpoint:
        return ListEndpoint(
            path=path,
            page_size=self.config.page_size,
            retries=self.config.retries,
            confirm_short_page=self.config.confirm_short_page,
        )


@dataclass
class SyncSummary:
    """Outcome of a completed sync run."""
    sync_name: str
    model_name: str
    pages: int = 0
    listed: int = 0
    saved: int = 0
    skipped: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Assembler = Callable[[SyncContext, NSReference], Awaitable[Optional[CanonicalBase]]]


async def run_paginated_sync(
    ctx: SyncContext,
    sync_name: str,
    list_path: str,
    model_name: str,
    assemble: Assembler,
    label: str,
) -> SyncSummary:
    """Walk ``list_path`` and save one batch of ``model_name`` per page.

    Args:
        ctx: Sync collaborators
        sync_name: Registered sync name (for logs and metrics)
        list_path: List endpoint path
        model_name: Model name passed to the sink
        assemble: Builds the canonical record for one reference, or returns
            None to skip it
        label: Plural noun used in log messages ("invoices")

    Raises:
        Exception: Transport failures from the fetcher. Pages saved before
            the failure stay saved.
    """
    summary = SyncSummary(sync_name=sync_name, model_name=model_name)
    started = time.monotonic()
    record_sync_started(sync_name)

    with with_correlation(connection_id=ctx.connection_id, sync_name=sync_name, model=model_name):
        try:
            paginator = Paginator(ctx.fetcher, ctx.list_endpoint(list_path))
            async for references in paginator:
                logger.info(f"Listed {label}", extra_fields={"total": len(references)})

                records: List[Dict[str, Any]] = []
                for reference in references:
                    if not reference.id:
                        logger.warning(
                            f"Skipping {label} reference without id",
                            extra_fields={"links": [l.href for l in reference.links]},
                        )
                        continue
                    try:
                        record = await assemble(ctx, reference)
                    except FieldMappingError as e:
                        logger.warning(
                            f"Skipping unmappable record: {e}",
                            extra_fields={"id": reference.id, "field": e.field},
                        )
                        record = None
                    if record is not None:
                        records.append(record.to_record())

                await ctx.sink.batch_save(records, model_name)

                skipped = len(references) - len(records)
                summary.pages += 1
                summary.listed += len(references)
                summary.saved += len(records)
                summary.skipped += skipped
                record_page(model_name, listed=len(references), saved=len(records), skipped=skipped)
        except Exception:
            record_sync_failed(sync_name)
            logger.exception(
                f"Sync {sync_name} failed",
                extra_fields={"pages_committed": summary.pages},
            )
            raise

        summary.duration_ms = (time.monotonic() - started) * 1000
        record_sync_completed(sync_name, summary.duration_ms)
        logger.info(f"Sync {sync_name} completed", extra_fields=summary.to_dict())

    return summary


# =============================================================================
# Sync Registry
# =============================================================================

SyncFunction = Callable[[SyncContext], Awaitable[SyncSummary]]

_sync_registry: Dict[str, SyncFunction] = {}


def register_sync(sync_name: str):
    """Decorator to register a sync implementation."""
    def decorator(func):
        _sync_registry[sync_name] = func
        return func
    return decorator


def get_sync(sync_name: str) -> SyncFunction:
    """Look up a registered sync.

    Raises:
        ValueError: If sync_name is not registered
    """
    if sync_name not in _sync_registry:
        available = list(_sync_registry.keys())
        raise ValueError(f"Unknown sync: {sync_name}. Available: {available}")
    return _sync_registry[sync_name]


def list_available_syncs() -> List[str]:
    """List all registered sync names."""
    return list(_sync_registry.keys())

"""Sync activities.

Entry point the orchestration runtime calls once per scheduled run and
connection. The activity loads the connection's credentials, opens a
NetSuite client, runs the registered sync and reports a summary.

A failed run is not resumed: transport retries happen inside the client,
and the next scheduled run starts pagination from the beginning.
"""

from dataclasses import dataclass
from typing import Optional

from temporalio import activity
from temporalio.exceptions import ApplicationError

from connectors.base import Fetcher
from connectors.netsuite.ns_client import (
    NetSuiteApiConfig,
    NetSuiteClient,
    NSAuthenticationError,
    NSValidationError,
    RetryConfig,
)
from core.config import Settings, load_settings
from core.connections.store import Connection, ConnectionStore, SqliteConnectionStore
from core.observability.logging import with_correlation
from storage.record_sink import RecordSink, SqliteRecordSink
from syncs import SyncConfig, SyncContext, get_sync


# =============================================================================
# Activity Input/Output Models
# =============================================================================

@dataclass
class SyncInput:
    """Input for run_sync activity.

    Attributes:
        sync_name: Registered sync ("invoices" or "payments")
        connection_id: Connection to sync
        provider_config_key: Provider config of the connection
        environment_id: Environment of the connection
    """
    sync_name: str
    connection_id: str
    provider_config_key: str = "netsuite"
    environment_id: int = 1


@dataclass
class SyncOutput:
    """Output from run_sync activity."""
    sync_name: str
    connection_id: str
    model_name: str
    pages: int
    listed: int
    saved: int
    skipped: int
    duration_ms: float


# =============================================================================
# Wiring
# =============================================================================

def get_connection_store(settings: Settings) -> ConnectionStore:
    return SqliteConnectionStore(settings.connections_db_path)


def build_client(connection: Connection, settings: Settings) -> NetSuiteClient:
    """Build a NetSuite client from connection credentials."""
    if not connection.access_token:
        raise ApplicationError(
            f"Connection {connection.connection_id} has no access token",
            type="MissingCredentials",
            non_retryable=True,
        )
    if not connection.account_id and not settings.netsuite_base_url:
        raise ApplicationError(
            f"Connection {connection.connection_id} has no NetSuite account id",
            type="MissingCredentials",
            non_retryable=True,
        )

    api_config = NetSuiteApiConfig(
        account_id=connection.account_id or "",
        base_url=settings.netsuite_base_url,
        retry_config=RetryConfig(max_retries=settings.sync_retries),
        timeout_seconds=settings.http_timeout_seconds,
    )
    return NetSuiteClient(api_config, connection.access_token)


def build_sync_config(settings: Settings) -> SyncConfig:
    return SyncConfig(
        page_size=settings.sync_page_size,
        retries=settings.sync_retries,
        confirm_short_page=settings.sync_confirm_short_page,
    )


async def execute_sync(
    input: SyncInput,
    store: ConnectionStore,
    settings: Settings,
    fetcher: Optional[Fetcher] = None,
    sink: Optional[RecordSink] = None,
) -> SyncOutput:
    """Run one sync for one connection.

    Args:
        input: What to sync
        store: Connection store holding credentials
        settings: Runtime settings
        fetcher: Upstream fetcher (default: a NetSuite client for the connection)
        sink: Record sink (default: SQLite sink for the connection)

    Raises:
        ApplicationError: Unknown sync or connection, or missing credentials
            (non-retryable)
        NSApiError: Fatal upstream errors
    """
    try:
        sync = get_sync(input.sync_name)
    except ValueError as e:
        raise ApplicationError(str(e), type="UnknownSync", non_retryable=True) from e

    connection = await store.get(input.connection_id, input.provider_config_key, input.environment_id)
    if connection is None:
        raise ApplicationError(
            f"Connection {input.connection_id} ({input.provider_config_key}) not found",
            type="UnknownConnection",
            non_retryable=True,
        )

    sink = sink or SqliteRecordSink(connection.connection_id, settings.records_db_path)
    config = build_sync_config(settings)

    with with_correlation(
        connection_id=connection.connection_id,
        provider_config_key=connection.provider_config_key,
    ):
        if fetcher is not None:
            summary = await sync(SyncContext(fetcher, sink, config, connection.connection_id))
        else:
            async with build_client(connection, settings) as client:
                summary = await sync(SyncContext(client, sink, config, connection.connection_id))

    return SyncOutput(
        sync_name=summary.sync_name,
        connection_id=connection.connection_id,
        model_name=summary.model_name,
        pages=summary.pages,
        listed=summary.listed,
        saved=summary.saved,
        skipped=summary.skipped,
        duration_ms=summary.duration_ms,
    )


# =============================================================================
# Activities
# =============================================================================

@activity.defn
async def run_sync(input: SyncInput) -> SyncOutput:
    """Run a registered sync for a connection."""
    info = activity.info()
    settings = load_settings()

    with with_correlation(
        workflow_id=info.workflow_id,
        workflow_run_id=info.workflow_run_id,
        activity_name=info.activity_type,
        sync_name=input.sync_name,
    ):
        activity.logger.info(f"Sync started: {input.sync_name} for connection={input.connection_id}")
        try:
            output = await execute_sync(input, get_connection_store(settings), settings)
        except (NSAuthenticationError, NSValidationError) as e:
            raise ApplicationError(str(e), type=type(e).__name__, non_retryable=True) from e

    activity.logger.info(
        f"Sync completed: {input.sync_name} ({output.saved} saved, {output.skipped} skipped, {output.pages} pages)"
    )
    return output

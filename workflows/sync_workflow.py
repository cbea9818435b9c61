"""NetSuite Sync Workflow.

Runs the registered syncs for one connection, one after the other. The
workflow is started by a Temporal schedule; each scheduled run is a full
sync from the first page.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from activities.sync import run_sync, SyncInput


TASK_QUEUE_SYNC = "netsuite-sync"

DEFAULT_SYNCS = ["invoices", "payments"]


@dataclass
class SyncWorkflowInput:
    """Input for NetSuite Sync Workflow.

    Attributes:
        connection_id: Connection to sync
        provider_config_key: Provider config of the connection
        environment_id: Environment of the connection
        syncs: Registered sync names, run in order
    """
    connection_id: str
    provider_config_key: str = "netsuite"
    environment_id: int = 1
    syncs: List[str] = field(default_factory=lambda: list(DEFAULT_SYNCS))


@workflow.defn
class NetSuiteSyncWorkflow:
    """Workflow running invoice and payment syncs for a connection.

    The activity is not retried by Temporal: upstream calls already retry
    inside the client, and pages saved before a failure stay saved. A failed
    run fails the workflow; the next scheduled run starts over.
    """

    @workflow.run
    async def run(self, input: SyncWorkflowInput) -> dict:
        workflow.logger.info(f"Starting NetSuite sync for connection {input.connection_id}: {input.syncs}")

        results = {}
        for sync_name in input.syncs:
            output = await workflow.execute_activity(
                run_sync,
                SyncInput(
                    sync_name=sync_name,
                    connection_id=input.connection_id,
                    provider_config_key=input.provider_config_key,
                    environment_id=input.environment_id,
                ),
                start_to_close_timeout=timedelta(hours=2),
                retry_policy=RetryPolicy(maximum_attempts=1),
            )
            workflow.logger.info(
                f"Sync {sync_name} done: {output.saved} saved, {output.skipped} skipped over {output.pages} pages"
            )
            results[sync_name] = {
                "model_name": output.model_name,
                "pages": output.pages,
                "listed": output.listed,
                "saved": output.saved,
                "skipped": output.skipped,
            }

        return {
            "connection_id": input.connection_id,
            "status": "COMPLETED",
            "syncs": results,
        }

"""Start a NetSuite sync on Temporal.

Either runs NetSuiteSyncWorkflow once and prints the result, or (with
--every) creates a Temporal schedule that starts it at a fixed interval.
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from temporalio.client import (
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleIntervalSpec,
    ScheduleSpec,
)

from core.config import load_settings
from core.observability.logging import configure_logging, get_logger
from temporal_client import get_temporal_client
from workflows.sync_workflow import DEFAULT_SYNCS, NetSuiteSyncWorkflow, SyncWorkflowInput


logger = get_logger(__name__)


async def start_sync(input: SyncWorkflowInput, every_minutes: int = None) -> dict:
    """Run the sync workflow once, or schedule it every ``every_minutes``."""
    settings = load_settings()
    client = await get_temporal_client(settings)
    logger.info(f"Connected to Temporal: {client.namespace}")

    workflow_id = f"netsuite-sync-{input.environment_id}-{input.provider_config_key}-{input.connection_id}"

    if every_minutes:
        schedule_id = f"{workflow_id}-schedule"
        await client.create_schedule(
            schedule_id,
            Schedule(
                action=ScheduleActionStartWorkflow(
                    NetSuiteSyncWorkflow.run,
                    input,
                    id=workflow_id,
                    task_queue=settings.temporal_task_queue,
                ),
                spec=ScheduleSpec(intervals=[ScheduleIntervalSpec(every=timedelta(minutes=every_minutes))]),
            ),
        )
        logger.info(f"Schedule created: {schedule_id} (every {every_minutes} min)")
        return {"schedule_id": schedule_id}

    logger.info(f"Starting NetSuiteSyncWorkflow {workflow_id} on '{settings.temporal_task_queue}'...")
    result = await client.execute_workflow(
        NetSuiteSyncWorkflow.run,
        input,
        id=workflow_id,
        task_queue=settings.temporal_task_queue,
    )
    logger.info(f"Workflow result: {result}")
    return result


def main():
    parser = argparse.ArgumentParser(description="Start a NetSuite sync")
    parser.add_argument("connection_id", help="Connection to sync")
    parser.add_argument("--provider-config-key", default="netsuite")
    parser.add_argument("--environment-id", type=int, default=1)
    parser.add_argument(
        "--sync",
        action="append",
        dest="syncs",
        choices=DEFAULT_SYNCS,
        help="Sync to run (repeatable, default: all)",
    )
    parser.add_argument("--every", type=int, default=None, help="Create a schedule running every N minutes")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)

    input = SyncWorkflowInput(
        connection_id=args.connection_id,
        provider_config_key=args.provider_config_key,
        environment_id=args.environment_id,
        syncs=args.syncs or list(DEFAULT_SYNCS),
    )
    asyncio.run(start_sync(input, every_minutes=args.every))


if __name__ == "__main__":
    main()

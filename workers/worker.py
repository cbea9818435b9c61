"""Worker for the NetSuite sync pipeline.

Polls the sync task queue and executes NetSuiteSyncWorkflow and the
run_sync activity.

Run with --queue <name> to poll a different task queue.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from temporalio.worker import Worker

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.config import load_settings
from core.observability.logging import configure_logging, get_logger
from temporal_client import get_temporal_client
from workflows.sync_workflow import NetSuiteSyncWorkflow
from activities.sync import run_sync


logger = get_logger(__name__)

WORKFLOWS = [NetSuiteSyncWorkflow]
ACTIVITIES = [run_sync]


async def run_worker(queue: str = None):
    """Start a worker listening on the sync task queue.

    Args:
        queue: Task queue to poll (default: TEMPORAL_TASK_QUEUE setting)

    Raises:
        Exception: If connection to Temporal fails
    """
    settings = load_settings()
    task_queue = queue or settings.temporal_task_queue
    client = await get_temporal_client(settings)
    logger.info(f"Connected to Temporal: {client.namespace}")

    worker = Worker(
        client,
        task_queue=task_queue,
        workflows=WORKFLOWS,
        activities=ACTIVITIES,
    )
    logger.info(f"Worker created for queue '{task_queue}':")
    logger.info(f"  - Workflows: {len(WORKFLOWS)}")
    logger.info(f"  - Activities: {len(ACTIVITIES)}")

    logger.info("Worker running... (Ctrl+C to stop)")
    await worker.run()


def main():
    """Entry point for worker with CLI args."""
    parser = argparse.ArgumentParser(description="NetSuite Sync Temporal Worker")
    parser.add_argument(
        "--queue", "-q",
        default=None,
        help="Task queue to poll (default: TEMPORAL_TASK_QUEUE or 'netsuite-sync')"
    )
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)

    try:
        asyncio.run(run_worker(queue=args.queue))
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")


if __name__ == "__main__":
    main()

"""Workflow definitions module."""

from workflows.sync_workflow import NetSuiteSyncWorkflow, SyncWorkflowInput, TASK_QUEUE_SYNC

__all__ = ["NetSuiteSyncWorkflow", "SyncWorkflowInput", "TASK_QUEUE_SYNC"]

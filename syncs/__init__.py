"""Syncs - paginated ingestion pipelines.

Each sync walks a NetSuite list endpoint, resolves every listed reference
through its detail endpoints, and saves canonical records page by page.

To add a new sync:
1. Write an assembler for one list reference
2. Wrap it with run_paginated_sync
3. Register using @register_sync decorator and import the module here
"""

from syncs.base import (
    SyncConfig,
    SyncContext,
    SyncSummary,
    get_sync,
    list_available_syncs,
    register_sync,
    run_paginated_sync,
)
from syncs.invoices import assemble_invoice, sync_invoices
from syncs.payments import assemble_payment, sync_payments

__all__ = [
    "SyncConfig",
    "SyncContext",
    "SyncSummary",
    "get_sync",
    "list_available_syncs",
    "register_sync",
    "run_paginated_sync",
    "assemble_invoice",
    "sync_invoices",
    "assemble_payment",
    "sync_payments",
]

"""Invoice sync.

For every invoice reference on a list page:

1. GET /invoice/{id}                    (missing -> skip the invoice)
2. GET /invoice/{id}/item               (item references, listing order)
3. item id from each item's self link   (no match -> drop the item)
4. GET /invoice/{id}/item/{itemId}      (missing -> drop the line)
5. map lines and invoice, append to the page batch

An invoice without resolvable items is still emitted with no lines.
"""

from typing import List, Optional

from connectors.netsuite.ns_links import ITEM_LINK_PATTERN, resolve_link_id
from connectors.netsuite.ns_models import NSInvoice, NSInvoiceItem, NSReference
from core.mapping.field_mapper import map_invoice, map_invoice_line
from core.models.canonical import CanonicalInvoice, CanonicalInvoiceLine, INVOICE_MODEL_NAME
from core.observability.logging import get_logger
from syncs.base import SyncContext, SyncSummary, register_sync, run_paginated_sync

logger = get_logger(__name__)

INVOICE_ENDPOINT = "/invoice"


async def assemble_invoice(ctx: SyncContext, reference: NSReference) -> Optional[CanonicalInvoice]:
    """Build the canonical invoice for one list reference.

    Returns:
        The invoice, or None when the invoice detail no longer exists
    """
    details = ctx.detail_fetcher()
    invoice_endpoint = f"{INVOICE_ENDPOINT}/{reference.id}"

    invoice = await details.fetch(invoice_endpoint, NSInvoice)
    if not invoice.found:
        logger.info("Invoice not found", extra_fields={"id": reference.id})
        return None

    lines: List[CanonicalInvoiceLine] = []
    for item_reference in await details.fetch_collection(f"{invoice_endpoint}/item"):
        item_id = resolve_link_id(item_reference.links, ITEM_LINK_PATTERN)
        if item_id is None:
            logger.warning(
                "Invoice item link could not be resolved",
                extra_fields={"id": reference.id, "links": [l.href for l in item_reference.links]},
            )
            continue

        item = await details.fetch(f"{invoice_endpoint}/item/{item_id}", NSInvoiceItem)
        if not item.found:
            logger.info("Invoice item not found", extra_fields={"id": reference.id, "item": item_id})
            continue

        lines.append(map_invoice_line(item.data))

    return map_invoice(invoice.data, lines, fallback_id=reference.id or "")


@register_sync("invoices")
async def sync_invoices(ctx: SyncContext) -> SyncSummary:
    """Sync all invoices, saving one NetsuiteInvoice batch per list page."""
    return await run_paginated_sync(
        ctx,
        sync_name="invoices",
        list_path=INVOICE_ENDPOINT,
        model_name=INVOICE_MODEL_NAME,
        assemble=assemble_invoice,
        label="invoices",
    )

"""Customer payment sync.

For every payment reference on a list page:

1. GET /customerpayment/{id}            (missing -> skip the payment)
2. GET /customerpayment/{id}/apply      (documents the payment settles)
3. document id from each apply entry's self link (``/apply/doc=<id>``);
   entries that don't match are dropped
4. map the payment with ``applyTo`` in listing order
"""

from typing import List, Optional

from connectors.netsuite.ns_links import APPLIED_DOC_LINK_PATTERN, resolve_link_id
from connectors.netsuite.ns_models import NSPayment, NSReference
from core.mapping.field_mapper import map_payment
from core.models.canonical import CanonicalPayment, PAYMENT_MODEL_NAME
from core.observability.logging import get_logger
from syncs.base import SyncContext, SyncSummary, register_sync, run_paginated_sync

logger = get_logger(__name__)

PAYMENT_ENDPOINT = "/customerpayment"


async def assemble_payment(ctx: SyncContext, reference: NSReference) -> Optional[CanonicalPayment]:
    """Build the canonical payment for one list reference.

    Returns:
        The payment, or None when the payment detail no longer exists
    """
    details = ctx.detail_fetcher()
    payment_endpoint = f"{PAYMENT_ENDPOINT}/{reference.id}"

    payment = await details.fetch(payment_endpoint, NSPayment)
    if not payment.found:
        logger.info("Payment not found", extra_fields={"id": reference.id})
        return None

    apply_to: List[str] = []
    for apply_reference in await details.fetch_collection(f"{payment_endpoint}/apply"):
        doc_id = resolve_link_id(apply_reference.links, APPLIED_DOC_LINK_PATTERN)
        if doc_id is None:
            logger.debug("Apply entry without document link", extra_fields={"id": reference.id})
            continue
        apply_to.append(doc_id)

    return map_payment(payment.data, apply_to, fallback_id=reference.id or "")


@register_sync("payments")
async def sync_payments(ctx: SyncContext) -> SyncSummary:
    """Sync all customer payments, saving one NetsuitePayment batch per list page."""
    return await run_paginated_sync(
        ctx,
        sync_name="payments",
        list_path=PAYMENT_ENDPOINT,
        model_name=PAYMENT_MODEL_NAME,
        assemble=assemble_payment,
        label="payments",
    )

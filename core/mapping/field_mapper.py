"""Field mapping from NetSuite records to canonical records.

This is the only place where upstream fields are defaulted:

- numeric field absent (or empty, or zero)  -> 0
- required text / reference id absent       -> "" (invoices) or None (payments)
- optional field absent                     -> key omitted from the record
- optional field present                    -> copied verbatim

Numeric strings go through Decimal; anything Decimal rejects, or a
non-finite value, raises FieldMappingError so the caller can skip the record.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence, Union

from connectors.netsuite.ns_models import NSInvoice, NSInvoiceItem, NSPayment, NSRefField
from core.models.canonical import CanonicalInvoice, CanonicalInvoiceLine, CanonicalPayment


class FieldMappingError(ValueError):
    """An upstream value could not be converted to its canonical type."""

    def __init__(self, field: str, value):
        super().__init__(f"Cannot convert {field}={value!r} to a number")
        self.field = field
        self.value = value


# =============================================================================
# Value Parsers
# =============================================================================

def parse_number(value: Optional[Union[str, int, float]], field: str = "value") -> float:
    """Parse an upstream numeric field.

    Args:
        value: Raw upstream value (string, number, or None)
        field: Field name, used in the error message

    Returns:
        The value as a JSON number; 0 when absent

    Raises:
        FieldMappingError: If the value is not a finite decimal number
    """
    if value is None or value == "" or value == 0:
        return 0
    if isinstance(value, bool):
        raise FieldMappingError(field, value)
    try:
        number = Decimal(value.strip() if isinstance(value, str) else str(value))
    except InvalidOperation:
        raise FieldMappingError(field, value) from None
    if not number.is_finite():
        raise FieldMappingError(field, value)
    return float(number)


def _ref_id(ref: Optional[NSRefField]) -> Optional[str]:
    return ref.id if ref and ref.id else None


def _ref_name(ref: Optional[NSRefField]) -> Optional[str]:
    return ref.refName if ref and ref.refName else None


# =============================================================================
# Invoice
# =============================================================================

def map_invoice_line(item: NSInvoiceItem) -> CanonicalInvoiceLine:
    """Map an invoice item sublist entry to a canonical line."""
    fields = {
        "item_id": _ref_id(item.item) or "",
        "quantity": parse_number(item.quantity, "quantity"),
        "amount": parse_number(item.amount, "amount"),
    }
    if item.taxDetailsReference:
        fields["vat_code"] = item.taxDetailsReference
    description = _ref_name(item.item)
    if description:
        fields["description"] = description
    return CanonicalInvoiceLine(**fields)


def map_invoice(
    invoice: NSInvoice,
    lines: Sequence[CanonicalInvoiceLine] = (),
    fallback_id: str = "",
) -> CanonicalInvoice:
    """Map an invoice record and its already-mapped lines.

    Args:
        invoice: Invoice detail
        lines: Lines in upstream listing order
        fallback_id: Id from the list reference, used if the detail omits it
    """
    return CanonicalInvoice(
        id=invoice.id or fallback_id,
        customer_id=_ref_id(invoice.entity) or "",
        currency=_ref_name(invoice.currency) or "",
        description=invoice.memo or None,
        created_at=invoice.tranDate or "",
        lines=list(lines),
        total=parse_number(invoice.total, "total"),
        status=_ref_id(invoice.status) or "",
    )


# =============================================================================
# Payment
# =============================================================================

def map_payment(
    payment: NSPayment,
    apply_to: Sequence[str] = (),
    fallback_id: str = "",
) -> CanonicalPayment:
    """Map a customer payment record.

    Args:
        payment: Payment detail
        apply_to: Ids of the settled documents, in listing order
        fallback_id: Id from the list reference, used if the detail omits it
    """
    fields = {
        "id": payment.id or fallback_id,
        "created_at": payment.tranDate or None,
        "customer_id": _ref_id(payment.customer),
        "amount": parse_number(payment.payment, "payment"),
        "currency": _ref_name(payment.currency),
        "payment_reference": payment.tranId or None,
        "status": _ref_id(payment.status),
        "apply_to": list(apply_to),
    }
    if payment.memo:
        fields["description"] = payment.memo
    return CanonicalPayment(**fields)

"""Core data models - provider-neutral canonical types."""

from core.models.canonical import (
    CanonicalBase,
    CanonicalInvoice,
    CanonicalInvoiceLine,
    CanonicalPayment,
    INVOICE_MODEL_NAME,
    PAYMENT_MODEL_NAME,
)

__all__ = [
    "CanonicalBase",
    "CanonicalInvoice",
    "CanonicalInvoiceLine",
    "CanonicalPayment",
    "INVOICE_MODEL_NAME",
    "PAYMENT_MODEL_NAME",
]

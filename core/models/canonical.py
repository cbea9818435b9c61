"""Core canonical data models - provider-neutral financial records.

These models represent synced records in a standardized format that is
independent of the upstream accounting system. Provider-specific field
mappings are handled in /core/mapping/.

Records are immutable once built and serialize to camelCase JSON objects
for the record sink.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Base
# =============================================================================

class CanonicalBase(BaseModel):
    """Base class for canonical records."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    # Optional fields dropped from the serialized record when unset
    omit_when_absent: ClassVar[FrozenSet[str]] = frozenset()

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the JSON-ready dict handed to the record sink."""
        data = self.model_dump(mode="json", by_alias=True)
        return _drop_absent(self, data)


def _drop_absent(model: CanonicalBase, data: Dict[str, Any]) -> Dict[str, Any]:
    for name in model.omit_when_absent:
        alias = type(model).model_fields[name].alias or name
        if data.get(alias) is None:
            data.pop(alias, None)
    return data


# =============================================================================
# Invoice
# =============================================================================

class CanonicalInvoiceLine(CanonicalBase):
    """One invoice line.

    ``vat_code`` and ``description`` only appear in the record when the
    upstream line carries them.
    """
    omit_when_absent: ClassVar[FrozenSet[str]] = frozenset({"vat_code", "description"})

    item_id: str = ""
    quantity: float = 0
    amount: float = 0
    vat_code: Optional[str] = None
    description: Optional[str] = None


class CanonicalInvoice(CanonicalBase):
    """Canonical invoice record.

    ``lines`` may be empty; ``total`` is always a number.
    """
    id: str
    customer_id: str = ""
    currency: str = ""
    description: Optional[str] = None
    created_at: str = ""
    lines: List[CanonicalInvoiceLine] = Field(default_factory=list)
    total: float = 0
    status: str = ""

    def to_record(self) -> Dict[str, Any]:
        data = super().to_record()
        data["lines"] = [line.to_record() for line in self.lines]
        return data


# =============================================================================
# Payment
# =============================================================================

class CanonicalPayment(CanonicalBase):
    """Canonical customer payment record.

    ``apply_to`` lists the ids of the documents the payment settles, in
    upstream listing order.
    """
    omit_when_absent: ClassVar[FrozenSet[str]] = frozenset({"description"})

    id: str
    created_at: Optional[str] = None
    customer_id: Optional[str] = None
    amount: float = 0
    currency: Optional[str] = None
    payment_reference: Optional[str] = None
    status: Optional[str] = None
    apply_to: List[str] = Field(default_factory=list)
    description: Optional[str] = None


INVOICE_MODEL_NAME = "NetsuiteInvoice"
PAYMENT_MODEL_NAME = "NetsuitePayment"

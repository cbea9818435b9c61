"""NetSuite REST record models.

These are NetSuite-specific models that map to the REST record API schema.
Every field is optional: the API omits fields freely and the canonical
defaulting policy lives in /core/mapping/, not here.
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# NetSuite API Models
# =============================================================================

class NSBaseModel(BaseModel):
    """Base model for NetSuite API entities."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


NumericField = Optional[Union[str, int, float]]


class NSLink(NSBaseModel):
    """Hypermedia link attached to every NetSuite resource."""
    rel: Optional[str] = None
    href: Optional[str] = None


class NSRefField(NSBaseModel):
    """Reference field (``{"id": "...", "refName": "..."}``)."""
    id: Optional[str] = None
    refName: Optional[str] = None
    links: List[NSLink] = Field(default_factory=list)


class NSReference(NSBaseModel):
    """Entry of a list page or a nested collection.

    Only the id and the links are returned; the full resource has to be
    fetched from its detail endpoint.
    """
    id: Optional[str] = None
    links: List[NSLink] = Field(default_factory=list)


class NSListPage(NSBaseModel):
    """One page of a list endpoint.

    Maps to: GET /invoice, GET /customerpayment, GET /invoice/{id}/item
    """
    items: List[NSReference] = Field(default_factory=list)
    links: Optional[List[NSLink]] = None
    hasMore: Optional[bool] = None
    count: Optional[int] = None
    offset: Optional[int] = None
    totalResults: Optional[int] = None


class NSInvoice(NSBaseModel):
    """NetSuite invoice record.

    Maps to: /invoice/{id}
    """
    id: Optional[str] = None
    tranId: Optional[str] = None
    tranDate: Optional[str] = None
    entity: Optional[NSRefField] = None
    currency: Optional[NSRefField] = None
    memo: Optional[str] = None
    total: NumericField = None
    status: Optional[NSRefField] = None
    links: List[NSLink] = Field(default_factory=list)


class NSInvoiceItem(NSBaseModel):
    """NetSuite invoice line (item sublist entry).

    Maps to: /invoice/{id}/item/{line}
    """
    item: Optional[NSRefField] = None
    quantity: NumericField = None
    amount: NumericField = None
    rate: NumericField = None
    taxDetailsReference: Optional[str] = None
    links: List[NSLink] = Field(default_factory=list)


class NSPayment(NSBaseModel):
    """NetSuite customer payment record.

    Maps to: /customerpayment/{id}
    """
    id: Optional[str] = None
    tranId: Optional[str] = None
    tranDate: Optional[str] = None
    customer: Optional[NSRefField] = None
    payment: NumericField = None
    currency: Optional[NSRefField] = None
    status: Optional[NSRefField] = None
    memo: Optional[str] = None
    links: List[NSLink] = Field(default_factory=list)


# =============================================================================
# Detail Envelope
# =============================================================================

T = TypeVar("T", bound=NSBaseModel)


@dataclass(frozen=True)
class DetailEnvelope(Generic[T]):
    """Result of a detail fetch.

    ``data`` is None when the resource vanished or was never materialized.
    That is a normal outcome, not a transport error.
    """
    endpoint: str
    data: Optional[T] = None

    @property
    def found(self) -> bool:
        return self.data is not None

"""NetSuite Connector Package.

Read-side integration with the NetSuite REST record API: HTTP client,
record models, link resolution, pagination and detail fetching.
"""

from connectors.netsuite.ns_client import (
    NetSuiteClient,
    NetSuiteApiConfig,
    RetryConfig,
    NSApiError,
    NSAuthenticationError,
    NSNotFoundError,
    NSRateLimitError,
    NSTransportError,
    NSValidationError,
)
from connectors.netsuite.ns_detail import DetailFetcher
from connectors.netsuite.ns_links import (
    APPLIED_DOC_LINK_PATTERN,
    ITEM_LINK_PATTERN,
    find_link,
    resolve_link_id,
)
from connectors.netsuite.ns_models import (
    DetailEnvelope,
    NSInvoice,
    NSInvoiceItem,
    NSLink,
    NSListPage,
    NSPayment,
    NSReference,
    NSRefField,
)
from connectors.netsuite.ns_pagination import ListEndpoint, Paginator

__all__ = [
    # Client
    "NetSuiteClient",
    "NetSuiteApiConfig",
    "RetryConfig",
    # Errors
    "NSApiError",
    "NSAuthenticationError",
    "NSNotFoundError",
    "NSRateLimitError",
    "NSTransportError",
    "NSValidationError",
    # Fetching
    "DetailFetcher",
    "ListEndpoint",
    "Paginator",
    # Links
    "APPLIED_DOC_LINK_PATTERN",
    "ITEM_LINK_PATTERN",
    "find_link",
    "resolve_link_id",
    # Models
    "DetailEnvelope",
    "NSInvoice",
    "NSInvoiceItem",
    "NSLink",
    "NSListPage",
    "NSPayment",
    "NSReference",
    "NSRefField",
]

"""Upstream connectors.

Syncs only depend on the ``Fetcher`` interface; the NetSuite package
provides the HTTP client plus pagination, detail fetching and link
resolution on top of it.

To add a new upstream:
1. Create a new folder (e.g., quickbooks/)
2. Implement the Fetcher interface
3. Write syncs against it in /syncs/
"""

from connectors.base import DEFAULT_RETRIES, Fetcher

__all__ = [
    "DEFAULT_RETRIES",
    "Fetcher",
]

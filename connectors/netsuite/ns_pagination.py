"""List endpoint pagination.

NetSuite list endpoints return ``limit``-sized pages of references plus
``links`` (with a ``next`` relation while more pages exist) and a
``hasMore`` flag. Not every proxy or API version returns both, so the
paginator falls back to offset arithmetic when no end marker is present.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from connectors.base import DEFAULT_RETRIES, Fetcher
from connectors.netsuite.ns_links import NEXT_REL, find_link
from connectors.netsuite.ns_models import NSListPage, NSReference
from core.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListEndpoint:
    """Descriptor of a paginated list endpoint.

    Attributes:
        path: Endpoint path (e.g. "/invoice")
        page_size: Requested page size (NetSuite allows up to 1000)
        retries: Retry budget for every page fetch
        confirm_short_page: Without an explicit end marker, fetch once more
            after a page shorter than page_size instead of stopping
    """
    path: str
    page_size: int = 100
    retries: int = DEFAULT_RETRIES
    confirm_short_page: bool = True


class Paginator:
    """Stateful cursor over the pages of a list endpoint.

    Usage:
        async for references in Paginator(client, ListEndpoint("/invoice")):
            ...

    A paginator is single-use: once exhausted (or failed) it keeps
    returning None. Each sync run starts a new one from offset 0.
    """

    def __init__(self, fetcher: Fetcher, endpoint: ListEndpoint):
        self.fetcher = fetcher
        self.endpoint = endpoint
        self.pages_fetched = 0
        self._offset = 0
        self._next_request: Optional[Tuple[str, Optional[Dict[str, str]]]] = (
            endpoint.path,
            self._offset_params(0),
        )

    @property
    def exhausted(self) -> bool:
        return self._next_request is None

    def _offset_params(self, offset: int) -> Dict[str, str]:
        return {"limit": str(self.endpoint.page_size), "offset": str(offset)}

    async def next_page(self) -> Optional[List[NSReference]]:
        """Fetch the next page.

        Returns:
            The page's references (possibly empty), or None once exhausted
        """
        if self._next_request is None:
            return None

        target, params = self._next_request
        try:
            payload = await self.fetcher.get(target, params=params, retries=self.endpoint.retries)
        except Exception:
            self._next_request = None
            raise

        if payload is None:
            logger.warning("List endpoint returned no page", extra_fields={"endpoint": target})
        page = NSListPage.model_validate(payload or {})
        self.pages_fetched += 1
        self._next_request = self._continuation(page)
        return page.items

    def _continuation(self, page: NSListPage) -> Optional[Tuple[str, Optional[Dict[str, str]]]]:
        """Work out the request for the page after ``page``, if any."""
        if not page.items:
            return None

        start = page.offset if page.offset is not None else self._offset
        self._offset = start + len(page.items)

        next_href = find_link(page.links, NEXT_REL)
        if next_href:
            return next_href, None

        if page.hasMore is True:
            return self.endpoint.path, self._offset_params(self._offset)
        if page.hasMore is False or page.links is not None:
            return None

        # No end marker at all
        if len(page.items) < self.endpoint.page_size and not self.endpoint.confirm_short_page:
            return None
        return self.endpoint.path, self._offset_params(self._offset)

    def __aiter__(self) -> "Paginator":
        return self

    async def __anext__(self) -> List[NSReference]:
        page = await self.next_page()
        if page is None:
            raise StopAsyncIteration
        return page

"""Detail fetching for NetSuite resources."""

from typing import List, Type

from connectors.base import DEFAULT_RETRIES, Fetcher
from connectors.netsuite.ns_models import DetailEnvelope, NSListPage, NSReference, T
from core.observability.logging import get_logger

logger = get_logger(__name__)


class DetailFetcher:
    """Fetches single resources and nested collections.

    A missing resource comes back as an empty envelope; transport failures
    (retry budget exhausted) propagate from the fetcher.
    """

    def __init__(self, fetcher: Fetcher, retries: int = DEFAULT_RETRIES):
        self.fetcher = fetcher
        self.retries = retries

    async def fetch(self, endpoint: str, model: Type[T]) -> DetailEnvelope[T]:
        """Fetch ``endpoint`` and parse it into ``model``."""
        payload = await self.fetcher.get(endpoint, retries=self.retries)
        if not payload:
            logger.debug("Resource not found", extra_fields={"endpoint": endpoint})
            return DetailEnvelope(endpoint=endpoint, data=None)
        return DetailEnvelope(endpoint=endpoint, data=model.model_validate(payload))

    async def fetch_collection(self, endpoint: str) -> List[NSReference]:
        """Fetch a nested collection (``{resource}/{id}/{subresource}``).

        A collection that does not exist is treated as empty.
        """
        payload = await self.fetcher.get(endpoint, retries=self.retries)
        if not payload:
            logger.info("Collection not found", extra_fields={"endpoint": endpoint})
            return []
        return NSListPage.model_validate(payload).items

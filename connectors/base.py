"""Abstract fetch interface.

Syncs depend only on this interface so they can run against the real
NetSuite client, a host-provided proxy, or an in-memory fake in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


DEFAULT_RETRIES = 3


class Fetcher(ABC):
    """Read-only access to the upstream accounting API."""

    @abstractmethod
    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        retries: int = DEFAULT_RETRIES,
    ) -> Optional[Dict[str, Any]]:
        """GET an endpoint with a retry budget.

        Args:
            endpoint: Path relative to the record API root, or an absolute URL
            params: Query parameters
            retries: Number of retries after the first attempt

        Returns:
            Decoded JSON body, or None when the resource does not exist

        Raises:
            Exception: Transport failure once the retry budget is exhausted
        """
        pass

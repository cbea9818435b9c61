"""Fake collaborators shared by the sync tests."""

from connectors.base import Fetcher


class RoutedFetcher(Fetcher):
    """Serves payloads by endpoint; unknown endpoints are absent (None).

    List requests are keyed as "<path>?offset=<n>". A payload that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    async def get(self, endpoint, params=None, retries=3):
        key = f"{endpoint}?offset={params['offset']}" if params else endpoint
        self.calls.append(key)
        payload = self.routes.get(key)
        if isinstance(payload, Exception):
            raise payload
        return payload

"""NetSuite HTTP Client.

Low-level HTTP client for NetSuite REST record API calls.
Handles authentication headers, retries, and error handling.
"""

from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
import asyncio
import json
import logging

import aiohttp

from core.observability.metrics import record_fetch_retry
from connectors.base import Fetcher

logger = logging.getLogger(__name__)


class NSApiError(Exception):
    """Base exception for NetSuite API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class NSAuthenticationError(NSApiError):
    """Authentication failed (401/403)."""
    pass


class NSNotFoundError(NSApiError):
    """Resource not found (404)."""
    pass


class NSRateLimitError(NSApiError):
    """Rate limit exceeded (429) after the retry budget."""
    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, 429)
        self.retry_after = retry_after


class NSValidationError(NSApiError):
    """Validation error from NetSuite (400)."""
    pass


class NSTransportError(NSApiError):
    """Retry budget exhausted on connection errors or server errors."""
    pass


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retry_on_status: Tuple[int, ...] = (429, 500, 502, 503, 504)

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for retry attempt (exponential backoff)."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


@dataclass
class NetSuiteApiConfig:
    """Configuration for NetSuite API client."""
    account_id: str
    base_url: Optional[str] = None
    api_path: str = "/services/rest/record/v1"
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    timeout_seconds: int = 30

    def get_base_url(self) -> str:
        """Get the record API root for the account.

        NetSuite account ids use an underscore for sandboxes ("123_SB1") but
        the hostname uses a dash ("123-sb1").
        """
        if self.base_url:
            return f"{self.base_url.rstrip('/')}{self.api_path}"
        host_id = self.account_id.lower().replace("_", "-")
        return f"https://{host_id}.suitetalk.api.netsuite.com{self.api_path}"


class NetSuiteClient(Fetcher):
    """HTTP client for the NetSuite REST record API.

    Provides:
    - Bearer-authenticated GET calls
    - Retries with exponential backoff on 429/5xx and connection errors
    - Not-found mapped to None instead of an exception

    Usage:
        client = NetSuiteClient(api_config, access_token)
        await client.connect()
        invoice = await client.get("/invoice/42", retries=3)
        await client.disconnect()
    """

    def __init__(self, api_config: NetSuiteApiConfig, access_token: str):
        """Initialize API client.

        Args:
            api_config: API configuration
            access_token: OAuth access token from the connection credentials
        """
        self.api_config = api_config
        self._access_token = access_token
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Initialize HTTP session."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.api_config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def disconnect(self) -> None:
        """Close HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "NetSuiteClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        if not self._access_token:
            raise NSAuthenticationError("No access token for connection")

        return {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
            "Prefer": "transient",
        }

    def _build_url(self, endpoint: str) -> str:
        """Build full URL for an endpoint.

        Absolute URLs (e.g. a "next" link href) are used as-is.
        """
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self.api_config.get_base_url()}/{endpoint.lstrip('/')}"

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]],
    ) -> Tuple[int, Dict[str, str], str]:
        """Perform one HTTP round trip and return (status, headers, body)."""
        if not self._session:
            raise NSApiError("Not connected. Call connect() first.")

        async with self._session.request(
            method,
            url,
            headers=self._get_headers(),
            params=params,
        ) as response:
            body = await response.text()
            return response.status, dict(response.headers), body

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        retries: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Make an authenticated API request with automatic retries.

        Args:
            method: HTTP method
            endpoint: API endpoint or absolute URL
            params: Query parameters
            retries: Retry budget for this call (defaults to RetryConfig.max_retries)

        Returns:
            Response JSON ({} for an empty body)

        Raises:
            NSAuthenticationError: Authentication failed
            NSNotFoundError: Resource not found
            NSRateLimitError: Rate limit exceeded after the retry budget
            NSValidationError: Validation error
            NSTransportError: Connection or server errors after the retry budget
            NSApiError: Other API errors
        """
        url = self._build_url(endpoint)
        retry_config = self.api_config.retry_config
        max_retries = retry_config.max_retries if retries is None else retries

        for attempt in range(max_retries + 1):
            try:
                status, headers, body = await self._send(method, url, params)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < max_retries:
                    delay = retry_config.get_delay(attempt)
                    logger.warning(
                        f"Request to {url} failed with {type(e).__name__}: {e}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{max_retries})"
                    )
                    record_fetch_retry(endpoint)
                    await asyncio.sleep(delay)
                    continue
                raise NSTransportError(f"Request to {url} failed after {max_retries} retries: {e}") from e

            if status < 400:
                if status == 204 or not body.strip():
                    return {}
                try:
                    return json.loads(body)
                except json.JSONDecodeError as e:
                    raise NSApiError(f"Invalid JSON from {url}: {e}", status, body) from e

            if status in (401, 403):
                raise NSAuthenticationError(f"Authentication failed: {body}", status, body)

            if status == 404:
                raise NSNotFoundError(f"Resource not found: {url}", status, body)

            if status == 400:
                raise NSValidationError(f"Validation error: {body}", status, body)

            if status == 429:
                retry_after = int(headers.get("Retry-After", 0) or 0)
                if attempt < max_retries:
                    delay = retry_after or retry_config.get_delay(attempt)
                    logger.warning(f"Rate limited on {url}, waiting {delay:.1f}s...")
                    record_fetch_retry(endpoint)
                    await asyncio.sleep(delay)
                    continue
                raise NSRateLimitError("Rate limit exceeded", retry_after or 60)

            if status in retry_config.retry_on_status:
                if attempt < max_retries:
                    delay = retry_config.get_delay(attempt)
                    logger.warning(
                        f"Request to {url} failed with {status}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{max_retries})"
                    )
                    record_fetch_retry(endpoint)
                    await asyncio.sleep(delay)
                    continue
                raise NSTransportError(
                    f"Request to {url} failed with {status} after {max_retries} retries",
                    status,
                    body,
                )

            # Non-retryable error
            raise NSApiError(f"API error {status}: {body}", status, body)

        raise NSTransportError(f"Request to {url} failed")

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        retries: int = 3,
    ) -> Optional[Dict[str, Any]]:
        """GET a resource.

        Returns:
            Response JSON, or None when the resource does not exist
            (404 or an empty body)
        """
        try:
            response = await self._request("GET", endpoint, params=params, retries=retries)
        except NSNotFoundError:
            return None
        return response or None

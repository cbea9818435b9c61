"""
NetSuite Client Tests

The HTTP round trip (_send) is scripted so these tests cover URL building,
retries, error mapping and not-found handling without a network.
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from connectors.netsuite.ns_client import (
    NetSuiteApiConfig,
    NetSuiteClient,
    NSApiError,
    NSAuthenticationError,
    NSRateLimitError,
    NSTransportError,
    NSValidationError,
    RetryConfig,
)
from core.observability.metrics import MetricsCollector


class ScriptedClient(NetSuiteClient):
    """NetSuiteClient whose HTTP round trips come from a script."""

    def __init__(self, responses, max_retries=3, base_url=None):
        config = NetSuiteApiConfig(
            account_id="123_SB1",
            base_url=base_url,
            retry_config=RetryConfig(max_retries=max_retries, base_delay=0),
        )
        super().__init__(config, access_token="token-abc")
        self.responses = list(responses)
        self.requests = []

    async def _send(self, method, url, params):
        self.requests.append((method, url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def ok(payload, headers=None):
    return 200, headers or {}, json.dumps(payload)


def status(code, body="", headers=None):
    return code, headers or {}, body


class TestUrls:

    def test_account_host(self):
        config = NetSuiteApiConfig(account_id="123_SB1")
        assert config.get_base_url() == "https://123-sb1.suitetalk.api.netsuite.com/services/rest/record/v1"

    def test_base_url_override(self):
        config = NetSuiteApiConfig(account_id="1", base_url="http://proxy.local/")
        assert config.get_base_url() == "http://proxy.local/services/rest/record/v1"

    def test_relative_and_absolute_endpoints(self):
        client = ScriptedClient([ok({"id": "1"}), ok({"items": []})])
        asyncio.run(client.get("/invoice/1"))
        asyncio.run(client.get("https://other/invoice?offset=2"))

        assert client.requests[0][1] == "https://123-sb1.suitetalk.api.netsuite.com/services/rest/record/v1/invoice/1"
        assert client.requests[1][1] == "https://other/invoice?offset=2"

    def test_headers(self):
        client = ScriptedClient([])
        headers = client._get_headers()
        assert headers["Authorization"] == "Bearer token-abc"
        assert headers["Accept"] == "application/json"


class TestGet:

    def test_returns_json(self):
        client = ScriptedClient([ok({"id": "1", "total": "100"})])
        assert asyncio.run(client.get("/invoice/1", params={"limit": "5"})) == {"id": "1", "total": "100"}
        assert client.requests == [("GET", client._build_url("/invoice/1"), {"limit": "5"})]

    def test_not_found_is_none(self):
        client = ScriptedClient([status(404, '{"title": "Not Found"}')])
        assert asyncio.run(client.get("/invoice/999")) is None
        assert len(client.requests) == 1

    def test_empty_body_is_none(self):
        client = ScriptedClient([status(204)])
        assert asyncio.run(client.get("/invoice/1")) is None


class TestRetries:

    def test_server_error_then_success(self):
        before = MetricsCollector.instance().get_summary()["fetch_retries"].get("invoice", 0)
        client = ScriptedClient([status(503), status(502), ok({"id": "1"})])

        assert asyncio.run(client.get("/invoice/1")) == {"id": "1"}
        assert len(client.requests) == 3
        after = MetricsCollector.instance().get_summary()["fetch_retries"]["invoice"]
        assert after == before + 2

    def test_connection_error_then_success(self):
        client = ScriptedClient([aiohttp.ClientConnectionError("reset"), ok({"id": "1"})])
        assert asyncio.run(client.get("/invoice/1")) == {"id": "1"}

    def test_retry_budget_per_call(self):
        client = ScriptedClient([status(500)] * 3, max_retries=10)
        with pytest.raises(NSTransportError) as exc_info:
            asyncio.run(client.get("/invoice/1", retries=2))
        assert len(client.requests) == 3
        assert exc_info.value.status_code == 500

    def test_zero_retries(self):
        client = ScriptedClient([asyncio.TimeoutError()])
        with pytest.raises(NSTransportError):
            asyncio.run(client.get("/invoice/1", retries=0))
        assert len(client.requests) == 1

    def test_rate_limit_honors_retry_after(self):
        client = ScriptedClient([status(429, headers={"Retry-After": "7"}), ok({"id": "1"})])
        with patch("connectors.netsuite.ns_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            asyncio.run(client.get("/invoice/1"))
        sleep.assert_awaited_once_with(7)

    def test_rate_limit_exhausted(self):
        client = ScriptedClient([status(429)] * 2)
        with pytest.raises(NSRateLimitError):
            asyncio.run(client.get("/invoice/1", retries=1))

    def test_backoff_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0)
        assert [config.get_delay(a) for a in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


class TestErrors:

    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_errors_not_retried(self, code):
        client = ScriptedClient([status(code, "denied")])
        with pytest.raises(NSAuthenticationError):
            asyncio.run(client.get("/invoice/1"))
        assert len(client.requests) == 1

    def test_validation_error(self):
        client = ScriptedClient([status(400, "bad query")])
        with pytest.raises(NSValidationError) as exc_info:
            asyncio.run(client.get("/invoice", params={"limit": "-1"}))
        assert exc_info.value.response_body == "bad query"

    def test_other_client_error(self):
        client = ScriptedClient([status(405)])
        with pytest.raises(NSApiError):
            asyncio.run(client.get("/invoice/1"))

    def test_malformed_json_body(self):
        client = ScriptedClient([status(200, "<html>maintenance</html>")])
        with pytest.raises(NSApiError) as exc_info:
            asyncio.run(client.get("/invoice/1"))
        assert exc_info.value.status_code == 200
        assert exc_info.value.response_body == "<html>maintenance</html>"

    def test_missing_token(self):
        client = NetSuiteClient(NetSuiteApiConfig(account_id="1"), access_token="")
        with pytest.raises(NSAuthenticationError):
            client._get_headers()

    def test_not_connected(self):
        client = NetSuiteClient(NetSuiteApiConfig(account_id="1"), access_token="t")
        with pytest.raises(NSApiError, match="Not connected"):
            asyncio.run(client.get("/invoice/1"))

# tests/test_http.py
"""
Test the request gateway and the per-source HTTP client.

Verifies header injection, timeout enforcement and that every
pipeline-level failure surfaces as ApiError with its request context.
"""

import httpx
import pytest

from aerofeeds.ingestion.errors import ApiError, HttpTimeoutError
from aerofeeds.ingestion.http import (
    CacheHint,
    HttpClient,
    RequestOptions,
    build_query,
    fetch_api,
    format_number,
)
from aerofeeds.settings import settings

from conftest import FakeFetcher, json_response, run


class TestFetchApi:
    """Tests for the single-request gateway."""

    def test_default_user_agent_added(self):
        """The identifying header is added to caller headers."""
        fetcher = FakeFetcher(json_response({}))
        run(fetch_api(fetcher, "https://example.test/", RequestOptions(headers={"X-Key": "k"})))

        assert fetcher.options.headers == {"X-Key": "k", "User-Agent": settings.user_agent}

    def test_caller_user_agent_wins(self):
        """A caller-supplied User-Agent (any case) is not overwritten."""
        fetcher = FakeFetcher(json_response({}))
        run(fetch_api(fetcher, "https://example.test/", RequestOptions(headers={"user-agent": "custom/2.0"})))

        assert fetcher.options.headers == {"user-agent": "custom/2.0"}

    def test_caller_options_not_mutated(self):
        """The gateway works on a copy of the caller's headers."""
        options = RequestOptions(headers={"X-Key": "k"})
        run(fetch_api(FakeFetcher(json_response({})), "https://example.test/", options))

        assert options.headers == {"X-Key": "k"}

    def test_non_success_status_returned(self):
        """The gateway does not judge the status."""
        fetcher = FakeFetcher(json_response({"error": "nope"}, status_code=503))
        response = run(fetch_api(fetcher, "https://example.test/"))

        assert response.status_code == 503

    def test_timeout_cancels_request(self):
        """A slow fetcher is cancelled at the timeout boundary."""
        fetcher = FakeFetcher(json_response({}), delay=5)

        with pytest.raises(HttpTimeoutError) as exc_info:
            run(fetch_api(fetcher, "https://example.test/", RequestOptions(timeout=20)))

        assert exc_info.value.timeout_ms == 20
        assert "20ms" in str(exc_info.value)

    def test_no_timeout_waits_for_response(self):
        """Without a timeout the fetcher is simply awaited."""
        fetcher = FakeFetcher(json_response({"ok": True}), delay=0.01)
        response = run(fetch_api(fetcher, "https://example.test/"))

        assert response.json() == {"ok": True}

    def test_cache_hint_passed_through(self):
        """Cache hints reach the fetcher untouched."""
        fetcher = FakeFetcher(json_response({}))
        run(fetch_api(fetcher, "https://example.test/", RequestOptions(cache=CacheHint(ttl=60))))

        assert fetcher.options.cache == CacheHint(ttl=60, cache_everything=True)


class TestQueryHelpers:
    """Tests for query string helpers."""

    def test_build_query_repeats_list_values(self):
        """List values repeat the key and commas stay literal."""
        query = build_query({"pos": "50.03,8.57", "type": [0, 1], "limit": 200})

        assert query == "pos=50.03,8.57&type=0&type=1&limit=200"

    def test_format_number(self):
        """Numbers render without a trailing .0 and round when asked."""
        assert format_number(50000.0) == "50000"
        assert format_number(-73.7816, 2) == "-73.78"
        assert format_number(20) == "20"


class TestHttpClient:
    """Tests for failure wrapping in HttpClient."""

    def _client(self, fetcher, **kwargs):
        return HttpClient("Test", "https://example.test/api/", timeout=1000, cache_ttl=60, fetcher=fetcher, **kwargs)

    def test_json_decoded(self):
        """A successful JSON body is decoded."""
        fetcher = FakeFetcher(json_response({"items": []}))
        data = run(self._client(fetcher).request_json("things?x=1"))

        assert data == {"items": []}
        assert fetcher.url == "https://example.test/api/things?x=1"
        assert fetcher.options.timeout == 1000
        assert fetcher.options.cache == CacheHint(ttl=60)

    def test_non_success_status_wrapped(self):
        """A non-2xx status raises ApiError with the status in the cause."""
        fetcher = FakeFetcher(json_response({}, status_code=503))

        with pytest.raises(ApiError) as exc_info:
            run(self._client(fetcher).request_json("things"))

        error = exc_info.value
        assert error.service_name == "Test"
        assert error.endpoint == "https://example.test/api/things"
        assert error.cause == "HTTP 503 - Service Unavailable"

    def test_no_content_is_failure(self):
        """HTTP 204 is a failure, not an empty success."""
        fetcher = FakeFetcher(httpx.Response(204))

        with pytest.raises(ApiError) as exc_info:
            run(self._client(fetcher).request_json("things"))

        assert "204" in exc_info.value.cause

    def test_transport_error_wrapped(self):
        """Transport exceptions become the ApiError cause."""
        cause = httpx.ConnectError("connection refused")
        fetcher = FakeFetcher(error=cause)

        with pytest.raises(ApiError) as exc_info:
            run(self._client(fetcher).request_json("things"))

        assert exc_info.value.cause is cause

    def test_timeout_wrapped(self):
        """Gateway timeouts surface as ApiError."""
        fetcher = FakeFetcher(json_response({}), delay=5)
        client = HttpClient("Test", "https://example.test/", timeout=20, fetcher=fetcher)

        with pytest.raises(ApiError) as exc_info:
            run(client.request_json("slow"))

        assert isinstance(exc_info.value.cause, HttpTimeoutError)

    def test_invalid_json_wrapped(self):
        """An undecodable body raises ApiError."""
        fetcher = FakeFetcher(httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(ApiError):
            run(self._client(fetcher).request_json("things"))

    def test_content_type_enforced(self):
        """Non-JSON content type fails even on HTTP 200."""
        fetcher = FakeFetcher(httpx.Response(
            200,
            content=b"<html>maintenance</html>",
            headers={"content-type": "text/html"},
        ))

        with pytest.raises(ApiError) as exc_info:
            run(self._client(fetcher).request_json("things", require_json_content_type=True))

        assert "text/html" in exc_info.value.cause
        assert "maintenance" in exc_info.value.cause

    def test_default_headers_merged(self):
        """Client headers and per-request headers are both sent."""
        fetcher = FakeFetcher(json_response({}))
        client = self._client(fetcher, headers={"x-api-key": "secret"})
        run(client.request_json("things", method="POST", headers={"Content-Type": "text/plain"}, body="a=1"))

        assert fetcher.options.method == "POST"
        assert fetcher.options.body == "a=1"
        assert fetcher.options.headers["x-api-key"] == "secret"
        assert fetcher.options.headers["Content-Type"] == "text/plain"


class TestApiError:
    """Tests for the error envelope."""

    def test_message(self):
        """The message names service and endpoint."""
        error = ApiError("OpenAIP", "https://api.core.openaip.net/api/airports")

        assert str(error) == "OpenAIP API request failed for endpoint: https://api.core.openaip.net/api/airports"

    def test_detailed_message(self):
        """Detailed message lists method, timeout and cause on separate lines."""
        options = RequestOptions(method="GET", timeout=10000)
        error = ApiError("OpenAIP", "https://x.test/a", options, "HTTP 500 - Internal Server Error")

        assert error.detailed_message() == (
            "OpenAIP API request failed for endpoint: https://x.test/a\n"
            "Method: GET\n"
            "Timeout: 10000ms\n"
            "Cause: HTTP 500 - Internal Server Error"
        )

    def test_detailed_message_without_context(self):
        """Missing options and cause are omitted."""
        error = ApiError("METAR", "https://x.test/b")

        assert error.detailed_message() == "METAR API request failed for endpoint: https://x.test/b"

    def test_exception_cause_uses_message(self):
        """Exception causes are rendered by their message."""
        error = ApiError("METAR", "https://x.test/b", cause=ValueError("bad body"))

        assert error.detailed_message().endswith("Cause: bad body")

# aerofeeds/ingestion/http.py
"""
Request gateway and per-source HTTP client for external API calls.

Uses httpx for async HTTP. The gateway (fetch_api) performs exactly one
request with timeout and header injection and never judges the status.
HttpClient sits on top of it for one upstream source and turns every
pipeline-level failure into an ApiError.

There is no retry here: a failed call is raised to the caller, who owns
the retry policy.
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlencode

import httpx

from ..logging import get_ingestion_logger
from ..settings import settings
from .errors import ApiError, HttpTimeoutError

logger = get_ingestion_logger("http")

# Bytes of a rejected body kept in the error cause
ERROR_BODY_EXCERPT = 500


@dataclass(frozen=True)
class CacheHint:
    """
    Caching instruction for an edge layer in front of the fetcher.

    Never enforced in process.
    """
    ttl: int  # seconds
    cache_everything: bool = True


@dataclass(frozen=True)
class RequestOptions:
    """Options for a single outbound request."""
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None
    timeout: Optional[int] = None  # milliseconds
    cache: Optional[CacheHint] = None


# (url, options) -> response. Injectable for tests and alternative runtimes.
Fetcher = Callable[[str, RequestOptions], Awaitable[httpx.Response]]


async def httpx_fetcher(url: str, options: RequestOptions) -> httpx.Response:
    """
    Default fetcher backed by httpx.AsyncClient.

    Timeouts are enforced by fetch_api, so the client itself has none.
    Cache hints are forwarded as a request extension.
    """
    extensions = None
    if options.cache is not None:
        extensions = {
            "cache": {
                "ttl": options.cache.ttl,
                "cache_everything": options.cache.cache_everything,
            }
        }

    async with httpx.AsyncClient(timeout=None) as client:
        return await client.request(
            method=options.method,
            url=url,
            headers=options.headers,
            content=options.body,
            extensions=extensions,
        )


async def fetch_api(
    fetcher: Fetcher,
    url: str,
    options: Optional[RequestOptions] = None,
) -> httpx.Response:
    """
    Perform one request through a fetcher.

    Args:
        fetcher: Coroutine function issuing the request
        url: Target URL
        options: Method, headers, body, timeout and cache hint

    Returns:
        The raw response, whatever its status

    Raises:
        HttpTimeoutError: If options.timeout elapses first; the in-flight
            call is cancelled
    """
    options = options or RequestOptions()

    headers = dict(options.headers)
    if not any(name.lower() == "user-agent" for name in headers):
        headers["User-Agent"] = settings.user_agent
    prepared = replace(options, headers=headers)

    if prepared.timeout:
        try:
            return await asyncio.wait_for(
                fetcher(url, prepared),
                timeout=prepared.timeout / 1000,
            )
        except asyncio.TimeoutError:
            raise HttpTimeoutError(url, prepared.timeout)

    return await fetcher(url, prepared)


def build_query(params: Dict[str, Any]) -> str:
    """
    Encode query parameters, keeping commas literal.

    List values repeat the key (type=0&type=1).
    """
    return urlencode(params, doseq=True, safe=",")


def format_number(value: float, precision: Optional[int] = None) -> str:
    """
    Render a number for a query string without a trailing ".0".

    Example:
        >>> format_number(50.0)
        '50'
        >>> format_number(-73.7816, 2)
        '-73.78'
    """
    if precision is not None:
        value = round(value, precision)
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class HttpClient:
    """
    HTTP client for one upstream API.

    Provides a consistent interface for fetching data from an external
    source: default headers, timeout and cache hint are applied to every
    request, and failures are wrapped in ApiError.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str,
        timeout: Optional[int] = None,
        cache_ttl: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            service_name: Name reported in ApiError
            base_url: Base URL for all requests
            timeout: Timeout in milliseconds
            cache_ttl: Cache lifetime hint in seconds
            headers: Default headers for all requests
            fetcher: Custom fetcher (defaults to httpx)
        """
        self.service_name = service_name
        self.base_url = base_url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.headers = headers or {}
        self.fetcher = fetcher or httpx_fetcher
        self.logger = logger.bind(service=service_name)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def build_options(
        self,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
    ) -> RequestOptions:
        cache = CacheHint(ttl=self.cache_ttl) if self.cache_ttl else None
        return RequestOptions(
            method=method,
            headers={**self.headers, **(headers or {})},
            body=body,
            timeout=self.timeout,
            cache=cache,
        )

    def _failure(self, url: str, options: RequestOptions, cause: Any) -> ApiError:
        self.logger.warning(
            "request_failed",
            endpoint=url,
            method=options.method,
            cause=str(cause),
        )
        return ApiError(self.service_name, url, options, cause)

    async def _send(self, url: str, options: RequestOptions) -> httpx.Response:
        self.logger.debug(
            "request_started",
            endpoint=url,
            method=options.method,
        )
        try:
            response = await fetch_api(self.fetcher, url, options)
        except Exception as e:
            # HttpTimeoutError, httpx transport errors, or whatever a
            # custom fetcher raises
            raise self._failure(url, options, e) from e

        if not response.is_success:
            raise self._failure(
                url, options, f"HTTP {response.status_code} - {response.reason_phrase}"
            )
        if response.status_code == 204:
            raise self._failure(url, options, "HTTP 204 - No Content")

        return response

    async def request_json(
        self,
        path: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
        require_json_content_type: bool = False,
    ) -> Any:
        """
        Issue a request and decode its JSON body.

        Args:
            path: URL path
            method: HTTP method
            headers: Additional headers
            body: Request body
            require_json_content_type: Reject responses whose content type
                is not application/json, even on a 2xx status

        Returns:
            Decoded JSON value

        Raises:
            ApiError: On any request failure, wrong content type or
                undecodable body
        """
        url = self.url_for(path)
        options = self.build_options(method, headers, body)
        response = await self._send(url, options)

        if require_json_content_type:
            content_type = response.headers.get("content-type")
            if not content_type or "application/json" not in content_type:
                excerpt = response.text[:ERROR_BODY_EXCERPT]
                raise self._failure(
                    url,
                    options,
                    f"Returned non-JSON response: {content_type}, body: {excerpt}",
                )

        try:
            return response.json()
        except ValueError as e:
            raise self._failure(url, options, f"Invalid JSON body: {e}") from e

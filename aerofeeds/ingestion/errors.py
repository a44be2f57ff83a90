# aerofeeds/ingestion/errors.py
"""
Exceptions raised by the ingestion layer.

ApiError is the single envelope for pipeline-level failures: transport
errors, timeouts, non-success statuses and undecodable bodies. Malformed
individual records are filtered by the pipelines and never raised.
"""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .http import RequestOptions


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class HttpTimeoutError(HttpClientError):
    """Raised when a request exceeds its timeout."""

    def __init__(self, url: str, timeout_ms: int):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"Request to {url} timed out after {timeout_ms}ms")


class ApiError(HttpClientError):
    """
    Failure of an upstream API call.

    Attributes:
        service_name: Upstream API (e.g. "OpenAIP")
        endpoint: Full URL attempted
        request_options: Options the request was issued with
        cause: Underlying exception or status description
    """

    def __init__(
        self,
        service_name: str,
        endpoint: str,
        request_options: Optional["RequestOptions"] = None,
        cause: Any = None,
    ):
        self.service_name = service_name
        self.endpoint = endpoint
        self.request_options = request_options
        self.cause = cause
        super().__init__(f"{service_name} API request failed for endpoint: {endpoint}")

    @property
    def message(self) -> str:
        return self.args[0]

    def detailed_message(self) -> str:
        """
        Format the error with its request context.

        Example:
            OpenAIP API request failed for endpoint: https://...
            Method: GET
            Timeout: 10000ms
            Cause: HTTP 503 - Service Unavailable
        """
        details = self.message

        if self.request_options is not None and self.request_options.method:
            details += f"\nMethod: {self.request_options.method}"

        if self.request_options is not None and self.request_options.timeout:
            details += f"\nTimeout: {self.request_options.timeout}ms"

        if self.cause:
            # Some transport exceptions carry an empty message
            cause_text = str(self.cause) or type(self.cause).__name__
            details += f"\nCause: {cause_text}"

        return details

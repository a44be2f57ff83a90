"""
Pytest configuration and fixtures.

Pipelines are exercised through a fake fetcher that records every call
and returns a canned httpx.Response, so no test touches the network.
"""

import asyncio
from typing import Any, List, Optional, Tuple

import httpx
import pytest

from aerofeeds.ingestion.http import RequestOptions


class FakeFetcher:
    """Fetcher double: records (url, options) and returns a fixed response."""

    def __init__(
        self,
        response: Optional[httpx.Response] = None,
        error: Optional[Exception] = None,
        delay: float = 0,
    ):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: List[Tuple[str, RequestOptions]] = []

    async def __call__(self, url: str, options: RequestOptions) -> httpx.Response:
        self.calls.append((url, options))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def url(self) -> str:
        return self.calls[-1][0]

    @property
    def options(self) -> RequestOptions:
        return self.calls[-1][1]


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


@pytest.fixture
def fetcher_for():
    """Build a FakeFetcher returning the given JSON payload."""
    def _build(payload: Any = None, status_code: int = 200, **kwargs) -> FakeFetcher:
        return FakeFetcher(json_response(payload, status_code), **kwargs)
    return _build


def run(coro):
    return asyncio.run(coro)

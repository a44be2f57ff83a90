# aerofeeds/ingestion/navaid.py
"""
OpenAIP navaid ingestion.

Source: https://api.core.openaip.net/api/navaids?search={identifier}&limit=1

Same auth, cache and timeout policy as the aerodrome pipeline. Items
without an identifier are dropped.
"""

from typing import Any, List, Optional

from pydantic import ValidationError

from ..logging import get_ingestion_logger
from ..models import NAV_FREQUENCY_TYPE, Frequency, Navaid
from .http import Fetcher, build_query
from .openaip import (
    OPENAIP_SERVICE_NAME,
    SEARCH_LIMIT,
    NavaidItem,
    extract_items,
    openaip_client,
)

logger = get_ingestion_logger("navaid").bind(service=OPENAIP_SERVICE_NAME)


def map_navaid(raw: Any) -> Optional[Navaid]:
    """
    Map one OpenAIP navaid item onto a Navaid.

    Returns:
        Navaid, or None if the item has no identifier or is malformed
    """
    identifier = raw.get("identifier") if isinstance(raw, dict) else None
    if not isinstance(identifier, str) or not identifier.strip():
        logger.debug("navaid_dropped", reason="missing identifier")
        return None

    try:
        item = NavaidItem.model_validate(raw)
    except ValidationError as e:
        logger.warning("navaid_dropped", identifier=identifier, reason="invalid", errors=e.error_count())
        return None

    identifier = identifier.strip()
    name = item.name or identifier
    frequencies = ()
    if item.frequency is not None and item.frequency.value is not None:
        frequencies = (Frequency(type=NAV_FREQUENCY_TYPE, name=item.name or "", value=item.frequency.value),)

    return Navaid(
        identifier=identifier,
        name=name,
        coordinates=tuple(item.geometry.coordinates),
        elevation=(item.elevation.value if item.elevation else None) or 0,
        frequencies=frequencies,
    )


def map_navaids(data: Any) -> List[Navaid]:
    return [n for n in map(map_navaid, extract_items(data)) if n is not None]


class NavaidClient:
    """
    Client for OpenAIP navaids.

    Usage:
        client = NavaidClient(api_key="...")
        navaids = await client.get_by_identifier("FFM")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        fetcher: Optional[Fetcher] = None,
        timeout: Optional[int] = None,
    ):
        self.client = openaip_client(api_key, fetcher, timeout)

    async def get_by_identifier(self, identifier: str) -> List[Navaid]:
        """
        Fetch navaids matching an identifier.

        Args:
            identifier: Navaid identifier (e.g. "FFM")

        Returns:
            Matching navaids (at most one)
        """
        query = build_query({"search": identifier, "limit": SEARCH_LIMIT})
        data = await self.client.request_json(f"navaids?{query}")
        navaids = map_navaids(data)
        logger.info("navaids_fetched", identifier=identifier, count=len(navaids))
        return navaids


async def get_navaid_by_identifier(
    identifier: str,
    api_key: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[Navaid]:
    """Convenience function to fetch navaids by identifier."""
    client = NavaidClient(api_key, fetcher, timeout)
    return await client.get_by_identifier(identifier)

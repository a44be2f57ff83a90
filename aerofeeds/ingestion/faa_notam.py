# aerofeeds/ingestion/faa_notam.py
"""
FAA NOTAM Search ingestion.

Sources:
- By location: POST https://notams.aim.faa.gov/notamSearch/search (form body)
- By transaction: GET https://notams.aim.faa.gov/notamSearch/details?transactionid={id}

The service answers with HTML error pages on a 200 status, so the
content type is checked explicitly. A body is either {"notamList": [...]}
or a single NOTAM record; anything else yields no NOTAMs.

The feed does not expose NOTAM type, scope or priority; they are fixed
defaults. Unparsable start/issue dates default to the current time so the
NOTAM stays usable.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..logging import get_ingestion_logger
from ..models import (
    Notam,
    NotamPriority,
    NotamSchedule,
    NotamScope,
    NotamType,
    is_icao,
    normalize_icao,
)
from .http import Fetcher, HttpClient, build_query
from .parsers import parse_notam_date, parse_point, parse_text

FAA_API_URL = "https://notams.aim.faa.gov/notamSearch/"
FAA_SERVICE_NAME = "FAA NOTAM"

CACHE_TTL = 3600 * 24  # 24 hours
TIMEOUT_MS = 5_000
SEARCH_RADIUS_NM = 10

MESSAGE_FIELDS = ("icaoMessage", "traditionalMessageFrom4thWord", "traditionalMessage")

logger = get_ingestion_logger("faa_notam").bind(service=FAA_SERVICE_NAME)


class FaaNotamItem(BaseModel):
    """FAA NOTAM record. Every field is optional upstream."""
    model_config = ConfigDict(extra="ignore")

    notamNumber: Optional[str] = None
    icaoId: Optional[str] = None
    traditionalMessageFrom4thWord: Optional[str] = None
    traditionalMessage: Optional[str] = None
    icaoMessage: Optional[str] = None
    notamGeometry: Optional[str] = None
    mapPointer: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    issueDate: Optional[str] = None
    source: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def loose_text(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None


def extract_notam_records(data: Any) -> List[Dict[str, Any]]:
    """
    Pull raw NOTAM records out of a search or details response.

    Returns:
        Records under "notamList", or the body itself if it is a single
        NOTAM record, or an empty list
    """
    if not isinstance(data, dict):
        return []

    notam_list = data.get("notamList")
    if isinstance(notam_list, list):
        return [record for record in notam_list if isinstance(record, dict)]

    if any(data.get(field) for field in MESSAGE_FIELDS):
        return [data]

    return []


def map_notam(raw: Dict[str, Any], now: Optional[datetime] = None) -> Notam:
    """
    Transform an FAA NOTAM record into a Notam.

    Args:
        raw: Raw FAA record
        now: Default for unparsable start/issue dates (current UTC time)

    Returns:
        Notam; never fails for malformed fields
    """
    now = now or datetime.now(timezone.utc)
    item = FaaNotamItem.model_validate(raw)

    text = item.traditionalMessageFrom4thWord or item.traditionalMessage or item.icaoMessage

    if item.notamGeometry:
        coordinates = parse_point(item.notamGeometry)
    elif item.mapPointer:
        coordinates = parse_point(item.mapPointer)
    else:
        coordinates = None

    return Notam(
        id=item.notamNumber or "",
        icao=normalize_icao(item.icaoId) if is_icao(item.icaoId) else None,
        type=NotamType.A,
        scope=NotamScope.A,
        priority=NotamPriority.NORMAL,
        subject="",
        text=parse_text(text),
        coordinates=coordinates,
        schedule=NotamSchedule(
            effective_from=parse_notam_date(item.startDate) or now,
            effective_until=parse_notam_date(item.endDate),
        ),
        issued=parse_notam_date(item.issueDate) or now,
        source=item.source or None,
        raw=item.icaoMessage,
    )


class NotamClient:
    """
    Client for FAA NOTAM Search.

    Usage:
        client = NotamClient()
        notams = await client.get_by_icao("KJFK")
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        timeout: Optional[int] = None,
    ):
        self.client = HttpClient(
            service_name=FAA_SERVICE_NAME,
            base_url=FAA_API_URL,
            timeout=timeout if timeout is not None else TIMEOUT_MS,
            cache_ttl=CACHE_TTL,
            fetcher=fetcher,
        )

    async def _search(self, icao: str) -> Any:
        form = build_query({
            "searchType": 0,
            "designatorsForLocation": icao,
            "radius": SEARCH_RADIUS_NM,
            "sortColumns": "5 false",
            "sortDirection": "true",
            "offset": 0,
        })
        return await self.client.request_json(
            "search",
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=form,
            require_json_content_type=True,
        )

    async def _details(self, transaction_id: int) -> Any:
        query = build_query({"transactionid": transaction_id})
        return await self.client.request_json(
            f"details?{query}",
            require_json_content_type=True,
        )

    def _transform(self, records: List[Dict[str, Any]]) -> List[Notam]:
        now = datetime.now(timezone.utc)
        return [map_notam(record, now) for record in records]

    async def get_raw_by_icao(self, icao: str) -> List[Dict[str, Any]]:
        """Fetch untransformed NOTAM records around a location."""
        return extract_notam_records(await self._search(icao))

    async def get_raw_by_transaction_id(self, transaction_id: int) -> Optional[Dict[str, Any]]:
        """Fetch one untransformed NOTAM record, or None if not found."""
        records = extract_notam_records(await self._details(transaction_id))
        return records[0] if records else None

    async def get_by_icao(self, icao: str) -> List[Notam]:
        """
        Fetch NOTAMs within the search radius of a location.

        Args:
            icao: ICAO location designator

        Returns:
            NOTAMs in upstream order
        """
        notams = self._transform(await self.get_raw_by_icao(icao))
        logger.info("notams_fetched", icao=icao, count=len(notams))
        return notams

    async def get_by_transaction_id(self, transaction_id: int) -> Optional[Notam]:
        """
        Fetch a single NOTAM by FAA transaction id.

        Returns:
            Notam, or None if the response holds no NOTAM
        """
        record = await self.get_raw_by_transaction_id(transaction_id)
        if record is None:
            return None
        return self._transform([record])[0]


async def get_notams_by_icao(
    icao: str,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[Notam]:
    """Convenience function to fetch NOTAMs for a location."""
    return await NotamClient(fetcher, timeout).get_by_icao(icao)


async def get_notam_by_transaction_id(
    transaction_id: int,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> Optional[Notam]:
    """Convenience function to fetch a NOTAM by transaction id."""
    return await NotamClient(fetcher, timeout).get_by_transaction_id(transaction_id)

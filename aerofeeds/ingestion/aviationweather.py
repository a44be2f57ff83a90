# aerofeeds/ingestion/aviationweather.py
"""
AviationWeather.gov METAR ingestion.

Sources:
- By station: https://aviationweather.gov/api/data/metar?ids={csv}&format=json&taf=true
- By area: https://aviationweather.gov/api/data/metar?bbox={s,w,n,e}&format=json&taf=true

Returns one MetarStation per observation: the raw METAR decoded by
metar_taf_parser, the raw TAF (if any) and the station position.
"""

from typing import Any, Callable, List, Optional, Sequence

from metar_taf_parser.parser.parser import MetarParser
from pydantic import BaseModel, ConfigDict, ValidationError

from ..logging import get_ingestion_logger
from ..models import MetarStation, normalize_icao
from .http import Fetcher, HttpClient, build_query, format_number

AVIATIONWEATHER_API_URL = "https://aviationweather.gov/api/data/"
AVIATIONWEATHER_SERVICE_NAME = "METAR"

CACHE_TTL = 60  # 1 minute, weather is volatile
TIMEOUT_MS = 5_000
COORDINATE_PRECISION = 2

logger = get_ingestion_logger("aviationweather").bind(service=AVIATIONWEATHER_SERVICE_NAME)


class MetarItem(BaseModel):
    """AviationWeather.gov METAR JSON record (fields we use)."""
    model_config = ConfigDict(extra="ignore")

    icaoId: str
    rawOb: str
    rawTaf: Optional[str] = None
    lat: float
    lon: float


def decode_metar(raw_text: str) -> Any:
    """
    Decode a raw METAR with metar_taf_parser.

    Args:
        raw_text: Encoded observation, optionally prefixed with
            "METAR" or "SPECI"

    Returns:
        metar_taf_parser Metar object
    """
    text = raw_text.strip()
    if text[:5].upper() in ("METAR", "SPECI"):
        text = text[5:].strip()
    return MetarParser().parse(text)


def map_metar_station(raw: Any, decoder: Callable[[str], Any] = decode_metar) -> Optional[MetarStation]:
    """
    Map one observation record onto a MetarStation.

    Records missing the station, the raw observation or the position,
    and records the decoder rejects, are dropped.
    """
    try:
        item = MetarItem.model_validate(raw)
    except ValidationError as e:
        logger.warning("metar_dropped", reason="invalid", errors=e.error_count())
        return None

    try:
        metar = decoder(item.rawOb)
    except Exception as e:
        logger.warning("metar_dropped", station=item.icaoId, reason=f"undecodable: {e}")
        return None

    return MetarStation(
        station=normalize_icao(item.icaoId),
        metar=metar,
        taf_raw=item.rawTaf,
        coordinates=(item.lon, item.lat),
    )


class MetarClient:
    """
    Client for AviationWeather.gov METAR data.

    Usage:
        client = MetarClient()
        stations = await client.get_by_icao(["KJFK", "KLGA"])
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        timeout: Optional[int] = None,
        decoder: Callable[[str], Any] = decode_metar,
    ):
        """
        Args:
            fetcher: Custom fetcher
            timeout: Timeout override in milliseconds
            decoder: Raw METAR decoder
        """
        self.client = HttpClient(
            service_name=AVIATIONWEATHER_SERVICE_NAME,
            base_url=AVIATIONWEATHER_API_URL,
            timeout=timeout if timeout is not None else TIMEOUT_MS,
            cache_ttl=CACHE_TTL,
            fetcher=fetcher,
        )
        self.decoder = decoder

    async def _fetch(self, params: dict) -> List[MetarStation]:
        query = build_query({**params, "format": "json", "taf": "true"})
        data = await self.client.request_json(f"metar?{query}")

        if not data:
            return []
        if not isinstance(data, list):
            logger.warning("metar_unexpected_body", body_type=type(data).__name__)
            return []

        stations = [
            s for s in (map_metar_station(obs, self.decoder) for obs in data)
            if s is not None
        ]
        logger.info("metar_fetched", received=len(data), count=len(stations))
        return stations

    async def get_by_icao(self, icao: Sequence[str]) -> List[MetarStation]:
        """
        Fetch METARs for a list of stations.

        Args:
            icao: ICAO station codes

        Returns:
            One MetarStation per reporting station; an empty input returns
            an empty list without a request
        """
        if not icao:
            return []
        return await self._fetch({"ids": ",".join(normalize_icao(code) for code in icao)})

    async def get_by_bbox(self, bbox: Sequence[float]) -> List[MetarStation]:
        """
        Fetch METARs for stations inside a bounding box.

        Args:
            bbox: GeoJSON bounding box [west, south, east, north]

        Returns:
            MetarStations inside the box

        Raises:
            ValueError: If bbox does not have four values
        """
        if len(bbox) != 4:
            raise ValueError("Bounding box must be [west, south, east, north]")

        west, south, east, north = bbox
        # Upstream expects south,west,north,east
        ordered = (south, west, north, east)
        return await self._fetch({
            "bbox": ",".join(format_number(v, COORDINATE_PRECISION) for v in ordered)
        })


async def get_metar_stations_by_icao(
    icao: Sequence[str],
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[MetarStation]:
    """Convenience function to fetch METARs by station codes."""
    return await MetarClient(fetcher, timeout).get_by_icao(icao)


async def get_metar_stations_by_bbox(
    bbox: Sequence[float],
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[MetarStation]:
    """Convenience function to fetch METARs inside a bounding box."""
    return await MetarClient(fetcher, timeout).get_by_bbox(bbox)

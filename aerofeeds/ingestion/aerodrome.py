# aerofeeds/ingestion/aerodrome.py
"""
OpenAIP aerodrome ingestion.

Sources:
- By code: https://api.core.openaip.net/api/airports?search={code}&limit=1
- By radius: https://api.core.openaip.net/api/airports?pos={lat},{lon}&dist={m}&type=...

Per-record policy:
- Items without a valid ICAO code are dropped
- Items failing boundary validation are dropped
- A runway or frequency entry that is malformed (including an unknown
  frequency type) is dropped on its own; the aerodrome is kept
"""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..logging import get_ingestion_logger
from ..models import (
    Aerodrome,
    Frequency,
    Runway,
    capitalize_words,
    is_icao,
    normalize_iata,
    normalize_icao,
    validate_frequency_type,
)
from .http import Fetcher, build_query, format_number
from .openaip import (
    AIRPORT_TYPES,
    COORDINATE_PRECISION,
    DATUM_MSL,
    DEFAULT_RADIUS_KM,
    KM_TO_METERS,
    OPENAIP_SERVICE_NAME,
    METERS_TO_FEET,
    RADIUS_LIMIT,
    SEARCH_LIMIT,
    UNIT_METERS,
    AirportItem,
    FrequencyItem,
    Measure,
    RunwayItem,
    extract_items,
    openaip_client,
)

logger = get_ingestion_logger("aerodrome").bind(service=OPENAIP_SERVICE_NAME)


def _metric(measure: Optional[Measure]) -> Optional[float]:
    """Value of a runway dimension, only if expressed in meters."""
    if measure is None or measure.unit != UNIT_METERS:
        return None
    return measure.value


def map_runway(raw: Any) -> Optional[Runway]:
    try:
        item = RunwayItem.model_validate(raw)
    except ValidationError as e:
        logger.warning("runway_dropped", reason="invalid", errors=e.error_count())
        return None

    heading = item.trueHeading
    if heading is not None and not 0 <= heading <= 360:
        logger.warning("runway_heading_dropped", designator=item.designator, heading=heading)
        heading = None

    dimension = item.dimension
    surface = item.surface.mainComposite if item.surface else None

    return Runway(
        designator=item.designator,
        heading=heading,
        length=_metric(dimension.length) if dimension else None,
        width=_metric(dimension.width) if dimension else None,
        surface=surface or "",
    )


def map_frequency(raw: Any) -> Optional[Frequency]:
    try:
        item = FrequencyItem.model_validate(raw)
        frequency_type = validate_frequency_type(item.type)
    except ValidationError as e:
        logger.warning("frequency_dropped", reason="invalid", errors=e.error_count())
        return None
    except ValueError as e:
        logger.warning("frequency_dropped", reason=str(e))
        return None

    return Frequency(
        type=frequency_type,
        name=item.name or "",
        value=item.value,
    )


def map_aerodrome(raw: Any) -> Optional[Aerodrome]:
    """
    Map one OpenAIP airport item onto an Aerodrome.

    Args:
        raw: Decoded item from the "items" array

    Returns:
        Aerodrome, or None if the item must be dropped
    """
    if not isinstance(raw, dict):
        logger.warning("aerodrome_dropped", reason="not an object")
        return None
    # Aerodromes without an ICAO code are not returned
    if not is_icao(raw.get("icaoCode")):
        logger.debug("aerodrome_dropped", reason="missing ICAO code", name=raw.get("name"))
        return None

    try:
        item = AirportItem.model_validate(raw)
    except ValidationError as e:
        logger.warning("aerodrome_dropped", icao=raw.get("icaoCode"), reason="invalid", errors=e.error_count())
        return None

    elevation = None
    if (
        item.elevation is not None
        and item.elevation.value is not None
        and item.elevation.unit == UNIT_METERS
        and item.elevation.referenceDatum == DATUM_MSL
    ):
        elevation = item.elevation.value * METERS_TO_FEET

    runways = tuple(r for r in map(map_runway, item.runways or []) if r is not None)
    frequencies = tuple(f for f in map(map_frequency, item.frequencies or []) if f is not None)

    return Aerodrome(
        icao=normalize_icao(item.icaoCode),
        iata=normalize_iata(item.iataCode) if item.iataCode else None,
        name=capitalize_words(item.name),
        coordinates=tuple(item.geometry.coordinates),
        elevation=elevation,
        magnetic_declination=item.magneticDeclination,
        runways=runways,
        frequencies=frequencies,
        ppr=item.ppr,
    )


def map_aerodromes(data: Any) -> List[Aerodrome]:
    """Map an OpenAIP airports response, preserving upstream order."""
    items = extract_items(data)
    aerodromes = [a for a in map(map_aerodrome, items) if a is not None]
    if len(aerodromes) < len(items):
        logger.info("aerodromes_filtered", received=len(items), kept=len(aerodromes))
    return aerodromes


class AerodromeClient:
    """
    Client for OpenAIP airports.

    Usage:
        client = AerodromeClient(api_key="...")
        aerodromes = await client.get_by_icao("EDDF")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        fetcher: Optional[Fetcher] = None,
        timeout: Optional[int] = None,
    ):
        self.client = openaip_client(api_key, fetcher, timeout)

    async def _search(self, params: Dict[str, Any]) -> List[Aerodrome]:
        data = await self.client.request_json(f"airports?{build_query(params)}")
        aerodromes = map_aerodromes(data)
        logger.info("aerodromes_fetched", count=len(aerodromes))
        return aerodromes

    async def get_by_icao(self, icao: str) -> List[Aerodrome]:
        """
        Fetch aerodromes matching an ICAO code.

        Args:
            icao: ICAO airport code

        Returns:
            Matching aerodromes (at most one)
        """
        return await self._search({"search": icao, "limit": SEARCH_LIMIT})

    async def get_by_iata(self, iata: str) -> List[Aerodrome]:
        """Fetch aerodromes matching an IATA code."""
        return await self._search({"search": iata, "limit": SEARCH_LIMIT})

    async def get_by_radius(
        self,
        location: Sequence[float],
        distance: float = DEFAULT_RADIUS_KM,
    ) -> List[Aerodrome]:
        """
        Fetch aerodromes within a radius of a point.

        Args:
            location: [longitude, latitude]
            distance: Radius in kilometers

        Returns:
            Aerodromes of the queried airport types, up to RADIUS_LIMIT

        Raises:
            ValueError: If distance is not positive or location is not 2D;
                raised before any request is issued
        """
        if not distance > 0:
            raise ValueError("Distance must be a positive number")
        if len(location) != 2:
            raise ValueError("Location must be a 2D coordinate")

        lon = format_number(location[0], COORDINATE_PRECISION)
        lat = format_number(location[1], COORDINATE_PRECISION)

        return await self._search({
            "pos": f"{lat},{lon}",
            "dist": format_number(distance * KM_TO_METERS),
            "type": list(AIRPORT_TYPES),
            "limit": RADIUS_LIMIT,
        })


async def get_aerodrome_by_icao(
    icao: str,
    api_key: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[Aerodrome]:
    """Convenience function to fetch aerodromes by ICAO code."""
    client = AerodromeClient(api_key, fetcher, timeout)
    return await client.get_by_icao(icao)


async def get_aerodrome_by_iata(
    iata: str,
    api_key: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[Aerodrome]:
    """Convenience function to fetch aerodromes by IATA code."""
    client = AerodromeClient(api_key, fetcher, timeout)
    return await client.get_by_iata(iata)


async def get_aerodrome_by_radius(
    location: Sequence[float],
    distance: float = DEFAULT_RADIUS_KM,
    api_key: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> List[Aerodrome]:
    """Convenience function to fetch aerodromes around a point."""
    client = AerodromeClient(api_key, fetcher, timeout)
    return await client.get_by_radius(location, distance)

# aerofeeds/ingestion/openaip.py
"""
OpenAIP API configuration and upstream item models.

Source: https://api.core.openaip.net/api/

Shared by the aerodrome and navaid pipelines. Items are validated one at
a time at the boundary. Only geometry is required; a malformed optional
field reads as None instead of failing the item. An item that still fails
validation is dropped by the pipeline, not raised.
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from ..settings import settings
from .http import Fetcher, HttpClient

OPENAIP_API_URL = "https://api.core.openaip.net/api/"
OPENAIP_SERVICE_NAME = "OpenAIP"
OPENAIP_API_KEY_HEADER = "x-openaip-api-key"

CACHE_TTL = 3600 * 24 * 7  # 1 week, airport data changes rarely
TIMEOUT_MS = 10_000
SEARCH_LIMIT = 1
RADIUS_LIMIT = 200
DEFAULT_RADIUS_KM = 50
COORDINATE_PRECISION = 2
METERS_TO_FEET = 3.28084
KM_TO_METERS = 1_000
AIRPORT_TYPES = (0, 1, 2, 3, 9, 5)

# OpenAIP unit and datum codes
UNIT_METERS = 0
DATUM_MSL = 1


def _number_or_none(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _code_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _object_or_none(value: Any) -> Any:
    # Nested objects that are not objects are treated as absent
    return value if isinstance(value, (dict, BaseModel)) else None


class OpenAipModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Geometry(OpenAipModel):
    coordinates: Tuple[float, float]  # [lon, lat]


class Measure(OpenAipModel):
    value: Optional[float] = None
    unit: Optional[int] = None

    @field_validator("value", mode="before")
    @classmethod
    def loose_value(cls, value: Any) -> Any:
        return _number_or_none(value)

    @field_validator("unit", mode="before")
    @classmethod
    def loose_unit(cls, value: Any) -> Optional[int]:
        return _code_or_none(value)


class Elevation(Measure):
    referenceDatum: Optional[int] = None

    @field_validator("referenceDatum", mode="before")
    @classmethod
    def loose_datum(cls, value: Any) -> Optional[int]:
        return _code_or_none(value)


class RunwayDimension(OpenAipModel):
    length: Optional[Measure] = None
    width: Optional[Measure] = None

    @field_validator("length", "width", mode="before")
    @classmethod
    def loose_measure(cls, value: Any) -> Any:
        return _object_or_none(value)


class RunwaySurface(OpenAipModel):
    mainComposite: Optional[str] = None

    @field_validator("mainComposite", mode="before")
    @classmethod
    def composite_as_text(cls, value: Any) -> Optional[str]:
        # OpenAIP sends a numeric surface code
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value if isinstance(value, str) else None


class RunwayItem(OpenAipModel):
    designator: str = ""
    trueHeading: Optional[float] = None
    dimension: Optional[RunwayDimension] = None
    surface: Optional[RunwaySurface] = None

    @field_validator("trueHeading", mode="before")
    @classmethod
    def loose_heading(cls, value: Any) -> Any:
        return _number_or_none(value)

    @field_validator("dimension", "surface", mode="before")
    @classmethod
    def loose_object(cls, value: Any) -> Any:
        return _object_or_none(value)


class FrequencyItem(OpenAipModel):
    # Left loose: checked against FrequencyType during mapping
    type: Any = None
    name: Optional[str] = None
    value: float


class AirportItem(OpenAipModel):
    """
    OpenAIP airport.

    Only geometry is required. Malformed optional fields read as absent
    instead of rejecting the item; nested runways/frequencies are
    validated per entry.
    """
    icaoCode: Optional[str] = None
    iataCode: Optional[str] = None
    name: Optional[str] = None
    geometry: Geometry
    elevation: Optional[Elevation] = None
    magneticDeclination: Optional[float] = None
    ppr: Optional[bool] = None
    runways: Optional[List[Any]] = None
    frequencies: Optional[List[Any]] = None

    @field_validator("icaoCode", "iataCode", "name", mode="before")
    @classmethod
    def loose_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("elevation", mode="before")
    @classmethod
    def loose_elevation(cls, value: Any) -> Any:
        return _object_or_none(value)

    @field_validator("magneticDeclination", mode="before")
    @classmethod
    def loose_declination(cls, value: Any) -> Any:
        return _number_or_none(value)

    @field_validator("ppr", mode="before")
    @classmethod
    def loose_flag(cls, value: Any) -> Optional[bool]:
        return value if isinstance(value, bool) else None

    @field_validator("runways", "frequencies", mode="before")
    @classmethod
    def loose_list(cls, value: Any) -> Optional[list]:
        return value if isinstance(value, list) else None


class NavaidFrequencyItem(OpenAipModel):
    value: Optional[float] = None

    @field_validator("value", mode="before")
    @classmethod
    def loose_value(cls, value: Any) -> Any:
        return _number_or_none(value)


class NavaidItem(OpenAipModel):
    identifier: Optional[str] = None
    name: Optional[str] = None
    geometry: Geometry
    elevation: Optional[Measure] = None
    frequency: Optional[NavaidFrequencyItem] = None

    @field_validator("identifier", "name", mode="before")
    @classmethod
    def loose_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("elevation", "frequency", mode="before")
    @classmethod
    def loose_object(cls, value: Any) -> Any:
        return _object_or_none(value)


def extract_items(data: Any) -> List[Any]:
    """
    Pull the item list out of an OpenAIP {items, totalCount} envelope.

    Returns:
        The raw items, or an empty list if the envelope is absent or
        malformed
    """
    if not isinstance(data, dict):
        return []
    items = data.get("items")
    if not isinstance(items, list):
        return []
    return items


def openaip_client(
    api_key: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout: Optional[int] = None,
) -> HttpClient:
    """
    Build an HttpClient for OpenAIP.

    Args:
        api_key: OpenAIP API key (defaults to OPENAIP_API_KEY)
        fetcher: Custom fetcher
        timeout: Timeout override in milliseconds

    Raises:
        ValueError: If no API key is available
    """
    api_key = api_key or settings.openaip_api_key
    if not api_key:
        raise ValueError("OpenAIP API key is required (pass api_key or set OPENAIP_API_KEY)")

    return HttpClient(
        service_name=OPENAIP_SERVICE_NAME,
        base_url=OPENAIP_API_URL,
        timeout=timeout if timeout is not None else TIMEOUT_MS,
        cache_ttl=CACHE_TTL,
        headers={OPENAIP_API_KEY_HEADER: api_key},
        fetcher=fetcher,
    )

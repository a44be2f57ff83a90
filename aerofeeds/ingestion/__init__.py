# Ingestion module - upstream aeronautical data sources
from .errors import ApiError, HttpClientError, HttpTimeoutError
from .http import CacheHint, HttpClient, RequestOptions, fetch_api, httpx_fetcher
from .aerodrome import (
    AerodromeClient,
    get_aerodrome_by_iata,
    get_aerodrome_by_icao,
    get_aerodrome_by_radius,
)
from .navaid import NavaidClient, get_navaid_by_identifier
from .aviationweather import (
    MetarClient,
    decode_metar,
    get_metar_stations_by_bbox,
    get_metar_stations_by_icao,
)
from .faa_notam import NotamClient, get_notam_by_transaction_id, get_notams_by_icao

__all__ = [
    "ApiError",
    "HttpClientError",
    "HttpTimeoutError",
    "CacheHint",
    "HttpClient",
    "RequestOptions",
    "fetch_api",
    "httpx_fetcher",
    "AerodromeClient",
    "get_aerodrome_by_iata",
    "get_aerodrome_by_icao",
    "get_aerodrome_by_radius",
    "NavaidClient",
    "get_navaid_by_identifier",
    "MetarClient",
    "decode_metar",
    "get_metar_stations_by_bbox",
    "get_metar_stations_by_icao",
    "NotamClient",
    "get_notam_by_transaction_id",
    "get_notams_by_icao",
]

# aerofeeds/models.py
"""
Canonical domain records produced by the ingestion pipelines.

Core entities:
- Aerodrome: Airport with runways and frequencies (OpenAIP)
- Navaid: Navigational aid (OpenAIP)
- MetarStation: Decoded METAR plus raw TAF (AviationWeather.gov)
- Notam: Normalized notice to airmen (FAA NOTAM Search)

All records are frozen; collections are tuples so a returned record
cannot be changed by the caller.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Optional, Tuple, Union

# (longitude, latitude), GeoJSON order
Position = Tuple[float, float]

ICAO_PATTERN = re.compile(r"^[A-Z][A-Z0-9]{3}$")
IATA_PATTERN = re.compile(r"^[A-Z]{3}$")

NAV_FREQUENCY_TYPE = "NAV"


class WaypointKind(str, Enum):
    AERODROME = "AERODROME"
    NAVAID = "NAVAID"


class FrequencyType(IntEnum):
    """OpenAIP frequency type codes."""
    APPROACH = 0
    APRON = 1
    ARRIVAL = 2
    CENTER = 3
    CTAF = 4
    DELIVERY = 5
    DEPARTURE = 6
    FIS = 7
    GLIDING = 8
    GROUND = 9
    INFO = 10
    MULTICOM = 11
    UNICOM = 12
    RADAR = 13
    TOWER = 14
    ATIS = 15
    RADIO = 16
    OTHER = 17
    AIRMET = 18
    AWOS = 19
    LIGHTS = 20
    VOLMET = 21
    AFIS = 22


class NotamType(str, Enum):
    A = "A"
    B = "B"
    C = "C"


class NotamScope(str, Enum):
    A = "A"  # Aerodrome
    E = "E"  # En-route
    W = "W"  # Navigation warning


class NotamPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


def is_icao(code: Any) -> bool:
    """Check whether a value is a syntactically valid ICAO code."""
    if not isinstance(code, str):
        return False
    return ICAO_PATTERN.match(code.strip().upper()) is not None


def normalize_icao(code: str) -> str:
    return code.strip().upper()


def normalize_iata(code: Any) -> Optional[str]:
    """Upper-case an IATA code, or None if it is not three letters."""
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code if IATA_PATTERN.match(code) else None


def capitalize_words(text: Optional[str]) -> str:
    """
    Title-case a name.

    Example:
        >>> capitalize_words("FRANKFURT/MAIN")
        'Frankfurt/Main'
    """
    if not text:
        return ""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), text.lower())


def validate_frequency_type(value: Any) -> FrequencyType:
    """
    Map an upstream frequency type code onto FrequencyType.

    Raises:
        ValueError: If the code is not a known frequency type
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid frequency type: {value!r}")
    try:
        return FrequencyType(value)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid frequency type: {value!r}")


@dataclass(frozen=True)
class Coordinates:
    """Point parsed from NOTAM geometry."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Runway:
    designator: str
    heading: Optional[float]  # true heading, degrees
    length: Optional[float]  # meters
    width: Optional[float]  # meters
    surface: str  # composite surface code


@dataclass(frozen=True)
class Frequency:
    type: Union[FrequencyType, str]  # FrequencyType, or "NAV" for navaids
    name: str
    value: float  # MHz


@dataclass(frozen=True)
class Aerodrome:
    """
    Airport record.

    Never constructed without a valid ICAO code; OpenAIP items lacking
    one are dropped by the pipeline.
    """
    icao: str
    iata: Optional[str]
    name: str
    coordinates: Position
    elevation: Optional[float]  # feet AMSL
    magnetic_declination: Optional[float]
    runways: Tuple[Runway, ...] = ()
    frequencies: Tuple[Frequency, ...] = ()
    ppr: Optional[bool] = None  # prior permission required
    kind: WaypointKind = WaypointKind.AERODROME


@dataclass(frozen=True)
class Navaid:
    """Navigational aid (VOR, NDB, DME, ...)."""
    identifier: str
    name: str
    coordinates: Position
    elevation: float
    frequencies: Tuple[Frequency, ...] = ()
    kind: WaypointKind = WaypointKind.NAVAID


@dataclass(frozen=True)
class MetarStation:
    station: str
    metar: Any  # decoded observation from metar_taf_parser
    taf_raw: Optional[str]
    coordinates: Position


@dataclass(frozen=True)
class NotamSchedule:
    effective_from: datetime
    effective_until: Optional[datetime] = None


@dataclass(frozen=True)
class Notam:
    """
    Normalized NOTAM.

    type, scope and priority are fixed defaults: the FAA search feed
    does not expose them.
    """
    id: str
    icao: Optional[str]
    type: NotamType
    scope: NotamScope
    priority: NotamPriority
    subject: str
    text: str
    coordinates: Optional[Coordinates]
    schedule: NotamSchedule
    issued: datetime
    source: Optional[str] = None
    raw: Optional[str] = None

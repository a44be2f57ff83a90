# aerofeeds/ingestion/parsers.py
"""
Scalar parsers shared by the pipelines.

Pure functions with no network dependency:
- parse_notam_date: "MM/DD/YYYY HHMM" (UTC) -> datetime
- parse_point: "[lon,lat]" or "POINT(lon lat)" -> Coordinates
- parse_text: abbreviation-laden NOTAM text -> normalized upper-case text

Malformed input yields None (or "" for text), never an exception, so a
single bad field cannot fail a whole response.
"""

import re
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..models import Coordinates

NOTAM_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})\s+(\d{2})(\d{2})$")

_NUMBER = r"([+-]?\d*\.?\d+)"
ARRAY_POINT_PATTERN = re.compile(rf"^\[{_NUMBER},{_NUMBER}\]$")
WKT_POINT_PATTERN = re.compile(rf"^POINT\({_NUMBER}\s+{_NUMBER}\)$")

# Common NOTAM contractions (ICAO Doc 8400 subset).
# No word of an expansion may itself be a key, otherwise a single
# replacement pass would not be stable.
ABBREVIATIONS: Mapping[str, str] = MappingProxyType({
    # Airport/Airfield
    "AD": "AERODROME",
    "AFTN": "AERONAUTICAL FIXED TELECOMMUNICATION NETWORK",
    "AGL": "ABOVE GROUND LEVEL",
    "AMSL": "ABOVE MEAN SEA LEVEL",
    "APCH": "APPROACH",
    "APT": "AIRPORT",
    "ARPT": "AIRPORT",

    # Air Traffic Control
    "TWR": "TOWER",
    "GND": "GROUND",
    "APP": "APPROACH",
    "DEP": "DEPARTURE",

    # Runway/Taxiway
    "RWY": "RUNWAY",
    "TWY": "TAXIWAY",
    "TKOF": "TAKEOFF",
    "LDG": "LANDING",
    "CLSD": "CLOSED",
    "AVBL": "AVAILABLE",
    "REQ": "REQUEST",
    "BTN": "BETWEEN",

    # Time/Duration
    "LCL": "LOCAL",
    "FM": "FROM",
    "TIL": "UNTIL",
    "PERM": "PERMANENT",
    "TEMP": "TEMPORARY",
    "DLY": "DAILY",
    "WEF": "WITH EFFECT FROM",
    "APPX": "APPROXIMATELY",

    # Weather/Conditions
    "WX": "WEATHER",
    "VIS": "VISIBILITY",
    "OBSCN": "OBSCURATION",
    "FG": "FOG",
    "BR": "MIST",
    "RA": "RAIN",
    "SN": "SNOW",
    "TS": "THUNDERSTORM",

    # Operations
    "OPR": "OPERATE/OPERATING",
    "OPNL": "OPERATIONAL",
    "INOP": "INOPERATIVE",
    "U/S": "UNSERVICEABLE",
    "MAINT": "MAINTENANCE",
    "CONST": "CONSTRUCTION",
    "WIP": "WORK IN PROGRESS",
    "OBST": "OBSTACLE",

    # Equipment/Systems
    "EQPT": "EQUIPMENT",
    "SYS": "SYSTEM",
    "PWR": "POWER",
    "ELEC": "ELECTRICAL",
    "LGTG": "LIGHTING",
    "REIL": "RUNWAY END IDENTIFIER LIGHTS",
    "LGTD": "LIGHTED",

    # Military/Restricted
    "MIL": "MILITARY",

    # Common operational terms
    "ACFT": "AIRCRAFT",
    "ALT": "ALTITUDE",
    "FL": "FLIGHT LEVEL",
    "FT": "FEET",
    "NM": "NAUTICAL MILES",
    "KT": "KNOTS",
    "DEG": "DEGREES",
    "MAG": "MAGNETIC",
    "VAR": "VARIATION",

    # Communications
    "FREQ": "FREQUENCY",
    "MHZ": "MEGAHERTZ",
    "KHZ": "KILOHERTZ",
    "COM": "COMMUNICATION",
    "RAD": "RADIO",
    "TEL": "TELEPHONE",
})

# One alternation, longest keys first, matched on word boundaries
_ABBREVIATION_PATTERN = re.compile(
    r"\b(?:"
    + "|".join(re.escape(key) for key in sorted(ABBREVIATIONS, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)


def parse_notam_date(date_string: Any) -> Optional[datetime]:
    """
    Parse an FAA NOTAM date.

    Args:
        date_string: Date in "MM/DD/YYYY HHMM" format, assumed UTC
            (e.g. "09/11/2025 1707")

    Returns:
        Timezone-aware UTC datetime, or None if the value has any other
        shape or names an impossible date
    """
    if not isinstance(date_string, str) or not date_string:
        return None

    match = NOTAM_DATE_PATTERN.match(date_string)
    if not match:
        return None

    month, day, year, hours, minutes = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hours, minutes, tzinfo=timezone.utc)
    except ValueError:
        return None


def _valid_point(longitude: float, latitude: float) -> Optional[Coordinates]:
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        return None
    return Coordinates(latitude=latitude, longitude=longitude)


def parse_point(point_string: Any) -> Optional[Coordinates]:
    """
    Parse a point from an array string or WKT.

    Args:
        point_string: "[-73.78,40.65]" or "POINT(-73.78 40.65)",
            longitude first in both forms

    Returns:
        Coordinates, or None if malformed or out of range
    """
    if not isinstance(point_string, str) or not point_string:
        return None

    match = ARRAY_POINT_PATTERN.match(point_string) or WKT_POINT_PATTERN.match(point_string)
    if not match:
        return None

    longitude, latitude = (float(part) for part in match.groups())
    return _valid_point(longitude, latitude)


def expand_abbreviations(text: str) -> str:
    """Replace whole-word abbreviations, case-insensitively, in one pass."""
    return _ABBREVIATION_PATTERN.sub(
        lambda m: ABBREVIATIONS[m.group(0).upper()], text
    )


def parse_text(text: Any) -> str:
    """
    Normalize NOTAM text.

    Newlines become spaces, abbreviations are expanded, runs of
    whitespace collapse to one space and the result is upper-cased.

    Example:
        >>> parse_text("RWY 04L/22R CLSD\\nWIP")
        'RUNWAY 04L/22R CLOSED WORK IN PROGRESS'
    """
    if not isinstance(text, str) or not text:
        return ""

    processed = text.replace("\n", " ").strip()
    processed = expand_abbreviations(processed)
    return re.sub(r"\s+", " ", processed).strip().upper()

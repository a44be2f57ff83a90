# tests/test_parsers.py
"""
Test scalar parsers.

Verifies date, point and NOTAM text parsing, including the guarantee
that malformed input yields an absent value rather than an exception.
"""

import re
from datetime import datetime, timezone

import pytest

from aerofeeds.ingestion.parsers import (
    ABBREVIATIONS,
    parse_notam_date,
    parse_point,
    parse_text,
)
from aerofeeds.models import Coordinates


class TestParseNotamDate:
    """Tests for the MM/DD/YYYY HHMM date parser."""

    def test_valid_date_is_utc(self):
        """A well-formed date parses as UTC."""
        result = parse_notam_date("09/11/2025 1707")

        assert result == datetime(2025, 9, 11, 17, 7, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_unpadded_month_is_absent(self):
        """Wrong zero-padding yields None."""
        assert parse_notam_date("9/11/2025 1707") is None

    @pytest.mark.parametrize("value", [
        None,
        "",
        "PERM",
        "2025-09-11T17:07:00Z",
        "09/11/2025",
        "09/11/2025 17:07",
        "09/11/2025 1707EST",
        12345,
    ])
    def test_other_shapes_are_absent(self, value):
        """Anything but the exact pattern yields None."""
        assert parse_notam_date(value) is None

    def test_impossible_calendar_date_is_absent(self):
        """A date matching the pattern but not the calendar yields None."""
        assert parse_notam_date("13/45/2025 2599") is None
        assert parse_notam_date("02/30/2025 1200") is None


class TestParsePoint:
    """Tests for array and WKT point parsing."""

    def test_array_string(self):
        """Bracketed [lon,lat] parses longitude first."""
        assert parse_point("[-73.78,40.65]") == Coordinates(latitude=40.65, longitude=-73.78)

    def test_wkt_point(self):
        """WKT POINT(lon lat) parses longitude first."""
        assert parse_point("POINT(-73.78 40.65)") == Coordinates(latitude=40.65, longitude=-73.78)

    def test_full_precision_array(self):
        """FAA map pointers carry many decimals."""
        point = parse_point("[-73.7816305555556,40.6494194444444]")

        assert point.longitude == pytest.approx(-73.7816305555556)
        assert point.latitude == pytest.approx(40.6494194444444)

    def test_out_of_range_longitude(self):
        """Longitude beyond 180 yields None."""
        assert parse_point("[200,40]") is None

    def test_out_of_range_latitude(self):
        """Latitude beyond 90 yields None."""
        assert parse_point("POINT(10 95)") is None

    @pytest.mark.parametrize("value", [
        None,
        "",
        "[1,2,3]",
        "POINT(1,2)",
        "LINESTRING(1 2, 3 4)",
        "[abc,def]",
        "-73.78,40.65",
    ])
    def test_malformed_is_absent(self, value):
        """Malformed input yields None, never raises."""
        assert parse_point(value) is None


class TestParseText:
    """Tests for NOTAM text normalization."""

    def test_expands_abbreviations(self):
        """Known abbreviations are expanded to full words."""
        assert parse_text("RWY 04L/22R CLSD") == "RUNWAY 04L/22R CLOSED"

    def test_case_insensitive_match(self):
        """Lower-case abbreviations are expanded and the result upper-cased."""
        assert parse_text("twy a clsd") == "TAXIWAY A CLOSED"

    def test_newlines_and_whitespace_collapse(self):
        """Newlines become spaces and runs of whitespace collapse."""
        assert parse_text("  RWY 13/31\n\nCLSD   DLY  ") == "RUNWAY 13/31 CLOSED DAILY"

    def test_embedded_abbreviation_untouched(self):
        """An abbreviation inside a longer token is not replaced."""
        assert parse_text("RAMP ADJ TWYS") == "RAMP ADJ TWYS"

    def test_slash_abbreviation(self):
        """U/S expands as a whole word."""
        assert parse_text("ILS U/S") == "ILS UNSERVICEABLE"

    def test_empty_input(self):
        """Missing text normalizes to an empty string."""
        assert parse_text(None) == ""
        assert parse_text("") == ""

    def test_idempotent(self):
        """Normalizing already-normalized text changes nothing."""
        once = parse_text("!JFK 09/123 JFK RWY 04L/22R CLSD WIP FM 0900 TIL 1700 DLY\nACFT REQ PPR")

        assert parse_text(once) == once


class TestAbbreviationDictionary:
    """Tests over the abbreviation dictionary itself."""

    def test_no_expansion_rematches_a_key(self):
        """No word of an expansion is itself an abbreviation."""
        for key, expansion in ABBREVIATIONS.items():
            for word in re.split(r"[^A-Z/]+|/", expansion):
                if word:
                    assert word not in ABBREVIATIONS, f"{key} -> {expansion} re-matches {word}"

    def test_every_expansion_is_stable(self):
        """Each expansion normalizes to itself."""
        for expansion in ABBREVIATIONS.values():
            assert parse_text(expansion) == expansion

    def test_dictionary_is_read_only(self):
        """The dictionary cannot be modified at runtime."""
        with pytest.raises(TypeError):
            ABBREVIATIONS["NEW"] = "VALUE"

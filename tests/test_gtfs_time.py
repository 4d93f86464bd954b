"""Tests for GTFS time helpers."""

from datetime import date, datetime

import pytest

from busmap_mcp.services.gtfs_time import (
    date_to_gtfs_format,
    format_gtfs_time,
    gtfs_time_to_seconds,
    parse_gtfs_date,
    parse_gtfs_time,
    seconds_since_midnight,
    time_to_gtfs_format,
)


class TestGTFSTimeParsing:
    """Tests for GTFS time parsing functions."""

    def test_parse_normal_time(self) -> None:
        """Test parsing a normal time."""
        assert parse_gtfs_time("08:30:00") == (8, 30, 0)

    def test_parse_time_exceeding_24(self) -> None:
        """Test parsing a time that exceeds 24:00:00."""
        assert parse_gtfs_time("25:30:00") == (25, 30, 0)

    def test_parse_without_seconds(self) -> None:
        """Seconds may be omitted."""
        assert parse_gtfs_time("08:30") == (8, 30, 0)

    def test_parse_invalid_format(self) -> None:
        """Test that invalid format raises ValueError."""
        with pytest.raises(ValueError):
            parse_gtfs_time("invalid")

    def test_parse_non_numeric(self) -> None:
        """Test that non-numeric parts raise ValueError."""
        with pytest.raises(ValueError):
            parse_gtfs_time("08:xx:00")


class TestGTFSTimeToSeconds:
    """Tests for converting GTFS time to seconds."""

    def test_midnight(self) -> None:
        """Test midnight is 0 seconds."""
        assert gtfs_time_to_seconds("00:00:00") == 0

    def test_normal_time(self) -> None:
        """Test a normal time."""
        # 8:30:00 = 8*3600 + 30*60 = 30600
        assert gtfs_time_to_seconds("08:30:00") == 30600

    def test_time_exceeding_24(self) -> None:
        """Post-midnight times exceed one day of seconds."""
        assert gtfs_time_to_seconds("25:00:00") == 90000


class TestFormatGTFSTime:
    """Tests for formatting GTFS time for display."""

    def test_format_morning(self) -> None:
        assert format_gtfs_time("08:30:00") == "08:30"

    def test_format_exceeding_24(self) -> None:
        """Test formatting a time exceeding 24:00."""
        assert format_gtfs_time("25:10:00") == "01:10 (+1)"


class TestDateTimeConversion:
    """Tests for datetime and date conversion helpers."""

    def test_seconds_since_midnight(self) -> None:
        assert seconds_since_midnight(datetime(2024, 1, 3, 8, 5, 30)) == 29130

    def test_time_to_gtfs_format(self) -> None:
        assert time_to_gtfs_format(datetime(2024, 1, 3, 7, 5, 9)) == "07:05:09"

    def test_date_round_trip(self) -> None:
        assert date_to_gtfs_format(date(2024, 1, 3)) == "20240103"
        assert parse_gtfs_date("20240103") == date(2024, 1, 3)

    def test_parse_invalid_date(self) -> None:
        with pytest.raises(ValueError):
            parse_gtfs_date("2024-01-03")

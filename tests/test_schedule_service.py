"""Tests for the service calendar resolver."""

from datetime import date

import pytest

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.schedule import CalendarEntry, CalendarException, ExtraData
from busmap_mcp.services.schedule_service import (
    ServiceDayCache,
    get_active_service_ids,
    is_service_running,
)

WEEKDAYS = ("1", "1", "1", "1", "1", "0", "0")
WEEKENDS = ("0", "0", "0", "0", "0", "1", "1")

# 2024-01-03 is a Wednesday, 2024-01-06 a Saturday
WEDNESDAY = date(2024, 1, 3)
SATURDAY = date(2024, 1, 6)


@pytest.fixture
def snapshot() -> Snapshot:
    """Calendar with short, long and special services."""
    return Snapshot.build(
        calendar={
            "SHORT": CalendarEntry(days=WEEKDAYS, start="20240101", end="20240105"),
            "LONG": CalendarEntry(days=WEEKDAYS, start="20230101", end="20231231"),
            "WEEKEND": CalendarEntry(days=WEEKENDS, start="20240101", end="20241231"),
            "BROKEN": CalendarEntry(days=WEEKDAYS, start="bad", end="20231231"),
        },
        extra=ExtraData(
            calendar_dates=(
                CalendarException(service_id="WEEKEND", date="20240103", exception_type="1"),
                CalendarException(service_id="SHORT", date="20240104", exception_type="2"),
                # Later duplicate for the same day is ignored
                CalendarException(service_id="SHORT", date="20240104", exception_type="1"),
                CalendarException(service_id="EXTRA", date="20240106", exception_type="1"),
            )
        ),
    )


class TestIsServiceRunning:
    """Tests for is_service_running."""

    def test_weekday_flag_inside_range(self, snapshot: Snapshot) -> None:
        """Wednesday inside the range uses days[2]."""
        assert is_service_running(snapshot, "SHORT", WEDNESDAY) is True

    def test_weekday_flag_off_inside_range(self, snapshot: Snapshot) -> None:
        """Weekend flag is off on a weekday service."""
        assert is_service_running(snapshot, "SHORT", date(2024, 1, 6)) is False

    def test_added_exception_overrides_weekday_flag(self, snapshot: Snapshot) -> None:
        """Type "1" runs the service even though Wednesday's flag is "0"."""
        assert is_service_running(snapshot, "WEEKEND", WEDNESDAY) is True

    def test_removed_exception_overrides_weekday_flag(self, snapshot: Snapshot) -> None:
        """A non-"1" type stops the service although the weekly pattern runs it."""
        assert is_service_running(snapshot, "SHORT", date(2024, 1, 4)) is False

    def test_exception_without_calendar_entry(self, snapshot: Snapshot) -> None:
        """An added date works for services without a calendar entry."""
        assert is_service_running(snapshot, "EXTRA", SATURDAY) is True
        assert is_service_running(snapshot, "EXTRA", WEDNESDAY) is False

    def test_unknown_service(self, snapshot: Snapshot) -> None:
        """No calendar entry means no service."""
        assert is_service_running(snapshot, "NOPE", WEDNESDAY) is False

    def test_short_calendar_outside_range(self, snapshot: Snapshot) -> None:
        """Calendars shorter than 20 days do not run outside their range."""
        assert is_service_running(snapshot, "SHORT", date(2024, 1, 10)) is False

    def test_long_calendar_outside_range_uses_weekly_pattern(self, snapshot: Snapshot) -> None:
        """Expired calendars spanning 20+ days keep their weekly pattern."""
        assert is_service_running(snapshot, "LONG", WEDNESDAY) is True
        assert is_service_running(snapshot, "LONG", SATURDAY) is False

    def test_unparseable_range(self, snapshot: Snapshot) -> None:
        """Invalid dates outside the range mean no service."""
        assert is_service_running(snapshot, "BROKEN", WEDNESDAY) is False

    def test_span_boundary(self) -> None:
        """Exactly 20 days of span qualifies for the fallback, 19 does not."""
        snapshot = Snapshot.build(
            calendar={
                "TWENTY": CalendarEntry(days=WEEKDAYS, start="20231201", end="20231221"),
                "NINETEEN": CalendarEntry(days=WEEKDAYS, start="20231201", end="20231220"),
            }
        )
        assert is_service_running(snapshot, "TWENTY", WEDNESDAY) is True
        assert is_service_running(snapshot, "NINETEEN", WEDNESDAY) is False


class TestActiveServices:
    """Tests for get_active_service_ids and ServiceDayCache."""

    def test_active_service_ids_on_wednesday(self, snapshot: Snapshot) -> None:
        assert get_active_service_ids(snapshot, WEDNESDAY) == {"SHORT", "LONG", "WEEKEND"}

    def test_active_service_ids_on_saturday(self, snapshot: Snapshot) -> None:
        assert get_active_service_ids(snapshot, SATURDAY) == {"WEEKEND", "EXTRA"}

    def test_service_day_cache_matches_resolver(self, snapshot: Snapshot) -> None:
        cache = ServiceDayCache(snapshot, WEDNESDAY)
        for service_id in ("SHORT", "LONG", "WEEKEND", "BROKEN", "NOPE"):
            assert cache.is_running(service_id) == is_service_running(
                snapshot, service_id, WEDNESDAY
            )
            # Cached answer is stable
            assert cache.is_running(service_id) == is_service_running(
                snapshot, service_id, WEDNESDAY
            )

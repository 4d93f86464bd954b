"""Schedule service: decides which services run on a given date."""

import logging
from datetime import date

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.schedule import CalendarEntry
from busmap_mcp.services.gtfs_time import date_to_gtfs_format, parse_gtfs_date

logger = logging.getLogger(__name__)

EXCEPTION_TYPE_ADDED = "1"

# Calendars spanning at least this many days keep using their weekly pattern
# outside their nominal validity window.
STALE_CALENDAR_MIN_SPAN_DAYS = 20


def weekday_flag(entry: CalendarEntry, on_date: date) -> bool:
    """Return the entry's running flag for the weekday of a date.

    GTFS orders flags Monday..Sunday, which matches date.weekday().
    """
    index = on_date.weekday()
    if index >= len(entry.days):
        return False
    return entry.days[index] == "1"


def is_service_running(snapshot: Snapshot, service_id: str, on_date: date) -> bool:
    """Check whether a service runs on a date.

    Implements the service day algorithm:
    1. A calendar exception for (service, date) decides alone:
       type "1" adds service, any other type removes it.
    2. Without a calendar entry the service does not run.
    3. Inside [start, end] the weekday flag decides.
    4. Outside the range, calendars spanning STALE_CALENDAR_MIN_SPAN_DAYS or
       more still use the weekday flag; shorter ones do not run.

    Args:
        snapshot: Schedule snapshot.
        service_id: Service to check.
        on_date: Local service date.

    Returns:
        True if the service runs on the date.
    """
    ymd = date_to_gtfs_format(on_date)

    exception = snapshot.exceptions.get((service_id, ymd))
    if exception is not None:
        return exception.exception_type == EXCEPTION_TYPE_ADDED

    entry = snapshot.calendar.get(service_id)
    if entry is None:
        return False

    if entry.start <= ymd <= entry.end:
        return weekday_flag(entry, on_date)

    try:
        span_days = (parse_gtfs_date(entry.end) - parse_gtfs_date(entry.start)).days
    except ValueError:
        logger.debug(
            f"Unparseable calendar range for service {service_id}: {entry.start}-{entry.end}"
        )
        return False

    if span_days >= STALE_CALENDAR_MIN_SPAN_DAYS:
        return weekday_flag(entry, on_date)

    return False


def get_active_service_ids(snapshot: Snapshot, on_date: date) -> set[str]:
    """Get service IDs running on a given date.

    Considers every service that has a calendar entry or an exception.

    Args:
        snapshot: Schedule snapshot.
        on_date: Date to check for active services.

    Returns:
        Set of active service IDs.
    """
    candidates = set(snapshot.calendar)
    candidates.update(service_id for service_id, _ in snapshot.exceptions)
    return {
        service_id
        for service_id in candidates
        if is_service_running(snapshot, service_id, on_date)
    }


class ServiceDayCache:
    """Memoizes is_service_running for one date."""

    def __init__(self, snapshot: Snapshot, on_date: date):
        self._snapshot = snapshot
        self._date = on_date
        self._answers: dict[str, bool] = {}

    def is_running(self, service_id: str) -> bool:
        answer = self._answers.get(service_id)
        if answer is None:
            answer = is_service_running(self._snapshot, service_id, self._date)
            self._answers[service_id] = answer
        return answer

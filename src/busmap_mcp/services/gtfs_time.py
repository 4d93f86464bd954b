"""GTFS time and date helpers.

Timetable times are "HH:MM:SS" strings counted from the start of the service
day, so hours can exceed 23 for trips running past midnight.
"""

from datetime import date, datetime


def parse_gtfs_time(time_str: str) -> tuple[int, int, int]:
    """Parse a GTFS time string into hours, minutes, seconds.

    GTFS times can exceed 24:00:00 for trips that extend past midnight.
    For example, "25:30:00" means 1:30 AM the next day. The seconds part
    may be omitted ("08:30").

    Args:
        time_str: Time string in HH:MM:SS or HH:MM format (hours can exceed 24).

    Returns:
        Tuple of (hours, minutes, seconds).

    Raises:
        ValueError: If the time string is invalid.
    """
    parts = time_str.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid GTFS time format: {time_str}")

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
    except ValueError as e:
        raise ValueError(f"Invalid GTFS time format: {time_str}") from e

    return hours, minutes, seconds


def gtfs_time_to_seconds(time_str: str) -> int:
    """Convert a GTFS time string to seconds since midnight.

    Args:
        time_str: Time string in HH:MM:SS format.

    Returns:
        Total seconds since midnight (can exceed 86400 for next-day times).
    """
    hours, minutes, seconds = parse_gtfs_time(time_str)
    return hours * 3600 + minutes * 60 + seconds


def format_gtfs_time(time_str: str) -> str:
    """Format a GTFS time string as "HH:MM" for display.

    Times >= 24:00 are shown with "(+1)" suffix to indicate next day.

    Args:
        time_str: Time string in HH:MM:SS format.

    Returns:
        Display time like "08:30" or "01:30 (+1)".
    """
    hours, minutes, _ = parse_gtfs_time(time_str)

    next_day = ""
    if hours >= 24:
        hours -= 24
        next_day = " (+1)"

    return f"{hours:02d}:{minutes:02d}{next_day}"


def seconds_since_midnight(dt: datetime) -> int:
    """Seconds elapsed since local midnight for a datetime."""
    return dt.hour * 3600 + dt.minute * 60 + dt.second


def time_to_gtfs_format(dt: datetime) -> str:
    """Convert a datetime to GTFS time format.

    Args:
        dt: Datetime object.

    Returns:
        Time string in HH:MM:SS format.
    """
    return f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"


def date_to_gtfs_format(d: date) -> str:
    """Convert a date to GTFS date format (YYYYMMDD).

    Args:
        d: Date object.

    Returns:
        Date string in YYYYMMDD format.
    """
    return d.strftime("%Y%m%d")


def parse_gtfs_date(date_str: str) -> date:
    """Parse a GTFS date string (YYYYMMDD).

    Raises:
        ValueError: If the string is not a valid date.
    """
    return datetime.strptime(date_str.strip(), "%Y%m%d").date()

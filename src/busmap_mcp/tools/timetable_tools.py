"""MCP tools for stop timetables and today's arrivals."""

from busmap_mcp.app import mcp
from busmap_mcp.data.config import get_config
from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.responses import GetStopArrivalsResponse, StopTimetableResponse
from busmap_mcp.services.arrivals_service import get_stop_arrivals as _get_stop_arrivals
from busmap_mcp.services.arrivals_service import get_stop_timetable as _get_stop_timetable


@mcp.tool()
async def get_stop_timetable(stop_id: str) -> StopTimetableResponse:
    """Get every trip that calls at a stop, on any day.

    Args:
        stop_id: The stop ID. Use search_stops() to find stop IDs.

    Returns:
        StopTimetableResponse with trips grouped by route ID then trip ID.
    """
    timetable = _get_stop_timetable(Snapshot.get_instance(), stop_id)
    if timetable is None:
        raise ValueError(f"Stop not found: {stop_id}")
    return timetable


@mcp.tool()
async def get_stop_arrivals(stop_id: str, grouped: bool = False) -> GetStopArrivalsResponse:
    """Get today's scheduled buses at a stop, past and upcoming.

    The list only contains trips whose service runs today (weekday, weekend
    and holiday calendars are applied).

    Examples:
        get_stop_arrivals(stop_id="1001_01")  # One platform
        get_stop_arrivals(stop_id="1001_01", grouped=True)  # All platforms of that stop

    Args:
        stop_id: The stop ID. Use search_stops() to find stop IDs.
        grouped: Merge all stops sharing this stop's name (every platform).

    Returns:
        GetStopArrivalsResponse containing:
        - arrivals: time-ordered calls with route, headsign, via, platform and is_past
        - next_index: position of the next bus in arrivals (null if none left)
        - service_date / query_time: the moment the list was computed for
    """
    arrivals = _get_stop_arrivals(
        Snapshot.get_instance(),
        stop_id=stop_id,
        now=get_config().now(),
        grouped=grouped,
    )
    if arrivals is None:
        raise ValueError(f"Stop not found: {stop_id}")
    return arrivals

"""Arrivals service: today's scheduled calls at a stop or group of stops.

A stop group is every stop sharing one display name (the poles of a
station-like stop spread over several platforms). Grouped listings merge the
calls of all poles into one time-ordered list.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.responses import (
    Arrival,
    GetStopArrivalsResponse,
    StopResult,
    StopTimetableResponse,
)
from busmap_mcp.models.schedule import Trip
from busmap_mcp.services.gtfs_time import (
    format_gtfs_time,
    seconds_since_midnight,
    time_to_gtfs_format,
)
from busmap_mcp.services.schedule_service import ServiceDayCache

logger = logging.getLogger(__name__)


def get_co_named_stop_ids(snapshot: Snapshot, stop_id: str) -> set[str]:
    """Get all stop ids sharing the display name of a stop.

    Returns:
        The set of co-named stop ids (including stop_id itself), or an
        empty set if the stop is unknown.
    """
    stop = snapshot.stops.get(stop_id)
    if stop is None:
        return set()
    return set(snapshot.stop_ids_by_name.get(stop.name, (stop_id,)))


def get_arrivals_for_stops(
    snapshot: Snapshot,
    stop_ids: Iterable[str],
    now: datetime,
) -> list[Arrival]:
    """Get today's arrivals at any of a set of stops.

    For each trip whose service runs on now's date, one Arrival is emitted
    for the first of its calls that hits the target set. A trip serving two
    poles of a grouped stop is therefore listed once, at the pole it
    reaches first.

    Args:
        snapshot: Schedule snapshot.
        stop_ids: Target stop ids.
        now: Local query time; decides the service date and is_past.

    Returns:
        Arrivals sorted by scheduled time (then route and trip id).
    """
    targets = set(stop_ids)
    if not targets:
        return []

    now_seconds = seconds_since_midnight(now)
    services = ServiceDayCache(snapshot, now.date())

    keyed: list[tuple[int, Arrival]] = []
    for route_id, trip_id, trip in snapshot.iter_trips():
        trip_stop = next((ts for ts in trip.stops if ts.stop_id in targets), None)
        if trip_stop is None or not services.is_running(trip.service_id):
            continue

        stop = snapshot.stops.get(trip_stop.stop_id)
        route = snapshot.routes.get(route_id)
        arrival = Arrival(
            time=trip_stop.time,
            time_formatted=format_gtfs_time(trip_stop.time),
            route_id=route_id,
            route_name=route.short_name if route else "",
            trip_id=trip_id,
            headsign=trip.headsign,
            via=trip.via,
            platform=stop.platform if stop else "",
            actual_stop_id=trip_stop.stop_id,
            is_past=trip_stop.seconds < now_seconds,
        )
        keyed.append((trip_stop.seconds, arrival))

    keyed.sort(key=lambda item: (item[0], item[1].route_id, item[1].trip_id))
    return [arrival for _, arrival in keyed]


def get_trips_for_stops(
    snapshot: Snapshot,
    stop_ids: Iterable[str],
) -> dict[str, dict[str, Trip]]:
    """Get every trip calling at any of a set of stops, regardless of calendar.

    Returns:
        Nested mapping route_id -> trip_id -> trip.
    """
    targets = set(stop_ids)
    timetables: dict[str, dict[str, Trip]] = {}
    for route_id, trip_id, trip in snapshot.iter_trips():
        if any(trip_stop.stop_id in targets for trip_stop in trip.stops):
            timetables.setdefault(route_id, {})[trip_id] = trip
    return timetables


def get_stop_timetable(snapshot: Snapshot, stop_id: str) -> StopTimetableResponse | None:
    """Get the full timetable of a stop.

    Returns:
        StopTimetableResponse, or None if the stop is unknown.
    """
    stop = snapshot.stops.get(stop_id)
    if stop is None:
        return None

    return StopTimetableResponse(
        stop_id=stop_id,
        stop_name=stop.name,
        timetables=get_trips_for_stops(snapshot, {stop_id}),
    )


def get_stop_arrivals(
    snapshot: Snapshot,
    stop_id: str,
    now: datetime,
    grouped: bool = False,
) -> GetStopArrivalsResponse | None:
    """Get today's arrivals at a stop, optionally merged with co-named stops.

    Args:
        snapshot: Schedule snapshot.
        stop_id: The stop to list.
        now: Local query time.
        grouped: Include every stop sharing the stop's display name.

    Returns:
        GetStopArrivalsResponse, or None if the stop is unknown.
    """
    stop = snapshot.stops.get(stop_id)
    if stop is None:
        return None

    stop_ids = get_co_named_stop_ids(snapshot, stop_id) if grouped else {stop_id}
    arrivals = get_arrivals_for_stops(snapshot, stop_ids, now)

    next_index = next((i for i, arrival in enumerate(arrivals) if not arrival.is_past), None)

    if not arrivals:
        logger.debug(f"No service today at stops {sorted(stop_ids)}")

    return GetStopArrivalsResponse(
        stop=StopResult.from_stop(stop_id, stop),
        stop_ids=sorted(stop_ids),
        arrivals=arrivals,
        next_index=next_index,
        service_date=now.date().isoformat(),
        query_time=time_to_gtfs_format(now),
        count=len(arrivals),
    )

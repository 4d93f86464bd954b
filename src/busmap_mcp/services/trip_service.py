"""Trip detail service."""

from datetime import datetime

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.responses import TripDetailResponse
from busmap_mcp.models.schedule import Stop, Trip
from busmap_mcp.services.geometry_service import lookup_shape, pattern_key
from busmap_mcp.services.gtfs_time import seconds_since_midnight


def find_next_stop_id(trip: Trip, now_seconds: int) -> str | None:
    """Get the first stop the trip has not yet reached at a time of day."""
    for trip_stop in trip.stops:
        if trip_stop.seconds > now_seconds:
            return trip_stop.stop_id
    return None


def get_trip_detail(
    snapshot: Snapshot,
    route_id: str,
    trip_id: str,
    now: datetime | None = None,
) -> TripDetailResponse | None:
    """Get a trip with its stops, path geometry and operating office.

    Args:
        snapshot: Schedule snapshot.
        route_id: Route owning the trip.
        trip_id: Trip to describe.
        now: Optional local time used to mark the next stop.

    Returns:
        TripDetailResponse, or None if the route or the trip is unknown.
        The shape is None when no geometry exists for the trip's pattern.
    """
    route_trips = snapshot.timetables.get(route_id)
    if route_trips is None:
        return None

    trip = route_trips.get(trip_id)
    if trip is None:
        return None

    trip_stops: dict[str, Stop] = {}
    for trip_stop in trip.stops:
        stop = snapshot.stops.get(trip_stop.stop_id)
        if stop is not None:
            trip_stops[trip_stop.stop_id] = stop

    route = snapshot.routes.get(route_id)
    next_stop_id = find_next_stop_id(trip, seconds_since_midnight(now)) if now else None

    return TripDetailResponse(
        trip_id=trip_id,
        route_id=route_id,
        route_name=route.short_name if route else "",
        route_color=route.color if route else "",
        trip=trip,
        stops=trip_stops,
        shape=lookup_shape(snapshot, pattern_key(trip)),
        office_name=snapshot.extra.offices.get(trip.office_id, ""),
        next_stop_id=next_stop_id,
    )

"""Vehicle locator: simulated positions of every trip currently in service."""

import logging
from datetime import datetime

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.geo import Bounds
from busmap_mcp.models.responses import GetActiveVehiclesResponse, VehiclePosition
from busmap_mcp.models.schedule import Route
from busmap_mcp.services.geometry_service import (
    interpolate_position,
    lookup_shape,
    pattern_key,
)
from busmap_mcp.services.gtfs_time import seconds_since_midnight
from busmap_mcp.services.schedule_service import ServiceDayCache

logger = logging.getLogger(__name__)

_UNKNOWN_ROUTE = Route(short_name="", color="")


def get_active_positions(
    snapshot: Snapshot,
    now: datetime,
    bounds: Bounds | None = None,
) -> list[VehiclePosition]:
    """Compute positions of all vehicles operating at a moment.

    A trip is located when its service runs on now's date, it has at least
    two stops, now lies within [first stop time, last stop time], and its
    pattern has a shape. Output order is unspecified.

    Args:
        snapshot: Schedule snapshot.
        now: Local time to locate vehicles at.
        bounds: Optional box; only vehicles inside it are returned.

    Returns:
        One VehiclePosition per located trip.
    """
    now_seconds = seconds_since_midnight(now)
    services = ServiceDayCache(snapshot, now.date())

    positions: list[VehiclePosition] = []
    for route_id, trip_id, trip in snapshot.iter_trips():
        if not services.is_running(trip.service_id):
            continue

        stops = trip.stops
        if len(stops) < 2:
            continue

        if not stops[0].seconds <= now_seconds <= stops[-1].seconds:
            continue

        shape = lookup_shape(snapshot, pattern_key(trip))
        position = interpolate_position(trip, now_seconds, shape)
        if position is None:
            continue

        lng, lat = position
        if bounds is not None and not bounds.contains(lat, lng):
            continue

        route = snapshot.routes.get(route_id, _UNKNOWN_ROUTE)
        positions.append(
            VehiclePosition(
                trip_id=trip_id,
                route_id=route_id,
                route_name=route.short_name,
                headsign=trip.headsign,
                position=position,
                color=route.color,
            )
        )

    return positions


def get_active_vehicles(
    snapshot: Snapshot,
    now: datetime,
    bounds: Bounds | None = None,
) -> GetActiveVehiclesResponse:
    """Get the active vehicle listing for a map view.

    Args:
        snapshot: Schedule snapshot.
        now: Local time to locate vehicles at.
        bounds: Optional viewport box.

    Returns:
        GetActiveVehiclesResponse with positions, count and timestamp.
    """
    buses = get_active_positions(snapshot, now, bounds)

    if bounds is not None:
        logger.debug(
            f"Vehicles in bounds lat={bounds.min_lat}..{bounds.max_lat} "
            f"lng={bounds.min_lng}..{bounds.max_lng}: {len(buses)}"
        )
    else:
        logger.debug(f"Vehicles in service: {len(buses)}")

    return GetActiveVehiclesResponse(
        buses=buses,
        count=len(buses),
        timestamp=int(now.timestamp()),
    )

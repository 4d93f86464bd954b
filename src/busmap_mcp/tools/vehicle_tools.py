from busmap_mcp.app import mcp
from busmap_mcp.data.config import get_config
from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.geo import bounds_from_optional
from busmap_mcp.models.responses import GetActiveVehiclesResponse
from busmap_mcp.services.vehicle_service import get_active_vehicles as _get_active_vehicles


@mcp.tool()
async def get_active_vehicles(
    min_lat: float | None = None,
    max_lat: float | None = None,
    min_lng: float | None = None,
    max_lng: float | None = None,
) -> GetActiveVehiclesResponse:
    """Get simulated positions of all buses currently in service.

    Positions are computed from the timetable: each bus is placed along its
    route path in proportion to the time elapsed between its last and next
    stop. Only trips whose service runs today are included. Call again every
    few seconds to animate the map.

    Bounds are optional; give all four edges or none.

    Examples:
        get_active_vehicles()  # Every bus in service
        get_active_vehicles(min_lat=38.25, max_lat=38.27, min_lng=140.87, max_lng=140.89)

    Args:
        min_lat: Southern edge latitude.
        max_lat: Northern edge latitude.
        min_lng: Western edge longitude.
        max_lng: Eastern edge longitude.

    Returns:
        GetActiveVehiclesResponse containing:
        - buses: trip, route, headsign, [lng, lat] position and route color
        - count: Number of buses returned
        - timestamp: Unix time the positions were computed for
    """
    bounds = bounds_from_optional(min_lat, max_lat, min_lng, max_lng)
    return _get_active_vehicles(Snapshot.get_instance(), get_config().now(), bounds)

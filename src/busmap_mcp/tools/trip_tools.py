from busmap_mcp.app import mcp
from busmap_mcp.data.config import get_config
from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.responses import TripDetailResponse
from busmap_mcp.services.trip_service import get_trip_detail as _get_trip_detail


@mcp.tool()
async def get_trip_detail(route_id: str, trip_id: str) -> TripDetailResponse:
    """Get the full details of one bus trip.

    Args:
        route_id: Route owning the trip (from get_active_vehicles or get_stop_arrivals).
        trip_id: The trip ID.

    Returns:
        TripDetailResponse with the trip's stop times, every stop it calls at,
        its path geometry (null if unknown), the operating office and the
        next stop the bus has not yet reached.
    """
    detail = _get_trip_detail(
        Snapshot.get_instance(),
        route_id=route_id,
        trip_id=trip_id,
        now=get_config().now(),
    )
    if detail is None:
        raise ValueError(f"Trip not found: {route_id}/{trip_id}")
    return detail

"""MCP tools for looking up and searching stops."""

from busmap_mcp.app import mcp
from busmap_mcp.data.config import get_config
from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.geo import Bounds
from busmap_mcp.models.responses import (
    SearchStopsInBoundsResponse,
    SearchStopsResponse,
    StopResult,
)
from busmap_mcp.services.stop_service import get_stop as _get_stop
from busmap_mcp.services.stop_service import search_stops_by_name as _search_stops_by_name
from busmap_mcp.services.stop_service import search_stops_in_bounds as _search_stops_in_bounds


@mcp.tool()
async def get_stop(stop_id: str) -> StopResult:
    """Get a bus stop by its stop ID.

    Args:
        stop_id: The stop ID. Use search_stops() to find stop IDs.

    Returns:
        StopResult with name, reading, coordinates and platform label.
    """
    stop = _get_stop(Snapshot.get_instance(), stop_id)
    if stop is None:
        raise ValueError(f"Stop not found: {stop_id}")
    return stop


@mcp.tool()
async def search_stops_in_bounds(
    min_lat: float,
    max_lat: float,
    min_lng: float,
    max_lng: float,
) -> SearchStopsInBoundsResponse:
    """Find all bus stops inside a map viewport.

    Examples:
        search_stops_in_bounds(min_lat=38.25, max_lat=38.27, min_lng=140.87, max_lng=140.89)

    Args:
        min_lat: Southern edge latitude.
        max_lat: Northern edge latitude (must be >= min_lat).
        min_lng: Western edge longitude.
        max_lng: Eastern edge longitude (must be >= min_lng).

    Returns:
        SearchStopsInBoundsResponse with stops keyed by stop ID and count.
    """
    bounds = Bounds(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)
    return _search_stops_in_bounds(Snapshot.get_instance(), bounds)


@mcp.tool()
async def search_stops(query: str, limit: int = 5) -> SearchStopsResponse:
    """Search bus stops by name or reading.

    Stops sharing a name (several platforms) are returned once. Kanji in the
    query are matched against the name, kana against the reading, so mixed
    queries work too.

    Examples:
        search_stops(query="仙台駅")  # By name
        search_stops(query="せんだい")  # By reading
        search_stops(query="仙台えき")  # Mixed

    Args:
        query: Text to search for.
        limit: Maximum number of results to return (default 5).

    Returns:
        SearchStopsResponse with matched stop name groups, best first.
    """
    limit_max = get_config().search_limit_max
    if limit < 1:
        limit = 1
    elif limit > limit_max:
        limit = limit_max

    return _search_stops_by_name(Snapshot.get_instance(), query=query, limit=limit)

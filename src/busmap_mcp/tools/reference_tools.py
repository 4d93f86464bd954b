"""MCP tools serving bulk reference tables verbatim."""

from busmap_mcp.app import mcp
from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.schedule import CalendarEntry, ExtraData, Route


@mcp.tool()
async def get_calendar() -> dict[str, CalendarEntry]:
    """Get the service calendar: service ID -> weekday flags (Mon..Sun) and date range."""
    return Snapshot.get_instance().calendar


@mcp.tool()
async def get_routes() -> dict[str, Route]:
    """Get all routes: route ID -> short name and color."""
    return Snapshot.get_instance().routes


@mcp.tool()
async def get_extra() -> ExtraData:
    """Get office names and calendar exceptions (holiday additions/removals)."""
    return Snapshot.get_instance().extra

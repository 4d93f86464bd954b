"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

from mcp.server.fastmcp import FastMCP

# Initialize the MCP server
mcp = FastMCP(
    "Bus Map",
    instructions=(
        "Live bus map - stop search, stop timetables, today's arrivals and "
        "simulated positions of buses currently in service"
    ),
)

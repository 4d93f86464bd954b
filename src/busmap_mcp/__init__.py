"""Bus map MCP server: simulated vehicle positions and stop timetables."""

__version__ = "0.1.0"

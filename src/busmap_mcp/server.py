import argparse
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from busmap_mcp.app import mcp
from busmap_mcp.data.snapshot import Snapshot, SnapshotLoadError, load_snapshot

# Register tools
from busmap_mcp.tools import (  # noqa: F401
    reference_tools,
    stop_tools,
    timetable_tools,
    trip_tools,
    vehicle_tools,
)

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the bus map server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from busmap_mcp import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def run_ingest(
    gtfs_path: Path,
    out_dir: Path,
    shapes_path: Path | None,
    manual_shapes_path: Path | None = None,
) -> None:
    """Run snapshot build from a GTFS feed."""
    from busmap_mcp.data.snapshot_builder import SnapshotBuilder

    builder = SnapshotBuilder(out_dir)
    counts = builder.build(
        gtfs_path, shapes_path=shapes_path, manual_shapes_path=manual_shapes_path
    )

    print("\nSnapshot build complete. Counts:")
    for name, count in counts.items():
        print(f"  {name}: {count:,}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="busmap-mcp",
        description="Bus Map MCP Server",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Build the JSON schedule snapshot from a GTFS feed",
    )
    ingest_parser.add_argument(
        "gtfs_path",
        type=Path,
        help="Path to GTFS directory or ZIP file",
    )
    ingest_parser.add_argument(
        "--out",
        type=Path,
        default=Path(os.environ.get("BUSMAP_DATA_DIR", "data")),
        help="Snapshot directory (default: data or BUSMAP_DATA_DIR env var)",
    )
    ingest_parser.add_argument(
        "--shapes",
        type=Path,
        default=None,
        help="Existing shapes.json to reuse route geometry from",
    )
    ingest_parser.add_argument(
        "--manual-shapes",
        type=Path,
        default=None,
        help="Hand-drawn shapes that replace reused geometry for the same pattern",
    )
    # SUPPRESS keeps a top-level -v when the subcommand omits it
    ingest_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "ingest":
        run_ingest(args.gtfs_path, args.out, args.shapes, args.manual_shapes)
        return

    # Default: load the snapshot, then run MCP server
    try:
        Snapshot.install(load_snapshot())
    except SnapshotLoadError as e:
        logger.error(f"Cannot start: {e}")
        sys.exit(1)

    mcp.run()


if __name__ == "__main__":
    main()

"""Read-only in-memory schedule snapshot loaded from JSON files."""

import json
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from pydantic import TypeAdapter, ValidationError

from busmap_mcp.data.config import get_config
from busmap_mcp.models.schedule import (
    CalendarEntry,
    CalendarException,
    ExtraData,
    PatternKey,
    Route,
    Shape,
    Stop,
    Trip,
    pattern_key_from_string,
)

logger = logging.getLogger(__name__)

# Snapshot files: attribute -> (filename, adapter)
SNAPSHOT_FILES: dict[str, tuple[str, TypeAdapter[Any]]] = {
    "stops": ("stops.json", TypeAdapter(dict[str, Stop])),
    "routes": ("routes.json", TypeAdapter(dict[str, Route])),
    "timetables": ("timetables.json", TypeAdapter(dict[str, dict[str, Trip]])),
    "shapes": ("shapes.json", TypeAdapter(dict[str, Shape])),
    "calendar": ("calendar.json", TypeAdapter(dict[str, CalendarEntry])),
    "extra": ("extra.json", TypeAdapter(ExtraData)),
}


class SnapshotLoadError(RuntimeError):
    """Snapshot files are missing or corrupt."""


@dataclass(frozen=True)
class Snapshot:
    """Immutable schedule snapshot shared by every query.

    Built once at start-up; services only read from it, so concurrent
    requests need no locking.

    Usage:
        snapshot = Snapshot.get_instance()
        # Use snapshot.stops, snapshot.timetables, ...

    Tests inject synthetic data with Snapshot.build(...) and install().
    """

    stops: dict[str, Stop]
    routes: dict[str, Route]
    timetables: dict[str, dict[str, Trip]]  # route_id -> trip_id -> trip
    shapes: dict[PatternKey, Shape]
    calendar: dict[str, CalendarEntry]
    extra: ExtraData

    # Derived indexes
    exceptions: dict[tuple[str, str], CalendarException] = field(default_factory=dict)
    stop_ids_by_name: dict[str, tuple[str, ...]] = field(default_factory=dict)

    _instance: ClassVar["Snapshot | None"] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def build(
        cls,
        stops: dict[str, Stop] | None = None,
        routes: dict[str, Route] | None = None,
        timetables: dict[str, dict[str, Trip]] | None = None,
        shapes: dict[PatternKey, Shape] | None = None,
        calendar: dict[str, CalendarEntry] | None = None,
        extra: ExtraData | None = None,
    ) -> "Snapshot":
        """Create a snapshot and its derived indexes."""
        stops = stops or {}
        extra = extra or ExtraData()

        # First exception listed for a (service, date) wins
        exceptions: dict[tuple[str, str], CalendarException] = {}
        for exception in extra.calendar_dates:
            exceptions.setdefault((exception.service_id, exception.date), exception)

        by_name: dict[str, list[str]] = {}
        for stop_id, stop in stops.items():
            by_name.setdefault(stop.name, []).append(stop_id)

        return cls(
            stops=stops,
            routes=routes or {},
            timetables=timetables or {},
            shapes=shapes or {},
            calendar=calendar or {},
            extra=extra,
            exceptions=exceptions,
            stop_ids_by_name={name: tuple(ids) for name, ids in by_name.items()},
        )

    def iter_trips(self) -> Iterator[tuple[str, str, Trip]]:
        """Yield (route_id, trip_id, trip) for every trip."""
        for route_id, trips in self.timetables.items():
            for trip_id, trip in trips.items():
                yield route_id, trip_id, trip

    @property
    def trip_count(self) -> int:
        return sum(len(trips) for trips in self.timetables.values())

    @classmethod
    def get_instance(cls, data_dir: Path | None = None) -> "Snapshot":
        """Get or load the process-wide snapshot.

        Args:
            data_dir: Optional snapshot directory. Uses BUSMAP_DATA_DIR if not provided.

        Raises:
            SnapshotLoadError: If the snapshot cannot be loaded.
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = load_snapshot(data_dir)
            return cls._instance

    @classmethod
    def install(cls, snapshot: "Snapshot") -> None:
        """Replace the process-wide snapshot."""
        with cls._lock:
            cls._instance = snapshot

    @classmethod
    def invalidate(cls) -> None:
        """Drop the cached snapshot so the next access reloads it."""
        with cls._lock:
            cls._instance = None
            logger.info("Snapshot invalidated")


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise SnapshotLoadError(
            f"Snapshot file not found: {path}. Run 'busmap-mcp ingest <gtfs_path>' to create it."
        )
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotLoadError(f"Cannot read snapshot file {path}: {e}") from e


def load_snapshot(data_dir: Path | None = None) -> Snapshot:
    """Load all snapshot files from a directory.

    There is no partial mode: any missing or invalid file fails the load.

    Args:
        data_dir: Directory holding the snapshot JSON files.

    Returns:
        The loaded Snapshot.

    Raises:
        SnapshotLoadError: If a file is missing, not JSON, or fails validation.
    """
    if data_dir is None:
        data_dir = get_config().data_dir
    data_dir = Path(data_dir)

    logger.info(f"Loading snapshot from {data_dir}...")

    tables: dict[str, Any] = {}
    for name, (filename, adapter) in SNAPSHOT_FILES.items():
        path = data_dir / filename
        raw = _read_json(path)
        try:
            tables[name] = adapter.validate_python(raw)
        except ValidationError as e:
            raise SnapshotLoadError(f"Invalid snapshot file {path}: {e}") from e

    shapes = {pattern_key_from_string(key): shape for key, shape in tables["shapes"].items()}

    snapshot = Snapshot.build(
        stops=tables["stops"],
        routes=tables["routes"],
        timetables=tables["timetables"],
        shapes=shapes,
        calendar=tables["calendar"],
        extra=tables["extra"],
    )

    short_trips = sum(1 for _, _, trip in snapshot.iter_trips() if len(trip.stops) < 2)
    if short_trips:
        logger.warning(f"{short_trips:,} trips have fewer than 2 stops and will never be located")

    logger.info(
        f"Snapshot loaded: {len(snapshot.stops):,} stops, {len(snapshot.routes):,} routes, "
        f"{snapshot.trip_count:,} trips, {len(snapshot.shapes):,} shapes, "
        f"{len(snapshot.calendar):,} services"
    )
    return snapshot

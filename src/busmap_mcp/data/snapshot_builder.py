"""Builds the JSON schedule snapshot from a GTFS (GTFS-JP) feed."""

import csv
import io
import json
import logging
import shutil
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from busmap_mcp.data.snapshot import SNAPSHOT_FILES
from busmap_mcp.models.schedule import pattern_key_to_string

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_COLOR = "00703c"

# Reading of stop names in translations.txt
YOMI_LANGUAGE = "ja-Hrkt"

# File definitions: key -> (csv_filename, required columns, optional columns)
FILE_DEFINITIONS: dict[str, tuple[str, list[str], list[str]]] = {
    "stops": (
        "stops.txt",
        ["stop_id", "stop_name", "stop_lat", "stop_lon"],
        ["platform_code"],
    ),
    "routes": (
        "routes.txt",
        ["route_id"],
        ["route_short_name", "route_color"],
    ),
    "trips": (
        "trips.txt",
        ["trip_id", "route_id", "service_id"],
        ["trip_headsign", "jp_office_id", "jp_pattern_id"],
    ),
    "stop_times": (
        "stop_times.txt",
        ["trip_id", "stop_id", "stop_sequence"],
        ["arrival_time", "departure_time"],
    ),
    "calendar": (
        "calendar.txt",
        [
            "service_id",
            "monday",
            "tuesday",
            "wednesday",
            "thursday",
            "friday",
            "saturday",
            "sunday",
            "start_date",
            "end_date",
        ],
        [],
    ),
    "calendar_dates": (
        "calendar_dates.txt",
        ["service_id", "date", "exception_type"],
        [],
    ),
    "offices": ("office_jp.txt", ["office_id", "office_name"], []),
    "patterns": ("pattern_jp.txt", ["jp_pattern_id"], ["via_stop"]),
    "translations": (
        "translations.txt",
        ["table_name", "field_name", "language", "translation"],
        ["field_value"],
    ),
}

REQUIRED_FILES = frozenset({"stops", "routes", "trips", "stop_times"})

WEEKDAY_COLUMNS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class GTFSSource:
    """Reads GTFS CSV files from a directory or ZIP archive."""

    def __init__(self, gtfs_path: Path):
        self.gtfs_path = Path(gtfs_path)
        self._zip: zipfile.ZipFile | None = None

    def __enter__(self) -> "GTFSSource":
        if self.gtfs_path.is_file() and self.gtfs_path.suffix == ".zip":
            self._zip = zipfile.ZipFile(self.gtfs_path, "r")
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def has_file(self, filename: str) -> bool:
        if self._zip is not None:
            return filename in self._zip.namelist()
        return (self.gtfs_path / filename).exists()

    def read_rows(
        self, filename: str, required: list[str], optional: list[str]
    ) -> Iterator[dict[str, str]]:
        """Yield rows as dicts with every required and optional column."""
        if self._zip is not None:
            with self._zip.open(filename) as f:
                text_file = io.TextIOWrapper(f, encoding="utf-8-sig")
                yield from _iter_rows(csv.reader(text_file), filename, required, optional)
        else:
            with open(self.gtfs_path / filename, encoding="utf-8-sig", newline="") as f:
                yield from _iter_rows(csv.reader(f), filename, required, optional)


def _build_header_index(
    reader: Iterator[list[str]], required: list[str], optional: list[str], filename: str
) -> dict[str, int]:
    """Build header index mapping for a CSV reader."""
    header = next(reader, None)
    if header is None:
        raise ValueError(f"{filename} is empty")
    wanted = set(required) | set(optional)
    header_index: dict[str, int] = {}
    for idx, name in enumerate(header):
        cleaned = name.strip()
        if cleaned in wanted and cleaned not in header_index:
            header_index[cleaned] = idx
    missing = [col for col in required if col not in header_index]
    if missing:
        raise ValueError(f"{filename} missing columns: {', '.join(missing)}")
    return header_index


def _iter_rows(
    reader: Iterator[list[str]], filename: str, required: list[str], optional: list[str]
) -> Iterator[dict[str, str]]:
    header_index = _build_header_index(reader, required, optional, filename)
    skipped = 0
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        row_dict = {col: "" for col in optional}
        for col, idx in header_index.items():
            row_dict[col] = row[idx].strip() if idx < len(row) else ""
        if any(not row_dict[col] for col in required):
            skipped += 1
            continue
        yield row_dict
    if skipped:
        logger.info(f"  Skipped {skipped:,} invalid rows in {filename}")


class SnapshotBuilder:
    """Converts a GTFS feed into the snapshot JSON files."""

    def __init__(self, out_dir: Path):
        """Initialize the builder.

        Args:
            out_dir: Directory the snapshot files will be written to.
        """
        self.out_dir = Path(out_dir)

    def build(
        self,
        gtfs_path: Path,
        shapes_path: Path | None = None,
        manual_shapes_path: Path | None = None,
    ) -> dict[str, int]:
        """Build the snapshot from a GTFS directory or ZIP file.

        Uses atomic swap: writes into a temp directory, then replaces the target.

        Args:
            gtfs_path: Path to GTFS directory or ZIP file.
            shapes_path: Optional existing shapes file to carry geometry over from.
            manual_shapes_path: Optional hand-drawn shapes overriding reused ones.

        Returns:
            Dictionary with entry counts per snapshot file.

        Raises:
            FileNotFoundError: If GTFS path doesn't exist.
            ValueError: If required GTFS files or columns are missing.
        """
        gtfs_path = Path(gtfs_path)
        if not gtfs_path.exists():
            raise FileNotFoundError(f"GTFS path not found: {gtfs_path}")

        with GTFSSource(gtfs_path) as source:
            tables = self._read_all(source)

        snapshot = self._convert(tables)
        snapshot["shapes"] = self._collect_shapes(
            shapes_path, manual_shapes_path, snapshot["timetables"]
        )

        self.out_dir.parent.mkdir(parents=True, exist_ok=True)
        temp_dir = self.out_dir.with_name(self.out_dir.name + ".tmp")

        try:
            shutil.rmtree(temp_dir, ignore_errors=True)
            temp_dir.mkdir()
            for name, (filename, _) in SNAPSHOT_FILES.items():
                with open(temp_dir / filename, "w", encoding="utf-8") as f:
                    json.dump(snapshot[name], f, ensure_ascii=False)

            # atomic swap
            if self.out_dir.exists():
                shutil.rmtree(self.out_dir)
            temp_dir.rename(self.out_dir)
        except Exception:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise

        counts = {
            "stops": len(snapshot["stops"]),
            "routes": len(snapshot["routes"]),
            "trips": sum(len(trips) for trips in snapshot["timetables"].values()),
            "shapes": len(snapshot["shapes"]),
            "calendar": len(snapshot["calendar"]),
            "calendar_dates": len(snapshot["extra"]["calendar_dates"]),
            "offices": len(snapshot["extra"]["offices"]),
        }
        logger.info(f"Snapshot build complete: {self.out_dir}")
        return counts

    def _read_all(self, source: GTFSSource) -> dict[str, list[dict[str, str]]]:
        """Read every known GTFS file; optional files may be absent."""
        tables: dict[str, list[dict[str, str]]] = {}
        for key, (filename, required, optional) in FILE_DEFINITIONS.items():
            if not source.has_file(filename):
                if key in REQUIRED_FILES:
                    raise ValueError(f"Required GTFS file {filename} not found")
                logger.warning(f"Optional file {filename} not found")
                tables[key] = []
                continue
            logger.info(f"Reading {filename}...")
            tables[key] = list(source.read_rows(filename, required, optional))
            logger.info(f"  Read {len(tables[key]):,} rows from {filename}")
        return tables

    def _convert(self, tables: dict[str, list[dict[str, str]]]) -> dict[str, Any]:
        """Convert GTFS rows into snapshot tables."""
        yomi_by_name: dict[str, str] = {}
        for row in tables["translations"]:
            if (
                row["table_name"] == "stops"
                and row["field_name"] == "stop_name"
                and row["language"] == YOMI_LANGUAGE
                and row["field_value"]
            ):
                yomi_by_name[row["field_value"]] = row["translation"]

        stops: dict[str, dict[str, Any]] = {}
        for row in tables["stops"]:
            try:
                lat = float(row["stop_lat"])
                lng = float(row["stop_lon"])
            except ValueError:
                logger.warning(f"Skipping stop {row['stop_id']} with invalid coordinates")
                continue
            stops[row["stop_id"]] = {
                "name": row["stop_name"],
                "yomi": yomi_by_name.get(row["stop_name"], ""),
                "lat": lat,
                "lng": lng,
                "platform": row["platform_code"],
            }

        routes = {
            row["route_id"]: {
                "short_name": row["route_short_name"],
                "color": row["route_color"] or DEFAULT_ROUTE_COLOR,
            }
            for row in tables["routes"]
        }

        offices = {row["office_id"]: row["office_name"] for row in tables["offices"]}
        via_by_pattern = {row["jp_pattern_id"]: row["via_stop"] for row in tables["patterns"]}

        calendar = {
            row["service_id"]: {
                "days": [row[col] for col in WEEKDAY_COLUMNS],
                "start": row["start_date"],
                "end": row["end_date"],
            }
            for row in tables["calendar"]
        }

        calendar_dates = [
            {
                "service_id": row["service_id"],
                "date": row["date"],
                "exception_type": row["exception_type"],
            }
            for row in tables["calendar_dates"]
        ]

        stop_times_by_trip: dict[str, list[tuple[int, dict[str, str]]]] = {}
        bad_sequences = 0
        for row in tables["stop_times"]:
            if not (row["departure_time"] or row["arrival_time"]):
                continue
            try:
                sequence = int(row["stop_sequence"])
            except ValueError:
                bad_sequences += 1
                continue
            stop_times_by_trip.setdefault(row["trip_id"], []).append((sequence, row))
        if bad_sequences:
            logger.warning(f"  Skipped {bad_sequences:,} stop times with invalid stop_sequence")

        timetables: dict[str, dict[str, Any]] = {}
        short_trips = 0
        for row in tables["trips"]:
            stop_times = [
                st
                for _, st in sorted(
                    stop_times_by_trip.get(row["trip_id"], []), key=lambda item: item[0]
                )
            ]
            if len(stop_times) < 2:
                short_trips += 1
                continue
            timetables.setdefault(row["route_id"], {})[row["trip_id"]] = {
                "headsign": row["trip_headsign"],
                "service_id": row["service_id"],
                "office_id": row["jp_office_id"],
                "via": via_by_pattern.get(row["jp_pattern_id"], ""),
                "stops": [
                    {
                        "time": st["departure_time"] or st["arrival_time"],
                        "stop_id": st["stop_id"],
                    }
                    for st in stop_times
                ],
            }
        if short_trips:
            logger.info(f"  Skipped {short_trips:,} trips with fewer than 2 stop times")

        return {
            "stops": stops,
            "routes": routes,
            "timetables": timetables,
            "calendar": calendar,
            "extra": {"offices": offices, "calendar_dates": calendar_dates},
        }

    def _collect_shapes(
        self,
        shapes_path: Path | None,
        manual_shapes_path: Path | None,
        timetables: dict[str, dict[str, Any]],
    ) -> dict[str, Any]:
        """Select shapes for the built trip patterns.

        Route geometry is prepared offline; this only reuses it. Existing
        shapes are carried over first, then hand-drawn shapes replace them
        for the same pattern key. Keys of built patterns only are kept.
        """
        if shapes_path is None and manual_shapes_path is None:
            logger.warning("No shapes file given; vehicles will not be located")
            return {}

        patterns = {
            pattern_key_to_string(tuple(st["stop_id"] for st in trip["stops"]))
            for trips in timetables.values()
            for trip in trips.values()
        }

        shapes: dict[str, Any] = {}
        if shapes_path is not None:
            existing = _read_shapes_file(shapes_path)
            shapes = {key: shape for key, shape in existing.items() if key in patterns}
            logger.info(f"  Reused {len(shapes):,} of {len(patterns):,} pattern shapes")

        if manual_shapes_path is not None:
            manual = _read_shapes_file(manual_shapes_path)
            overrides = {key: shape for key, shape in manual.items() if key in patterns}
            shapes.update(overrides)
            logger.info(f"  Applied {len(overrides):,} manual shapes")

        return shapes


def _read_shapes_file(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)

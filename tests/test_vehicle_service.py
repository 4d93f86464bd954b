"""Tests for the vehicle locator."""

from datetime import datetime

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.geo import Bounds
from busmap_mcp.models.schedule import CalendarEntry, Shape, Trip, TripStop
from busmap_mcp.services.vehicle_service import get_active_positions, get_active_vehicles

# 2024-01-03 is a Wednesday; 2024-01-02 is a weekday run as a holiday
WEDNESDAY_0805 = datetime(2024, 1, 3, 8, 5, 0)
HOLIDAY_0805 = datetime(2024, 1, 2, 8, 5, 0)


class TestGetActivePositions:
    """Tests for get_active_positions."""

    def test_locates_trip_in_service(self, sample_snapshot: Snapshot) -> None:
        positions = get_active_positions(sample_snapshot, WEDNESDAY_0805)

        assert len(positions) == 1
        bus = positions[0]
        assert bus.trip_id == "T1"
        assert bus.route_id == "R1"
        assert bus.route_name == "10"
        assert bus.headsign == "North Park"
        assert bus.color == "ff0000"
        # Halfway along the shape
        assert bus.position == sample_snapshot.shapes[("C1", "N")].coordinates[5]

    def test_holiday_exception_switches_service(self, sample_snapshot: Snapshot) -> None:
        """Weekday service is removed and weekend service added on the holiday."""
        positions = get_active_positions(sample_snapshot, HOLIDAY_0805)
        assert [bus.trip_id for bus in positions] == ["T3"]

    def test_outside_trip_window(self, sample_snapshot: Snapshot) -> None:
        assert get_active_positions(sample_snapshot, datetime(2024, 1, 3, 12, 0, 0)) == []

    def test_at_last_stop_time(self, sample_snapshot: Snapshot) -> None:
        """A trip at its final stop's time is not placed on the map."""
        assert get_active_positions(sample_snapshot, datetime(2024, 1, 3, 8, 10, 0)) == []

    def test_trip_without_shape(self, sample_snapshot: Snapshot) -> None:
        """T4 runs at 07:15 but its pattern has no geometry."""
        assert get_active_positions(sample_snapshot, datetime(2024, 1, 3, 7, 15, 0)) == []

    def test_bounds_filter(self, sample_snapshot: Snapshot) -> None:
        inside = Bounds(min_lat=38.27, max_lat=38.29, min_lng=140.885, max_lng=140.895)
        outside = Bounds(min_lat=35.0, max_lat=36.0, min_lng=139.0, max_lng=140.0)

        assert len(get_active_positions(sample_snapshot, WEDNESDAY_0805, inside)) == 1
        assert get_active_positions(sample_snapshot, WEDNESDAY_0805, outside) == []

    def test_bounds_edges_are_inclusive(self, sample_snapshot: Snapshot) -> None:
        lng, lat = sample_snapshot.shapes[("C1", "N")].coordinates[5]
        point = Bounds(min_lat=lat, max_lat=lat, min_lng=lng, max_lng=lng)
        assert len(get_active_positions(sample_snapshot, WEDNESDAY_0805, point)) == 1

    def test_unknown_route_and_short_trip(self) -> None:
        """Trips of unlisted routes get empty route fields; single-stop trips are skipped."""
        snapshot = Snapshot.build(
            timetables={
                "R9": {
                    "X1": Trip(
                        service_id="DAILY",
                        stops=(
                            TripStop(time="08:00:00", stop_id="A"),
                            TripStop(time="08:10:00", stop_id="B"),
                        ),
                    ),
                    "X2": Trip(service_id="DAILY", stops=(TripStop(time="08:00:00", stop_id="A"),)),
                }
            },
            shapes={
                ("A", "B"): Shape(coordinates=((140.0, 38.0), (140.1, 38.1)), stop_indices=(0, 1)),
                ("A",): Shape(coordinates=((140.0, 38.0),), stop_indices=(0,)),
            },
            calendar={
                "DAILY": CalendarEntry(days=("1",) * 7, start="20240101", end="20241231"),
            },
        )

        positions = get_active_positions(snapshot, WEDNESDAY_0805)

        assert len(positions) == 1
        assert positions[0].trip_id == "X1"
        assert positions[0].route_name == ""
        assert positions[0].color == ""


class TestGetActiveVehicles:
    """Tests for get_active_vehicles."""

    def test_response(self, sample_snapshot: Snapshot) -> None:
        response = get_active_vehicles(sample_snapshot, WEDNESDAY_0805)

        assert response.count == 1
        assert len(response.buses) == 1
        assert response.timestamp == int(WEDNESDAY_0805.timestamp())

    def test_empty_snapshot(self) -> None:
        response = get_active_vehicles(Snapshot.build(), WEDNESDAY_0805)
        assert response.count == 0
        assert response.buses == []

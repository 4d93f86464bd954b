"""Shared fixtures: a small synthetic schedule snapshot.

Layout:
- "Central" has two poles, C1 and C2.
- Route R1 (short name "10") runs T1, T2 on weekdays and T3 on weekends.
- Route R2 (short name "20") runs T4 on weekdays, calling at both Central poles.
- Only the C1 -> N pattern has a shape.
"""

from datetime import datetime

import pytest

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.schedule import (
    CalendarEntry,
    CalendarException,
    ExtraData,
    Route,
    Shape,
    Stop,
    Trip,
    TripStop,
)

# 2024-01-03 is a Wednesday
WEDNESDAY_0805 = datetime(2024, 1, 3, 8, 5, 0)


def make_stops(*calls: tuple[str, str]) -> tuple[TripStop, ...]:
    return tuple(TripStop(time=time, stop_id=stop_id) for time, stop_id in calls)


def build_sample_snapshot() -> Snapshot:
    stops = {
        "C1": Stop(name="Central", yomi="せんとらる", lat=38.2600, lng=140.8800, platform="1"),
        "C2": Stop(name="Central", yomi="せんとらる", lat=38.2601, lng=140.8801, platform="2"),
        "N": Stop(name="North Park", yomi="のーすぱーく", lat=38.3000, lng=140.9000),
        "S": Stop(name="仙台駅", yomi="せんだいえき", lat=38.2606, lng=140.8822),
        "E": Stop(name="仙台駅東口", yomi="せんだいえきひがしぐち", lat=38.2590, lng=140.8840),
    }
    routes = {
        "R1": Route(short_name="10", color="ff0000"),
        "R2": Route(short_name="20", color="0000ff"),
    }
    timetables = {
        "R1": {
            "T1": Trip(
                headsign="North Park",
                service_id="WEEKDAY",
                office_id="O1",
                via="Central",
                stops=make_stops(("08:00:00", "C1"), ("08:10:00", "N")),
            ),
            "T2": Trip(
                headsign="Central",
                service_id="WEEKDAY",
                stops=make_stops(("09:00:00", "N"), ("09:10:00", "C2")),
            ),
            "T3": Trip(
                headsign="North Park",
                service_id="WEEKEND",
                stops=make_stops(("08:00:00", "C1"), ("08:10:00", "N")),
            ),
        },
        "R2": {
            "T4": Trip(
                headsign="Central",
                service_id="WEEKDAY",
                office_id="UNKNOWN",
                stops=make_stops(("07:00:00", "S"), ("07:30:00", "C1"), ("07:45:00", "C2")),
            ),
        },
    }
    shapes = {
        ("C1", "N"): Shape(
            # lng steps east, lat steps north
            coordinates=tuple((140.88 + i * 0.002, 38.26 + i * 0.004) for i in range(11)),
            stop_indices=(0, 10),
        ),
    }
    calendar = {
        "WEEKDAY": CalendarEntry(
            days=("1", "1", "1", "1", "1", "0", "0"), start="20240101", end="20241231"
        ),
        "WEEKEND": CalendarEntry(
            days=("0", "0", "0", "0", "0", "1", "1"), start="20240101", end="20241231"
        ),
    }
    extra = ExtraData(
        offices={"O1": "North Office"},
        calendar_dates=(
            # New Year holiday: weekday service off, weekend service on
            CalendarException(service_id="WEEKDAY", date="20240102", exception_type="2"),
            CalendarException(service_id="WEEKEND", date="20240102", exception_type="1"),
        ),
    )
    return Snapshot.build(
        stops=stops,
        routes=routes,
        timetables=timetables,
        shapes=shapes,
        calendar=calendar,
        extra=extra,
    )


@pytest.fixture
def sample_snapshot() -> Snapshot:
    return build_sample_snapshot()

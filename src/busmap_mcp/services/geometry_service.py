"""Path geometry lookup and time-based position interpolation.

Vehicle positions are simulated: a trip's location is found by mapping the
elapsed fraction of the current stop-to-stop interval onto the coordinate
span between the two stops' indices on the pattern's shape.
"""

import math

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.models.schedule import PatternKey, Shape, Trip


def pattern_key(trip: Trip) -> PatternKey:
    """Build the pattern key of a trip from its ordered stop ids."""
    return tuple(stop.stop_id for stop in trip.stops)


def lookup_shape(snapshot: Snapshot, key: PatternKey) -> Shape | None:
    """Get the shape for a pattern, or None if no geometry is known."""
    return snapshot.shapes.get(key)


def interpolate_index(trip: Trip, now_seconds: int, shape: Shape | None) -> int | None:
    """Compute the coordinate index a trip has reached at a time of day.

    Finds the stop pair with s_i <= now < s_i+1 and maps the elapsed ratio
    linearly onto [stop_indices[i], stop_indices[i+1]]. A time equal to a
    stop's time belongs to the interval starting at that stop.

    Args:
        trip: Trip with ordered stop times.
        now_seconds: Seconds since midnight.
        shape: Shape of the trip's pattern (may be None).

    Returns:
        Index into shape.coordinates, or None if the trip is not between
        two stops at that time or has no usable shape.
    """
    if shape is None or not shape.coordinates or not shape.stop_indices:
        return None

    stops = trip.stops
    indices = shape.stop_indices
    last_index = len(shape.coordinates) - 1

    for i in range(len(stops) - 1):
        s1 = stops[i].seconds
        s2 = stops[i + 1].seconds
        if not s1 <= now_seconds < s2:
            continue
        if i + 1 >= len(indices):
            return None

        ratio = (now_seconds - s1) / (s2 - s1)
        target = math.floor(indices[i] + (indices[i + 1] - indices[i]) * ratio)
        return max(0, min(target, last_index))

    return None


def interpolate_position(
    trip: Trip, now_seconds: int, shape: Shape | None
) -> tuple[float, float] | None:
    """Compute a trip's simulated [lng, lat] position at a time of day.

    Returns:
        (lng, lat) coordinate, or None if no position can be computed.
    """
    index = interpolate_index(trip, now_seconds, shape)
    if index is None:
        return None
    return shape.coordinates[index]

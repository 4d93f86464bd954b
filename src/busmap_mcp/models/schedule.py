"""Pydantic models for the schedule snapshot entities."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from busmap_mcp.services.gtfs_time import gtfs_time_to_seconds

# Ordered stop ids of a trip; trips with the same sequence share one shape.
PatternKey = tuple[str, ...]

PATTERN_KEY_SEPARATOR = "|"


class Stop(BaseModel):
    """A bus stop (one pole / platform)."""

    model_config = ConfigDict(frozen=True)

    name: str
    yomi: str = ""  # phonetic reading
    lat: float
    lng: float
    platform: str = ""


class Route(BaseModel):
    """A route line."""

    model_config = ConfigDict(frozen=True)

    short_name: str
    color: str = Field(default="", description="Hex color without '#'")


class TripStop(BaseModel):
    """One scheduled call of a trip at a stop."""

    model_config = ConfigDict(frozen=True)

    time: str  # HH:MM:SS (can exceed 24:00:00)
    stop_id: str
    seconds: int = Field(default=0, exclude=True, description="Seconds since midnight")

    @model_validator(mode="before")
    @classmethod
    def _fill_seconds(cls, data: object) -> object:
        if isinstance(data, dict) and "seconds" not in data and isinstance(data.get("time"), str):
            return {**data, "seconds": gtfs_time_to_seconds(data["time"])}
        return data


class Trip(BaseModel):
    """A single scheduled trip."""

    model_config = ConfigDict(frozen=True)

    headsign: str = ""
    service_id: str
    office_id: str = ""
    via: str = ""
    stops: tuple[TripStop, ...] = ()


class Shape(BaseModel):
    """Precomputed road geometry for one stop pattern."""

    model_config = ConfigDict(frozen=True)

    coordinates: tuple[tuple[float, float], ...] = Field(
        default=(), description="Path coordinates as [lng, lat] pairs"
    )
    stop_indices: tuple[int, ...] = Field(
        default=(), description="Coordinate index nearest each stop of the pattern"
    )


class CalendarEntry(BaseModel):
    """Weekly running pattern of a service."""

    model_config = ConfigDict(frozen=True)

    days: tuple[str, ...]  # Monday..Sunday, "1" = running
    start: str  # YYYYMMDD
    end: str  # YYYYMMDD


class CalendarException(BaseModel):
    """Per-date override of a service's weekly pattern."""

    model_config = ConfigDict(frozen=True)

    service_id: str
    date: str  # YYYYMMDD
    exception_type: str  # "1"=added, anything else=removed


class ExtraData(BaseModel):
    """Office names and calendar exceptions."""

    model_config = ConfigDict(frozen=True)

    offices: dict[str, str] = Field(default_factory=dict)
    calendar_dates: tuple[CalendarException, ...] = ()


def pattern_key_from_string(value: str) -> PatternKey:
    """Split a stored pipe-joined pattern key into its stop ids."""
    return tuple(value.split(PATTERN_KEY_SEPARATOR))


def pattern_key_to_string(key: PatternKey) -> str:
    """Join a pattern key for storage."""
    return PATTERN_KEY_SEPARATOR.join(key)

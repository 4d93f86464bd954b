from pydantic import BaseModel, Field

from busmap_mcp.models.schedule import Shape, Stop, Trip


class StopResult(BaseModel):
    stop_id: str
    name: str
    yomi: str = ""
    lat: float
    lng: float
    platform: str = Field(default="", description="Platform label, empty if none")

    @classmethod
    def from_stop(cls, stop_id: str, stop: Stop) -> "StopResult":
        return cls(
            stop_id=stop_id,
            name=stop.name,
            yomi=stop.yomi,
            lat=stop.lat,
            lng=stop.lng,
            platform=stop.platform,
        )


class SearchStopsInBoundsResponse(BaseModel):
    stops: dict[str, Stop] = Field(description="stop_id -> stop inside the bounds")
    count: int = Field(description="Number of stops returned")


class StopNameMatch(BaseModel):
    """A stop name group matched by a text search."""

    stop_id: str = Field(description="Representative stop id for the name")
    name: str
    yomi: str = ""
    lat: float
    lng: float
    stop_ids: list[str] = Field(description="All stop ids sharing this name")
    score: float = Field(description="Match score (0-100)")


class SearchStopsResponse(BaseModel):
    query: str
    matches: list[StopNameMatch]
    count: int = Field(description="Number of matches returned")


class VehiclePosition(BaseModel):
    """Simulated position of a vehicle currently in service."""

    trip_id: str
    route_id: str
    route_name: str = Field(default="", description="Route short name")
    headsign: str = ""
    position: tuple[float, float] = Field(description="[lng, lat]")
    color: str = Field(default="", description="Route color, hex without '#'")


class GetActiveVehiclesResponse(BaseModel):
    buses: list[VehiclePosition]
    count: int = Field(description="Number of vehicles returned")
    timestamp: int = Field(description="Unix timestamp of the computation")


class TripDetailResponse(BaseModel):
    trip_id: str
    route_id: str
    route_name: str = ""
    route_color: str = ""
    trip: Trip
    stops: dict[str, Stop] = Field(description="Every known stop the trip calls at")
    shape: Shape | None = Field(default=None, description="Path geometry, null if unknown")
    office_name: str = Field(default="", description="Operating office, empty if unknown")
    next_stop_id: str | None = Field(
        default=None, description="First stop not yet departed at query time"
    )


class StopTimetableResponse(BaseModel):
    stop_id: str
    stop_name: str
    timetables: dict[str, dict[str, Trip]] = Field(
        description="route_id -> trip_id -> trip, only trips calling at this stop"
    )


class Arrival(BaseModel):
    """A scheduled call at one of the requested stops."""

    time: str = Field(description="Scheduled time in HH:MM:SS format")
    time_formatted: str = Field(description="Display time (e.g., '25:10:00' -> '01:10 (+1)')")
    route_id: str
    route_name: str = ""
    trip_id: str
    headsign: str = ""
    via: str = ""
    platform: str = ""
    actual_stop_id: str = Field(description="Stop id the trip calls at")
    is_past: bool = Field(description="True if the time is earlier than the query time")


class GetStopArrivalsResponse(BaseModel):
    stop: StopResult
    stop_ids: list[str] = Field(description="Stop ids aggregated into this listing")
    arrivals: list[Arrival]
    next_index: int | None = Field(
        default=None, description="Index of the first arrival not yet past"
    )
    service_date: str = Field(description="Service date in YYYY-MM-DD format")
    query_time: str = Field(description="Query time in HH:MM:SS format")
    count: int = Field(description="Number of arrivals returned")

"""Geographic bounding box used by map-viewport queries."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Bounds(BaseModel):
    """Latitude/longitude rectangle, inclusive on every edge."""

    model_config = ConfigDict(frozen=True)

    min_lat: float = Field(description="Southern edge")
    max_lat: float = Field(description="Northern edge")
    min_lng: float = Field(description="Western edge")
    max_lng: float = Field(description="Eastern edge")

    @model_validator(mode="after")
    def _check_order(self) -> "Bounds":
        if self.min_lat > self.max_lat or self.min_lng > self.max_lng:
            raise ValueError(
                "Invalid bounds: min must not exceed max "
                f"(lat {self.min_lat}..{self.max_lat}, lng {self.min_lng}..{self.max_lng})"
            )
        return self

    def contains(self, lat: float, lng: float) -> bool:
        """Return True if the point lies inside the box."""
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


def bounds_from_optional(
    min_lat: float | None,
    max_lat: float | None,
    min_lng: float | None,
    max_lng: float | None,
) -> Bounds | None:
    """Build Bounds from optional edges.

    Returns None when no edge is given.

    Raises:
        ValueError: If only some edges are given, or min exceeds max.
    """
    edges = (min_lat, max_lat, min_lng, max_lng)
    if all(edge is None for edge in edges):
        return None
    if any(edge is None for edge in edges):
        raise ValueError("min_lat, max_lat, min_lng and max_lng must be given together")
    return Bounds(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)

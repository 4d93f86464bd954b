"""Stop lookup and search over the schedule snapshot."""

from rapidfuzz import fuzz

from busmap_mcp.data.snapshot import Snapshot
from busmap_mcp.matching.normalizers import flexible_match, normalize_text, starts_like
from busmap_mcp.models.geo import Bounds
from busmap_mcp.models.responses import (
    SearchStopsInBoundsResponse,
    SearchStopsResponse,
    StopNameMatch,
    StopResult,
)
from busmap_mcp.models.schedule import Stop

# Minimum fuzzy score for stops that fail the in-order character match
FUZZY_FALLBACK_MIN_SCORE = 75.0


def get_stop(snapshot: Snapshot, stop_id: str) -> StopResult | None:
    """Get a stop by id.

    Returns:
        StopResult, or None if the stop is unknown.
    """
    stop = snapshot.stops.get(stop_id)
    if stop is None:
        return None
    return StopResult.from_stop(stop_id, stop)


def filter_stops_by_bounds(snapshot: Snapshot, bounds: Bounds) -> dict[str, Stop]:
    """Get all stops whose coordinates lie inside a box (edges inclusive)."""
    return {
        stop_id: stop
        for stop_id, stop in snapshot.stops.items()
        if bounds.contains(stop.lat, stop.lng)
    }


def search_stops_in_bounds(snapshot: Snapshot, bounds: Bounds) -> SearchStopsInBoundsResponse:
    """Search stops inside a map viewport.

    Args:
        snapshot: Schedule snapshot.
        bounds: Validated viewport box.

    Returns:
        SearchStopsInBoundsResponse keyed by stop id.
    """
    stops = filter_stops_by_bounds(snapshot, bounds)
    return SearchStopsInBoundsResponse(stops=stops, count=len(stops))


def _compute_score(query: str, name: str, yomi: str) -> float:
    """Best partial fuzzy score of the query against name or reading."""
    name_score = fuzz.partial_ratio(query, name)
    yomi_score = fuzz.partial_ratio(query, yomi) if yomi else 0.0
    return float(max(name_score, yomi_score))


def search_stops_by_name(
    snapshot: Snapshot,
    query: str,
    limit: int = 5,
) -> SearchStopsResponse:
    """Search stops by name or phonetic reading.

    Stops sharing a display name are returned once, represented by the
    first stop id listed for that name.

    Ranking:
    1. In-order character matches whose first character starts the name
       or reading
    2. Other in-order character matches
    3. Fuzzy matches (typos) scoring at least FUZZY_FALLBACK_MIN_SCORE
    Within a tier, higher score then shorter name first.

    Args:
        snapshot: Schedule snapshot.
        query: Kanji, kana or mixed query text.
        limit: Maximum number of name groups to return.

    Returns:
        SearchStopsResponse with matched name groups.
    """
    normalized_query = normalize_text(query)
    if not normalized_query:
        return SearchStopsResponse(query=query, matches=[], count=0)

    ranked: list[tuple[int, float, StopNameMatch]] = []
    for name, stop_ids in snapshot.stop_ids_by_name.items():
        representative_id = stop_ids[0]
        stop = snapshot.stops[representative_id]
        norm_name = normalize_text(stop.name)
        norm_yomi = normalize_text(stop.yomi)

        score = _compute_score(normalized_query, norm_name, norm_yomi)
        if flexible_match(norm_name, norm_yomi, normalized_query):
            tier = 0 if starts_like(norm_name, norm_yomi, normalized_query) else 1
        elif score >= FUZZY_FALLBACK_MIN_SCORE:
            tier = 2
        else:
            continue

        ranked.append(
            (
                tier,
                score,
                StopNameMatch(
                    stop_id=representative_id,
                    name=name,
                    yomi=stop.yomi,
                    lat=stop.lat,
                    lng=stop.lng,
                    stop_ids=list(stop_ids),
                    score=score,
                ),
            )
        )

    ranked.sort(key=lambda item: (item[0], -item[1], len(item[2].name), item[2].name))
    matches = [match for _, _, match in ranked[:limit]]

    return SearchStopsResponse(query=query, matches=matches, count=len(matches))

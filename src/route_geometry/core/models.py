"""Data models for waypoint ordering, loop search and POI matching."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional


TRAVEL_MODES = ("walking", "bicycle", "ebike")
EBIKE_ASSIST_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 coordinate in decimal degrees."""

    lat: float
    lon: float

    def is_valid(self) -> bool:
        """Check that both coordinates are finite and inside their ranges."""
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            return False
        return -90 <= self.lat <= 90 and -180 <= self.lon <= 180

    def to_lon_lat(self) -> List[float]:
        """GeoJSON coordinate order."""
        return [self.lon, self.lat]


def default_label(lat: float, lon: float) -> str:
    return f"{lat:.5f},{lon:.5f}"


@dataclass(frozen=True)
class RouteLocation:
    """A labelled stop on a route."""

    lat: float
    lon: float
    label: str = ""

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lon)

    def with_default_label(self) -> "RouteLocation":
        """Return a copy whose label is trimmed, or derived from the coordinates if blank."""
        label = (self.label or "").strip()
        if not label:
            label = default_label(self.lat, self.lon)
        return RouteLocation(self.lat, self.lon, label)


@dataclass(frozen=True)
class LoopCandidate:
    """Two synthetic turning points that shape a loop around the start."""

    point_a: GeoPoint
    point_b: GeoPoint


@dataclass
class RouteSnapshot:
    """A route realized by the routing engine."""

    polyline: List[GeoPoint]
    distance_meters: float
    eta_seconds: float

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0


@dataclass(frozen=True)
class OverlapResult:
    """How much of a loop retraces its own segments."""

    ratio: float
    segments_count: int
    overlap_segments_count: int
    label: str


@dataclass
class LoopCandidateResult:
    """A realized loop candidate that passed the distance tolerance."""

    snapshot: RouteSnapshot
    overlap: OverlapResult
    distance_error_km: float

    @property
    def overlap_ratio(self) -> float:
        return self.overlap.ratio


@dataclass
class LoopSearchResult:
    """The loop retained by a search."""

    geometry: List[GeoPoint]
    distance_meters: float
    eta_seconds: float
    overlap_label: str
    segments_count: int
    overlap_ratio: float = 0.0
    candidates_evaluated: int = 0

    def to_geojson(self) -> Dict:
        """Return the geometry as a GeoJSON LineString."""
        return {
            "type": "LineString",
            "coordinates": [p.to_lon_lat() for p in self.geometry],
        }


@dataclass
class PoiMatch:
    """A point of interest projected onto a route corridor."""

    id: str
    name: str
    category: str
    kind: Optional[str]
    location: GeoPoint
    osm_type: str
    osm_id: int
    tags: Dict[str, str] = field(default_factory=dict)
    distance_to_route_meters: float = math.inf
    distance_along_route_meters: float = 0.0

    def __repr__(self) -> str:
        return (
            f"PoiMatch(id={self.id}, name='{self.name}', category={self.category}, "
            f"along={self.distance_along_route_meters:.0f}m, "
            f"to_route={self.distance_to_route_meters:.0f}m)"
        )


class SegmentProjection(NamedTuple):
    """Nearest point on a segment, as a distance and a clamped fraction."""

    distance_meters: float
    t: float


class SegmentPairProjection(NamedTuple):
    """Closest approach of two segments and the fraction on each."""

    distance_meters: float
    route_t: float
    feature_t: float


class RouteProjection(NamedTuple):
    """Where a feature sits relative to a route polyline."""

    distance_to_route_meters: float
    distance_along_route_meters: float
    matched_point: GeoPoint


class Bounds(NamedTuple):
    """A latitude/longitude bounding box."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def is_valid(self) -> bool:
        values = (self.min_lat, self.min_lon, self.max_lat, self.max_lon)
        return all(math.isfinite(v) for v in values)


@dataclass
class WaypointOrderingRequest:
    """Order waypoints between a start and an optional destination.

    Without a destination the waypoints are ordered as a loop back to the start.
    """

    start: RouteLocation
    waypoints: List[RouteLocation] = field(default_factory=list)
    destination: Optional[RouteLocation] = None
    optimize: bool = True

    @property
    def mode(self) -> str:
        return "route" if self.destination is not None else "loop"


@dataclass
class LoopSearchRequest:
    """Parameters of a loop search."""

    start: RouteLocation
    target_distance_km: float
    mode: str = "bicycle"
    waypoints: List[RouteLocation] = field(default_factory=list)
    variation: int = 0
    speed_kmh: Optional[float] = None
    ebike_assist: Optional[str] = None

    def validate(self):
        """
        Check request bounds.

        Raises:
            ValueError: If any parameter is out of range
        """
        if not self.start.point.is_valid():
            raise ValueError(f"Invalid start coordinates: {self.start.lat}, {self.start.lon}")
        if not (0 < self.target_distance_km <= 300):
            raise ValueError("Target distance must be greater than 0 and at most 300 km")
        if (self.mode or "").lower() not in TRAVEL_MODES:
            raise ValueError(
                f"Unknown mode: {self.mode}. Valid options: {', '.join(TRAVEL_MODES)}"
            )
        if self.speed_kmh is not None and not (0 < self.speed_kmh <= 60):
            raise ValueError("Speed must be greater than 0 and at most 60 km/h")
        if not (0 <= self.variation <= 9999):
            raise ValueError("Variation must be between 0 and 9999")
        if self.ebike_assist and self.ebike_assist.strip().lower() not in EBIKE_ASSIST_LEVELS:
            raise ValueError(
                f"Unknown e-bike assist level: {self.ebike_assist}. "
                f"Valid options: {', '.join(EBIKE_ASSIST_LEVELS)}"
            )


@dataclass
class CorridorMatchRequest:
    """A route and a feature (a point, optionally with its own linear geometry)."""

    route: List[GeoPoint]
    point: GeoPoint
    feature_geometry: Optional[List[GeoPoint]] = None

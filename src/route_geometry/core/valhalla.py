"""Valhalla routing engine integration."""

import logging
from typing import Dict, List, Optional, Sequence

import polyline
import requests

from .errors import RoutingProviderError
from .models import GeoPoint, RouteLocation, RouteSnapshot


logger = logging.getLogger(__name__)

DEFAULT_VALHALLA_URL = "http://localhost:8002"

# Locations carrying this label prefix are shaping points, not stops
LOOP_CANDIDATE_PREFIX = "loop-candidate-"

# Ring closure tolerance in degrees
CLOSE_RING_TOLERANCE = 0.00001

# (min, baseline, max speed km/h, downward bias, upward bias)
SPEED_HILLS_BIAS = {
    "walking": (3.0, 5.0, 7.0, 0.1, 0.1),
    "bicycle": (10.0, 15.0, 30.0, 0.1, 0.12),
    "ebike": (15.0, 25.0, 25.0, 0.1, 0.0),
}

EBIKE_ASSIST_HILLS_BIAS = {
    "low": -0.25,
    "high": 0.2,
}


def resolve_costing(mode: str) -> str:
    """Map a travel mode onto a Valhalla costing model."""
    if (mode or "").strip().lower() == "walking":
        return "pedestrian"
    return "bicycle"


def _speed_hills_bias(mode: str, speed_kmh: Optional[float]) -> float:
    if speed_kmh is None or mode not in SPEED_HILLS_BIAS:
        return 0.0

    min_speed, baseline, max_speed, down_bias, up_bias = SPEED_HILLS_BIAS[mode]
    speed = max(min_speed, min(max_speed, speed_kmh))

    if speed < baseline:
        span = baseline - min_speed
        if span <= 0 or down_bias <= 0:
            return 0.0
        return -down_bias * (baseline - speed) / span

    span = max_speed - baseline
    if span <= 0 or up_bias <= 0:
        return 0.0
    return up_bias * (speed - baseline) / span


def build_costing_options(mode: str, speed_kmh: Optional[float] = None,
                          ebike_assist: Optional[str] = None,
                          prefer_cycleways: bool = True,
                          avoid_hills: bool = False) -> Dict:
    """
    Build Valhalla costing options for a travel mode.

    Faster riders and stronger e-bike assistance tolerate more climbing,
    unless hills are avoided outright.

    Args:
        mode: walking, bicycle or ebike
        speed_kmh: Expected average speed
        ebike_assist: low, medium or high
        prefer_cycleways: Keep bicycles off roads where possible
        avoid_hills: Start from a low hill tolerance and ignore speed

    Returns:
        Dict keyed by costing model
    """
    mode = (mode or "").strip().lower()
    costing = resolve_costing(mode)

    if mode == "walking":
        use_hills = 0.15 if avoid_hills else 0.45
    else:
        use_hills = 0.2 if avoid_hills else 0.7
    if not avoid_hills:
        use_hills += _speed_hills_bias(mode, speed_kmh)
    if mode == "ebike" and ebike_assist:
        use_hills += EBIKE_ASSIST_HILLS_BIAS.get(ebike_assist.strip().lower(), 0.0)
    use_hills = max(0.05, min(0.95, use_hills))

    if costing == "bicycle":
        use_roads = 0.2 if prefer_cycleways else 0.6
        return {costing: {"use_roads": use_roads, "use_hills": use_hills}}
    return {costing: {"use_hills": use_hills}}


class ValhallaClient:
    """Realize ordered locations into routes with a Valhalla server."""

    def __init__(self, base_url: str = DEFAULT_VALHALLA_URL,
                 language: str = "fr", timeout: float = 60):
        """
        Initialize the client.

        Args:
            base_url: URL of Valhalla server (default: http://localhost:8002)
            language: Language of the turn-by-turn narrative
            timeout: Default request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout = timeout

    def build_request(self, locations: Sequence[RouteLocation], mode: str,
                      speed_kmh: Optional[float] = None,
                      ebike_assist: Optional[str] = None,
                      prefer_cycleways: bool = True,
                      avoid_hills: bool = False) -> Dict:
        """Build the JSON body of a /route request."""
        payload_locations = []
        last = len(locations) - 1
        for index, location in enumerate(locations):
            entry = {"lat": location.lat, "lon": location.lon}
            # Start and end keep Valhalla's default stop type
            if 0 < index < last:
                is_shaping = (location.label or "").startswith(LOOP_CANDIDATE_PREFIX)
                entry["type"] = "through" if is_shaping else "break"
            payload_locations.append(entry)

        return {
            "locations": payload_locations,
            "costing": resolve_costing(mode),
            "directions_options": {"units": "kilometers", "language": self.language},
            "costing_options": build_costing_options(mode, speed_kmh, ebike_assist,
                                                     prefer_cycleways, avoid_hills),
        }

    def route(self, locations: Sequence[RouteLocation], mode: str = "bicycle",
              timeout: Optional[float] = None, speed_kmh: Optional[float] = None,
              ebike_assist: Optional[str] = None,
              close_ring: bool = False, prefer_cycleways: bool = True,
              avoid_hills: bool = False) -> RouteSnapshot:
        """
        Compute a route through ordered locations.

        Args:
            locations: Start, intermediate stops and end, in visiting order
            mode: walking, bicycle or ebike
            timeout: Request timeout in seconds (client default if None)
            speed_kmh: Speed used for the ETA instead of Valhalla's estimate
            ebike_assist: E-bike assistance level
            close_ring: Append the first vertex if the shape does not end on it
            prefer_cycleways: Keep bicycles off roads where possible
            avoid_hills: Minimize climbing

        Returns:
            RouteSnapshot

        Raises:
            RoutingProviderError: On timeout, HTTP error or malformed response
        """
        if len(locations) < 2:
            raise RoutingProviderError("At least two locations are required")

        body = self.build_request(locations, mode, speed_kmh, ebike_assist,
                                  prefer_cycleways, avoid_hills)
        try:
            response = requests.post(
                f"{self.base_url}/route",
                json=body,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.RequestException as e:
            raise RoutingProviderError(f"Valhalla request failed: {e}") from e

        if response.status_code != 200:
            logger.warning("Valhalla responded %s: %s", response.status_code,
                           response.text[:500])
            raise RoutingProviderError(f"Valhalla responded {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise RoutingProviderError("Valhalla returned invalid JSON") from e

        return parse_trip(data, speed_kmh, close_ring)


def parse_trip(data: Dict, speed_kmh: Optional[float] = None,
               close_ring: bool = False) -> RouteSnapshot:
    """
    Convert a Valhalla /route response into a RouteSnapshot.

    Raises:
        RoutingProviderError: If the payload has no usable legs
    """
    trip = data.get("trip") if isinstance(data, dict) else None
    legs = trip.get("legs") if isinstance(trip, dict) else None
    if not legs:
        raise RoutingProviderError("Invalid Valhalla response: no legs")

    points: List[GeoPoint] = []
    distance_meters = 0.0
    duration_seconds = 0.0
    try:
        for leg in legs:
            summary = leg.get("summary") or {}
            distance_meters += float(summary.get("length", 0)) * 1000
            duration_seconds += float(summary.get("time", 0))

            shape = leg.get("shape")
            if not shape:
                continue
            decoded = polyline.decode(shape, 6)
            if not decoded:
                continue
            # Consecutive legs share their junction vertex
            if points:
                decoded = decoded[1:]
            points.extend(GeoPoint(lat, lon) for lat, lon in decoded)
    except (AttributeError, TypeError, ValueError, IndexError) as e:
        raise RoutingProviderError(f"Invalid Valhalla response: {e}") from e

    if close_ring and points:
        first, last = points[0], points[-1]
        if (abs(first.lat - last.lat) >= CLOSE_RING_TOLERANCE
                or abs(first.lon - last.lon) >= CLOSE_RING_TOLERANCE):
            points.append(first)

    return RouteSnapshot(
        polyline=points,
        distance_meters=distance_meters,
        eta_seconds=compute_eta_seconds(distance_meters, speed_kmh, duration_seconds),
    )


def compute_eta_seconds(distance_meters: float, speed_kmh: Optional[float],
                        fallback_seconds: float) -> float:
    """Travel time at a fixed speed, or the engine's own estimate."""
    if distance_meters <= 0 or not speed_kmh or speed_kmh <= 0:
        return fallback_seconds
    return distance_meters / (speed_kmh * 1000 / 3600)


def check_valhalla_connection(base_url: str = DEFAULT_VALHALLA_URL) -> bool:
    """
    Check if Valhalla server is accessible.

    Args:
        base_url: URL of Valhalla server

    Returns:
        True if server is accessible, False otherwise
    """
    try:
        response = requests.get(f"{base_url.rstrip('/')}/status", timeout=5)
        return response.status_code == 200
    except requests.RequestException:
        return False

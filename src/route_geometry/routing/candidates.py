"""Synthetic loop shapes around a start point."""

import hashlib
import random
from typing import List, Optional, Sequence

from ..core.models import GeoPoint, LoopCandidate, RouteLocation
from ..core.policy import RoutingPolicy
from ..core.utils import haversine_distance, offset_point
from ..core.valhalla import LOOP_CANDIDATE_PREFIX
from .waypoints import WaypointOrderer


# Angle between the two turning points, as seen from the start
ANGLE_CANDIDATES = (70.0, 90.0, 110.0, 130.0)
RADIUS_FACTORS = (0.85, 1.0, 1.15)

# A loop start -> A -> B -> start with |A| = |B| = r is about 3.4 r long
LOOP_LENGTH_TO_RADIUS = 3.4
MIN_RADIUS_KM = 0.8

BEARING_JITTER = 0.4


def candidate_seed(start: GeoPoint, target_km: float, variation: int = 0) -> int:
    """
    Derive a reproducible PRNG seed from the request.

    Args:
        start: Loop start
        target_km: Target loop length
        variation: Caller-chosen alternative number

    Returns:
        64-bit integer seed
    """
    key = f"{start.lat:.6f}|{start.lon:.6f}|{target_km:.3f}|{int(variation)}"
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def build_candidates(start: GeoPoint, target_km: float, seed: int,
                     count: int = 14) -> List[LoopCandidate]:
    """
    Generate loop candidates fanned out around the start.

    Bearings are spread evenly over the compass with a seeded jitter, while
    the opening angle and radius cycle through fixed options.

    Args:
        start: Loop start
        target_km: Target loop length
        seed: Value from candidate_seed
        count: Number of candidates

    Returns:
        Candidates in evaluation order
    """
    rng = random.Random(seed)
    base_radius_km = max(MIN_RADIUS_KM, target_km / LOOP_LENGTH_TO_RADIUS)
    bearing_step = 360.0 / count

    candidates = []
    for i in range(count):
        angle = ANGLE_CANDIDATES[i % len(ANGLE_CANDIDATES)]
        radius_factor = RADIUS_FACTORS[(i // len(ANGLE_CANDIDATES)) % len(RADIUS_FACTORS)]
        radius_km = base_radius_km * radius_factor
        bearing = bearing_step * i + (rng.random() - 0.5) * bearing_step * BEARING_JITTER
        radius_b_km = radius_km * (0.9 + rng.random() * 0.2)

        point_a = offset_point(start, radius_km * 1000, bearing)
        point_b = offset_point(start, radius_b_km * 1000, bearing + angle)
        candidates.append(LoopCandidate(point_a, point_b))

    return candidates


def build_ordered_loop_intermediates(start: RouteLocation,
                                     user_waypoints: Optional[Sequence[RouteLocation]],
                                     candidate: LoopCandidate,
                                     orderer: Optional[WaypointOrderer] = None) -> List[RouteLocation]:
    """Merge the candidate turning points with user stops and order them as a loop."""
    orderer = orderer or WaypointOrderer()
    points = list(user_waypoints or ())
    points.append(RouteLocation(candidate.point_a.lat, candidate.point_a.lon,
                                LOOP_CANDIDATE_PREFIX + "a"))
    points.append(RouteLocation(candidate.point_b.lat, candidate.point_b.lon,
                                LOOP_CANDIDATE_PREFIX + "b"))
    return orderer.order_for_loop(start, points)


def estimate_loop_distance_km(start: RouteLocation,
                              intermediates: Sequence[RouteLocation]) -> float:
    """Straight-line length of start -> intermediates -> start in kilometers."""
    if not intermediates:
        return 0.0

    total = 0.0
    previous = start
    for point in intermediates:
        total += haversine_distance(previous.lat, previous.lon, point.lat, point.lon)
        previous = point
    total += haversine_distance(previous.lat, previous.lon, start.lat, start.lon)
    return total / 1000


def is_estimate_plausible(estimate_km: float, target_km: float,
                          policy: Optional[RoutingPolicy] = None) -> bool:
    """Check a straight-line estimate against the target before routing it."""
    policy = policy or RoutingPolicy()
    low = target_km * policy.loop['estimate_min_ratio']
    high = target_km * policy.loop['estimate_max_ratio']
    return low <= estimate_km <= high

"""Loop quality: self-overlap and distance error."""

import math
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..core.models import GeoPoint, LoopCandidateResult, OverlapResult, RouteSnapshot
from ..core.policy import RoutingPolicy


def _quantize(value: float, precision: int) -> int:
    """Round to a fixed number of decimals, halves away from zero."""
    scaled = Decimal(repr(value)).scaleb(precision)
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def compute_overlap(polyline: Sequence[GeoPoint], precision: Optional[int] = None,
                    policy: Optional[RoutingPolicy] = None) -> OverlapResult:
    """
    Measure how much of a route travels the same segment more than once.

    Endpoints are snapped to ``precision`` decimals and each segment is keyed
    without regard to direction, so going out and back along a street counts
    as overlap.

    Args:
        polyline: Route vertices
        precision: Decimal places used to match endpoints
        policy: Thresholds for the label

    Returns:
        OverlapResult
    """
    policy = policy or RoutingPolicy()
    if precision is None:
        precision = int(policy.overlap['precision'])

    if len(polyline) < 2:
        return OverlapResult(0.0, 0, 0, "low")

    counts = Counter()
    for a, b in zip(polyline, polyline[1:]):
        if not all(math.isfinite(v) for v in (a.lat, a.lon, b.lat, b.lon)):
            continue
        start = (_quantize(a.lon, precision), _quantize(a.lat, precision))
        end = (_quantize(b.lon, precision), _quantize(b.lat, precision))
        counts[(start, end) if start <= end else (end, start)] += 1

    segments = sum(counts.values())
    if segments == 0:
        return OverlapResult(0.0, 0, 0, "low")

    overlap = sum(count - 1 for count in counts.values() if count > 1)
    ratio = overlap / segments
    return OverlapResult(ratio, segments, overlap, policy.overlap_label(ratio))


class LoopRouteScorer:
    """Score realized loops and pick the best one."""

    def __init__(self, policy: Optional[RoutingPolicy] = None):
        self.policy = policy or RoutingPolicy()
        self.epsilon = self.policy.loop['overlap_epsilon']

    def create_result(self, snapshot: RouteSnapshot, target_km: float) -> LoopCandidateResult:
        return LoopCandidateResult(
            snapshot=snapshot,
            overlap=compute_overlap(snapshot.polyline, policy=self.policy),
            distance_error_km=abs(snapshot.distance_km - target_km),
        )

    def is_better(self, candidate: LoopCandidateResult,
                  best: Optional[LoopCandidateResult]) -> bool:
        """
        Compare two loops. Less overlap always wins; distance error only
        breaks ties between practically equal overlap ratios.
        """
        if best is None:
            return True
        if candidate.overlap_ratio < best.overlap_ratio - self.epsilon:
            return True
        return (abs(candidate.overlap_ratio - best.overlap_ratio) < self.epsilon
                and candidate.distance_error_km < best.distance_error_km)

    def is_within_tolerance(self, distance_km: float, target_km: float) -> bool:
        tolerance = target_km * self.policy.loop['distance_tolerance_pct']
        return target_km - tolerance <= distance_km <= target_km + tolerance

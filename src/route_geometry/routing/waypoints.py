"""Waypoint normalization and visiting-order optimization."""

import math
from typing import List, Optional, Sequence

from ..core.models import RouteLocation
from ..core.policy import RoutingPolicy
from ..core.utils import haversine_distance


def _distance(a: RouteLocation, b: RouteLocation) -> float:
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


class WaypointOrderer:
    """
    Order user waypoints into a short visiting sequence.

    Up to ``max_exact_waypoints`` stops are ordered exactly with a bitmask
    dynamic program over (visited set, last stop). Larger sets use a greedy
    nearest-neighbour walk biased towards the destination.

    None of the methods raise on bad input: invalid or duplicate stops are
    dropped during normalization.
    """

    def __init__(self, policy: Optional[RoutingPolicy] = None):
        self.policy = policy or RoutingPolicy()
        self.min_distinct_m = self.policy.waypoints['min_distinct_distance_m']
        self.max_exact = int(self.policy.waypoints['max_exact_waypoints'])

    def normalize_waypoints(self, start: RouteLocation,
                            waypoints: Optional[Sequence[RouteLocation]]) -> List[RouteLocation]:
        """
        Drop unusable waypoints and fill in missing labels.

        Args:
            start: Route start
            waypoints: Candidate stops in caller order

        Returns:
            Stops with valid coordinates, at least the minimum spacing away
            from the start and from every earlier kept stop
        """
        normalized: List[RouteLocation] = []
        for waypoint in waypoints or ():
            if not waypoint.point.is_valid():
                continue
            if _distance(start, waypoint) < self.min_distinct_m:
                continue
            if any(_distance(kept, waypoint) < self.min_distinct_m for kept in normalized):
                continue
            normalized.append(waypoint.with_default_label())
        return normalized

    def order_for_route(self, start: RouteLocation, end: RouteLocation,
                        waypoints: Optional[Sequence[RouteLocation]]) -> List[RouteLocation]:
        """Order stops between a start and a distinct end."""
        return self._order(start, end, waypoints, self.policy.get_end_weight("route"))

    def order_for_loop(self, start: RouteLocation,
                       waypoints: Optional[Sequence[RouteLocation]]) -> List[RouteLocation]:
        """Order stops on a loop that returns to the start."""
        return self._order(start, start, waypoints, self.policy.get_end_weight("loop"))

    def preserve_order(self, start: RouteLocation,
                       waypoints: Optional[Sequence[RouteLocation]]) -> List[RouteLocation]:
        """Normalize stops but keep the caller's sequence."""
        return self.normalize_waypoints(start, waypoints)

    def _order(self, start, destination, waypoints, end_weight):
        normalized = self.normalize_waypoints(start, waypoints)
        if len(normalized) <= 1:
            return normalized
        if len(normalized) <= self.max_exact:
            return self._order_exact(start, destination, normalized, end_weight)
        return self._order_greedy(start, destination, normalized, end_weight)

    def _order_exact(self, start, destination, waypoints, end_weight):
        count = len(waypoints)
        full_mask = (1 << count) - 1

        from_start = [_distance(start, w) for w in waypoints]
        to_end = [_distance(w, destination) for w in waypoints]
        between = [
            [0.0 if i == j else _distance(waypoints[i], waypoints[j]) for j in range(count)]
            for i in range(count)
        ]

        # dp[mask][last]: shortest path from start visiting mask, ending at last
        dp = [[math.inf] * count for _ in range(full_mask + 1)]
        previous = [[-1] * count for _ in range(full_mask + 1)]
        for i in range(count):
            dp[1 << i][i] = from_start[i]

        for mask in range(1, full_mask + 1):
            row = dp[mask]
            for last in range(count):
                if not mask & (1 << last):
                    continue
                current = row[last]
                if current == math.inf:
                    continue
                distances = between[last]
                for nxt in range(count):
                    bit = 1 << nxt
                    if mask & bit:
                        continue
                    candidate = current + distances[nxt]
                    if candidate < dp[mask | bit][nxt]:
                        dp[mask | bit][nxt] = candidate
                        previous[mask | bit][nxt] = last

        best_last = -1
        best_total = math.inf
        for last in range(count):
            current = dp[full_mask][last]
            if current == math.inf:
                continue
            total = current + to_end[last]
            if total < best_total:
                best_total = total
                best_last = last

        if best_last < 0:
            return self._order_greedy(start, destination, waypoints, end_weight)

        ordered = []
        mask = full_mask
        index = best_last
        while index >= 0:
            ordered.append(waypoints[index])
            prev_index = previous[mask][index]
            mask &= ~(1 << index)
            index = prev_index
        ordered.reverse()
        return ordered

    def _order_greedy(self, start, destination, waypoints, end_weight):
        remaining = list(waypoints)
        ordered = []
        current = start
        while remaining:
            best_index = 0
            best_score = math.inf
            for i, candidate in enumerate(remaining):
                score = (_distance(current, candidate)
                         + end_weight * _distance(candidate, destination))
                if score < best_score:
                    best_score = score
                    best_index = i
            current = remaining.pop(best_index)
            ordered.append(current)
        return ordered


def plan_route_locations(request, orderer: Optional[WaypointOrderer] = None) -> List[RouteLocation]:
    """
    Build the full location list for a WaypointOrderingRequest.

    Args:
        request: WaypointOrderingRequest
        orderer: Orderer to use (default policy if None)

    Returns:
        Start, ordered stops, then the destination (the start again for loops)
    """
    orderer = orderer or WaypointOrderer()
    start = request.start.with_default_label()
    destination = request.destination.with_default_label() if request.destination else start

    if not request.optimize:
        stops = orderer.preserve_order(start, request.waypoints)
    elif request.destination is not None:
        stops = orderer.order_for_route(start, destination, request.waypoints)
    else:
        stops = orderer.order_for_loop(start, request.waypoints)

    return [start] + stops + [destination]

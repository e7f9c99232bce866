"""Waypoint ordering and loop search."""

from .waypoints import WaypointOrderer, plan_route_locations
from .candidates import (
    build_candidates,
    build_ordered_loop_intermediates,
    candidate_seed,
    estimate_loop_distance_km,
)
from .scoring import LoopRouteScorer, compute_overlap
from .search import LoopSearch, search_loop

__all__ = [
    "WaypointOrderer",
    "plan_route_locations",
    "build_candidates",
    "build_ordered_loop_intermediates",
    "candidate_seed",
    "estimate_loop_distance_km",
    "LoopRouteScorer",
    "compute_overlap",
    "LoopSearch",
    "search_loop",
]

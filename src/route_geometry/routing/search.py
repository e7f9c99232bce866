"""Loop search: realize candidates until the best acceptable loop is found."""

import logging
import threading
import time
from typing import Callable, List, Optional, Sequence

from ..core.errors import LoopNotFoundError, RoutingProviderError
from ..core.models import (
    LoopCandidateResult,
    LoopSearchRequest,
    LoopSearchResult,
    RouteLocation,
    RouteSnapshot,
)
from ..core.policy import RoutingPolicy
from .candidates import (
    build_candidates,
    build_ordered_loop_intermediates,
    candidate_seed,
    estimate_loop_distance_km,
    is_estimate_plausible,
)
from .scoring import LoopRouteScorer
from .waypoints import WaypointOrderer


logger = logging.getLogger(__name__)


class LoopSearch:
    """
    Search for a loop of a target length with as little backtracking as possible.

    The provider is any object with a ``route(locations, mode, timeout=...,
    speed_kmh=..., ebike_assist=..., close_ring=...)`` method returning a
    RouteSnapshot and raising RoutingProviderError on failure, such as
    ValhallaClient.
    """

    def __init__(self, provider, policy: Optional[RoutingPolicy] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.provider = provider
        self.policy = policy or RoutingPolicy()
        self.clock = clock
        self.orderer = WaypointOrderer(self.policy)
        self.scorer = LoopRouteScorer(self.policy)

    def search(self, request: LoopSearchRequest,
               cancel_event: Optional[threading.Event] = None) -> LoopSearchResult:
        """
        Run the candidate search.

        Candidates are tried in generation order. Each routing call gets the
        remaining time budget as its timeout, and a failed call only skips
        that candidate. When cancelled, the best loop found so far is returned.

        Args:
            request: Loop parameters
            cancel_event: Set from another thread to stop early

        Returns:
            LoopSearchResult

        Raises:
            ValueError: If the request is out of bounds
            LoopNotFoundError: If no candidate matched the distance tolerance
        """
        request.validate()

        start = request.start.with_default_label()
        target_km = request.target_distance_km
        budget = float(self.policy.loop['compute_budget_s'])
        started = self.clock()

        seed = candidate_seed(start.point, target_km, request.variation)
        candidates = build_candidates(start.point, target_km, seed,
                                      count=int(self.policy.loop['candidate_count']))

        best: Optional[LoopCandidateResult] = None
        evaluated = 0

        for index, candidate in enumerate(candidates):
            if cancel_event is not None and cancel_event.is_set():
                logger.debug("Loop search cancelled after %d candidates", index)
                break

            elapsed = self.clock() - started
            if elapsed >= budget:
                logger.debug("Loop search budget of %.1fs exhausted", budget)
                break

            intermediates = build_ordered_loop_intermediates(
                start, request.waypoints, candidate, self.orderer
            )
            estimate_km = estimate_loop_distance_km(start, intermediates)
            if not is_estimate_plausible(estimate_km, target_km, self.policy):
                logger.debug("Candidate %d skipped: estimate %.2f km", index, estimate_km)
                continue

            remaining = budget - (self.clock() - started)
            if remaining <= 0:
                break

            snapshot = self._realize(start, intermediates, request, remaining, index)
            if snapshot is None:
                continue
            evaluated += 1

            if not self.scorer.is_within_tolerance(snapshot.distance_km, target_km):
                logger.debug("Candidate %d rejected: %.2f km for target %.2f km",
                             index, snapshot.distance_km, target_km)
                continue

            result = self.scorer.create_result(snapshot, target_km)
            if self.scorer.is_better(result, best):
                best = result

        if best is None:
            raise LoopNotFoundError()

        logger.debug(
            "Selected loop %.0fm overlap=%s ratio=%.4f variation=%d",
            best.snapshot.distance_meters,
            best.overlap.label,
            best.overlap_ratio,
            request.variation,
        )

        return LoopSearchResult(
            geometry=best.snapshot.polyline,
            distance_meters=best.snapshot.distance_meters,
            eta_seconds=best.snapshot.eta_seconds,
            overlap_label=best.overlap.label,
            segments_count=best.overlap.segments_count,
            overlap_ratio=best.overlap_ratio,
            candidates_evaluated=evaluated,
        )

    def _realize(self, start: RouteLocation, intermediates: Sequence[RouteLocation],
                 request: LoopSearchRequest, timeout: float,
                 index: int) -> Optional[RouteSnapshot]:
        locations: List[RouteLocation] = [start] + list(intermediates) + [start]
        try:
            return self.provider.route(
                locations,
                request.mode,
                timeout=timeout,
                speed_kmh=request.speed_kmh,
                ebike_assist=request.ebike_assist,
                close_ring=True,
            )
        except RoutingProviderError as e:
            logger.warning("Candidate %d skipped: %s", index, e)
            return None


def search_loop(request: LoopSearchRequest, provider,
                policy: Optional[RoutingPolicy] = None,
                cancel_event: Optional[threading.Event] = None) -> LoopSearchResult:
    """Convenience wrapper around LoopSearch.search."""
    return LoopSearch(provider, policy).search(request, cancel_event)

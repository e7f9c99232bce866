"""Tests for loop candidate generation."""

import pytest

from route_geometry.core.models import GeoPoint, LoopCandidate, RouteLocation
from route_geometry.core.utils import haversine_distance
from route_geometry.routing.candidates import (
    build_candidates,
    build_ordered_loop_intermediates,
    candidate_seed,
    estimate_loop_distance_km,
    is_estimate_plausible,
)


START = GeoPoint(48.8566, 2.3522)


def test_seed_is_deterministic_and_depends_on_variation():
    assert candidate_seed(START, 10.0, 0) == candidate_seed(START, 10.0, 0)
    assert candidate_seed(START, 10.0, 0) != candidate_seed(START, 10.0, 1)
    assert candidate_seed(START, 10.0, 0) != candidate_seed(START, 12.0, 0)


def test_identical_inputs_produce_identical_candidates():
    seed = candidate_seed(START, 25.0, 3)
    assert build_candidates(START, 25.0, seed) == build_candidates(START, 25.0, seed)


def test_variation_changes_candidates():
    first = build_candidates(START, 25.0, candidate_seed(START, 25.0, 0))
    second = build_candidates(START, 25.0, candidate_seed(START, 25.0, 1))
    assert first != second


def test_fourteen_candidates_with_cycling_radius():
    target_km = 34.0
    candidates = build_candidates(START, target_km, candidate_seed(START, target_km, 0))

    assert len(candidates) == 14
    factors = [0.85] * 4 + [1.0] * 4 + [1.15] * 4 + [0.85] * 2
    for candidate, factor in zip(candidates, factors):
        radius_a = haversine_distance(START.lat, START.lon,
                                      candidate.point_a.lat, candidate.point_a.lon)
        radius_b = haversine_distance(START.lat, START.lon,
                                      candidate.point_b.lat, candidate.point_b.lon)
        expected = 10000 * factor
        assert radius_a == pytest.approx(expected, rel=1e-6)
        assert expected * 0.9 - 1 <= radius_b <= expected * 1.1 + 1


def test_short_targets_use_minimum_radius():
    candidates = build_candidates(START, 1.0, candidate_seed(START, 1.0, 0))
    radius = haversine_distance(START.lat, START.lon,
                                candidates[4].point_a.lat, candidates[4].point_a.lon)
    assert radius == pytest.approx(800, rel=1e-6)


def test_ordered_intermediates_include_user_waypoints():
    start = RouteLocation(START.lat, START.lon, "Start")
    candidate = LoopCandidate(GeoPoint(48.88, 2.35), GeoPoint(48.86, 2.39))
    user = [RouteLocation(48.87, 2.37, "Cafe")]

    ordered = build_ordered_loop_intermediates(start, user, candidate)

    assert sorted(p.label for p in ordered) == ["Cafe", "loop-candidate-a", "loop-candidate-b"]


def test_estimate_loop_distance():
    start = RouteLocation(48.0, 2.0, "Start")
    a = RouteLocation(48.01, 2.0, "a")
    b = RouteLocation(48.01, 2.01, "b")
    expected = (
        haversine_distance(48.0, 2.0, 48.01, 2.0)
        + haversine_distance(48.01, 2.0, 48.01, 2.01)
        + haversine_distance(48.01, 2.01, 48.0, 2.0)
    ) / 1000

    assert estimate_loop_distance_km(start, [a, b]) == pytest.approx(expected)
    assert estimate_loop_distance_km(start, []) == 0.0


def test_estimate_plausibility_window():
    assert is_estimate_plausible(6.1, 10.0)
    assert is_estimate_plausible(13.9, 10.0)
    assert not is_estimate_plausible(5.9, 10.0)
    assert not is_estimate_plausible(14.1, 10.0)

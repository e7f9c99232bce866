"""Shared fixtures."""

import pytest

from route_geometry.core.errors import RoutingProviderError
from route_geometry.core.models import GeoPoint, RouteLocation, RouteSnapshot
from route_geometry.core.utils import haversine_distance


class FakeRoutingProvider:
    """Routes straight lines between the requested locations."""

    def __init__(self, road_factor=1.0, fixed_distance_m=None, fail=False, on_route=None):
        self.road_factor = road_factor
        self.fixed_distance_m = fixed_distance_m
        self.fail = fail
        self.on_route = on_route
        self.calls = []

    def route(self, locations, mode="bicycle", timeout=None, speed_kmh=None,
              ebike_assist=None, close_ring=False, prefer_cycleways=True,
              avoid_hills=False):
        self.calls.append({"locations": list(locations), "mode": mode, "timeout": timeout,
                           "close_ring": close_ring, "prefer_cycleways": prefer_cycleways,
                           "avoid_hills": avoid_hills})
        if self.on_route is not None:
            self.on_route(self)
        if self.fail:
            raise RoutingProviderError("no route found")

        polyline = [GeoPoint(loc.lat, loc.lon) for loc in locations]
        distance = sum(
            haversine_distance(a.lat, a.lon, b.lat, b.lon)
            for a, b in zip(polyline, polyline[1:])
        ) * self.road_factor
        if self.fixed_distance_m is not None:
            distance = self.fixed_distance_m
        return RouteSnapshot(polyline=polyline, distance_meters=distance,
                             eta_seconds=distance / 5.0)


@pytest.fixture
def make_provider():
    return FakeRoutingProvider


@pytest.fixture
def paris():
    return RouteLocation(48.8566, 2.3522, "Paris")


@pytest.fixture
def straight_route():
    """Two segments heading east along the 48th parallel."""
    return [GeoPoint(48.0, 2.0), GeoPoint(48.0, 2.01), GeoPoint(48.0, 2.02)]

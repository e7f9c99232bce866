"""Tests for the Valhalla client."""

import polyline
import pytest
import requests

from route_geometry.core import valhalla
from route_geometry.core.errors import RoutingProviderError
from route_geometry.core.models import RouteLocation
from route_geometry.core.valhalla import (
    ValhallaClient,
    build_costing_options,
    compute_eta_seconds,
    parse_trip,
    resolve_costing,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


def leg(coords, length_km, time_s):
    return {"shape": polyline.encode(coords, 6),
            "summary": {"length": length_km, "time": time_s}}


@pytest.fixture
def stops():
    return [
        RouteLocation(48.0, 2.0, "Start"),
        RouteLocation(48.01, 2.01, "loop-candidate-a"),
        RouteLocation(48.02, 2.0, "Bakery"),
        RouteLocation(48.0, 2.0, "Start"),
    ]


def test_resolve_costing():
    assert resolve_costing("walking") == "pedestrian"
    assert resolve_costing("bicycle") == "bicycle"
    assert resolve_costing("ebike") == "bicycle"


def test_costing_defaults():
    assert build_costing_options("bicycle") == {"bicycle": {"use_roads": 0.2, "use_hills": 0.7}}
    assert build_costing_options("walking") == {"pedestrian": {"use_hills": 0.45}}


def test_costing_speed_and_assist_bias():
    fast = build_costing_options("bicycle", speed_kmh=30)["bicycle"]["use_hills"]
    slow = build_costing_options("bicycle", speed_kmh=10)["bicycle"]["use_hills"]
    assert fast == pytest.approx(0.82)
    assert slow == pytest.approx(0.6)

    high = build_costing_options("ebike", ebike_assist="high")["bicycle"]["use_hills"]
    low = build_costing_options("ebike", ebike_assist="low")["bicycle"]["use_hills"]
    assert high == pytest.approx(0.9)
    assert low == pytest.approx(0.45)


def test_costing_is_clamped():
    options = build_costing_options("ebike", speed_kmh=25, ebike_assist="high")
    assert options["bicycle"]["use_hills"] <= 0.95


def test_request_marks_shaping_and_stop_points(stops):
    body = ValhallaClient().build_request(stops, "bicycle")

    locations = body["locations"]
    assert "type" not in locations[0]
    assert locations[1]["type"] == "through"
    assert locations[2]["type"] == "break"
    assert "type" not in locations[3]
    assert body["costing"] == "bicycle"
    assert body["directions_options"]["language"] == "fr"


def test_parse_trip_joins_legs_and_closes_ring():
    data = {"trip": {"legs": [
        leg([(48.0, 2.0), (48.01, 2.01)], 1.5, 300),
        leg([(48.01, 2.01), (48.02, 2.0)], 1.2, 240),
    ]}}

    snapshot = parse_trip(data, close_ring=True)

    assert len(snapshot.polyline) == 4
    assert snapshot.polyline[0] == snapshot.polyline[-1]
    assert snapshot.distance_meters == pytest.approx(2700.0)
    assert snapshot.eta_seconds == pytest.approx(540.0)


def test_parse_trip_uses_fixed_speed_for_eta():
    data = {"trip": {"legs": [leg([(48.0, 2.0), (48.01, 2.0)], 18.0, 100)]}}
    assert parse_trip(data, speed_kmh=18.0).eta_seconds == pytest.approx(3600.0)


@pytest.mark.parametrize("data", [{}, {"trip": {}}, {"trip": {"legs": []}}, None,
                                  {"trip": {"legs": [{"summary": {"length": "x"}}]}}])
def test_parse_trip_rejects_malformed_payloads(data):
    with pytest.raises(RoutingProviderError):
        parse_trip(data)


def test_compute_eta_seconds():
    assert compute_eta_seconds(10000, 20, 999) == pytest.approx(1800)
    assert compute_eta_seconds(10000, None, 999) == 999
    assert compute_eta_seconds(0, 20, 5) == 5


def test_route_posts_to_server(monkeypatch, stops):
    captured = {}

    def fake_post(url, json, timeout):
        captured.update(url=url, json=json, timeout=timeout)
        return FakeResponse({"trip": {"legs": [leg([(48.0, 2.0), (48.02, 2.0)], 3.0, 600)]}})

    monkeypatch.setattr(valhalla.requests, "post", fake_post)

    snapshot = ValhallaClient("http://valhalla:8002/").route(stops, timeout=4.5, close_ring=True)

    assert captured["url"] == "http://valhalla:8002/route"
    assert captured["timeout"] == 4.5
    assert snapshot.distance_km == pytest.approx(3.0)


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=400, text="No path could be found"),
    FakeResponse(payload=None),
])
def test_route_errors_become_provider_errors(monkeypatch, stops, response):
    monkeypatch.setattr(valhalla.requests, "post", lambda url, json, timeout: response)
    with pytest.raises(RoutingProviderError):
        ValhallaClient().route(stops)


def test_route_timeout_becomes_provider_error(monkeypatch, stops):
    def fake_post(url, json, timeout):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(valhalla.requests, "post", fake_post)
    with pytest.raises(RoutingProviderError):
        ValhallaClient().route(stops)


def test_route_needs_two_locations(stops):
    with pytest.raises(RoutingProviderError):
        ValhallaClient().route(stops[:1])


def test_costing_for_routes_that_accept_roads():
    options = build_costing_options("bicycle", prefer_cycleways=False)
    assert options == {"bicycle": {"use_roads": 0.6, "use_hills": 0.7}}


@pytest.mark.parametrize("mode, costing, expected", [
    ("bicycle", "bicycle", 0.2),
    ("ebike", "bicycle", 0.2),
    ("walking", "pedestrian", 0.15),
])
def test_avoid_hills_lowers_base_and_ignores_speed(mode, costing, expected):
    slow = build_costing_options(mode, speed_kmh=3, avoid_hills=True)
    fast = build_costing_options(mode, speed_kmh=30, avoid_hills=True)
    assert slow[costing]["use_hills"] == pytest.approx(expected)
    assert fast[costing]["use_hills"] == pytest.approx(expected)


def test_avoid_hills_keeps_ebike_assist_bias():
    options = build_costing_options("ebike", ebike_assist="low", avoid_hills=True)
    assert options["bicycle"]["use_hills"] == pytest.approx(0.05)


def test_route_sends_routing_preferences(monkeypatch, stops):
    captured = {}

    def fake_post(url, json, timeout):
        captured.update(json)
        return FakeResponse({"trip": {"legs": [leg([(48.0, 2.0), (48.02, 2.0)], 3.0, 600)]}})

    monkeypatch.setattr(valhalla.requests, "post", fake_post)

    ValhallaClient().route(stops, "bicycle", prefer_cycleways=False, avoid_hills=True)

    assert captured["costing_options"] == {"bicycle": {"use_roads": 0.6, "use_hills": 0.2}}

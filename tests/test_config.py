"""Tests for the category catalog and routing policy."""

import pytest

from route_geometry.core.config import Config, clamp_corridor
from route_geometry.core.policy import MAX_EXACT_WAYPOINTS, RoutingPolicy
from route_geometry.routing import LoopRouteScorer, WaypointOrderer


CONFIG_INI = """
[corridor]
default_meters = 20

[gpx_symbols]
water = Drinking Water

[water]
amenity = drinking_water, fountain,
natural = spring
"""


def test_default_catalog():
    config = Config()
    assert config.get_category_list() == ["monuments", "landscapes", "shops", "services"]
    assert config.get_category_filters(" Services ")["amenity"][0] == "cafe"
    assert config.get_category_filters("unknown") is None
    assert config.corridor_meters == 500


def test_catalog_is_read_only():
    config = Config()
    with pytest.raises(TypeError):
        config.get_categories()["extra"] = {}
    with pytest.raises(TypeError):
        config.get_category_filters("shops")["shop"] = ("kiosk",)
    assert isinstance(config.get_category_filters("shops")["shop"], tuple)


def test_catalog_from_ini(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(CONFIG_INI)

    config = Config(str(path))

    assert config.get_category_list() == ["water"]
    assert config.get_category_filters("water")["amenity"] == ("drinking_water", "fountain")
    assert config.corridor_meters == 50
    assert config.get_gpx_symbol("water") == "Drinking Water"
    assert config.get_gpx_symbol("unknown") == "Flag, Blue"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / "missing.ini"))


@pytest.mark.parametrize("value, expected", [(10, 50), (50, 50), (750, 750), (9000, 5000)])
def test_clamp_corridor(value, expected):
    assert clamp_corridor(value) == expected


def test_policy_defaults():
    policy = RoutingPolicy()
    assert policy.get_end_weight("route") == 0.35
    assert policy.get_end_weight("loop") == 0.18
    assert policy.loop["candidate_count"] == 14
    assert policy.loop["compute_budget_s"] == 12.0


@pytest.mark.parametrize("ratio, label", [
    (0.0, "low"), (0.0799, "low"), (0.08, "medium"), (0.1799, "medium"), (0.18, "high"), (1.0, "high"),
])
def test_overlap_labels(ratio, label):
    assert RoutingPolicy().overlap_label(ratio) == label


def test_policy_yaml_overrides(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("waypoints:\n  max_exact_waypoints: 8\nloop:\n  compute_budget_s: 3\n")

    policy = RoutingPolicy(str(path))

    assert policy.waypoints["max_exact_waypoints"] == 8
    assert policy.loop["compute_budget_s"] == 3
    assert policy.loop["candidate_count"] == 14


def test_exact_ordering_limit_cannot_be_raised(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text(f"waypoints:\n  max_exact_waypoints: {MAX_EXACT_WAYPOINTS + 1}\n")
    with pytest.raises(ValueError):
        RoutingPolicy(str(path))


def test_from_yaml_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / "policy.yaml"
    path.write_text("overlap: [unclosed\n")

    policy = RoutingPolicy.from_yaml(str(path))

    assert policy.overlap["medium_threshold"] == 0.08
    assert "using default policy" in caplog.text

    assert RoutingPolicy.from_yaml(str(tmp_path / "missing.yaml")).loop["candidate_count"] == 14


def test_components_do_not_share_default_policy():
    first = WaypointOrderer()
    first.policy.waypoints["max_exact_waypoints"] = 2
    first.policy.loop["distance_tolerance_pct"] = 0.5

    assert WaypointOrderer().policy.waypoints["max_exact_waypoints"] == MAX_EXACT_WAYPOINTS
    assert not LoopRouteScorer().is_within_tolerance(6.0, 10.0)
    assert RoutingPolicy().loop["distance_tolerance_pct"] == 0.15

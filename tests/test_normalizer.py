"""Tests for turning Overpass elements into POIs."""

import pytest

from route_geometry.core.config import Config
from route_geometry.pois.normalizer import (
    build_tag_details,
    element_coordinate,
    element_geometry,
    map_elements,
    normalize_language,
    resolve_category,
    resolve_kind,
    resolve_name,
)

ALL_CATEGORIES = ["monuments", "landscapes", "shops", "services"]


def node(osm_id, lat, lon, **tags):
    return {"type": "node", "id": osm_id, "lat": lat, "lon": lon, "tags": tags}


@pytest.fixture
def config():
    return Config()


@pytest.mark.parametrize("value, expected", [
    ("fr-FR", "fr"),
    ("EN_gb", "en"),
    (" fr ", "fr"),
    ("de", None),
    ("", None),
    (None, None),
])
def test_normalize_language(value, expected):
    assert normalize_language(value) == expected


def test_resolve_name_prefers_localized_name(config):
    tags = {"name": "Tour Eiffel", "name:en": "Eiffel Tower"}
    assert resolve_name(tags, "en-US", config) == "Eiffel Tower"
    assert resolve_name(tags, "fr", config) == "Tour Eiffel"
    assert resolve_name(tags, None, config) == "Tour Eiffel"


def test_resolve_name_fallbacks(config):
    assert resolve_name({"brand": "Decathlon"}, "fr", config) == "Decathlon"
    assert resolve_name({"amenity": "drinking_water"}, "en", config) == "Drinking Water"
    assert resolve_name({"foo": "bar"}, "en", config) == "Point of interest"
    assert resolve_name({"foo": "bar"}, "fr", config) == "Point d'interet"


def test_resolve_category_follows_request_order(config):
    tags = {"tourism": "viewpoint", "amenity": "cafe"}
    assert resolve_category(["services", "landscapes"], tags, config) == "services"
    assert resolve_category(["landscapes", "services"], tags, config) == "landscapes"
    assert resolve_category(["shops"], tags, config) is None


def test_resolve_kind(config):
    assert resolve_kind({"amenity": "cafe", "historic": "monument"}, config) == "historic:monument"
    assert resolve_kind({"highway": "bus_stop"}, config) is None


def test_element_coordinate_order():
    way = {"center": {"lat": 48.1, "lon": 2.1},
           "geometry": [{"lat": 48.0, "lon": 2.0}, {"lat": 48.2, "lon": 2.2}]}
    assert element_coordinate(way, element_geometry(way)).lat == 48.1

    del way["center"]
    assert element_coordinate(way, element_geometry(way)).lat == 48.0

    assert element_coordinate({"lat": "bad", "lon": 2.0}, []) is None
    assert element_coordinate({}, []) is None


def test_element_geometry_skips_broken_vertices():
    element = {"geometry": [{"lat": 48.0, "lon": 2.0}, {"lat": 48.1}, None,
                            {"lat": "x", "lon": 2.0}]}
    assert len(element_geometry(element)) == 1


def test_build_tag_details_drops_blanks():
    assert build_tag_details({" name ": " Relais ", "note": " ", "": "x"}) == {"name": "Relais"}


def test_map_elements_filters_and_sorts(straight_route):
    elements = [
        node(3, 48.0002, 2.018, amenity="cafe", name="Far Cafe"),
        node(1, 48.0001, 2.002, historic="monument", name="Monument"),
        node(2, 48.05, 2.01, amenity="cafe", name="Outside"),
        node(4, 48.0, 2.01, highway="crossing"),
        {"type": "node", "id": 5, "lat": 48.0, "lon": 2.01},
    ]

    pois = map_elements(elements, straight_route, ALL_CATEGORIES, 500)

    assert [poi.id for poi in pois] == ["node/1", "node/3"]
    assert pois[0].category == "monuments"
    assert pois[0].kind == "historic:monument"
    assert pois[1].distance_to_route_meters == pytest.approx(22.24, rel=1e-2)
    assert pois[0].distance_along_route_meters < pois[1].distance_along_route_meters


def test_map_elements_respects_limit_and_corridor_floor(straight_route):
    elements = [node(i, 48.0003, 2.0 + i * 0.001, amenity="cafe", name=f"Cafe {i}")
                for i in range(1, 10)]

    assert len(map_elements(elements, straight_route, ["services"], 500, limit=3)) == 3
    assert len(map_elements(elements, straight_route, ["services"], 500, limit=0)) == 1
    # Corridor below the floor is raised to 50 m, these cafes sit ~33 m away
    assert len(map_elements(elements, straight_route, ["services"], 5)) == 9


def test_map_elements_keeps_closest_copy_of_repeated_element(straight_route):
    elements = [
        node(7, 48.002, 2.005, amenity="cafe", name="Le Relais"),
        node(7, 48.001, 2.005, amenity="cafe", name="Le Relais"),
    ]

    pois = map_elements(elements, straight_route, ["services"], 500)

    assert len(pois) == 1
    assert pois[0].distance_to_route_meters == pytest.approx(111.19, rel=1e-3)


def test_map_elements_merges_semantic_duplicates(straight_route):
    elements = [
        node(1, 48.0001, 2.005, amenity="cafe", name="Café du Port"),
        {"type": "way", "id": 2, "center": {"lat": 48.0002, "lon": 2.0051},
         "tags": {"amenity": "cafe", "name": "cafe du port", "website": "x"}},
    ]

    pois = map_elements(elements, straight_route, ["services"], 500)

    assert len(pois) == 1


def test_map_elements_uses_linear_footprint(straight_route):
    path = {
        "type": "way", "id": 9,
        "center": {"lat": 48.003, "lon": 2.012},
        "geometry": [{"lat": 48.005, "lon": 2.012}, {"lat": 48.0, "lon": 2.012}],
        "tags": {"tourism": "viewpoint", "name": "Belvedere"},
    }

    pois = map_elements([path], straight_route, ["landscapes"], 100)

    assert len(pois) == 1
    assert pois[0].distance_to_route_meters == pytest.approx(0, abs=1e-6)
    assert pois[0].location.lat == pytest.approx(48.0)


def test_map_elements_skips_malformed_elements(straight_route):
    elements = [
        "node/1",
        {"type": "node", "id": 2, "tags": ["amenity=cafe"], "lat": 48.0, "lon": 2.01},
        {"type": "way", "id": 3, "center": [48.0, 2.01], "geometry": "broken",
         "tags": {"amenity": "cafe", "name": "No Position"}},
        node(4, 48.0001, 2.01, amenity="cafe", name="Kept"),
    ]

    pois = map_elements(elements, straight_route, ["services"], 500)

    assert [poi.id for poi in pois] == ["node/4"]


def test_element_coordinate_ignores_non_mapping_center():
    assert element_coordinate({"center": "48.1,2.1"}, []) is None

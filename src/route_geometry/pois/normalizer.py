"""Conversion of raw Overpass elements into POIs along a route."""

import math
from typing import Dict, List, Mapping, Optional, Sequence

from ..core.config import Config, clamp_corridor
from ..core.models import GeoPoint, PoiMatch
from ..core.policy import RoutingPolicy
from .deduplication import get_tag_value, merge_semantic_duplicates
from .projection import project_feature


LOCALIZED_NAME_KEYS = {
    "fr": ("name:fr", "name:fr-fr", "name:fr_fr"),
    "en": ("name:en", "name:en-gb", "name:en-us", "name:en_gb", "name:en_us"),
}

FALLBACK_NAME_KEYS = ("name", "int_name", "official_name", "brand", "operator")

MAX_LIMIT = 5000


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Reduce a language tag such as 'fr-FR' or 'en_GB' to 'fr' or 'en'."""
    if not language or not language.strip():
        return None
    language = language.strip().lower()
    if language.startswith("fr"):
        return "fr"
    if language.startswith("en"):
        return "en"
    return None


def _as_point(lat, lon) -> Optional[GeoPoint]:
    try:
        point = GeoPoint(float(lat), float(lon))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(point.lat) and math.isfinite(point.lon)):
        return None
    return point


def element_geometry(element: Mapping) -> List[GeoPoint]:
    """Vertices of a way or relation returned with ``out geom``."""
    geometry = element.get("geometry")
    if not isinstance(geometry, list):
        return []

    points = []
    for vertex in geometry:
        if not isinstance(vertex, Mapping):
            continue
        try:
            points.append(GeoPoint(float(vertex["lat"]), float(vertex["lon"])))
        except (KeyError, TypeError, ValueError):
            continue
    return points


def element_coordinate(element: Mapping, geometry: Sequence[GeoPoint]) -> Optional[GeoPoint]:
    """Node position, then centre, then first finite geometry vertex."""
    if element.get("lat") is not None and element.get("lon") is not None:
        return _as_point(element["lat"], element["lon"])

    center = element.get("center")
    if (isinstance(center, Mapping)
            and center.get("lat") is not None and center.get("lon") is not None):
        return _as_point(center["lat"], center["lon"])

    for vertex in geometry:
        if math.isfinite(vertex.lat) and math.isfinite(vertex.lon):
            return vertex
    return None


def resolve_category(categories: Sequence[str], tags: Mapping[str, str],
                     config: Config) -> Optional[str]:
    """First requested category whose filters match the tags."""
    for category in categories:
        filters = config.get_category_filters(category)
        if filters is None:
            continue
        for key, values in filters.items():
            value = tags.get(key)
            if value is None:
                continue
            if not values or str(value).lower() in (v.lower() for v in values):
                return category
    return None


def resolve_kind(tags: Mapping[str, str], config: Config) -> Optional[str]:
    for key in config.KIND_PRIORITY_KEYS:
        value = get_tag_value(tags, key)
        if value is not None:
            return f"{key}:{value}"
    return None


def resolve_name(tags: Mapping[str, str], language: Optional[str], config: Config) -> str:
    """
    Pick a display name for a POI.

    Args:
        tags: OSM tags
        language: Preferred language ('fr', 'en' or None)
        config: Provides the kind keys used when the POI has no name

    Returns:
        Localized name, generic name, brand or operator, a readable kind,
        or a placeholder
    """
    language = normalize_language(language)

    for key in LOCALIZED_NAME_KEYS.get(language, ()):
        value = get_tag_value(tags, key)
        if value is not None:
            return value

    for key in FALLBACK_NAME_KEYS:
        value = get_tag_value(tags, key)
        if value is not None:
            return value

    for key in config.KIND_PRIORITY_KEYS:
        value = get_tag_value(tags, key)
        if value is not None:
            return value.replace("_", " ").title()

    return "Point of interest" if language == "en" else "Point d'interet"


def build_tag_details(tags: Mapping[str, str]) -> Dict[str, str]:
    return {
        str(key).strip(): str(value).strip()
        for key, value in tags.items()
        if key and str(key).strip() and value is not None and str(value).strip()
    }


def map_elements(elements: Sequence[Mapping], route: Sequence[GeoPoint],
                 categories: Sequence[str], corridor_meters: float,
                 limit: int = 200, language: Optional[str] = None,
                 config: Optional[Config] = None,
                 policy: Optional[RoutingPolicy] = None) -> List[PoiMatch]:
    """
    Turn Overpass elements into deduplicated POIs ordered along the route.

    Args:
        elements: Raw Overpass elements
        route: Route polyline
        categories: Requested categories, in priority order
        corridor_meters: Maximum distance from the route
        limit: Maximum number of POIs returned
        language: Preferred name language
        config: Category catalog
        policy: Deduplication thresholds

    Returns:
        POIs sorted by distance along the route, then distance to it
    """
    config = config or Config()
    corridor_meters = clamp_corridor(corridor_meters)
    limit = max(1, min(MAX_LIMIT, int(limit)))

    results: Dict[str, PoiMatch] = {}
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        tags = element.get("tags")
        if not tags or not isinstance(tags, Mapping):
            continue

        geometry = element_geometry(element)
        point = element_coordinate(element, geometry)
        if point is None:
            continue

        category = resolve_category(categories, tags, config)
        if category is None:
            continue

        projection = project_feature(route, point, geometry)
        distance = projection.distance_to_route_meters
        if not math.isfinite(distance) or distance > corridor_meters:
            continue

        osm_type = str(element.get("type", ""))
        osm_id = element.get("id", 0)
        poi_id = f"{osm_type}/{osm_id}"

        existing = results.get(poi_id)
        if existing is not None:
            if distance < existing.distance_to_route_meters:
                existing.distance_to_route_meters = distance
                existing.distance_along_route_meters = projection.distance_along_route_meters
            continue

        results[poi_id] = PoiMatch(
            id=poi_id,
            name=resolve_name(tags, language, config),
            category=category,
            kind=resolve_kind(tags, config),
            location=projection.matched_point,
            osm_type=osm_type,
            osm_id=osm_id,
            tags=build_tag_details(tags),
            distance_to_route_meters=distance,
            distance_along_route_meters=projection.distance_along_route_meters,
        )

    deduplicated = merge_semantic_duplicates(results.values(), policy)
    deduplicated.sort(key=lambda m: (m.distance_along_route_meters,
                                     m.distance_to_route_meters))
    return deduplicated[:limit]

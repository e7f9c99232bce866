"""Projection of POIs onto a route corridor."""

import math
from typing import List, Optional, Sequence, Tuple

from ..core.models import CorridorMatchRequest, GeoPoint, RouteProjection
from ..core.utils import (
    is_finite_point,
    point_distance,
    project_point_to_segment,
    project_segment_to_segment,
)


def _route_segments(route: Sequence[GeoPoint]) -> List[Tuple[GeoPoint, GeoPoint, float]]:
    """Finite route segments with their lengths in meters."""
    segments = []
    for a, b in zip(route, route[1:]):
        if not (is_finite_point(a) and is_finite_point(b)):
            continue
        segments.append((a, b, point_distance(a, b)))
    return segments


def project_point(route: Sequence[GeoPoint], point: GeoPoint) -> RouteProjection:
    """
    Locate a point relative to a route.

    Args:
        route: Route polyline
        point: Feature location

    Returns:
        RouteProjection with the input point as matched point. The distance
        to the route is infinite if the route has no usable segment.
    """
    min_distance = math.inf
    along = math.inf
    traversed = 0.0

    for a, b, length in _route_segments(route):
        projection = project_point_to_segment(point, a, b)
        if projection.distance_meters < min_distance:
            min_distance = projection.distance_meters
            along = traversed + projection.t * length
        traversed += length

    if not math.isfinite(along):
        along = traversed

    return RouteProjection(min_distance, along, point)


def project_feature(route: Sequence[GeoPoint], point: GeoPoint,
                    feature_geometry: Optional[Sequence[GeoPoint]] = None) -> RouteProjection:
    """
    Locate a feature relative to a route.

    Linear features (roads, paths, building outlines) are matched segment
    against segment, and the matched point lies on the feature's own
    footprint. A feature without any usable segment is matched through its
    vertices and the fallback point, keeping the closest.

    Args:
        route: Route polyline
        point: Fallback location of the feature (node position or centre)
        feature_geometry: Feature vertices, if any

    Returns:
        RouteProjection
    """
    if not feature_geometry:
        return project_point(route, point)

    route_segments = _route_segments(route)
    if not route_segments:
        return RouteProjection(math.inf, 0.0, point)

    feature_segments = [
        (a, b) for a, b in zip(feature_geometry, feature_geometry[1:])
        if is_finite_point(a) and is_finite_point(b)
    ]

    if not feature_segments:
        best = project_point(route, point)
        for vertex in feature_geometry:
            if not is_finite_point(vertex):
                continue
            candidate = project_point(route, vertex)
            if candidate.distance_to_route_meters < best.distance_to_route_meters:
                best = candidate
        return best

    min_distance = math.inf
    along = math.inf
    matched = point
    traversed = 0.0

    for route_a, route_b, length in route_segments:
        for feature_a, feature_b in feature_segments:
            projection = project_segment_to_segment(route_a, route_b, feature_a, feature_b)
            if projection.distance_meters >= min_distance:
                continue
            min_distance = projection.distance_meters
            along = traversed + projection.route_t * length
            t = projection.feature_t
            matched = GeoPoint(
                feature_a.lat + (feature_b.lat - feature_a.lat) * t,
                feature_a.lon + (feature_b.lon - feature_a.lon) * t,
            )
        traversed += length

    if not math.isfinite(along):
        along = traversed

    return RouteProjection(min_distance, along, matched)


def match_corridor(request: CorridorMatchRequest) -> RouteProjection:
    return project_feature(request.route, request.point, request.feature_geometry)

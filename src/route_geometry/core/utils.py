"""Spherical geometry helpers shared by routing and POI matching."""

import gpxpy
from math import asin, atan2, cos, degrees, inf, isfinite, radians, sin, sqrt
from pathlib import Path
from typing import List, Sequence

from .models import Bounds, GeoPoint, SegmentPairProjection, SegmentProjection


EARTH_RADIUS_M = 6371000  # Earth radius in meters
METERS_PER_DEGREE = 111320.0

# Segments shorter than this (in projected meters) are treated as points
DEGENERATE_SEGMENT_M = 0.000001
SEGMENT_PAIR_EPSILON = 1e-9


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate distance between two points in meters using Haversine formula.

    Args:
        lat1, lon1: Coordinates of first point
        lat2, lon2: Coordinates of second point

    Returns:
        Distance in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat/2)**2 + cos(lat1) * cos(lat2) * sin(dlon/2)**2
    c = 2 * asin(min(1.0, sqrt(a)))

    return EARTH_RADIUS_M * c


def point_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in meters between two points."""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def normalize_longitude(lon: float) -> float:
    """Wrap a longitude into [-180, 180]."""
    if -180 <= lon <= 180:
        return lon
    return ((lon + 180) % 360) - 180


def offset_point(start: GeoPoint, distance_meters: float,
                 bearing_degrees: float) -> GeoPoint:
    """
    Move from a point along a great circle.

    Args:
        start: Origin point
        distance_meters: Distance to travel
        bearing_degrees: Initial bearing, clockwise from north

    Returns:
        Destination point with longitude wrapped into [-180, 180]
    """
    if distance_meters == 0:
        return start

    bearing = radians(bearing_degrees)
    angular = distance_meters / EARTH_RADIUS_M
    lat1 = radians(start.lat)
    lon1 = radians(start.lon)

    lat2 = asin(sin(lat1) * cos(angular) + cos(lat1) * sin(angular) * cos(bearing))
    lon2 = lon1 + atan2(
        sin(bearing) * sin(angular) * cos(lat1),
        cos(angular) - sin(lat1) * sin(lat2),
    )

    return GeoPoint(degrees(lat2), normalize_longitude(degrees(lon2)))


def _to_meters(lat, lon, reference_lat):
    """Equirectangular projection around a reference latitude."""
    x = radians(lon) * cos(radians(reference_lat)) * EARTH_RADIUS_M
    y = radians(lat) * EARTH_RADIUS_M
    return x, y


def project_point_to_segment(point: GeoPoint, seg_a: GeoPoint,
                             seg_b: GeoPoint) -> SegmentProjection:
    """
    Find the nearest point of a segment.

    The segment is projected onto a local plane centred on its mid-latitude,
    which is accurate for segments up to a few kilometers.

    Args:
        point: Point to project
        seg_a, seg_b: Segment ends

    Returns:
        SegmentProjection with the distance in meters and t in [0, 1]
    """
    reference_lat = (seg_a.lat + seg_b.lat) / 2
    ax, ay = _to_meters(seg_a.lat, seg_a.lon, reference_lat)
    bx, by = _to_meters(seg_b.lat, seg_b.lon, reference_lat)
    px, py = _to_meters(point.lat, point.lon, reference_lat)

    dx = bx - ax
    dy = by - ay
    if abs(dx) < DEGENERATE_SEGMENT_M and abs(dy) < DEGENERATE_SEGMENT_M:
        return SegmentProjection(sqrt((px - ax)**2 + (py - ay)**2), 0.0)

    t = ((px - ax) * dx + (py - ay) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))

    proj_x = ax + t * dx
    proj_y = ay + t * dy
    return SegmentProjection(sqrt((px - proj_x)**2 + (py - proj_y)**2), t)


def project_segment_to_segment(route_a: GeoPoint, route_b: GeoPoint,
                               feature_a: GeoPoint,
                               feature_b: GeoPoint) -> SegmentPairProjection:
    """
    Find the closest approach between a route segment and a feature segment.

    Both segments share one local plane centred on the mean latitude of the
    four ends. Zero-length segments fall back to a point projection.

    Args:
        route_a, route_b: Route segment ends
        feature_a, feature_b: Feature segment ends

    Returns:
        SegmentPairProjection with the distance in meters and the clamped
        fraction along each segment
    """
    eps = SEGMENT_PAIR_EPSILON
    reference_lat = (route_a.lat + route_b.lat + feature_a.lat + feature_b.lat) / 4
    ax, ay = _to_meters(route_a.lat, route_a.lon, reference_lat)
    bx, by = _to_meters(route_b.lat, route_b.lon, reference_lat)
    cx, cy = _to_meters(feature_a.lat, feature_a.lon, reference_lat)
    dx, dy = _to_meters(feature_b.lat, feature_b.lon, reference_lat)

    ux, uy = bx - ax, by - ay
    vx, vy = dx - cx, dy - cy
    wx, wy = ax - cx, ay - cy

    a = ux * ux + uy * uy
    b = ux * vx + uy * vy
    c = vx * vx + vy * vy
    d = ux * wx + uy * wy
    e = vx * wx + vy * wy
    denominator = a * c - b * b

    if a <= eps and c <= eps:
        return SegmentPairProjection(sqrt(wx * wx + wy * wy), 0.0, 0.0)

    if a <= eps:
        projection = project_point_to_segment(route_a, feature_a, feature_b)
        return SegmentPairProjection(projection.distance_meters, 0.0, projection.t)

    if c <= eps:
        projection = project_point_to_segment(feature_a, route_a, route_b)
        return SegmentPairProjection(projection.distance_meters, projection.t, 0.0)

    route_den = denominator
    feature_den = denominator

    if abs(denominator) < eps:
        # Parallel segments: pin the route end and slide along the feature
        route_num, route_den = 0.0, 1.0
        feature_num, feature_den = e, c
    else:
        route_num = b * e - c * d
        feature_num = a * e - b * d
        if route_num < 0:
            route_num = 0.0
            feature_num, feature_den = e, c
        elif route_num > route_den:
            route_num = route_den
            feature_num, feature_den = e + b, c

    if feature_num < 0:
        feature_num = 0.0
        if -d < 0:
            route_num = 0.0
        elif -d > a:
            route_num = route_den
        else:
            route_num, route_den = -d, a
    elif feature_num > feature_den:
        feature_num = feature_den
        if -d + b < 0:
            route_num = 0.0
        elif -d + b > a:
            route_num = route_den
        else:
            route_num, route_den = -d + b, a

    route_t = 0.0 if abs(route_num) < eps else route_num / route_den
    feature_t = 0.0 if abs(feature_num) < eps else feature_num / feature_den

    diff_x = wx + route_t * ux - feature_t * vx
    diff_y = wy + route_t * uy - feature_t * vy
    return SegmentPairProjection(sqrt(diff_x * diff_x + diff_y * diff_y),
                                 route_t, feature_t)


def is_finite_point(point: GeoPoint) -> bool:
    return isfinite(point.lat) and isfinite(point.lon)


def load_gpx_route(gpx_file) -> List[GeoPoint]:
    """
    Load and parse GPX route file.

    Args:
        gpx_file: Path to GPX file

    Returns:
        List of GeoPoint, from tracks, then routes, then waypoints

    Raises:
        ValueError: If no points found in GPX file
    """
    gpx_file = Path(gpx_file)

    with open(gpx_file) as f:
        gpx = gpxpy.parse(f)

    points = []

    # Try tracks first
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                points.append(GeoPoint(point.latitude, point.longitude))

    if not points:
        for route in gpx.routes:
            for point in route.points:
                points.append(GeoPoint(point.latitude, point.longitude))

    # Fall back to waypoints if no tracks
    if not points:
        for waypoint in gpx.waypoints:
            points.append(GeoPoint(waypoint.latitude, waypoint.longitude))

    if not points:
        raise ValueError(f"No points found in GPX file: {gpx_file}")

    return points


def calculate_route_length(points: Sequence[GeoPoint]) -> float:
    """
    Calculate total route length in kilometers.

    Args:
        points: Route polyline

    Returns:
        Total length in kilometers
    """
    total = 0.0
    for i in range(len(points) - 1):
        total += point_distance(points[i], points[i + 1])
    return total / 1000  # Convert to km


def compute_bounds(points: Sequence[GeoPoint]) -> Bounds:
    """
    Bounding box of the finite points.

    Returns:
        Bounds, with infinite values if there is no finite point
    """
    finite = [p for p in points if is_finite_point(p)]
    if not finite:
        return Bounds(inf, inf, -inf, -inf)
    lats = [p.lat for p in finite]
    lons = [p.lon for p in finite]
    return Bounds(min(lats), min(lons), max(lats), max(lons))


def expand_bounds(bounds: Bounds, buffer_meters: float) -> Bounds:
    """Pad a bounding box by a distance, staying inside valid coordinates."""
    if not bounds.is_valid():
        return bounds

    lat_padding = buffer_meters / METERS_PER_DEGREE
    mid_lat = max(-89.0, min(89.0, (bounds.min_lat + bounds.max_lat) / 2))
    lon_padding = buffer_meters / (METERS_PER_DEGREE * cos(radians(mid_lat)))

    return Bounds(
        max(-90.0, bounds.min_lat - lat_padding),
        max(-180.0, bounds.min_lon - lon_padding),
        min(90.0, bounds.max_lat + lat_padding),
        min(180.0, bounds.max_lon + lon_padding),
    )


def get_bounding_box(points: Sequence[GeoPoint], buffer_km: float = 2) -> Bounds:
    """
    Calculate bounding box around route with buffer.

    Args:
        points: Route polyline
        buffer_km: Buffer distance in kilometers

    Returns:
        Bounds, invalid (infinite) if the route has no finite point
    """
    return expand_bounds(compute_bounds(points), buffer_km * 1000)

"""Core utilities for Route Geometry."""

from .utils import (
    haversine_distance,
    point_distance,
    offset_point,
    project_point_to_segment,
    project_segment_to_segment,
    load_gpx_route,
    calculate_route_length,
    get_bounding_box,
)
from .config import Config
from .policy import RoutingPolicy
from .errors import (
    RouteGeometryError,
    RoutingProviderError,
    LoopNotFoundError,
    PoiSourceError,
)
from .models import GeoPoint, RouteLocation, PoiMatch
from .valhalla import ValhallaClient, check_valhalla_connection

__all__ = [
    "haversine_distance",
    "point_distance",
    "offset_point",
    "project_point_to_segment",
    "project_segment_to_segment",
    "load_gpx_route",
    "calculate_route_length",
    "get_bounding_box",
    "Config",
    "RoutingPolicy",
    "RouteGeometryError",
    "RoutingProviderError",
    "LoopNotFoundError",
    "PoiSourceError",
    "GeoPoint",
    "RouteLocation",
    "PoiMatch",
    "ValhallaClient",
    "check_valhalla_connection",
]

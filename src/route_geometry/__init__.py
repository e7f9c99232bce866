"""Route Geometry - Waypoint ordering, loop synthesis and POI matching along routes."""

__version__ = "0.1.0"

# Expose main classes for programmatic use
from .core import Config, RoutingPolicy, ValhallaClient, LoopNotFoundError
from .routing import WaypointOrderer, LoopSearch
from .pois import map_elements, merge_semantic_duplicates, OverpassClient
from .exporters import GpxExporter

__all__ = [
    "__version__",
    "Config",
    "RoutingPolicy",
    "ValhallaClient",
    "LoopNotFoundError",
    "WaypointOrderer",
    "LoopSearch",
    "map_elements",
    "merge_semantic_duplicates",
    "OverpassClient",
    "GpxExporter",
]

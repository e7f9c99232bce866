"""POI corridor matching."""

from .projection import project_point, project_feature, match_corridor
from .deduplication import merge_semantic_duplicates, build_semantic_key, normalize_text
from .overpass import (
    OverpassClient,
    build_overpass_query,
    normalize_categories,
)
from .normalizer import map_elements

__all__ = [
    "project_point",
    "project_feature",
    "match_corridor",
    "merge_semantic_duplicates",
    "build_semantic_key",
    "normalize_text",
    "OverpassClient",
    "build_overpass_query",
    "normalize_categories",
    "map_elements",
]

"""Merging of POI matches that describe the same place."""

import unicodedata
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.models import PoiMatch
from ..core.policy import RoutingPolicy
from ..core.utils import point_distance


CANONICAL_NAME_KEYS = ("name", "name:fr", "name:en", "int_name", "official_name")

# Placeholder names produced when a POI has no name of its own, normalized
GENERIC_POI_NAMES = frozenset({
    "point d'interet",
    "point dinteret",
    "point of interest",
})

OSM_TYPE_RANK = {
    "relation": 3,
    "way": 2,
    "node": 1,
}


def get_tag_value(tags: Optional[Mapping[str, str]], key: str) -> Optional[str]:
    """
    Look up a tag, ignoring key case and blank values.

    Args:
        tags: OSM tags
        key: Tag key

    Returns:
        Trimmed value, or None
    """
    if not tags:
        return None

    value = tags.get(key)
    if value and value.strip():
        return value.strip()

    key = key.lower()
    for tag_key, tag_value in tags.items():
        if tag_key.lower() != key or not tag_value or not tag_value.strip():
            continue
        return tag_value.strip()
    return None


def resolve_canonical_name(tags: Optional[Mapping[str, str]]) -> Optional[str]:
    for key in CANONICAL_NAME_KEYS:
        value = get_tag_value(tags, key)
        if value is not None:
            return value
    return None


def normalize_text(value: Optional[str]) -> str:
    """Strip accents, lowercase and collapse whitespace."""
    if not value or not value.strip():
        return ""
    decomposed = unicodedata.normalize("NFD", value.strip())
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return " ".join(stripped.lower().split())


def build_semantic_key(match: PoiMatch) -> Optional[str]:
    """
    Build the key under which same-named POIs are compared.

    Returns:
        ``category|kind|name`` with kind and name normalized, or None when
        the POI has no meaningful name and must never be merged
    """
    name = resolve_canonical_name(match.tags)
    if name is None:
        return None

    normalized_name = normalize_text(name)
    if not normalized_name or normalized_name in GENERIC_POI_NAMES:
        return None

    return f"{match.category}|{normalize_text(match.kind or '')}|{normalized_name}"


def osm_type_rank(osm_type: Optional[str]) -> int:
    return OSM_TYPE_RANK.get((osm_type or "").lower(), 0)


def select_preferred_duplicate(current: PoiMatch, candidate: PoiMatch,
                               tie_margin_m: float = 1.0) -> PoiMatch:
    """
    Choose which of two duplicates to keep.

    Closer to the route wins by more than ``tie_margin_m``; then more tags;
    then relation over way over node; then the smaller id.
    """
    if candidate.distance_to_route_meters + tie_margin_m < current.distance_to_route_meters:
        return candidate
    if current.distance_to_route_meters + tie_margin_m < candidate.distance_to_route_meters:
        return current

    current_tags = len(current.tags or {})
    candidate_tags = len(candidate.tags or {})
    if candidate_tags != current_tags:
        return candidate if candidate_tags > current_tags else current

    current_rank = osm_type_rank(current.osm_type)
    candidate_rank = osm_type_rank(candidate.osm_type)
    if candidate_rank != current_rank:
        return candidate if candidate_rank > current_rank else current

    return candidate if candidate.id < current.id else current


def merge_semantic_duplicates(matches: Iterable[PoiMatch],
                              policy: Optional[RoutingPolicy] = None) -> List[PoiMatch]:
    """
    Collapse POIs that share a name, kind and category and sit at the same spot.

    The same name further along the route (a chain store in the next town)
    stays a separate entry.

    Args:
        matches: Projected POIs
        policy: Distance thresholds

    Returns:
        Unnamed POIs first, then one entry per distinct named place
    """
    policy = policy or RoutingPolicy()
    max_spatial = policy.deduplication['max_spatial_distance_m']
    max_along_delta = policy.deduplication['max_along_route_delta_m']
    tie_margin = policy.deduplication['distance_tie_margin_m']

    passthrough: List[PoiMatch] = []
    buckets: Dict[str, List[PoiMatch]] = {}

    for match in matches:
        key = build_semantic_key(match)
        if key is None:
            passthrough.append(match)
            continue

        bucket = buckets.setdefault(key, [])
        for index, existing in enumerate(bucket):
            along_delta = abs(existing.distance_along_route_meters
                              - match.distance_along_route_meters)
            if along_delta > max_along_delta:
                continue
            if point_distance(existing.location, match.location) > max_spatial:
                continue
            bucket[index] = select_preferred_duplicate(existing, match, tie_margin)
            break
        else:
            bucket.append(match)

    merged = list(passthrough)
    for bucket in buckets.values():
        merged.extend(bucket)
    return merged

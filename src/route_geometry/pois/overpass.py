"""Overpass API queries for POIs around a route."""

import logging
import time
from typing import Dict, List, Optional, Sequence

import requests

from ..core.config import Config
from ..core.errors import PoiSourceError
from ..core.models import Bounds, GeoPoint
from ..core.utils import get_bounding_box


logger = logging.getLogger(__name__)

DEFAULT_OVERPASS_SERVERS = [
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
]


def normalize_categories(requested: Optional[Sequence[str]],
                         config: Optional[Config] = None) -> List[str]:
    """
    Keep known categories in request order, without duplicates.

    An empty or fully unknown request selects every configured category.
    """
    config = config or Config()
    normalized = []
    for category in requested or ():
        if not category or not category.strip():
            continue
        name = category.strip().lower()
        if config.get_category_filters(name) is None or name in normalized:
            continue
        normalized.append(name)
    return normalized or config.get_category_list()


def _build_filter(key: str, values: Sequence[str]) -> str:
    if not values:
        return f'["{key}"]'
    if len(values) == 1:
        return f'["{key}"="{values[0]}"]'
    return f'["{key}"~"{"|".join(values)}"]'


def build_overpass_query(categories: Sequence[str], bounds: Bounds,
                         config: Optional[Config] = None, timeout: int = 25) -> str:
    """
    Build an Overpass QL query for the given categories.

    Args:
        categories: Category names from the catalog
        bounds: Area to search
        config: Category catalog (defaults if None)
        timeout: Server-side timeout in seconds

    Returns:
        Query text returning tags, centres and full geometries
    """
    config = config or Config()
    bbox = (f"{bounds.min_lat:.6f},{bounds.min_lon:.6f},"
            f"{bounds.max_lat:.6f},{bounds.max_lon:.6f}")

    lines = [f"[out:json][timeout:{timeout}];", "("]
    for category in categories:
        filters = config.get_category_filters(category)
        if filters is None:
            continue
        for key, values in filters.items():
            lines.append(f"  nwr{_build_filter(key, values)}({bbox});")
    lines.append(");")
    lines.append("out body center geom;")
    return "\n".join(lines) + "\n"


class OverpassClient:
    """Run Overpass queries, trying each server in turn."""

    def __init__(self, servers: Optional[List[str]] = None, timeout: int = 25):
        """
        Initialize the client.

        Args:
            servers: Overpass interpreter URLs in order of preference
            timeout: Query timeout in seconds
        """
        self.servers = servers or list(DEFAULT_OVERPASS_SERVERS)
        self.timeout = timeout

    def fetch_elements(self, route: Sequence[GeoPoint], categories: Sequence[str],
                       corridor_meters: float, config: Optional[Config] = None) -> List[Dict]:
        """
        Fetch raw OSM elements near a route.

        Returns:
            List of Overpass element dicts

        Raises:
            PoiSourceError: If the route is empty or every server fails
        """
        bounds = get_bounding_box(route, corridor_meters / 1000)
        if not bounds.is_valid():
            raise PoiSourceError("Route has no valid coordinates")

        query = build_overpass_query(categories, bounds, config, self.timeout)

        last_error = None
        for server in self.servers:
            try:
                response = requests.post(
                    server,
                    data={'data': query},
                    timeout=self.timeout + 5,
                )
                response.raise_for_status()
                data = response.json()
            except (requests.RequestException, ValueError) as e:
                logger.warning("Overpass server %s failed: %s", server, e)
                last_error = e
                time.sleep(1)  # Rate limiting
                continue

            elements = data.get("elements") if isinstance(data, dict) else None
            if not isinstance(elements, list):
                last_error = ValueError("response has no elements list")
                logger.warning("Overpass server %s returned an invalid payload", server)
                continue

            logger.info("Overpass returned %d elements from %s", len(elements), server)
            return elements

        raise PoiSourceError(f"All Overpass servers failed: {last_error}")

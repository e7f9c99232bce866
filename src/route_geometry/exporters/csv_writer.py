"""CSV export of POIs along a route."""

import csv
from pathlib import Path
from typing import Iterable

from ..core.models import PoiMatch


FIELDNAMES = ['id', 'category', 'kind', 'name', 'lat', 'lon',
              'distance_along_route_km', 'distance_to_route_m', 'osm_type', 'osm_id']


def save_pois_to_csv(pois: Iterable[PoiMatch], output_file: str) -> int:
    """
    Save POIs to CSV file.

    Args:
        pois: POIs in route order
        output_file: Path to output CSV file

    Returns:
        Number of rows written
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()

        for poi in pois:
            writer.writerow({
                'id': poi.id,
                'category': poi.category,
                'kind': poi.kind or '',
                'name': poi.name,
                'lat': f"{poi.location.lat:.6f}",
                'lon': f"{poi.location.lon:.6f}",
                'distance_along_route_km': f"{poi.distance_along_route_meters / 1000:.2f}",
                'distance_to_route_m': int(round(poi.distance_to_route_meters)),
                'osm_type': poi.osm_type,
                'osm_id': poi.osm_id,
            })
            count += 1

    return count

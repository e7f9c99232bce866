"""GPX exporter for routes, loops and POIs."""

import gpxpy.gpx
from pathlib import Path
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core import Config
from ..core.models import GeoPoint, PoiMatch


DETAIL_TAGS = ["amenity", "shop", "tourism", "historic", "natural",
               "opening_hours", "addr:street", "addr:city"]


class GpxExporter:
    """Export a route track and its POIs as GPX."""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize GPX Exporter.

        Args:
            config: Configuration object for symbol mappings (uses defaults if None)
        """
        self.config = config or Config()

    def build_gpx(self, route: Optional[Sequence[GeoPoint]] = None,
                  pois: Iterable[PoiMatch] = (), name: str = "Route") -> gpxpy.gpx.GPX:
        """
        Build a GPX document.

        Args:
            route: Route polyline written as a single track (optional)
            pois: POIs written as waypoints
            name: Document and track name

        Returns:
            gpxpy GPX object
        """
        gpx = gpxpy.gpx.GPX()
        gpx.name = name
        gpx.description = f"Generated {datetime.now().strftime('%Y-%m-%d')}"

        if route:
            track = gpxpy.gpx.GPXTrack(name=name)
            segment = gpxpy.gpx.GPXTrackSegment()
            for point in route:
                segment.points.append(
                    gpxpy.gpx.GPXTrackPoint(latitude=point.lat, longitude=point.lon)
                )
            track.segments.append(segment)
            gpx.tracks.append(track)

        for poi in pois:
            gpx.waypoints.append(self._build_waypoint(poi))

        return gpx

    def _build_waypoint(self, poi: PoiMatch) -> gpxpy.gpx.GPXWaypoint:
        category = poi.category
        wpt = gpxpy.gpx.GPXWaypoint(
            latitude=poi.location.lat,
            longitude=poi.location.lon,
            # Truncate long names for GPS units
            name=f"{category[:3].upper()} - {poi.name[:20]}" if poi.name else category.capitalize(),
        )
        wpt.symbol = self.config.get_gpx_symbol(category)
        wpt.type = category

        desc_parts = [f"Category: {category}"]
        if poi.name:
            desc_parts.append(f"Name: {poi.name}")
        desc_parts.append(f"Km: {poi.distance_along_route_meters / 1000:.1f}")
        for key in DETAIL_TAGS:
            if poi.tags.get(key):
                desc_parts.append(f"{key}: {poi.tags[key]}")
        wpt.description = " | ".join(desc_parts)
        return wpt

    def export(self, output_file: str, route: Optional[Sequence[GeoPoint]] = None,
               pois: Iterable[PoiMatch] = (), name: str = "Route") -> str:
        """
        Write a GPX file.

        Args:
            output_file: Output GPX file path
            route: Route polyline (optional)
            pois: POIs to include as waypoints
            name: Document and track name

        Returns:
            Path to output file
        """
        gpx = self.build_gpx(route, pois, name)

        # Ensure output directory exists
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(gpx.to_xml())

        return str(output_path)

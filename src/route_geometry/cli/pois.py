"""POIs subcommand implementation."""

import json
import sys
from collections import Counter
from pathlib import Path

from ..core import Config, PoiSourceError, load_gpx_route
from ..core.config import clamp_corridor
from ..core.utils import calculate_route_length
from ..exporters import GpxExporter, save_pois_to_csv
from ..pois import OverpassClient, map_elements, normalize_categories


def run_pois(args):
    """
    Find POIs along a route and save them.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    print("=" * 60)
    print("POIs Along Route")
    print("=" * 60)
    print(f"\nGPX file: {args.gpx}")

    # Validate GPX file exists
    if not Path(args.gpx).exists():
        print(f"\n❌ Error: GPX file not found: {args.gpx}")
        return 1

    # Load configuration
    if args.config:
        print(f"Config: {args.config}")
        try:
            config = Config(args.config)
        except (FileNotFoundError, ValueError) as e:
            print(f"\n❌ Error loading config: {e}")
            return 1
    else:
        config = Config()  # Use defaults

    categories = normalize_categories(args.categories, config)
    corridor = clamp_corridor(args.corridor if args.corridor else config.corridor_meters)
    print(f"Categories: {', '.join(categories)}")
    print(f"Corridor: {corridor:.0f}m")

    try:
        route = load_gpx_route(args.gpx)
    except ValueError as e:
        print(f"\n❌ Error: {e}")
        return 1
    print(f"✓ Loaded route with {len(route)} points ({calculate_route_length(route):.1f} km)")

    print("\n" + "-" * 60)
    try:
        if args.elements:
            with open(args.elements, encoding="utf-8") as f:
                data = json.load(f)
            elements = data.get("elements") if isinstance(data, dict) else None
            if not isinstance(elements, list):
                raise ValueError(f"No Overpass elements list in {args.elements}")
            print(f"✓ Loaded {len(elements)} elements from {args.elements}")
        else:
            print("Querying OpenStreetMap via Overpass API...")
            client = OverpassClient(servers=args.overpass_url)
            elements = client.fetch_elements(route, categories, corridor, config)
            print(f"✓ Received {len(elements)} elements")

        pois = map_elements(elements, route, categories, corridor,
                            limit=args.limit, language=args.language, config=config)
    except (OSError, ValueError, PoiSourceError) as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\n⚠ Extraction interrupted by user")
        return 130

    if not pois:
        print("\n⚠ Warning: No POIs found!")

    # Show breakdown by category
    for category, count in sorted(Counter(p.category for p in pois).items()):
        print(f"  - {category}: {count}")

    count = save_pois_to_csv(pois, args.output)
    print(f"\n✓ Saved {count} POIs to {args.output}")

    if args.output_gpx:
        path = GpxExporter(config).export(args.output_gpx, route=route, pois=pois,
                                          name=Path(args.gpx).stem)
        print(f"✓ Exported route and {len(pois)} waypoints to {path}")

    print("\n" + "=" * 60)
    print("✅ POI EXTRACTION COMPLETE!")
    print("=" * 60)
    return 0

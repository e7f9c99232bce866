"""Order subcommand implementation."""

import sys

from ..core import RoutingPolicy, RoutingProviderError, ValhallaClient
from ..core.models import WaypointOrderingRequest
from ..core.utils import haversine_distance
from ..exporters import GpxExporter
from ..routing import WaypointOrderer, plan_route_locations


def run_order(args):
    """
    Order waypoints, print the itinerary and optionally route it with Valhalla.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    print("=" * 60)
    print("Waypoint Ordering")
    print("=" * 60)

    policy = RoutingPolicy.from_yaml(args.policy) if args.policy else RoutingPolicy()
    request = WaypointOrderingRequest(
        start=args.start,
        waypoints=args.waypoint,
        destination=args.end,
        optimize=not args.keep_order,
    )

    print(f"\nMode: {request.mode}")
    print(f"Waypoints given: {len(request.waypoints)}")
    print(f"Optimize: {'no' if args.keep_order else 'yes'}")

    if not request.start.point.is_valid():
        print(f"\n❌ Error: Invalid start coordinates: {request.start.lat},{request.start.lon}",
              file=sys.stderr)
        return 1
    if request.destination is not None and not request.destination.point.is_valid():
        print(f"\n❌ Error: Invalid end coordinates: "
              f"{request.destination.lat},{request.destination.lon}", file=sys.stderr)
        return 1

    locations = plan_route_locations(request, WaypointOrderer(policy))

    dropped = len(request.waypoints) - (len(locations) - 2)
    if dropped:
        print(f"⚠ Dropped {dropped} invalid or duplicate waypoint(s)")

    print("\n" + "-" * 60)
    total = 0.0
    for index, location in enumerate(locations):
        if index > 0:
            previous = locations[index - 1]
            total += haversine_distance(previous.lat, previous.lon, location.lat, location.lon)
        print(f"  {index:2d}. {location.label:<30} "
              f"{location.lat:.5f},{location.lon:.5f}  ({total / 1000:.2f} km)")

    print("\n" + "=" * 60)
    print(f"✓ Straight-line length: {total / 1000:.2f} km")

    if not args.valhalla_url:
        return 0

    print(f"\nRouting with Valhalla at {args.valhalla_url} ({args.travel_mode})...")
    try:
        snapshot = ValhallaClient(args.valhalla_url).route(
            locations,
            args.travel_mode,
            speed_kmh=args.speed_kmh,
            ebike_assist=args.ebike_assist,
            close_ring=request.destination is None,
            prefer_cycleways=not args.allow_roads,
            avoid_hills=args.avoid_hills,
        )
    except RoutingProviderError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ Routed distance: {snapshot.distance_km:.2f} km")
    print(f"✓ ETA: {snapshot.eta_seconds / 60:.0f} min")

    if args.output_gpx:
        path = GpxExporter().export(args.output_gpx, route=snapshot.polyline,
                                    name=f"{locations[0].label} - {locations[-1].label}")
        print(f"✓ Saved route to {path}")

    return 0

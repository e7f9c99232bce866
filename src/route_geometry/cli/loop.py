"""Loop subcommand implementation."""

import sys

from ..core import LoopNotFoundError, RoutingPolicy, ValhallaClient, check_valhalla_connection
from ..core.models import LoopSearchRequest
from ..exporters import GpxExporter
from ..routing import LoopSearch


def run_loop(args):
    """
    Search for a loop and optionally export it.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    print("=" * 60)
    print("Loop Generator")
    print("=" * 60)
    print(f"\nStart: {args.start.lat:.5f},{args.start.lon:.5f}")
    print(f"Target: {args.distance_km} km ({args.mode})")
    print(f"Variation: {args.variation}")
    print(f"Valhalla: {args.valhalla_url}")

    policy = RoutingPolicy.from_yaml(args.policy) if args.policy else RoutingPolicy()
    if args.budget_s is not None:
        if args.budget_s <= 0:
            print(f"\n❌ Error: Budget must be positive, got {args.budget_s}", file=sys.stderr)
            return 1
        policy.loop['compute_budget_s'] = args.budget_s
    print(f"Budget: {policy.loop['compute_budget_s']:g}s")

    request = LoopSearchRequest(
        start=args.start,
        target_distance_km=args.distance_km,
        mode=args.mode,
        waypoints=args.waypoint,
        variation=args.variation,
        speed_kmh=args.speed_kmh,
        ebike_assist=args.ebike_assist,
    )

    try:
        request.validate()
    except ValueError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1

    if not check_valhalla_connection(args.valhalla_url):
        print(f"\n⚠ Valhalla does not answer at {args.valhalla_url}, trying anyway")

    print("\n" + "-" * 60)
    print("Searching candidates...")

    try:
        result = LoopSearch(ValhallaClient(args.valhalla_url), policy).search(request)
    except LoopNotFoundError as e:
        print(f"\n❌ {e}")
        print("Try another --variation or a different target distance.")
        return 2
    except KeyboardInterrupt:
        print("\n\n⚠ Search interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error during loop search: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1

    print("\n" + "=" * 60)
    print("✅ LOOP FOUND")
    print("=" * 60)
    print(f"Distance: {result.distance_meters / 1000:.2f} km")
    print(f"ETA: {result.eta_seconds / 60:.0f} min")
    print(f"Overlap: {result.overlap_label} ({result.overlap_ratio:.1%} of "
          f"{result.segments_count} segments)")
    print(f"Candidates routed: {result.candidates_evaluated}")

    if args.output_gpx:
        name = f"Loop {args.distance_km:g} km #{args.variation}"
        path = GpxExporter().export(args.output_gpx, route=result.geometry, name=name)
        print(f"\n✓ Saved loop to {path}")

    return 0

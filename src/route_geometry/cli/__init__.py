"""Command-line interface for Route Geometry."""

import sys
import argparse

from .parsing import configure_logging, parse_location


def main(argv=None):
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="route-geometry",
        description="Order waypoints, generate loops and find POIs along routes"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Order subcommand
    order_parser = subparsers.add_parser(
        "order",
        help="Order waypoints into a short visiting sequence"
    )
    order_parser.add_argument(
        "--start",
        type=parse_location,
        required=True,
        help="Start location as LAT,LON[,LABEL]"
    )
    order_parser.add_argument(
        "--end",
        type=parse_location,
        help="End location as LAT,LON[,LABEL] (default: loop back to start)"
    )
    order_parser.add_argument(
        "--waypoint",
        type=parse_location,
        action="append",
        default=[],
        help="Waypoint as LAT,LON[,LABEL] (repeatable)"
    )
    order_parser.add_argument(
        "--keep-order",
        action="store_true",
        help="Keep waypoints in the given order (only drop invalid or duplicate ones)"
    )
    order_parser.add_argument(
        "--policy",
        help="Path to routing policy YAML (default: built-in policy)"
    )
    order_parser.add_argument(
        "--valhalla-url",
        help="Route the ordered stops with this Valhalla server (default: straight lines only)"
    )
    order_parser.add_argument(
        "--mode",
        dest="travel_mode",
        choices=["walking", "bicycle", "ebike"],
        default="bicycle",
        help="Travel mode for routing (default: bicycle)"
    )
    order_parser.add_argument(
        "--speed-kmh",
        type=float,
        help="Average speed used for the ETA"
    )
    order_parser.add_argument(
        "--ebike-assist",
        choices=["low", "medium", "high"],
        help="E-bike assistance level"
    )
    order_parser.add_argument(
        "--allow-roads",
        action="store_true",
        help="Do not favour cycleways over roads"
    )
    order_parser.add_argument(
        "--avoid-hills",
        action="store_true",
        help="Minimize climbing"
    )
    order_parser.add_argument(
        "--output-gpx",
        help="Write the routed track to a GPX file (requires --valhalla-url)"
    )

    # Loop subcommand
    loop_parser = subparsers.add_parser(
        "loop",
        help="Generate a loop of a target distance"
    )
    loop_parser.add_argument(
        "--start",
        type=parse_location,
        required=True,
        help="Start location as LAT,LON[,LABEL]"
    )
    loop_parser.add_argument(
        "--distance-km",
        type=float,
        required=True,
        help="Target loop distance in kilometers"
    )
    loop_parser.add_argument(
        "--mode",
        choices=["walking", "bicycle", "ebike"],
        default="bicycle",
        help="Travel mode (default: bicycle)"
    )
    loop_parser.add_argument(
        "--waypoint",
        type=parse_location,
        action="append",
        default=[],
        help="Waypoint the loop must visit, as LAT,LON[,LABEL] (repeatable)"
    )
    loop_parser.add_argument(
        "--variation",
        type=int,
        default=0,
        help="Alternative number; change it to get a different loop (default: 0)"
    )
    loop_parser.add_argument(
        "--speed-kmh",
        type=float,
        help="Average speed used for the ETA"
    )
    loop_parser.add_argument(
        "--ebike-assist",
        choices=["low", "medium", "high"],
        help="E-bike assistance level"
    )
    loop_parser.add_argument(
        "--valhalla-url",
        default="http://localhost:8002",
        help="Valhalla server URL (default: http://localhost:8002)"
    )
    loop_parser.add_argument(
        "--budget-s",
        type=float,
        help="Search time budget in seconds (default: from policy, 12)"
    )
    loop_parser.add_argument(
        "--policy",
        help="Path to routing policy YAML (default: built-in policy)"
    )
    loop_parser.add_argument(
        "--output-gpx",
        help="Write the loop to a GPX file"
    )

    # POIs subcommand
    pois_parser = subparsers.add_parser(
        "pois",
        help="Find POIs along a GPX route"
    )
    pois_parser.add_argument(
        "--gpx",
        required=True,
        help="Input GPX route file"
    )
    pois_parser.add_argument(
        "--elements",
        help="Saved Overpass JSON response (default: query Overpass)"
    )
    pois_parser.add_argument(
        "--overpass-url",
        action="append",
        help="Overpass interpreter URL (repeatable, tried in order)"
    )
    pois_parser.add_argument(
        "--categories",
        nargs="+",
        help="Categories to search (default: all)"
    )
    pois_parser.add_argument(
        "--corridor",
        type=float,
        help="Corridor width in meters around the route (default: from config)"
    )
    pois_parser.add_argument(
        "--limit",
        type=int,
        default=200,
        help="Maximum number of POIs (default: 200)"
    )
    pois_parser.add_argument(
        "--language",
        default="fr",
        help="Preferred name language, fr or en (default: fr)"
    )
    pois_parser.add_argument(
        "--config",
        help="Path to config.ini file (default: use built-in categories)"
    )
    pois_parser.add_argument(
        "--output",
        default="data/pois_along_route.csv",
        help="Output CSV file (default: data/pois_along_route.csv)"
    )
    pois_parser.add_argument(
        "--output-gpx",
        help="Also write route and POIs to a GPX file"
    )

    # Parse arguments
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Route to appropriate subcommand
    if args.command == "order":
        from .order import run_order
        sys.exit(run_order(args))
    elif args.command == "loop":
        from .loop import run_loop
        sys.exit(run_loop(args))
    elif args.command == "pois":
        from .pois import run_pois
        sys.exit(run_pois(args))


if __name__ == "__main__":
    main()

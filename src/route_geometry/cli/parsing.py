"""Argument helpers shared by subcommands."""

import argparse
import logging

from ..core.models import RouteLocation


def parse_location(value: str) -> RouteLocation:
    """
    Parse ``LAT,LON`` or ``LAT,LON,LABEL``.

    Raises:
        argparse.ArgumentTypeError: If the coordinates are not numbers
    """
    parts = value.split(",", 2)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Expected LAT,LON[,LABEL], got: {value}")
    try:
        lat = float(parts[0])
        lon = float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid coordinates: {value}")
    label = parts[2] if len(parts) == 3 else ""
    return RouteLocation(lat, lon, label)


def configure_logging(verbose: bool):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

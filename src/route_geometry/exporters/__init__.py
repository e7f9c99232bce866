"""Exporters for routes and POIs."""

from .gpx import GpxExporter
from .csv_writer import save_pois_to_csv

__all__ = ["GpxExporter", "save_pois_to_csv"]

"""Configuration management for POI categories and corridor settings."""

import configparser
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple


# Tag filter: tag key -> accepted values (empty tuple accepts any value)
CategoryFilters = Mapping[str, Tuple[str, ...]]

MIN_CORRIDOR_METERS = 50
MAX_CORRIDOR_METERS = 5000


class Config:
    """Parse and manage the POI category catalog."""

    # Default POI categories (used if no config file provided)
    DEFAULT_CATEGORIES = {
        "monuments": {
            "historic": ["monument", "memorial", "castle", "ruins",
                         "archaeological_site", "fort"],
            "tourism": ["attraction", "museum"],
            "amenity": ["place_of_worship"],
        },
        "landscapes": {
            "tourism": ["viewpoint"],
            "natural": ["peak", "waterfall", "beach", "bay", "spring", "wood",
                        "cave", "cliff"],
            "waterway": ["waterfall"],
        },
        "shops": {
            "shop": ["bicycle", "supermarket", "bakery", "convenience", "farm",
                     "outdoor", "sports"],
            "amenity": ["marketplace"],
        },
        "services": {
            "amenity": ["cafe", "restaurant", "fast_food", "toilets", "pharmacy",
                        "drinking_water", "bicycle_repair_station", "shelter",
                        "fuel", "bank", "atm", "parking"],
            "tourism": ["information"],
        },
    }

    # Default GPX symbol mappings
    DEFAULT_SYMBOLS = {
        "monuments": "Museum",
        "landscapes": "Scenic Area",
        "shops": "Shopping",
        "services": "Restaurant",
    }

    DEFAULT_CORRIDOR_METERS = 500

    # Tag keys that describe what a POI is, most specific first
    KIND_PRIORITY_KEYS = ("historic", "tourism", "natural", "amenity", "shop")

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config.ini file. If None, uses defaults.
        """
        categories = self.DEFAULT_CATEGORIES
        self.symbols = self.DEFAULT_SYMBOLS.copy()
        self.corridor_meters = self.DEFAULT_CORRIDOR_METERS

        if config_file:
            categories = self._load_config(config_file)

        self.catalog = self._freeze(categories)

    @staticmethod
    def _freeze(categories: Dict[str, Dict[str, List[str]]]) -> Mapping[str, CategoryFilters]:
        return MappingProxyType({
            name.strip().lower(): MappingProxyType({
                key: tuple(v for v in values if v)
                for key, values in filters.items()
            })
            for name, filters in categories.items()
        })

    def _load_config(self, config_file: str) -> Dict[str, Dict[str, List[str]]]:
        """Load configuration from INI file and return its category filters."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        parser = configparser.ConfigParser()
        parser.read(config_path)

        # Parse POI categories
        categories = {}
        for section in parser.sections():
            if section in ['corridor', 'gpx_symbols']:
                continue

            category_filters = {}
            for key in parser[section]:
                values = [v.strip() for v in parser[section][key].split(',')]
                category_filters[key] = [v for v in values if v]

            categories[section] = category_filters

        if 'corridor' in parser:
            value = parser['corridor'].get('default_meters')
            if value is not None:
                try:
                    self.corridor_meters = clamp_corridor(float(value))
                except ValueError:
                    raise ValueError(f"Invalid corridor width in config file: {value}")

        # Parse GPX symbols
        if 'gpx_symbols' in parser:
            for category, symbol in parser['gpx_symbols'].items():
                self.symbols[category] = symbol

        return categories or self.DEFAULT_CATEGORIES

    def get_categories(self) -> Mapping[str, CategoryFilters]:
        """Get all POI category definitions (read-only)."""
        return self.catalog

    def get_category_filters(self, category: str) -> Optional[CategoryFilters]:
        return self.catalog.get(category.strip().lower())

    def get_gpx_symbol(self, category: str) -> str:
        """Get GPX waypoint symbol for a category."""
        return self.symbols.get(category, "Flag, Blue")

    def get_category_list(self) -> List[str]:
        """Get list of all category names."""
        return list(self.catalog.keys())


def clamp_corridor(corridor_meters: float) -> float:
    """Keep a corridor width inside the supported range."""
    return max(MIN_CORRIDOR_METERS, min(MAX_CORRIDOR_METERS, corridor_meters))

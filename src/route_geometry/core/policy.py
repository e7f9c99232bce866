"""Tuning constants for waypoint ordering, loop search and POI deduplication."""

import logging
from pathlib import Path
from typing import Optional

import yaml


logger = logging.getLogger(__name__)

# Exact ordering enumerates 2^n subsets; this is the hard ceiling for n
MAX_EXACT_WAYPOINTS = 12


class RoutingPolicy:
    """Parse and manage routing policy constants."""

    DEFAULT_WAYPOINTS = {
        'min_distinct_distance_m': 15.0,
        'max_exact_waypoints': MAX_EXACT_WAYPOINTS,
        'route_end_weight': 0.35,
        'loop_end_weight': 0.18,
    }

    DEFAULT_LOOP = {
        'candidate_count': 14,
        'distance_tolerance_pct': 0.15,
        'estimate_min_ratio': 0.6,
        'estimate_max_ratio': 1.4,
        'compute_budget_s': 12.0,
        'overlap_epsilon': 0.0001,
    }

    DEFAULT_OVERLAP = {
        'precision': 5,
        'medium_threshold': 0.08,
        'high_threshold': 0.18,
    }

    DEFAULT_DEDUPLICATION = {
        'max_spatial_distance_m': 35.0,
        'max_along_route_delta_m': 80.0,
        'distance_tie_margin_m': 1.0,
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize routing policy.

        Args:
            config_file: Path to YAML config file. If None, uses defaults.
        """
        self.waypoints = self.DEFAULT_WAYPOINTS.copy()
        self.loop = self.DEFAULT_LOOP.copy()
        self.overlap = self.DEFAULT_OVERLAP.copy()
        self.deduplication = self.DEFAULT_DEDUPLICATION.copy()

        if config_file:
            self._load_config(config_file)

        self._validate()

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'RoutingPolicy':
        """
        Load policy from YAML file, falling back to defaults on any problem.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            RoutingPolicy instance
        """
        yaml_file = Path(yaml_path)

        if not yaml_file.exists():
            logger.warning("Policy file not found: %s, using default policy", yaml_path)
            return cls()

        try:
            return cls(config_file=yaml_path)
        except (ValueError, TypeError) as e:
            logger.warning("Error loading policy file %s: %s, using default policy",
                           yaml_path, e)
            return cls()

    def _load_config(self, config_file: str):
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        try:
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

        if not isinstance(config, dict):
            raise ValueError("Policy file must contain a mapping")

        # Load sections
        if 'waypoints' in config:
            self.waypoints.update(config['waypoints'])

        if 'loop' in config:
            self.loop.update(config['loop'])

        if 'overlap' in config:
            self.overlap.update(config['overlap'])

        if 'deduplication' in config:
            self.deduplication.update(config['deduplication'])

    def _validate(self):
        max_exact = int(self.waypoints['max_exact_waypoints'])
        if not 1 <= max_exact <= MAX_EXACT_WAYPOINTS:
            raise ValueError(
                f"max_exact_waypoints must be between 1 and {MAX_EXACT_WAYPOINTS}, "
                f"got {max_exact}"
            )
        if self.overlap['medium_threshold'] > self.overlap['high_threshold']:
            raise ValueError("Overlap medium_threshold must not exceed high_threshold")
        if self.loop['estimate_min_ratio'] > self.loop['estimate_max_ratio']:
            raise ValueError("Loop estimate_min_ratio must not exceed estimate_max_ratio")
        if int(self.loop['candidate_count']) < 1:
            raise ValueError("Loop candidate_count must be at least 1")

    def get_end_weight(self, mode: str) -> float:
        """Get greedy destination bias for 'route' or 'loop' ordering."""
        if mode == "loop":
            return self.waypoints['loop_end_weight']
        return self.waypoints['route_end_weight']

    def overlap_label(self, ratio: float) -> str:
        """Map an overlap ratio to low / medium / high."""
        if ratio < self.overlap['medium_threshold']:
            return "low"
        if ratio < self.overlap['high_threshold']:
            return "medium"
        return "high"

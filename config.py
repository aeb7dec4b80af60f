"""Simulation-wide configuration constants for RPG World Core."""

import logging
import os

WORLD_WIDTH = int(os.environ.get("WORLD_WIDTH", "30"))    # Tiles
WORLD_HEIGHT = int(os.environ.get("WORLD_HEIGHT", "30"))  # Tiles

# Terrain option defaults (see engine.terrain.WorldOptions)
DEFAULT_MOUNTAIN_THRESHOLD = 0.8
DEFAULT_FOREST_THRESHOLD = 0.3
DEFAULT_HILL_DENSITY = 50    # 0-100, relief amplitude
DEFAULT_WATER_LEVEL = 50     # 0-100, 50 = neutral sea level

MIN_TOWN_DISTANCE = 3        # Manhattan distance between towns
TOWN_PLACEMENT_ATTEMPTS = 30

# Encounter pacing
MAX_ENCOUNTER_CHANCE = 0.7
PITY_STEP = 0.05             # Added per idle move after the first
PITY_CAP = 0.25
POI_REVISIT_MULTIPLIER = 0.4
MAX_ENCOUNTER_HISTORY = int(os.environ.get("MAX_ENCOUNTER_HISTORY", "20"))

# Optional JSON file replacing the built-in encounter tables
ENCOUNTER_TABLES_FILE = os.environ.get("ENCOUNTER_TABLES_FILE")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts and tools."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )

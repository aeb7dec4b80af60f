"""Terrain generation: elevation compositing, biome classification, towns."""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
from pydantic import BaseModel, Field

from config import (
    DEFAULT_FOREST_THRESHOLD,
    DEFAULT_HILL_DENSITY,
    DEFAULT_MOUNTAIN_THRESHOLD,
    DEFAULT_WATER_LEVEL,
    MIN_TOWN_DISTANCE,
    TOWN_PLACEMENT_ATTEMPTS,
)
from engine.names import mountain_name, town_name, unique_names
from engine.noise import NoiseOptions, generate_height_field
from models.world import Biome, WorldMap, WorldTile

logger = logging.getLogger(__name__)

CONTINENT_NOISE = NoiseOptions(octaves=4, persistence=0.55, scale=0.05)
HILLS_NOISE = NoiseOptions(octaves=3, persistence=0.5, scale=0.12)
DETAIL_NOISE = NoiseOptions(octaves=2, persistence=0.5, scale=0.25)
HILLS_SEED_OFFSET = 2
DETAIL_SEED_OFFSET = 1

CONTRAST = 1.2
DRAMA_EXPONENT = 1.1
RIDGE_BAND = 0.25            # Width of the boosted band below the threshold
RIDGE_BOOST = 0.6
PEAK_MARGIN = 0.18           # Height above the mountain cut for a peak POI
SEA_LEVEL_STEP = 0.008       # Cut-point shift per water_level unit

TOWN_SIZES = ("hamlet", "village", "town", "city")
_SIZE_RANK = {"city": 0, "town": 1, "village": 2, "hamlet": 3}


class WorldOptions(BaseModel):
    """Tunable terrain parameters."""
    mountain_threshold: float = Field(default=DEFAULT_MOUNTAIN_THRESHOLD, ge=0.0, le=2.0)
    forest_threshold: float = Field(default=DEFAULT_FOREST_THRESHOLD, ge=0.0, le=1.0)
    hill_density: float = Field(default=DEFAULT_HILL_DENSITY, ge=0, le=100)
    water_level: float = Field(default=DEFAULT_WATER_LEVEL, ge=0, le=100)


class BiomeCuts(NamedTuple):
    """Upper elevation bounds for each biome below mountain."""
    deep_water: float
    water: float
    beach: float
    plains: float


def sea_level_offset(water_level: float) -> float:
    """Shift applied to every biome cut point. Zero at water_level 50."""
    return (water_level - 50) * SEA_LEVEL_STEP


def biome_cuts(options: WorldOptions) -> BiomeCuts:
    """Compute the ordered biome cut points for a set of options.

    A low mountain threshold could otherwise fall below the beach cut;
    it is clamped so the cut points never decrease.
    """
    offset = sea_level_offset(options.water_level)
    beach = 0.0 + offset
    return BiomeCuts(
        deep_water=-0.4 + offset,
        water=-0.1 + offset,
        beach=beach,
        plains=max(options.mountain_threshold + offset, beach),
    )


def classify_biome(height: float, cuts: BiomeCuts) -> Biome:
    if height < cuts.deep_water:
        return Biome.DEEP_WATER
    if height < cuts.water:
        return Biome.WATER
    if height < cuts.beach:
        return Biome.BEACH
    if height < cuts.plains:
        return Biome.PLAINS
    return Biome.MOUNTAIN


def composite_elevation(
    continent: np.ndarray,
    hills: np.ndarray,
    detail: np.ndarray,
    options: WorldOptions,
) -> np.ndarray:
    """Blend the three noise layers into final tile heights.

    Args:
        continent: Large-scale landmass field.
        hills: Medium-scale rolling hills field.
        detail: Fine surface detail field.
        options: Terrain options (uses hill_density and mountain_threshold).

    Returns:
        Array of composite heights with the same shape as the inputs.
    """
    biome_h = continent * 0.8 + hills * 0.2
    relief_multiplier = options.hill_density / 100 * 1.5
    relief = (hills * 0.6 + detail * 0.4) * relief_multiplier

    h = (biome_h + relief * 0.1) * CONTRAST
    land = h > 0
    h = np.where(
        land,
        np.power(np.where(land, h, 0.0), DRAMA_EXPONENT) + relief * 0.35,
        h,
    )

    ridge_start = options.mountain_threshold - RIDGE_BAND
    t = (h - ridge_start) / RIDGE_BAND
    h = np.where(h > ridge_start, h + t * t * RIDGE_BOOST, h)
    return h


def overlay_poi(
    biome: Biome,
    height: float,
    detail: float,
    cuts: BiomeCuts,
    forest_threshold: float,
) -> str | None:
    """Pick a point-of-interest overlay for a tile from its detail noise."""
    if biome == Biome.BEACH:
        return "forest" if detail > 0.85 - forest_threshold * 0.2 else None
    if biome == Biome.PLAINS:
        return "forest" if detail > 0.85 - forest_threshold else None
    if biome == Biome.MOUNTAIN:
        peak = cuts.plains + PEAK_MARGIN
        if height > peak:
            return "mountain"
        if detail > 0.95 - forest_threshold * 0.1:
            return "forest"
    return None


def generate_world(
    width: int,
    height: int,
    seed: int,
    options: WorldOptions | None = None,
    *,
    fog_of_war: bool = False,
    custom_town_names: Sequence[str] = (),
    custom_mountain_names: Sequence[str] = (),
) -> WorldMap:
    """Generate a complete world map from a seed.

    Tiles are created explored. Pass ``fog_of_war=True`` to start them
    unexplored instead.

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        seed: Non-negative seed. The same seed and options always yield
            the same map.
        options: Terrain parameters. Defaults to WorldOptions().
        fog_of_war: Start every tile unexplored.
        custom_town_names: Names used for towns before generated ones,
            most important town first.
        custom_mountain_names: Names used for mountain ranges before
            generated ones.

    Returns:
        The generated WorldMap.

    Raises:
        ValueError: If a dimension is not positive or the seed is negative.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"World dimensions must be positive, got {width}x{height}")
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    options = options or WorldOptions()

    continent = generate_height_field(width, height, seed, CONTINENT_NOISE)
    hills = generate_height_field(width, height, seed + HILLS_SEED_OFFSET, HILLS_NOISE)
    detail = generate_height_field(width, height, seed + DETAIL_SEED_OFFSET, DETAIL_NOISE)
    heights = composite_elevation(continent, hills, detail, options)
    if not np.all(np.isfinite(heights)):
        raise ValueError(f"Composite elevation for seed {seed} contains non-finite values")

    cuts = biome_cuts(options)
    tiles: list[list[WorldTile]] = []
    for y in range(height):
        row = []
        for x in range(width):
            h = float(heights[y, x])
            biome = classify_biome(h, cuts)
            row.append(WorldTile(
                x=x,
                y=y,
                height=h,
                elevation=h + 0.5,
                biome=biome,
                poi=overlay_poi(biome, h, float(detail[y, x]), cuts, options.forest_threshold),
                is_explored=not fog_of_war,
            ))
        tiles.append(row)

    world = WorldMap(width=width, height=height, seed=seed, tiles=tiles)

    # Placement uses its own seeded stream, never the combat RNG.
    rng = random.Random(seed)
    towns = place_towns(world, rng, custom_town_names)
    ranges = name_mountain_ranges(world, rng, custom_mountain_names)
    logger.info(
        "Generated %dx%d world (seed=%d): %d towns, %d mountain ranges",
        width, height, seed, len(towns), ranges,
    )
    return world


def _manhattan(a: WorldTile, b: WorldTile) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def _can_host_town(tile: WorldTile, towns: list[WorldTile]) -> bool:
    if tile.poi is not None or tile.is_water:
        return False
    return all(_manhattan(tile, town) >= MIN_TOWN_DISTANCE for town in towns)


def _town_region(world: WorldMap, tile: WorldTile) -> str:
    """Describe a town's surroundings for naming purposes."""
    if tile.biome == Biome.MOUNTAIN:
        return "mountain"
    neighbours = [
        world.tiles[ny][nx]
        for nx, ny in ((tile.x + 1, tile.y), (tile.x - 1, tile.y),
                       (tile.x, tile.y + 1), (tile.x, tile.y - 1))
        if world.in_bounds(nx, ny)
    ]
    if tile.biome == Biome.BEACH or any(n.is_water for n in neighbours):
        return "water"
    if any(n.poi == "forest" for n in neighbours):
        return "forest"
    return "plains"


def place_towns(
    world: WorldMap,
    rng: random.Random,
    custom_names: Sequence[str] = (),
) -> list[WorldTile]:
    """Place two to four towns, then assign sizes, names and a starting town.

    Each town needs a land tile with no POI at least MIN_TOWN_DISTANCE
    (Manhattan) from every other town. A town that cannot be placed within
    TOWN_PLACEMENT_ATTEMPTS random tries is skipped.
    """
    wanted = 2 + rng.randrange(3)
    towns: list[WorldTile] = []
    for _ in range(wanted):
        for _attempt in range(TOWN_PLACEMENT_ATTEMPTS):
            tile = world.tiles[rng.randrange(world.height)][rng.randrange(world.width)]
            if _can_host_town(tile, towns):
                tile.poi = "town"
                towns.append(tile)
                break
        else:
            logger.warning(
                "Failed to place town %d of %d after %d attempts",
                len(towns) + 1, wanted, TOWN_PLACEMENT_ATTEMPTS,
            )

    if not towns:
        logger.warning("World %d has no towns", world.seed)
        return towns

    rng.choice(towns).is_starting_town = True

    sizes = list(TOWN_SIZES)
    rng.shuffle(sizes)
    for index, town in enumerate(towns):
        town.town_size = sizes[index] if index < len(sizes) else "village"

    taken: set[str] = set()
    remaining_custom = [n for n in custom_names if n and n.strip()]
    for town in sorted(towns, key=lambda t: _SIZE_RANK[t.town_size]):
        if remaining_custom:
            town.town_name = remaining_custom.pop(0).strip()
            taken.add(town.town_name)
            continue
        region = _town_region(world, town)
        generated = unique_names(
            lambda size=town.town_size: town_name(size, region, rng), 1, taken
        )
        town.town_name = generated[0] if generated else town_name(town.town_size, region, rng)
        taken.add(town.town_name)

    return towns


def name_mountain_ranges(
    world: WorldMap,
    rng: random.Random,
    custom_names: Sequence[str] = (),
) -> int:
    """Give every 4-connected cluster of mountain-POI tiles a shared name.

    Returns:
        The number of ranges named.
    """
    visited: set[tuple[int, int]] = set()
    remaining_custom = [n.strip() for n in custom_names if n and n.strip()]
    taken: set[str] = set()
    ranges = 0

    for start in world.iter_tiles():
        if start.poi != "mountain" or (start.x, start.y) in visited:
            continue
        cluster = []
        queue = deque([start])
        visited.add((start.x, start.y))
        while queue:
            tile = queue.popleft()
            cluster.append(tile)
            for nx, ny in ((tile.x + 1, tile.y), (tile.x - 1, tile.y),
                           (tile.x, tile.y + 1), (tile.x, tile.y - 1)):
                if not world.in_bounds(nx, ny) or (nx, ny) in visited:
                    continue
                neighbour = world.tiles[ny][nx]
                if neighbour.poi == "mountain":
                    visited.add((nx, ny))
                    queue.append(neighbour)

        if remaining_custom:
            name = remaining_custom.pop(0)
        else:
            generated = unique_names(lambda: mountain_name(rng), 1, taken)
            name = generated[0] if generated else mountain_name(rng)
        taken.add(name)
        for tile in cluster:
            tile.mountain_name = name
        ranges += 1

    return ranges


def find_starting_town(world: WorldMap) -> WorldTile:
    """Return the starting town, falling back to any town.

    Raises:
        LookupError: If the world has no towns at all.
    """
    towns = world.find_tiles(lambda t: t.is_town)
    for town in towns:
        if town.is_starting_town:
            return town
    if towns:
        logger.warning("No starting town flagged; using %s", towns[0].town_name)
        return towns[0]
    raise LookupError(f"World {world.seed} has no towns")

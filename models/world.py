"""World map and tile models for the overworld simulation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from enum import Enum

from pydantic import BaseModel, model_validator

logger = logging.getLogger(__name__)


class Biome(str, Enum):
    """Terrain category of a tile, ordered from lowest to highest elevation."""
    DEEP_WATER = "deep_water"
    WATER = "water"
    BEACH = "beach"
    PLAINS = "plains"
    MOUNTAIN = "mountain"


BIOME_ORDER: tuple[Biome, ...] = (
    Biome.DEEP_WATER,
    Biome.WATER,
    Biome.BEACH,
    Biome.PLAINS,
    Biome.MOUNTAIN,
)

TOWN_POIS = frozenset({"town", "city", "village", "hamlet"})


class WorldTile(BaseModel):
    """A single overworld tile."""
    x: int
    y: int
    height: float                   # Raw composite elevation
    elevation: float                # height + 0.5, used by renderers
    biome: Biome
    poi: str | None = None          # Overlay: "forest", "mountain", "town", ...
    is_explored: bool = True
    town_name: str | None = None
    town_size: str | None = None    # "hamlet", "village", "town", "city"
    is_starting_town: bool = False
    town_entered: bool = False
    mountain_name: str | None = None

    @property
    def is_water(self) -> bool:
        return self.biome in (Biome.WATER, Biome.DEEP_WATER)

    @property
    def is_town(self) -> bool:
        return self.poi in TOWN_POIS


class WorldMap(BaseModel):
    """A generated world, owned by exactly one session.

    Dimensions and seed are fixed at creation. The only tile state that
    changes afterwards is exploration and town entry, both monotonic.
    """
    width: int
    height: int
    seed: int
    tiles: list[list[WorldTile]]    # 2D grid [y][x]

    @model_validator(mode="after")
    def _check_shape(self) -> WorldMap:
        if len(self.tiles) != self.height:
            raise ValueError(
                f"Expected {self.height} rows of tiles, got {len(self.tiles)}"
            )
        for row in self.tiles:
            if len(row) != self.width:
                raise ValueError(
                    f"Expected rows of {self.width} tiles, got {len(row)}"
                )
        return self

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> WorldTile | None:
        """Return the tile at (x, y), or None if the position is off the map."""
        if not self.in_bounds(x, y):
            logger.warning("Tile lookup out of bounds: (%d, %d)", x, y)
            return None
        return self.tiles[y][x]

    def mark_explored(self, x: int, y: int) -> bool:
        """Mark a tile as explored.

        Args:
            x: Column of the tile.
            y: Row of the tile.

        Returns:
            True if this call explored the tile for the first time, False
            if it was already explored.

        Raises:
            ValueError: If the position is off the map.
        """
        if not self.in_bounds(x, y):
            raise ValueError(f"Position ({x}, {y}) is out of bounds")
        tile = self.tiles[y][x]
        if tile.is_explored:
            return False
        tile.is_explored = True
        return True

    def set_town_entered(self, x: int, y: int) -> bool:
        """Flag a town tile as entered. Returns True on the first entry."""
        if not self.in_bounds(x, y):
            raise ValueError(f"Position ({x}, {y}) is out of bounds")
        tile = self.tiles[y][x]
        if not tile.is_town:
            raise ValueError(f"Tile ({x}, {y}) is not a town")
        if tile.town_entered:
            return False
        tile.town_entered = True
        return True

    def iter_tiles(self) -> Iterator[WorldTile]:
        for row in self.tiles:
            yield from row

    def find_tiles(self, predicate: Callable[[WorldTile], bool]) -> list[WorldTile]:
        return [tile for tile in self.iter_tiles() if predicate(tile)]

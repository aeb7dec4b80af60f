"""Tests for world generation."""

import random

import numpy as np
import pytest

from config import MIN_TOWN_DISTANCE
from engine.names import mountain_name, town_name, unique_names
from engine.terrain import (
    BiomeCuts,
    WorldOptions,
    biome_cuts,
    classify_biome,
    composite_elevation,
    find_starting_town,
    generate_world,
    overlay_poi,
    place_towns,
    sea_level_offset,
)
from models.world import BIOME_ORDER, Biome, WorldMap, WorldTile

DEFAULT_OPTIONS = WorldOptions(
    mountain_threshold=0.8, forest_threshold=0.3, hill_density=50, water_level=50,
)


def _make_flat_world(width: int = 10, height: int = 10, biome: Biome = Biome.PLAINS) -> WorldMap:
    """Helper to create a world of identical plain tiles."""
    tiles = [
        [WorldTile(x=x, y=y, height=0.5, elevation=1.0, biome=biome) for x in range(width)]
        for y in range(height)
    ]
    return WorldMap(width=width, height=height, seed=1, tiles=tiles)


class TestGenerateWorld:
    """Tests for generate_world()."""

    def test_deterministic(self):
        a = generate_world(10, 10, 42, DEFAULT_OPTIONS)
        b = generate_world(10, 10, 42, DEFAULT_OPTIONS)
        assert a.model_dump() == b.model_dump()
        assert a.tiles[0][0].biome == b.tiles[0][0].biome
        assert a.tiles[9][9].biome == b.tiles[9][9].biome

    def test_dimensions(self):
        world = generate_world(12, 8, 7)
        assert world.width == 12
        assert world.height == 8
        assert len(world.tiles) == 8
        assert all(len(row) == 12 for row in world.tiles)
        assert world.tiles[3][5].x == 5
        assert world.tiles[3][5].y == 3

    def test_different_seeds_differ(self):
        a = generate_world(20, 20, 1)
        b = generate_world(20, 20, 2)
        assert [t.height for t in a.iter_tiles()] != [t.height for t in b.iter_tiles()]

    def test_elevation_offset(self):
        world = generate_world(8, 8, 3)
        for tile in world.iter_tiles():
            assert tile.elevation == pytest.approx(tile.height + 0.5)

    def test_biomes_ordered_by_height(self):
        world = generate_world(30, 30, 11)
        ordered = sorted(world.iter_tiles(), key=lambda t: t.height)
        ranks = [BIOME_ORDER.index(t.biome) for t in ordered]
        assert ranks == sorted(ranks)

    def test_explored_by_default(self):
        world = generate_world(6, 6, 4)
        assert all(t.is_explored for t in world.iter_tiles())

    def test_fog_of_war(self):
        world = generate_world(6, 6, 4, fog_of_war=True)
        assert not any(t.is_explored for t in world.iter_tiles())

    def test_one_by_one(self):
        world = generate_world(1, 1, 0)
        assert len(world.tiles) == 1
        assert world.tiles[0][0].biome in BIOME_ORDER

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-3, 4)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(ValueError):
            generate_world(width, height, 1)

    def test_negative_seed(self):
        with pytest.raises(ValueError):
            generate_world(5, 5, -1)

    def test_water_level_raises_sea(self):
        low = generate_world(30, 30, 8, WorldOptions(water_level=10))
        high = generate_world(30, 30, 8, WorldOptions(water_level=90))
        low_water = sum(t.is_water for t in low.iter_tiles())
        high_water = sum(t.is_water for t in high.iter_tiles())
        assert high_water >= low_water


class TestBiomeCuts:
    """Tests for cut points and classification."""

    def test_neutral_water_level(self):
        cuts = biome_cuts(DEFAULT_OPTIONS)
        assert cuts == BiomeCuts(deep_water=-0.4, water=-0.1, beach=0.0, plains=0.8)

    def test_offset_shifts_all_cuts(self):
        offset = sea_level_offset(75)
        cuts = biome_cuts(WorldOptions(water_level=75))
        assert offset == pytest.approx(0.2)
        assert cuts.deep_water == pytest.approx(-0.4 + offset)
        assert cuts.plains == pytest.approx(0.8 + offset)

    def test_cuts_never_decrease(self):
        cuts = biome_cuts(WorldOptions(mountain_threshold=0.0, water_level=0))
        assert cuts.deep_water <= cuts.water <= cuts.beach <= cuts.plains

    @pytest.mark.parametrize("height,expected", [
        (-0.9, Biome.DEEP_WATER),
        (-0.4, Biome.WATER),
        (-0.05, Biome.BEACH),
        (0.0, Biome.PLAINS),
        (0.79, Biome.PLAINS),
        (0.8, Biome.MOUNTAIN),
        (3.0, Biome.MOUNTAIN),
    ])
    def test_classify(self, height, expected):
        assert classify_biome(height, biome_cuts(DEFAULT_OPTIONS)) == expected

    def test_composite_is_monotonic_in_continent(self):
        continent = np.linspace(-1, 1, 50)
        flat = np.zeros(50)
        h = composite_elevation(continent, flat, flat, DEFAULT_OPTIONS)
        assert np.all(np.diff(h) >= 0)


class TestOverlayPoi:

    def test_dense_plains_forest(self):
        cuts = biome_cuts(DEFAULT_OPTIONS)
        assert overlay_poi(Biome.PLAINS, 0.3, 0.9, cuts, 0.3) == "forest"
        assert overlay_poi(Biome.PLAINS, 0.3, 0.1, cuts, 0.3) is None

    def test_peak(self):
        cuts = biome_cuts(DEFAULT_OPTIONS)
        assert overlay_poi(Biome.MOUNTAIN, 1.5, 0.0, cuts, 0.3) == "mountain"
        assert overlay_poi(Biome.MOUNTAIN, 0.85, 0.0, cuts, 0.3) is None

    def test_water_has_no_poi(self):
        cuts = biome_cuts(DEFAULT_OPTIONS)
        assert overlay_poi(Biome.WATER, -0.2, 1.0, cuts, 1.0) is None


class TestTowns:
    """Tests for town placement and naming."""

    def test_town_count_and_spacing(self):
        world = _make_flat_world(12, 12)
        towns = place_towns(world, random.Random(5))
        assert 2 <= len(towns) <= 4
        for i, a in enumerate(towns):
            for b in towns[i + 1:]:
                assert abs(a.x - b.x) + abs(a.y - b.y) >= MIN_TOWN_DISTANCE

    def test_exactly_one_starting_town(self):
        world = _make_flat_world(12, 12)
        towns = place_towns(world, random.Random(6))
        assert sum(t.is_starting_town for t in towns) == 1
        assert find_starting_town(world).is_starting_town

    def test_towns_are_named_and_sized(self):
        world = _make_flat_world(12, 12)
        towns = place_towns(world, random.Random(8))
        names = [t.town_name for t in towns]
        assert all(names)
        assert len(set(names)) == len(names)
        assert all(t.town_size in ("hamlet", "village", "town", "city") for t in towns)

    def test_custom_names_first(self):
        world = _make_flat_world(12, 12)
        towns = place_towns(world, random.Random(8), ["Kingsreach"])
        assert "Kingsreach" in [t.town_name for t in towns]

    def test_no_towns_on_water(self):
        world = _make_flat_world(6, 6, biome=Biome.WATER)
        assert place_towns(world, random.Random(1)) == []
        with pytest.raises(LookupError):
            find_starting_town(world)

    def test_generated_world_towns_on_land(self):
        world = generate_world(30, 30, 42)
        for town in world.find_tiles(lambda t: t.is_town):
            assert not town.is_water
            assert town.town_name


class TestMountainNames:

    def test_clusters_share_names(self):
        world = generate_world(40, 40, 17, WorldOptions(mountain_threshold=0.3, hill_density=100))
        for tile in world.find_tiles(lambda t: t.poi == "mountain"):
            assert tile.mountain_name
            for nx, ny in ((tile.x + 1, tile.y), (tile.x, tile.y + 1)):
                if world.in_bounds(nx, ny) and world.tiles[ny][nx].poi == "mountain":
                    assert world.tiles[ny][nx].mountain_name == tile.mountain_name


class TestNames:

    def test_town_name_deterministic(self):
        assert town_name("city", "forest", random.Random(3)) == town_name("city", "forest", random.Random(3))

    def test_mountain_name_shape(self):
        assert len(mountain_name(random.Random(2)).split(" ")) == 2

    def test_unique_names_skips_taken(self):
        names = iter(["Ashford", "Ashford", "Brookvale"])
        result = unique_names(lambda: next(names), 2)
        assert result == ["Ashford", "Brookvale"]

    def test_unique_names_gives_up(self):
        assert unique_names(lambda: "Same", 3, max_attempts_per_name=2) == ["Same"]

"""Tests for the overworld move loop."""

import json
import random

import pytest

from engine.encounter_data import DEFAULT_TEMPLATES
from engine.encounters import EncounterResolver
from engine.session import GameSession
from models.characters import AbilityScores, Character
from models.encounters import (
    EncounterHistory,
    EncounterSource,
    EncounterTableEntry,
    EncounterTables,
)
from models.world import Biome, WorldMap, WorldTile


def _make_character(char_id: str = "c1") -> Character:
    """Helper to create a test character."""
    return Character(
        id=char_id,
        name=f"Char_{char_id}",
        character_class="Fighter",
        ability_scores=AbilityScores(strength=16, constitution=14),
    )


def _make_world(fog_of_war: bool = True) -> WorldMap:
    """A 5x5 plains world with water at (2, 0), a cave at (4, 4) and a town at (0, 4)."""
    tiles = []
    for y in range(5):
        row = []
        for x in range(5):
            row.append(WorldTile(
                x=x, y=y, height=0.3, elevation=0.8,
                biome=Biome.PLAINS, is_explored=not fog_of_war,
            ))
        tiles.append(row)
    tiles[0][2].biome = Biome.WATER
    tiles[4][4].poi = "cave"
    tiles[4][0].poi = "town"
    tiles[4][0].town_name = "Ashford"
    tiles[4][0].town_size = "village"
    return WorldMap(width=5, height=5, seed=1, tiles=tiles)


def _make_resolver(cave_encounters: bool = False) -> EncounterResolver:
    """Resolver that never fires, except for guaranteed cave encounters when asked."""
    none = EncounterTableEntry(template="none", weight=1)
    poi_tables = {}
    poi_chance = {}
    if cave_encounters:
        poi_tables["cave"] = (EncounterTableEntry(template="wolf_pack", weight=100),
                              EncounterTableEntry(template="none", weight=0))
        poi_chance["cave"] = 1.0
    tables = EncounterTables(
        biome_tables={"plains": (none,), "town": (none,)},
        poi_tables=poi_tables,
        poi_chance=poi_chance,
        biome_chance={"plains": 0.0, "town": 0.0},
    )
    return EncounterResolver(tables, DEFAULT_TEMPLATES, rng=random.Random(3))


def _make_session(cave_encounters: bool = False, position: tuple[int, int] = (0, 0)) -> GameSession:
    return GameSession(
        _make_world(),
        [_make_character()],
        position,
        resolver=_make_resolver(cave_encounters),
    )


def _walk_to_cave(session: GameSession):
    """Walk from (2, 2) into the cave at (4, 4)."""
    session.move(3, 3)
    return session.move(4, 4)


class TestMove:
    """Tests for GameSession.move()."""

    def test_start_tile_explored(self):
        session = _make_session()
        assert session.world.tiles[0][0].is_explored

    def test_orthogonal_and_diagonal(self):
        session = _make_session()
        session.move(1, 0)
        session.move(2, 1)
        assert session.position == (2, 1)

    def test_first_visit(self):
        session = _make_session()
        assert session.move(1, 0).is_first_visit
        assert not session.move(0, 0).is_first_visit
        assert not session.move(1, 0).is_first_visit

    def test_not_adjacent(self):
        session = _make_session()
        with pytest.raises(ValueError):
            session.move(2, 2)
        with pytest.raises(ValueError):
            session.move(0, 0)

    def test_out_of_bounds(self):
        session = _make_session()
        with pytest.raises(ValueError):
            session.move(-1, 0)

    def test_water_is_impassable(self):
        session = _make_session(position=(1, 0))
        with pytest.raises(ValueError):
            session.move(2, 0)
        assert session.position == (1, 0)

    def test_counts_quiet_moves(self):
        session = _make_session()
        session.move(1, 0)
        result = session.move(1, 1)
        assert result.moves_since_encounter == 2
        assert result.encounter is None

    def test_enters_town(self):
        session = _make_session(position=(0, 3))
        result = session.move(0, 4)
        assert result.tile.is_town
        assert session.world.tiles[4][0].town_entered


class TestEncounters:
    """Tests for rolling and resolving encounters."""

    def test_cave_triggers_encounter(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        result = _walk_to_cave(session)
        assert result.encounter is not None
        assert result.encounter.template == "wolf_pack"
        assert result.encounter.source == EncounterSource.POI
        assert result.encounter.hostile
        assert result.moves_since_encounter == 0
        assert session.pending_encounter == result.encounter

    def test_pending_encounter_blocks_movement(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        with pytest.raises(ValueError):
            session.move(3, 3)

    def test_dismiss(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        assert session.dismiss_encounter() is not None
        assert session.pending_encounter is None
        session.move(3, 3)

    def test_resolve_applies_results(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        outcome = session.resolve_encounter("c1", "Athletics")
        hero = session.heroes["c1"]
        resolution = outcome.resolution

        assert session.pending_encounter is None
        assert resolution.name == "Wolf Pack"
        assert hero.xp == resolution.xp
        assert hero.current_hp == max(0, hero.max_hp - resolution.hp_damage)
        assert hero.gold == resolution.loot.gold - outcome.gold_lost
        assert session.history.latest().name == "Wolf Pack"
        assert session.history.latest().hero_id == "c1"

    def test_resolve_without_encounter(self):
        session = _make_session()
        with pytest.raises(ValueError):
            session.resolve_encounter("c1", "Athletics")

    def test_resolve_unknown_hero(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        with pytest.raises(ValueError):
            session.resolve_encounter("nobody", "Athletics")

    def test_defeated_hero_cannot_act(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        session.heroes["c1"].current_hp = 0
        session.heroes["c1"].is_defeated = True
        assert session.is_party_defeated
        with pytest.raises(ValueError):
            session.resolve_encounter("c1", "Athletics")

    def test_rest(self):
        session = _make_session()
        hero = session.heroes["c1"]
        hero.current_hp = 1
        recovered = session.rest()
        assert recovered["c1"] == hero.max_hp // 2
        session.rest(long=True)
        assert hero.current_hp == hero.max_hp


class TestPersistence:
    """Tests for to_blob() and from_blob()."""

    def test_round_trip(self):
        session = _make_session(cave_encounters=True, position=(2, 2))
        _walk_to_cave(session)
        blob = session.to_blob()
        json.dumps(blob)

        restored = GameSession.from_blob(blob, resolver=_make_resolver(True))
        assert restored.position == (4, 4)
        assert restored.pending_encounter == session.pending_encounter
        assert restored.heroes["c1"] == session.heroes["c1"]
        assert restored.world.tiles[3][3].is_explored
        assert not restored.world.tiles[0][4].is_explored

        restored.resolve_encounter("c1", "Athletics")
        assert len(restored.history.entries) == 1

    def test_missing_hero_state(self):
        with pytest.raises(ValueError):
            GameSession(_make_world(), [_make_character()], (0, 0), heroes={})

    def test_needs_characters(self):
        with pytest.raises(ValueError):
            GameSession(_make_world(), [], (0, 0))


class TestNewSession:

    def test_starts_on_land(self):
        session = GameSession.new(20, 20, 42, [_make_character()])
        tile = session.current_tile
        assert not tile.is_water
        assert tile.is_explored
        if tile.is_town:
            assert tile.is_starting_town
            assert tile.town_entered


class TestHistory:

    def test_capped(self):
        history = EncounterHistory(max_entries=3)
        session = _make_session(cave_encounters=True, position=(4, 4))
        session.history = history
        for _ in range(5):
            # Revisits only sometimes fire, so pace until one does
            while session.pending_encounter is None:
                session.move(3, 3)
                session.move(4, 4)
            session.resolve_encounter("c1", "Athletics")
            session.rest(long=True)
        assert len(history.entries) == 3
        assert history.latest() is history.entries[-1]


class TestWorldMap:

    def test_mark_explored_once(self):
        world = _make_world()
        assert world.mark_explored(1, 1)
        assert not world.mark_explored(1, 1)

    def test_mark_explored_out_of_bounds(self):
        with pytest.raises(ValueError):
            _make_world().mark_explored(5, 0)

    def test_get_tile(self):
        world = _make_world()
        assert world.get_tile(4, 4).poi == "cave"
        assert world.get_tile(9, 9) is None

    def test_town_entry_only_on_towns(self):
        world = _make_world()
        assert world.set_town_entered(0, 4)
        assert not world.set_town_entered(0, 4)
        with pytest.raises(ValueError):
            world.set_town_entered(1, 1)

    def test_shape_checked(self):
        world = _make_world()
        with pytest.raises(ValueError):
            WorldMap(width=6, height=5, seed=1, tiles=world.tiles)

"""The overworld move loop: exploring tiles, rolling and resolving encounters."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import BaseModel

from config import MAX_ENCOUNTER_HISTORY
from engine.encounters import EncounterResolver
from engine.health import apply_damage, apply_healing, long_rest, short_rest
from engine.inventory import add_gold, add_item, lose_gold
from engine.outcomes import EncounterResolution, resolve_encounter_outcome
from engine.progression import XPAward, award_xp, create_hero
from engine.terrain import WorldOptions, find_starting_town, generate_world
from models.characters import Character, HeroState
from models.encounters import (
    EncounterHistory,
    EncounterHistoryEntry,
    EncounterSettings,
    RolledEncounter,
)
from models.world import WorldMap, WorldTile

logger = logging.getLogger(__name__)


class MoveResult(BaseModel):
    """What happened when the party entered a tile."""
    tile: WorldTile
    is_first_visit: bool
    encounter: RolledEncounter | None = None
    moves_since_encounter: int


class EncounterOutcome(BaseModel):
    """An encounter resolution after it has been applied to a hero."""
    resolution: EncounterResolution
    xp_award: XPAward
    gold_lost: int = 0
    hp_healed: int = 0
    messages: list[str] = []


class SessionSnapshot(BaseModel):
    """Serializable state of a session, handed to the persistence layer."""
    world: WorldMap
    characters: dict[str, Character]
    heroes: dict[str, HeroState]
    position: tuple[int, int]
    moves_since_encounter: int = 0
    settings: EncounterSettings = EncounterSettings()
    pending_encounter: RolledEncounter | None = None
    history: EncounterHistory = EncounterHistory()


class GameSession:
    """Owns one world map and one party for the duration of a game.

    Not thread-safe: a session and its map must only be driven by a single
    caller at a time.
    """

    def __init__(
        self,
        world: WorldMap,
        characters: Sequence[Character],
        position: tuple[int, int],
        resolver: EncounterResolver | None = None,
        settings: EncounterSettings | None = None,
        heroes: dict[str, HeroState] | None = None,
        history: EncounterHistory | None = None,
    ):
        if not characters:
            raise ValueError("A session needs at least one character")
        if not world.in_bounds(*position):
            raise ValueError(f"Starting position {position} is out of bounds")

        self.world = world
        self.characters = {c.id: c for c in characters}
        self.heroes = heroes if heroes is not None else {
            c.id: create_hero(c) for c in characters
        }
        missing = set(self.characters) - set(self.heroes)
        if missing:
            raise ValueError(f"No hero state for characters: {sorted(missing)}")

        self.resolver = resolver or EncounterResolver()
        self.settings = settings or EncounterSettings()
        self.history = history or EncounterHistory(max_entries=MAX_ENCOUNTER_HISTORY)
        self.position = position
        self.moves_since_encounter = 0
        self.pending_encounter: RolledEncounter | None = None
        self.world.mark_explored(*position)

    @classmethod
    def new(
        cls,
        width: int,
        height: int,
        seed: int,
        characters: Sequence[Character],
        options: WorldOptions | None = None,
        settings: EncounterSettings | None = None,
        resolver: EncounterResolver | None = None,
        fog_of_war: bool = True,
    ) -> GameSession:
        """Generate a world and start the party at its starting town.

        Worlds too small to hold a town start the party on the first land
        tile instead.
        """
        world = generate_world(width, height, seed, options, fog_of_war=fog_of_war)
        try:
            start = find_starting_town(world)
            position = (start.x, start.y)
            world.set_town_entered(*position)
        except LookupError:
            land = world.find_tiles(lambda t: not t.is_water)
            first = land[0] if land else world.tiles[0][0]
            position = (first.x, first.y)
            logger.warning("No town in world %d; starting at %s", seed, position)
        return cls(world, characters, position, resolver=resolver, settings=settings)

    @property
    def current_tile(self) -> WorldTile:
        x, y = self.position
        return self.world.tiles[y][x]

    def move(self, x: int, y: int) -> MoveResult:
        """Move the party to an adjacent tile and roll for an encounter.

        Args:
            x: Target column.
            y: Target row.

        Returns:
            MoveResult with the tile, first-visit flag and any encounter.

        Raises:
            ValueError: If an encounter is still unresolved, or the target
                is off the map, not adjacent, or water.
        """
        if self.pending_encounter is not None:
            raise ValueError("Resolve the current encounter before moving")
        if not self.world.in_bounds(x, y):
            raise ValueError(f"Position ({x}, {y}) is out of bounds")
        cx, cy = self.position
        if max(abs(x - cx), abs(y - cy)) != 1:
            raise ValueError(f"Position ({x}, {y}) is not adjacent to ({cx}, {cy})")
        tile = self.world.tiles[y][x]
        if tile.is_water:
            raise ValueError(f"Position ({x}, {y}) is water")

        self.position = (x, y)
        is_first_visit = self.world.mark_explored(x, y)
        if tile.is_town and self.world.set_town_entered(x, y):
            logger.info("Party entered %s", tile.town_name)

        self.moves_since_encounter += 1
        encounter = self.resolver.resolve(
            tile,
            is_first_visit,
            self.settings,
            self.moves_since_encounter,
        )
        if encounter is not None:
            self.pending_encounter = encounter
            self.moves_since_encounter = 0

        return MoveResult(
            tile=tile,
            is_first_visit=is_first_visit,
            encounter=encounter,
            moves_since_encounter=self.moves_since_encounter,
        )

    def dismiss_encounter(self) -> RolledEncounter | None:
        """Walk away from the pending encounter without a check."""
        encounter, self.pending_encounter = self.pending_encounter, None
        return encounter

    def resolve_encounter(
        self,
        hero_id: str,
        skill: str,
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> EncounterOutcome:
        """Resolve the pending encounter with one hero's skill check.

        Damage is applied first, then XP (a level-up heals to full), then
        gold, items and healing, and finally any gold lost.

        Raises:
            ValueError: If there is no pending encounter, or the hero is
                unknown or defeated.
        """
        if self.pending_encounter is None:
            raise ValueError("There is no encounter to resolve")
        if hero_id not in self.heroes:
            raise ValueError(f"Unknown hero '{hero_id}'")
        hero = self.heroes[hero_id]
        if hero.is_defeated:
            raise ValueError(f"Hero '{hero_id}' is defeated")

        encounter = self.pending_encounter
        template = self.resolver.template_for(encounter)
        resolution = resolve_encounter_outcome(
            encounter.template,
            template,
            self.characters[hero_id],
            hero,
            skill,
            advantage=advantage,
            disadvantage=disadvantage,
            rng=self.resolver.rng,
        )

        messages: list[str] = []
        if resolution.hp_damage > 0:
            apply_damage(hero, resolution.hp_damage)
            messages.append(f"-{resolution.hp_damage} HP")

        xp_award = award_xp(hero, self.characters[hero_id], resolution.xp)
        if resolution.xp > 0:
            messages.append(f"+{resolution.xp} XP")
        if xp_award.summary is not None:
            messages.append(xp_award.summary.message)

        loot = resolution.loot
        if loot.gold > 0:
            add_gold(hero, loot.gold)
            messages.append(f"+{loot.gold} gold")
        for item in loot.items:
            add_item(hero, item)
        if loot.items:
            messages.append(f"Found: {', '.join(loot.items)}")

        before = hero.current_hp
        if loot.full_heal:
            long_rest(hero)
        elif loot.healing > 0:
            apply_healing(hero, loot.healing)
        hp_healed = hero.current_hp - before
        if hp_healed > 0:
            messages.append(f"Healed for {hp_healed} HP")

        gold_lost = 0
        if resolution.penalties is not None:
            messages.extend(resolution.penalties.messages)
            gold_lost = lose_gold(hero, resolution.penalties.gold_loss)

        self.history.append(EncounterHistoryEntry(
            name=resolution.name,
            outcome=resolution.outcome,
            hero_id=hero_id,
            xp_gained=resolution.xp,
            timestamp=datetime.now(timezone.utc),
        ))
        self.pending_encounter = None
        logger.info(
            "%s resolved %s: %s", hero_id, resolution.name, resolution.outcome.value,
        )

        return EncounterOutcome(
            resolution=resolution,
            xp_award=xp_award,
            gold_lost=gold_lost,
            hp_healed=hp_healed,
            messages=messages,
        )

    def rest(self, long: bool = False) -> dict[str, int]:
        """Rest the whole party. Returns HP recovered per hero."""
        recovered = {}
        for hero_id, hero in self.heroes.items():
            before = hero.current_hp
            if long:
                long_rest(hero)
            else:
                short_rest(hero)
            recovered[hero_id] = hero.current_hp - before
        return recovered

    @property
    def is_party_defeated(self) -> bool:
        return all(hero.is_defeated for hero in self.heroes.values())

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            world=self.world,
            characters=self.characters,
            heroes=self.heroes,
            position=self.position,
            moves_since_encounter=self.moves_since_encounter,
            settings=self.settings,
            pending_encounter=self.pending_encounter,
            history=self.history,
        )

    def to_blob(self) -> dict:
        """Serialize the session to plain JSON-compatible data."""
        return self.snapshot().model_dump(mode="json")

    @classmethod
    def from_blob(cls, data: dict, resolver: EncounterResolver | None = None) -> GameSession:
        """Rebuild a session from data produced by to_blob()."""
        snapshot = SessionSnapshot.model_validate(data)
        session = cls(
            snapshot.world,
            list(snapshot.characters.values()),
            snapshot.position,
            resolver=resolver,
            settings=snapshot.settings,
            heroes=snapshot.heroes,
            history=snapshot.history,
        )
        session.moves_since_encounter = snapshot.moves_since_encounter
        session.pending_encounter = snapshot.pending_encounter
        return session

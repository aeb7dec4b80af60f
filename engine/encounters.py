"""Random encounter resolution for overworld moves.

A move can trigger an encounter from one of three buckets, checked in
order: the tile's point of interest, an independent environmental roll,
then the tile's biome. Each bucket rolls against its own chance and, if it
fires, draws from a weighted table whose "none" entry still means nothing
happens.
"""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import ValidationError

from config import (
    ENCOUNTER_TABLES_FILE,
    MAX_ENCOUNTER_CHANCE,
    PITY_CAP,
    PITY_STEP,
    POI_REVISIT_MULTIPLIER,
)
from engine.dice import check_formula, resolve_rng
from engine.encounter_data import DEFAULT_TABLES, DEFAULT_TEMPLATES
from models.encounters import (
    NO_ENCOUNTER,
    EncounterSettings,
    EncounterSource,
    EncounterTableEntry,
    EncounterTables,
    EncounterTemplate,
    Grimness,
    RolledEncounter,
)
from models.world import TOWN_POIS, Biome, WorldTile

logger = logging.getLogger(__name__)

POI_TYPES = frozenset({"cave", "ruins", "grove", "forest", "mountain", "peak"})

GRIMNESS_MODIFIERS: dict[Grimness, float] = {
    Grimness.NOBLE: 0.8,
    Grimness.GRITTY: 1.0,
    Grimness.DARK: 1.2,
    Grimness.GRIMDARK: 1.4,
}
ENVIRONMENTAL_GRIMNESS_MODIFIERS: dict[Grimness, float] = {
    Grimness.NOBLE: 0.7,
    Grimness.GRITTY: 1.0,
    Grimness.DARK: 1.3,
    Grimness.GRIMDARK: 1.5,
}
POI_GRIMNESS_MODIFIERS: dict[Grimness, float] = {
    Grimness.NOBLE: 0.8,
    Grimness.GRITTY: 1.0,
    Grimness.DARK: 1.15,
    Grimness.GRIMDARK: 1.3,
}


class EncounterConfigError(ValueError):
    """Raised when encounter tables or templates are malformed."""

    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems)
        super().__init__("Invalid encounter configuration: " + "; ".join(self.problems))


def weighted_choice(
    table: Sequence[EncounterTableEntry],
    rng: random.Random | None = None,
) -> EncounterTableEntry | None:
    """Pick one entry from a weighted table.

    Draws a single integer uniformly from [0, total_weight) and returns the
    first entry whose cumulative weight exceeds it. The "none" sentinel
    and a misconfigured (empty or all-zero) table both yield None; the
    latter is logged rather than raised.
    """
    total_weight = sum(entry.weight for entry in table)
    if not table or total_weight <= 0:
        logger.error("Encounter table is empty or has no positive weights; skipping roll")
        return None

    draw = resolve_rng(rng).randrange(total_weight)
    cumulative = 0
    for entry in table:
        cumulative += entry.weight
        if draw < cumulative:
            return None if entry.template == NO_ENCOUNTER else entry
    return None


def pity_bonus(moves_since_encounter: int) -> float:
    """Extra encounter chance after a run of quiet moves.

    Linear: nothing for the first move, then PITY_STEP per further move,
    capped at PITY_CAP.
    """
    return min(PITY_CAP, PITY_STEP * max(0, moves_since_encounter - 1))


def encounter_bucket(tile: WorldTile) -> str:
    """Name of the biome table and chance keys that apply to a tile."""
    if tile.poi in TOWN_POIS:
        return "town"
    if tile.poi in ("forest", "mountain"):
        return tile.poi
    if tile.biome in (Biome.WATER, Biome.DEEP_WATER):
        return "water"
    if tile.biome in (Biome.BEACH, Biome.MOUNTAIN):
        return tile.biome.value
    return "plains"


def poi_type(tile: WorldTile) -> str | None:
    """POI key used for POI tables, or None for untagged and town tiles."""
    return tile.poi if tile.poi in POI_TYPES else None


def encounter_problems(
    tables: EncounterTables,
    templates: Mapping[str, EncounterTemplate] | None = None,
) -> list[str]:
    """Collect table problems plus references to unknown templates."""
    problems = tables.problems()
    if templates is not None:
        referenced = {
            entry.template
            for table in (
                *tables.biome_tables.values(),
                *tables.poi_tables.values(),
                tables.environmental_table,
            )
            for entry in table
            if entry.template != NO_ENCOUNTER
        }
        for name in sorted(referenced - set(templates)):
            problems.append(f"table entry '{name}' has no template")
        for key, template in templates.items():
            formulas = [template.gold, *(
                f for f in template.healing_by_tier.values() if f != "full"
            )]
            for formula in formulas:
                try:
                    check_formula(formula)
                except ValueError as exc:
                    problems.append(f"template '{key}': {exc}")
    return problems


def validate_encounter_tables(
    tables: EncounterTables,
    templates: Mapping[str, EncounterTemplate] | None = None,
) -> None:
    """Raise EncounterConfigError if the configuration has any problem."""
    problems = encounter_problems(tables, templates)
    if problems:
        raise EncounterConfigError(problems)


def load_encounter_tables(path: str | Path) -> EncounterTables:
    """Load and validate encounter tables from a JSON file.

    Raises:
        EncounterConfigError: If the file is not valid table JSON or the
            tables fail validation.
    """
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        tables = EncounterTables.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise EncounterConfigError([f"{path}: {exc}"]) from exc
    validate_encounter_tables(tables)
    logger.info("Loaded encounter tables from %s", path)
    return tables


def configured_tables() -> EncounterTables:
    """Tables from ENCOUNTER_TABLES_FILE if set, else the built-in ones."""
    if ENCOUNTER_TABLES_FILE:
        return load_encounter_tables(ENCOUNTER_TABLES_FILE)
    return DEFAULT_TABLES


class EncounterResolver:
    """Decides whether a move triggers an encounter, and which one.

    Args:
        tables: Encounter tables, validated once here.
        templates: Template catalogue used to check table references.
        rng: Random source for encounter rolls. Defaults to the
            process-wide dice generator, never the terrain seed.
        strict: Raise EncounterConfigError on bad configuration. When
            False, problems are logged and the affected rolls yield no
            encounter.
    """

    def __init__(
        self,
        tables: EncounterTables = DEFAULT_TABLES,
        templates: Mapping[str, EncounterTemplate] | None = DEFAULT_TEMPLATES,
        rng: random.Random | None = None,
        strict: bool = True,
    ):
        problems = encounter_problems(tables, templates)
        if problems:
            if strict:
                raise EncounterConfigError(problems)
            for problem in problems:
                logger.error("Encounter configuration problem: %s", problem)
        self.tables = tables
        self.templates = templates
        self.rng = resolve_rng(rng)

    def poi_chance(self, poi: str, is_first_visit: bool, settings: EncounterSettings) -> float:
        chance = self.tables.poi_chance.get(poi, 0.0)
        if not is_first_visit:
            chance *= POI_REVISIT_MULTIPLIER
        return min(1.0, chance * POI_GRIMNESS_MODIFIERS[settings.grimness])

    def environmental_chance(self, bucket: str, settings: EncounterSettings) -> float:
        chance = self.tables.environmental_chance.get(bucket, 0.0)
        return min(1.0, chance * ENVIRONMENTAL_GRIMNESS_MODIFIERS[settings.grimness])

    def biome_chance(
        self,
        bucket: str,
        is_first_visit: bool,
        settings: EncounterSettings,
        moves_since_encounter: int = 0,
    ) -> float:
        """Chance that the biome bucket fires, including pity and the cap.

        Buckets with no base chance (such as water) stay at zero.
        """
        base = self.tables.biome_chance.get(bucket, 0.0)
        if base <= 0:
            return 0.0
        chance = base
        if not is_first_visit:
            chance *= self.tables.revisit_multiplier.get(bucket, 1.0)
        chance *= GRIMNESS_MODIFIERS[settings.grimness]
        chance += pity_bonus(moves_since_encounter)
        return min(MAX_ENCOUNTER_CHANCE, chance)

    def resolve(
        self,
        tile: WorldTile,
        is_first_visit: bool,
        settings: EncounterSettings | None = None,
        moves_since_encounter: int = 0,
    ) -> RolledEncounter | None:
        """Roll for an encounter on a tile the party just entered.

        Args:
            tile: The tile being entered.
            is_first_visit: Whether this move explored the tile.
            settings: Campaign settings; defaults to Gritty.
            moves_since_encounter: Quiet moves since the last encounter.

        Returns:
            The rolled encounter, or None if nothing happens.
        """
        settings = settings or EncounterSettings()
        bucket = encounter_bucket(tile)
        poi = poi_type(tile)

        if poi is not None and poi in self.tables.poi_tables:
            chance = self.poi_chance(poi, is_first_visit, settings)
            if self.rng.random() < chance:
                entry = weighted_choice(self.tables.poi_tables[poi], self.rng)
                if entry is not None:
                    return self._rolled(entry, EncounterSource.POI, tile, bucket)

        if self.tables.environmental_table:
            chance = self.environmental_chance(bucket, settings)
            if self.rng.random() < chance:
                entry = weighted_choice(self.tables.environmental_table, self.rng)
                if entry is not None:
                    return self._rolled(entry, EncounterSource.ENVIRONMENTAL, tile, bucket)

        chance = self.biome_chance(bucket, is_first_visit, settings, moves_since_encounter)
        if self.rng.random() < chance:
            table = self.tables.poi_tables.get(poi) if poi is not None else None
            if table is None:
                table = self.tables.biome_tables.get(bucket)
            if table is None:
                logger.error("No encounter table for bucket '%s'", bucket)
                return None
            entry = weighted_choice(table, self.rng)
            if entry is not None:
                return self._rolled(entry, EncounterSource.BIOME, tile, bucket)

        logger.debug("No encounter at (%d, %d) [%s]", tile.x, tile.y, bucket)
        return None

    def template_for(self, encounter: RolledEncounter) -> EncounterTemplate:
        """Look up the template of a rolled encounter.

        Raises:
            KeyError: If the resolver has no template catalogue entry.
        """
        if self.templates is None or encounter.template not in self.templates:
            raise KeyError(f"Unknown encounter template: {encounter.template}")
        return self.templates[encounter.template]

    def _rolled(
        self,
        entry: EncounterTableEntry,
        source: EncounterSource,
        tile: WorldTile,
        bucket: str,
    ) -> RolledEncounter:
        hostile = entry.hostile
        if hostile is None and self.templates and entry.template in self.templates:
            hostile = self.templates[entry.template].hostile
        logger.debug(
            "Encounter '%s' (%s) at (%d, %d)", entry.template, source.value, tile.x, tile.y,
        )
        return RolledEncounter(
            template=entry.template,
            hostile=bool(hostile),
            source=source,
            biome=bucket,
            poi=tile.poi,
            x=tile.x,
            y=tile.y,
        )

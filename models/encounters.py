"""Encounter tables, templates, settings and history models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NO_ENCOUNTER = "none"


class Grimness(str, Enum):
    """Campaign tone. Darker settings make encounters more frequent."""
    NOBLE = "Noble"
    GRITTY = "Gritty"
    DARK = "Dark"
    GRIMDARK = "Grimdark"


class Difficulty(str, Enum):
    TRIVIAL = "trivial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    DEADLY = "deadly"


class OutcomeTier(str, Enum):
    """Result band of a skill check against an encounter DC."""
    CRITICAL_FAILURE = "criticalFailure"
    FAILURE = "failure"
    SUCCESS = "success"
    CRITICAL_SUCCESS = "criticalSuccess"


class EncounterSource(str, Enum):
    """Which bucket produced a rolled encounter."""
    POI = "poi"
    ENVIRONMENTAL = "environmental"
    BIOME = "biome"


class EncounterCategory(str, Enum):
    """Broad kind of encounter, used to pick failure penalties."""
    HOSTILE = "hostile"
    SOCIAL = "social"
    ENVIRONMENTAL = "environmental"
    OTHER = "other"


class EncounterTableEntry(BaseModel):
    """One weighted row of an encounter table."""
    model_config = ConfigDict(frozen=True)

    template: str
    weight: int = Field(ge=0)
    hostile: bool | None = None


class EncounterTables(BaseModel):
    """All static encounter configuration. Loaded once, read-only."""
    model_config = ConfigDict(frozen=True)

    biome_tables: dict[str, tuple[EncounterTableEntry, ...]]
    poi_tables: dict[str, tuple[EncounterTableEntry, ...]] = {}
    environmental_table: tuple[EncounterTableEntry, ...] = ()
    biome_chance: dict[str, float] = {}
    revisit_multiplier: dict[str, float] = {}
    environmental_chance: dict[str, float] = {}
    poi_chance: dict[str, float] = {}

    def problems(self) -> list[str]:
        """Return every configuration problem found in these tables."""
        found: list[str] = []
        named_tables: list[tuple[str, tuple[EncounterTableEntry, ...]]] = [
            *((f"biome table '{k}'", v) for k, v in self.biome_tables.items()),
            *((f"poi table '{k}'", v) for k, v in self.poi_tables.items()),
        ]
        if self.environmental_table:
            named_tables.append(("environmental table", self.environmental_table))

        for label, table in named_tables:
            if not table:
                found.append(f"{label} has no entries")
                continue
            sentinels = sum(1 for e in table if e.template == NO_ENCOUNTER)
            if sentinels != 1:
                found.append(
                    f"{label} must contain exactly one '{NO_ENCOUNTER}' entry, "
                    f"found {sentinels}"
                )
            if sum(e.weight for e in table) <= 0:
                found.append(f"{label} has no positive weights")

        chance_maps = {
            "biome_chance": self.biome_chance,
            "revisit_multiplier": self.revisit_multiplier,
            "environmental_chance": self.environmental_chance,
            "poi_chance": self.poi_chance,
        }
        for label, mapping in chance_maps.items():
            for key, value in mapping.items():
                if not 0.0 <= value <= 1.0:
                    found.append(f"{label}['{key}'] = {value} is outside [0, 1]")

        for key in self.poi_chance:
            if key not in self.poi_tables:
                found.append(f"poi_chance['{key}'] has no matching poi table")
        for key in self.poi_tables:
            if key not in self.poi_chance:
                found.append(f"poi table '{key}' has no poi_chance entry")
        for key, value in self.biome_chance.items():
            if value > 0 and key not in self.biome_tables:
                found.append(f"biome_chance['{key}'] > 0 has no matching biome table")
        return found


class EncounterTemplate(BaseModel):
    """Mechanical description of an encounter: difficulty and rewards."""
    model_config = ConfigDict(frozen=True)

    name: str
    difficulty: Difficulty = Difficulty.MEDIUM
    category: EncounterCategory = EncounterCategory.OTHER
    xp: int = Field(default=0, ge=0)
    gold: str = "0"                 # Dice notation, or "0"
    items: tuple[str, ...] = ()     # "item_key:30%" drop chances
    healing_by_tier: dict[OutcomeTier, str] = {}  # Dice notation or "full"

    @property
    def hostile(self) -> bool:
        return self.category == EncounterCategory.HOSTILE


class RolledEncounter(BaseModel):
    """An encounter that fired on a tile."""
    template: str
    hostile: bool = False
    source: EncounterSource
    biome: str
    poi: str | None = None
    x: int | None = None
    y: int | None = None


class EncounterSettings(BaseModel):
    """Campaign settings that influence encounter frequency."""
    grimness: Grimness = Grimness.GRITTY


class EncounterHistoryEntry(BaseModel):
    """A resolved encounter, kept for display and narration context."""
    name: str
    outcome: OutcomeTier
    hero_id: str
    xp_gained: int
    timestamp: datetime


class EncounterHistory(BaseModel):
    """Capped log of resolved encounters, oldest first."""
    max_entries: int = Field(default=20, ge=1)
    entries: list[EncounterHistoryEntry] = []

    def append(self, entry: EncounterHistoryEntry) -> None:
        """Add an entry, evicting the oldest ones beyond max_entries."""
        self.entries.append(entry)
        overflow = len(self.entries) - self.max_entries
        if overflow > 0:
            del self.entries[:overflow]

    def latest(self) -> EncounterHistoryEntry | None:
        return self.entries[-1] if self.entries else None

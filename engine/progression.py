"""Experience, levels and hit point progression."""

from __future__ import annotations

import bisect
import logging
import math
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

from engine.rules import calculate_ability_modifier
from models.characters import HeroState
from models.encounters import Difficulty, OutcomeTier

if TYPE_CHECKING:
    from models.characters import Character

logger = logging.getLogger(__name__)

XP_THRESHOLDS: tuple[int, ...] = (
    0, 300, 900, 2700, 6500, 14000, 23000, 34000, 48000, 64000,
    85000, 100000, 120000, 140000, 165000, 195000, 225000, 265000, 305000, 355000,
)
MAX_LEVEL = 20

XP_REWARDS: dict[Difficulty, int] = {
    Difficulty.TRIVIAL: 10,
    Difficulty.EASY: 25,
    Difficulty.MEDIUM: 50,
    Difficulty.HARD: 100,
    Difficulty.DEADLY: 200,
}

OUTCOME_XP_MULTIPLIER: dict[OutcomeTier, float] = {
    OutcomeTier.CRITICAL_SUCCESS: 1.5,
    OutcomeTier.SUCCESS: 1.0,
    OutcomeTier.FAILURE: 0.5,
    OutcomeTier.CRITICAL_FAILURE: 0.25,
}

HIT_DICE: dict[str, int] = {
    "Barbarian": 12,
    "Fighter": 10,
    "Paladin": 10,
    "Ranger": 10,
    "Bard": 8,
    "Cleric": 8,
    "Druid": 8,
    "Monk": 8,
    "Rogue": 8,
    "Warlock": 8,
    "Sorcerer": 6,
    "Wizard": 6,
}
DEFAULT_HIT_DIE = 8

ASI_LEVELS: tuple[int, ...] = (4, 8, 12, 16, 19)
ASI_POINTS = 2


class HitPointModel(Protocol):
    """Derives maximum hit points from a character and a level."""

    def max_hp(self, character: Character, level: int) -> int: ...


class ClassHitDieModel:
    """Class hit die plus Constitution, with average gains per level.

    Level 1 gets the full hit die; each later level adds half the die
    plus one. The Constitution modifier applies at every level.
    """

    def __init__(self, hit_dice: dict[str, int] | None = None, default_die: int = DEFAULT_HIT_DIE):
        self.hit_dice = hit_dice if hit_dice is not None else HIT_DICE
        self.default_die = default_die

    def hit_die(self, character_class: str) -> int:
        return self.hit_dice.get(character_class, self.default_die)

    def max_hp(self, character: Character, level: int) -> int:
        hit_die = self.hit_die(character.character_class)
        con_mod = calculate_ability_modifier(character.ability_scores.constitution)
        per_level = hit_die // 2 + 1 + con_mod
        return max(1, hit_die + con_mod + per_level * (level - 1))


DEFAULT_HP_MODEL: HitPointModel = ClassHitDieModel()


class LevelProgress(BaseModel):
    current: int          # XP earned into the current level
    required: int         # XP span of the current level
    percentage: int
    is_max_level: bool


class LevelUpSummary(BaseModel):
    levels_gained: int
    new_level: int
    new_max_hp: int
    asi_earned: int
    message: str


class XPAward(BaseModel):
    """Outcome of awarding experience to a hero."""
    xp_gained: int
    previous_level: int
    new_level: int
    leveled_up: bool
    summary: LevelUpSummary | None = None


def calculate_level(xp: int) -> int:
    """Return the level for a total XP amount, clamped to [1, MAX_LEVEL]."""
    level = bisect.bisect_right(XP_THRESHOLDS, xp)
    return min(max(level, 1), MAX_LEVEL)


def xp_for_next_level(level: int) -> int | None:
    """Total XP needed to reach the level after ``level``, or None at the cap."""
    if level >= MAX_LEVEL:
        return None
    return XP_THRESHOLDS[max(level, 1)]


def level_progress(xp: int) -> LevelProgress:
    level = calculate_level(xp)
    if level >= MAX_LEVEL:
        return LevelProgress(
            current=xp,
            required=XP_THRESHOLDS[MAX_LEVEL - 1],
            percentage=100,
            is_max_level=True,
        )
    floor_xp = XP_THRESHOLDS[level - 1]
    span = XP_THRESHOLDS[level] - floor_xp
    into_level = xp - floor_xp
    return LevelProgress(
        current=into_level,
        required=span,
        percentage=math.floor(into_level / span * 100),
        is_max_level=False,
    )


def ability_score_improvements(level: int) -> int:
    """Number of ASI milestones reached by ``level``."""
    return sum(1 for asi_level in ASI_LEVELS if level >= asi_level)


def level_grants_asi(level: int) -> bool:
    return level in ASI_LEVELS


def level_up_summary(previous_level: int, new_level: int, hero: HeroState) -> LevelUpSummary:
    """Summarize what a level change granted."""
    asi_earned = ability_score_improvements(new_level) - ability_score_improvements(previous_level)
    if asi_earned > 0:
        message = f"Level {new_level}! +{asi_earned * ASI_POINTS} ability points to distribute!"
    else:
        message = f"Level {new_level}! Your maximum HP has increased!"
    return LevelUpSummary(
        levels_gained=new_level - previous_level,
        new_level=new_level,
        new_max_hp=hero.max_hp,
        asi_earned=asi_earned,
        message=message,
    )


def create_hero(
    character: Character,
    xp: int = 0,
    hp_model: HitPointModel = DEFAULT_HP_MODEL,
) -> HeroState:
    """Create fresh mechanical state for a party member at full HP."""
    level = calculate_level(xp)
    max_hp = hp_model.max_hp(character, level)
    return HeroState(
        hero_id=character.id,
        current_hp=max_hp,
        max_hp=max_hp,
        xp=xp,
        level=level,
    )


def award_xp(
    hero: HeroState,
    character: Character,
    xp_gained: int,
    hp_model: HitPointModel = DEFAULT_HP_MODEL,
) -> XPAward:
    """Add experience to a hero and apply any level-up.

    A level-up recomputes max HP and heals the hero to full.

    Args:
        hero: The hero's state (mutated in place).
        character: The hero's definition, for class and Constitution.
        xp_gained: Non-negative XP to add.
        hp_model: Hit point model used on level-up.

    Returns:
        XPAward describing the change.

    Raises:
        ValueError: If xp_gained is negative.
    """
    if xp_gained < 0:
        raise ValueError(f"XP award must be non-negative, got {xp_gained}")

    previous_level = hero.level
    hero.xp += xp_gained
    new_level = max(previous_level, calculate_level(hero.xp))

    if new_level <= previous_level:
        return XPAward(
            xp_gained=xp_gained,
            previous_level=previous_level,
            new_level=previous_level,
            leveled_up=False,
        )

    hero.level = new_level
    hero.max_hp = hp_model.max_hp(character, new_level)
    hero.current_hp = hero.max_hp
    hero.is_defeated = False
    logger.info("Hero %s reached level %d", hero.hero_id, new_level)

    return XPAward(
        xp_gained=xp_gained,
        previous_level=previous_level,
        new_level=new_level,
        leveled_up=True,
        summary=level_up_summary(previous_level, new_level, hero),
    )


def calculate_encounter_xp(
    difficulty: Difficulty,
    outcome: OutcomeTier,
    player_level: int = 1,
    base_xp: int | None = None,
) -> int:
    """XP for an encounter, reduced as the player out-levels it.

    The level dampener loses 5% per level above 1 but never drops
    below 25% of the base reward.

    Args:
        difficulty: Encounter difficulty, selects the base reward.
        outcome: Outcome tier of the check.
        player_level: The hero's current level.
        base_xp: Explicit base reward (e.g. from a template), used
            instead of the difficulty table.
    """
    if base_xp is not None:
        base = base_xp
    else:
        base = XP_REWARDS.get(difficulty, XP_REWARDS[Difficulty.EASY])
    level_scaling = max(0.25, 1 - (player_level - 1) * 0.05)
    return math.floor(base * OUTCOME_XP_MULTIPLIER[outcome] * level_scaling)

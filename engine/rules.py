"""Ability, skill and difficulty rules shared by encounters and progression."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from engine.dice import CheckResult, roll_check
from models.encounters import Difficulty, OutcomeTier

if TYPE_CHECKING:
    from models.characters import Character

SKILLS: dict[str, str] = {
    "Acrobatics": "Dexterity",
    "Animal Handling": "Wisdom",
    "Arcana": "Intelligence",
    "Athletics": "Strength",
    "Deception": "Charisma",
    "History": "Intelligence",
    "Insight": "Wisdom",
    "Intimidation": "Charisma",
    "Investigation": "Intelligence",
    "Medicine": "Wisdom",
    "Nature": "Intelligence",
    "Perception": "Wisdom",
    "Performance": "Charisma",
    "Persuasion": "Charisma",
    "Religion": "Intelligence",
    "Sleight of Hand": "Dexterity",
    "Stealth": "Dexterity",
    "Survival": "Wisdom",
    "Initiative": "Dexterity",
}

ABILITIES = (
    "Strength",
    "Dexterity",
    "Constitution",
    "Intelligence",
    "Wisdom",
    "Charisma",
)

DIFFICULTY_DC: dict[Difficulty, int] = {
    Difficulty.TRIVIAL: 5,
    Difficulty.EASY: 10,
    Difficulty.MEDIUM: 15,
    Difficulty.HARD: 20,
    Difficulty.DEADLY: 25,
}


def calculate_ability_modifier(score: int) -> int:
    """Calculate ability modifier from a score using the 5e formula.

    Args:
        score: The ability score (e.g. 16).

    Returns:
        The modifier (e.g. +3 for score 16).
    """
    return (score - 10) // 2


def ability_for(skill_or_ability: str) -> str:
    """Map a skill name (or a bare ability name) to its governing ability.

    Raises:
        ValueError: If the name is neither a known skill nor an ability.
    """
    if skill_or_ability in SKILLS:
        return SKILLS[skill_or_ability]
    if skill_or_ability in ABILITIES:
        return skill_or_ability
    raise ValueError(f"Unknown skill or ability: {skill_or_ability}")


def skill_modifier(character: Character, skill: str) -> int:
    """Ability modifier a character adds to checks with the given skill."""
    score = character.ability_scores.score_for(ability_for(skill))
    return calculate_ability_modifier(score)


def determine_outcome_tier(check: CheckResult, dc: int) -> OutcomeTier:
    """Band a check result. Natural 20 and natural 1 override the DC."""
    if check.is_critical_success:
        return OutcomeTier.CRITICAL_SUCCESS
    if check.is_critical_failure:
        return OutcomeTier.CRITICAL_FAILURE
    if check.total >= dc:
        return OutcomeTier.SUCCESS
    return OutcomeTier.FAILURE


def roll_skill_check(
    character: Character,
    skill: str,
    difficulty: Difficulty,
    advantage: bool = False,
    disadvantage: bool = False,
    rng: random.Random | None = None,
) -> tuple[CheckResult, OutcomeTier]:
    """Roll a character's skill check against a difficulty's DC.

    Args:
        character: The character making the check.
        skill: Skill or ability name, e.g. "Stealth".
        difficulty: Encounter difficulty, mapped to a DC.
        advantage: Roll with advantage.
        disadvantage: Roll with disadvantage.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        (check_result, outcome_tier) tuple.
    """
    check = roll_check(
        skill_modifier(character, skill),
        advantage=advantage,
        disadvantage=disadvantage,
        rng=rng,
    )
    return check, determine_outcome_tier(check, DIFFICULTY_DC[difficulty])

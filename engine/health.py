"""Hit point damage, healing, rests and status descriptions."""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING, NamedTuple

from engine.dice import resolve_rng
from models.encounters import Difficulty, OutcomeTier

if TYPE_CHECKING:
    from models.characters import HeroState

DAMAGE_PERCENT: dict[OutcomeTier, float] = {
    OutcomeTier.CRITICAL_FAILURE: 0.40,
    OutcomeTier.FAILURE: 0.15,
    OutcomeTier.SUCCESS: 0.05,
    OutcomeTier.CRITICAL_SUCCESS: 0.0,
}

DIFFICULTY_DAMAGE_MULTIPLIER: dict[Difficulty, float] = {
    Difficulty.TRIVIAL: 0.5,
    Difficulty.EASY: 0.75,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.25,
    Difficulty.DEADLY: 1.5,
}

DAMAGE_VARIANCE = 0.2


class HPStatus(NamedTuple):
    status: str
    description: str


def calculate_damage(
    outcome_tier: OutcomeTier,
    max_hp: int,
    difficulty: Difficulty,
    rng: random.Random | None = None,
) -> int:
    """Damage taken from an encounter, as a share of maximum HP.

    The base is a percentage of max_hp by outcome tier, scaled by the
    difficulty multiplier and floored. A uniform integer variance of up to
    20% of the base is then added or subtracted.

    Args:
        outcome_tier: Result band of the check.
        max_hp: The hero's maximum hit points.
        difficulty: Encounter difficulty.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        Non-negative damage.
    """
    base = math.floor(
        max_hp * DAMAGE_PERCENT[outcome_tier] * DIFFICULTY_DAMAGE_MULTIPLIER[difficulty]
    )
    variance = math.floor(base * DAMAGE_VARIANCE)
    jitter = resolve_rng(rng).randint(-variance, variance) if variance else 0
    return max(0, base + jitter)


def apply_damage(hero: HeroState, damage: int) -> HeroState:
    """Apply damage to a hero, clamping HP at zero.

    Args:
        hero: The hero taking damage (mutated in place).
        damage: Amount of damage to deal.

    Returns:
        The updated hero.

    Raises:
        ValueError: If damage is negative.
    """
    if damage < 0:
        raise ValueError(f"Damage must be non-negative, got {damage}")
    hero.current_hp = max(0, hero.current_hp - damage)
    hero.is_defeated = hero.current_hp == 0
    return hero


def apply_healing(hero: HeroState, healing: int) -> HeroState:
    """Heal a hero up to max HP. Any heal clears the defeated flag.

    Raises:
        ValueError: If healing is negative.
    """
    if healing < 0:
        raise ValueError(f"Healing must be non-negative, got {healing}")
    hero.current_hp = min(hero.max_hp, hero.current_hp + healing)
    hero.is_defeated = False
    return hero


def short_rest(hero: HeroState) -> HeroState:
    """Recover half of max HP."""
    return apply_healing(hero, hero.max_hp // 2)


def long_rest(hero: HeroState) -> HeroState:
    """Recover to full HP."""
    return apply_healing(hero, hero.max_hp)


def hp_status(current_hp: int, max_hp: int) -> HPStatus:
    """Describe a hero's condition from the share of HP remaining."""
    percentage = current_hp / max_hp * 100 if max_hp > 0 else 0

    if percentage == 0:
        return HPStatus("defeated", "Defeated")
    if percentage <= 25:
        return HPStatus("critical", "Critically Wounded")
    if percentage <= 50:
        return HPStatus("wounded", "Wounded")
    if percentage <= 75:
        return HPStatus("injured", "Injured")
    if percentage < 100:
        return HPStatus("healthy", "Healthy")
    return HPStatus("full", "Full Health")


def damage_description(damage: int, max_hp: int) -> str:
    if damage == 0:
        return "You emerge unscathed."
    percentage = damage / max_hp * 100
    if percentage >= 30:
        return "You suffer grievous wounds!"
    if percentage >= 15:
        return "You take significant damage."
    if percentage >= 5:
        return "You sustain minor injuries."
    return "You barely feel a scratch."

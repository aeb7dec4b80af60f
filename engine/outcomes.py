"""Turning a rolled encounter and a skill check into rewards and harm."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel

from engine.dice import CheckResult, resolve_rng, roll_amount
from engine.health import calculate_damage, damage_description
from engine.inventory import normalize_item_name
from engine.progression import calculate_encounter_xp
from engine.rules import roll_skill_check
from models.encounters import EncounterCategory, EncounterTemplate, OutcomeTier

if TYPE_CHECKING:
    from models.characters import Character, HeroState

logger = logging.getLogger(__name__)

CRITICAL_DROP_BONUS = 1.5
FAILURE_TIERS = frozenset({OutcomeTier.FAILURE, OutcomeTier.CRITICAL_FAILURE})
SUCCESS_TIERS = frozenset({OutcomeTier.SUCCESS, OutcomeTier.CRITICAL_SUCCESS})

# (message, gold loss dice) for (category, is_critical); None means no gold lost
_PENALTIES: dict[tuple[EncounterCategory, bool], tuple[str, str | None]] = {
    (EncounterCategory.HOSTILE, True): ("Serious injuries sustained", "2d10+10"),
    (EncounterCategory.HOSTILE, False): ("Minor injuries sustained", "1d10+5"),
    (EncounterCategory.SOCIAL, True): ("Reputation damaged", "1d6+2"),
    (EncounterCategory.SOCIAL, False): ("Missed opportunity", None),
    (EncounterCategory.ENVIRONMENTAL, True): ("Injured by hazard", "1d6"),
    (EncounterCategory.ENVIRONMENTAL, False): ("Minor setback", None),
    (EncounterCategory.OTHER, True): ("Significant setback", "1d8+2"),
    (EncounterCategory.OTHER, False): ("Minor setback", None),
}


class EncounterLoot(BaseModel):
    gold: int = 0
    items: list[str] = []
    healing: int = 0
    full_heal: bool = False


class EncounterPenalties(BaseModel):
    messages: list[str] = []
    gold_loss: int = 0


class EncounterResolution(BaseModel):
    """Everything an encounter outcome does to one hero, before applying it."""
    template: str
    name: str
    skill: str
    check: CheckResult
    outcome: OutcomeTier
    xp: int
    loot: EncounterLoot
    penalties: EncounterPenalties | None = None
    hp_damage: int = 0
    damage_description: str | None = None


def parse_drop(entry: str) -> tuple[str, float]:
    """Split an 'item_key:30%' drop entry into (key, probability)."""
    key, _, chance = entry.partition(":")
    if not chance:
        return key, 1.0
    return key, int(chance.rstrip("%")) / 100


def roll_item_drops(
    items: tuple[str, ...],
    outcome: OutcomeTier,
    rng: random.Random | None = None,
) -> list[str]:
    """Roll each drop independently. Critical successes raise the odds by half."""
    rng = resolve_rng(rng)
    found = []
    for entry in items:
        key, chance = parse_drop(entry)
        if outcome == OutcomeTier.CRITICAL_SUCCESS:
            chance = min(chance * CRITICAL_DROP_BONUS, 1.0)
        if rng.random() < chance:
            found.append(normalize_item_name(key))
    return found


def roll_healing(
    template: EncounterTemplate,
    outcome: OutcomeTier,
    rng: random.Random | None = None,
) -> tuple[int, bool]:
    """Healing granted by a template for an outcome, as (amount, full_heal)."""
    formula = template.healing_by_tier.get(outcome)
    if not formula:
        return 0, False
    if formula == "full":
        return 0, True
    return max(0, roll_amount(formula, rng)), False


def determine_penalties(
    template: EncounterTemplate,
    outcome: OutcomeTier,
    rng: random.Random | None = None,
) -> EncounterPenalties | None:
    """Gold loss and setback messages for a failed encounter."""
    if outcome not in FAILURE_TIERS:
        return None
    is_critical = outcome == OutcomeTier.CRITICAL_FAILURE
    message, loss_formula = _PENALTIES[(template.category, is_critical)]
    penalties = EncounterPenalties(messages=[message])
    if loss_formula:
        penalties.gold_loss = roll_amount(loss_formula, rng)
        if penalties.gold_loss > 0:
            penalties.messages.append(f"Lost {penalties.gold_loss} gold")
    return penalties


def resolve_encounter_outcome(
    template_key: str,
    template: EncounterTemplate,
    character: Character,
    hero: HeroState,
    skill: str,
    advantage: bool = False,
    disadvantage: bool = False,
    rng: random.Random | None = None,
) -> EncounterResolution:
    """Roll a hero's skill check against an encounter and work out the results.

    Nothing is applied to the hero here; see GameSession.resolve_encounter.

    Args:
        template_key: Table key of the encounter, e.g. "wolf_pack".
        template: The encounter's template.
        character: The acting hero's definition.
        hero: The acting hero's current state (read only).
        skill: Skill or ability used for the check.
        advantage: Roll with advantage.
        disadvantage: Roll with disadvantage.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        EncounterResolution with XP, loot, penalties and damage.
    """
    rng = resolve_rng(rng)
    check, outcome = roll_skill_check(
        character,
        skill,
        template.difficulty,
        advantage=advantage,
        disadvantage=disadvantage,
        rng=rng,
    )

    loot = EncounterLoot()
    if outcome in SUCCESS_TIERS:
        loot.gold = max(0, roll_amount(template.gold, rng))
        loot.items = roll_item_drops(template.items, outcome, rng)
    loot.healing, loot.full_heal = roll_healing(template, outcome, rng)

    hp_damage = 0
    description = None
    if template.hostile:
        hp_damage = calculate_damage(outcome, hero.max_hp, template.difficulty, rng)
        description = damage_description(hp_damage, hero.max_hp)

    xp = calculate_encounter_xp(
        template.difficulty, outcome, hero.level, base_xp=template.xp,
    )
    logger.debug(
        "%s: %s check %d vs %s -> %s",
        template.name, skill, check.total, template.difficulty.value, outcome.value,
    )
    return EncounterResolution(
        template=template_key,
        name=template.name,
        skill=skill,
        check=check,
        outcome=outcome,
        xp=xp,
        loot=loot,
        penalties=determine_penalties(template, outcome, rng),
        hp_damage=hp_damage,
        damage_description=description,
    )

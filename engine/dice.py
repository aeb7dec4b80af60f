"""Dice rolling utilities.

Rolls draw from an injectable ``random.Random``. When none is given they
use a module-level, unseeded generator that is never shared with terrain
generation.
"""

import random
import re

from pydantic import BaseModel

_ambient_rng = random.Random()


def resolve_rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else _ambient_rng


class DiceResult(BaseModel):
    """Result of a dice roll from notation."""
    total: int
    rolls: list[int]
    modifier: int
    notation: str


class DiceRollResult(BaseModel):
    """Result of rolling a fixed number of identical dice."""
    total: int
    results: list[int]


class CheckResult(BaseModel):
    """Result of a d20 ability check."""
    total: int
    natural_roll: int
    modifier: int
    rolls: list[int]
    advantage: bool = False
    disadvantage: bool = False
    is_critical_success: bool
    is_critical_failure: bool


def roll_die(sides: int, rng: random.Random | None = None) -> int:
    """Roll one die with the given number of sides.

    Raises:
        ValueError: If sides is not positive.
    """
    if sides <= 0:
        raise ValueError(f"A die needs at least one side, got {sides}")
    return resolve_rng(rng).randint(1, sides)


def roll_dice(count: int, sides: int, rng: random.Random | None = None) -> DiceRollResult:
    """Roll ``count`` dice of ``sides`` sides and sum them.

    Args:
        count: Number of dice, must be positive.
        sides: Sides per die, must be positive.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        DiceRollResult with the total and each individual result.

    Raises:
        ValueError: If count or sides is not positive.
    """
    if count <= 0:
        raise ValueError(f"Dice count must be positive, got {count}")
    results = [roll_die(sides, rng) for _ in range(count)]
    return DiceRollResult(total=sum(results), results=results)


def roll(notation: str, rng: random.Random | None = None) -> DiceResult:
    """Parse and roll dice notation like '2d6+3', '1d20', '4d6-1'.

    Args:
        notation: Dice notation string (e.g. "2d6+3").
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        DiceResult with total, individual rolls, modifier, and notation.

    Raises:
        ValueError: If the notation is malformed or uses zero dice or sides.
    """
    notation = notation.strip().lower()

    match = re.match(r"^(\d+)d(\d+)([+-]\d+)?$", notation)
    if not match:
        raise ValueError(f"Invalid dice notation: {notation}")

    num_dice = int(match.group(1))
    die_size = int(match.group(2))
    modifier = int(match.group(3)) if match.group(3) else 0

    rolls = roll_dice(num_dice, die_size, rng).results
    total = sum(rolls) + modifier

    return DiceResult(
        total=total,
        rolls=rolls,
        modifier=modifier,
        notation=notation,
    )


def check_formula(formula: str) -> None:
    """Check that a reward formula is a number or rollable dice notation.

    Raises:
        ValueError: If the formula is malformed or uses zero dice or sides.
    """
    formula = formula.strip().lower()
    if formula.lstrip("-").isdigit():
        return
    match = re.match(r"^(\d+)d(\d+)([+-]\d+)?$", formula)
    if not match:
        raise ValueError(f"Invalid dice notation: {formula}")
    if int(match.group(1)) <= 0 or int(match.group(2)) <= 0:
        raise ValueError(f"Dice notation needs positive dice and sides: {formula}")


def roll_amount(formula: str, rng: random.Random | None = None) -> int:
    """Roll a reward formula such as '2d10' or '2d8+4'. '0' yields 0."""
    formula = formula.strip()
    if formula.lstrip("-").isdigit():
        return int(formula)
    return roll(formula, rng).total


def roll_check(
    modifier: int = 0,
    advantage: bool = False,
    disadvantage: bool = False,
    rng: random.Random | None = None,
) -> CheckResult:
    """Roll a d20 check.

    Two d20s are always drawn. Advantage keeps the higher and disadvantage
    the lower; with both or neither set, the first draw is used.
    Criticals depend only on the natural roll.

    Args:
        modifier: Added to the natural roll.
        advantage: Keep the higher of two d20s.
        disadvantage: Keep the lower of two d20s.
        rng: Optional Random instance for seeded/testing rolls.

    Returns:
        CheckResult with total, natural roll and critical flags.
    """
    rng = resolve_rng(rng)
    first = rng.randint(1, 20)
    second = rng.randint(1, 20)

    if advantage and not disadvantage:
        natural = max(first, second)
    elif disadvantage and not advantage:
        natural = min(first, second)
    else:
        natural = first

    return CheckResult(
        total=natural + modifier,
        natural_roll=natural,
        modifier=modifier,
        rolls=[first, second] if advantage or disadvantage else [first],
        advantage=advantage,
        disadvantage=disadvantage,
        is_critical_success=natural == 20,
        is_critical_failure=natural == 1,
    )

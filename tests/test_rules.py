"""Tests for ability, skill and outcome rules."""

import random

import pytest

from engine.dice import CheckResult
from engine.rules import (
    DIFFICULTY_DC,
    ability_for,
    calculate_ability_modifier,
    determine_outcome_tier,
    roll_skill_check,
    skill_modifier,
)
from models.characters import AbilityScores, Character
from models.encounters import Difficulty, OutcomeTier


def _make_character(dex: int = 14, wis: int = 8) -> Character:
    """Helper to create a test character."""
    return Character(
        id="c1",
        name="Char_c1",
        character_class="Rogue",
        ability_scores=AbilityScores(dexterity=dex, wisdom=wis),
    )


def _check(natural: int, modifier: int = 0) -> CheckResult:
    return CheckResult(
        total=natural + modifier,
        natural_roll=natural,
        modifier=modifier,
        rolls=[natural],
        is_critical_success=natural == 20,
        is_critical_failure=natural == 1,
    )


class TestAbilityModifier:
    """Tests for calculate_ability_modifier()."""

    def test_score_10(self):
        assert calculate_ability_modifier(10) == 0

    def test_score_16(self):
        assert calculate_ability_modifier(16) == 3

    def test_score_8(self):
        assert calculate_ability_modifier(8) == -1

    def test_score_1(self):
        assert calculate_ability_modifier(1) == -5

    def test_score_30(self):
        assert calculate_ability_modifier(30) == 10


class TestSkills:
    """Tests for skill to ability mapping."""

    def test_skill_maps_to_ability(self):
        assert ability_for("Stealth") == "Dexterity"
        assert ability_for("Perception") == "Wisdom"

    def test_bare_ability(self):
        assert ability_for("Strength") == "Strength"

    def test_unknown_skill(self):
        with pytest.raises(ValueError):
            ability_for("Juggling")

    def test_skill_modifier(self):
        character = _make_character(dex=16, wis=8)
        assert skill_modifier(character, "Stealth") == 3
        assert skill_modifier(character, "Survival") == -1


class TestOutcomeTier:
    """Tests for determine_outcome_tier()."""

    def test_meets_dc(self):
        assert determine_outcome_tier(_check(12, 3), 15) == OutcomeTier.SUCCESS

    def test_below_dc(self):
        assert determine_outcome_tier(_check(12, 2), 15) == OutcomeTier.FAILURE

    def test_natural_20_beats_any_dc(self):
        assert determine_outcome_tier(_check(20, -5), 25) == OutcomeTier.CRITICAL_SUCCESS

    def test_natural_1_fails_any_dc(self):
        assert determine_outcome_tier(_check(1, 10), 5) == OutcomeTier.CRITICAL_FAILURE


class TestRollSkillCheck:
    """Tests for roll_skill_check()."""

    def test_uses_skill_modifier(self):
        character = _make_character(dex=18)
        check, _ = roll_skill_check(character, "Acrobatics", Difficulty.MEDIUM, rng=random.Random(1))
        assert check.modifier == 4
        assert check.total == check.natural_roll + 4

    def test_outcome_matches_dc(self):
        character = _make_character()
        rng = random.Random(3)
        for _ in range(200):
            check, outcome = roll_skill_check(character, "Stealth", Difficulty.HARD, rng=rng)
            assert outcome == determine_outcome_tier(check, DIFFICULTY_DC[Difficulty.HARD])

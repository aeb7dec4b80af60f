"""Tests for damage, healing and rests."""

import random

import pytest

from engine.health import (
    apply_damage,
    apply_healing,
    calculate_damage,
    damage_description,
    hp_status,
    long_rest,
    short_rest,
)
from models.characters import HeroState
from models.encounters import Difficulty, OutcomeTier


def _make_hero(current: int = 20, maximum: int = 20) -> HeroState:
    return HeroState(hero_id="h1", current_hp=current, max_hp=maximum)


class TestDamage:
    """Tests for apply_damage()."""

    def test_reduces_hp(self):
        hero = apply_damage(_make_hero(), 7)
        assert hero.current_hp == 13
        assert not hero.is_defeated

    def test_clamps_at_zero(self):
        hero = apply_damage(_make_hero(), 100)
        assert hero.current_hp == 0
        assert hero.is_defeated

    def test_zero_damage(self):
        hero = apply_damage(_make_hero(), 0)
        assert hero.current_hp == 20

    def test_negative_damage(self):
        with pytest.raises(ValueError):
            apply_damage(_make_hero(), -1)

    def test_never_below_zero(self):
        rng = random.Random(1)
        hero = _make_hero()
        for _ in range(200):
            apply_damage(hero, rng.randint(0, 15))
            assert 0 <= hero.current_hp <= hero.max_hp


class TestHealing:
    """Tests for apply_healing() and rests."""

    def test_heals(self):
        hero = apply_healing(_make_hero(5), 6)
        assert hero.current_hp == 11

    def test_clamps_at_max(self):
        hero = apply_healing(_make_hero(15), 50)
        assert hero.current_hp == 20

    def test_clears_defeat(self):
        hero = apply_damage(_make_hero(), 20)
        apply_healing(hero, 1)
        assert hero.current_hp == 1
        assert not hero.is_defeated

    def test_negative_healing(self):
        with pytest.raises(ValueError):
            apply_healing(_make_hero(), -3)

    def test_short_rest(self):
        hero = short_rest(_make_hero(2, 21))
        assert hero.current_hp == 12

    def test_long_rest(self):
        hero = long_rest(_make_hero(0, 30))
        assert hero.current_hp == 30


class TestCalculateDamage:
    """Tests for calculate_damage()."""

    def test_critical_success_is_free(self):
        rng = random.Random(1)
        assert calculate_damage(OutcomeTier.CRITICAL_SUCCESS, 50, Difficulty.DEADLY, rng) == 0

    def test_within_variance(self):
        rng = random.Random(2)
        # 100 * 0.40 * 1.25 = 50, variance 10
        for _ in range(200):
            damage = calculate_damage(OutcomeTier.CRITICAL_FAILURE, 100, Difficulty.HARD, rng)
            assert 40 <= damage <= 60

    def test_small_base_has_no_variance(self):
        # 20 * 0.05 * 1.0 = 1, variance floor(0.2) = 0
        assert calculate_damage(OutcomeTier.SUCCESS, 20, Difficulty.MEDIUM) == 1

    def test_worse_outcomes_hurt_more(self):
        fail = calculate_damage(OutcomeTier.FAILURE, 100, Difficulty.TRIVIAL, random.Random(3))
        crit = calculate_damage(OutcomeTier.CRITICAL_FAILURE, 100, Difficulty.TRIVIAL, random.Random(3))
        assert fail < crit


class TestStatus:

    @pytest.mark.parametrize("current,expected", [
        (0, "defeated"),
        (5, "critical"),
        (10, "wounded"),
        (15, "injured"),
        (19, "healthy"),
        (20, "full"),
    ])
    def test_hp_status(self, current, expected):
        assert hp_status(current, 20).status == expected

    def test_damage_description(self):
        assert damage_description(0, 20) == "You emerge unscathed."
        assert damage_description(10, 20) == "You suffer grievous wounds!"
        assert damage_description(1, 100) == "You barely feel a scratch."

"""Tests for gold and item bookkeeping."""

import pytest

from engine.inventory import add_gold, add_item, lose_gold, remove_item, spend_gold
from models.characters import HeroState


def _make_hero(gold: int = 0) -> HeroState:
    return HeroState(hero_id="h1", current_hp=10, max_hp=10, gold=gold)


class TestItems:

    def test_add_normalizes_name(self):
        hero = _make_hero()
        item = add_item(hero, "healing_potion")
        assert item.name == "healing potion"
        assert item.quantity == 1

    def test_stacks(self):
        hero = _make_hero()
        add_item(hero, "rope")
        add_item(hero, "rope", 2)
        assert len(hero.inventory) == 1
        assert hero.inventory[0].quantity == 3

    def test_invalid_quantity(self):
        with pytest.raises(ValueError):
            add_item(_make_hero(), "rope", 0)

    def test_remove(self):
        hero = _make_hero()
        add_item(hero, "rations", 2)
        assert remove_item(hero, "rations")
        assert hero.inventory[0].quantity == 1
        assert remove_item(hero, "rations")
        assert hero.inventory == []

    def test_remove_missing(self):
        hero = _make_hero()
        add_item(hero, "rations")
        assert not remove_item(hero, "rations", 5)
        assert not remove_item(hero, "torch")
        assert hero.inventory[0].quantity == 1


class TestGold:

    def test_add(self):
        hero = _make_hero(5)
        assert add_gold(hero, 10) == 15

    def test_spend(self):
        hero = _make_hero(10)
        assert spend_gold(hero, 4)
        assert hero.gold == 6
        assert not spend_gold(hero, 7)
        assert hero.gold == 6

    def test_lose_is_capped(self):
        hero = _make_hero(8)
        assert lose_gold(hero, 15) == 8
        assert hero.gold == 0

    def test_negative_amounts(self):
        with pytest.raises(ValueError):
            add_gold(_make_hero(), -1)
        with pytest.raises(ValueError):
            lose_gold(_make_hero(), -1)

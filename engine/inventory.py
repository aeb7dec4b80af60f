"""Gold and item bookkeeping for heroes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.characters import InventoryItem

if TYPE_CHECKING:
    from models.characters import HeroState


def normalize_item_name(name: str) -> str:
    """Turn a loot key like 'healing_potion' into 'healing potion'."""
    return name.replace("_", " ").strip()


def add_item(hero: HeroState, name: str, quantity: int = 1) -> InventoryItem:
    """Add items to a hero's inventory, stacking with an existing entry.

    Raises:
        ValueError: If quantity is not positive.
    """
    if quantity <= 0:
        raise ValueError(f"Quantity must be positive, got {quantity}")
    name = normalize_item_name(name)
    for item in hero.inventory:
        if item.name == name:
            item.quantity += quantity
            return item
    item = InventoryItem(name=name, quantity=quantity)
    hero.inventory.append(item)
    return item


def remove_item(hero: HeroState, name: str, quantity: int = 1) -> bool:
    """Remove items from a stack. Returns False if there are not enough."""
    if quantity <= 0:
        raise ValueError(f"Quantity must be positive, got {quantity}")
    name = normalize_item_name(name)
    for item in hero.inventory:
        if item.name == name:
            if item.quantity < quantity:
                return False
            item.quantity -= quantity
            if item.quantity == 0:
                hero.inventory.remove(item)
            return True
    return False


def add_gold(hero: HeroState, amount: int) -> int:
    if amount < 0:
        raise ValueError(f"Gold amount must be non-negative, got {amount}")
    hero.gold += amount
    return hero.gold


def spend_gold(hero: HeroState, amount: int) -> bool:
    """Spend gold if the hero can afford it."""
    if amount < 0:
        raise ValueError(f"Gold amount must be non-negative, got {amount}")
    if hero.gold < amount:
        return False
    hero.gold -= amount
    return True


def lose_gold(hero: HeroState, amount: int) -> int:
    """Take up to ``amount`` gold from a hero. Returns what was actually lost."""
    if amount < 0:
        raise ValueError(f"Gold amount must be non-negative, got {amount}")
    lost = min(amount, hero.gold)
    hero.gold -= lost
    return lost

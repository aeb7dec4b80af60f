"""Place-name generation for towns and mountain ranges."""

import random
from collections.abc import Callable

NAME_PREFIXES = (
    "Mill", "Stone", "River", "Oak", "Iron", "Gold", "Silver", "Green",
    "White", "Black", "Red", "Blue", "High", "Low", "North", "South",
    "East", "West", "Old", "New", "Fair", "Bright", "Dark", "Swift",
    "Deep", "Shallow", "Long", "Short", "Broad", "Narrow", "Wide",
    "Winter", "Summer", "Spring", "Autumn", "Frost", "Sun", "Moon", "Star",
    "Cloud", "Mist", "Fog", "Rain", "Storm", "Thunder", "Wind", "Snow",
    "Crystal", "Diamond", "Ruby", "Emerald", "Sapphire", "Amber", "Jade",
)

SIZE_SUFFIXES = {
    "hamlet": ("stead", "wick", "croft", "well", "hill", "side", "edge"),
    "village": ("ton", "ham", "ley", "worth", "field", "wood", "burn"),
    "town": ("market", "ford", "bridge", "haven", "shire", "mouth", "crossing"),
    "city": ("burg", "bury", "caster", "chester", "cester", "keep", "hold", "bastion"),
}

CITY_TITLES = (
    "Stronghold", "Fortress", "Citadel", "Bastion", "Rampart", "Bulwark",
    "Keep", "Castle", "Tower", "Spire", "Crown", "Throne", "Palace",
    "Capital", "Metropolis", "Sanctuary", "Dominion", "Empire",
)

NOBLE_HOUSES = (
    "Ashwood", "Blackwater", "Copperleaf", "Dawnbringer", "Evenfall",
    "Frostbeard", "Highwind", "Ironhand", "Jadefire", "Kingsley",
    "Lightfoot", "Moonwhisper", "Nightshade", "Oakenshield", "Pinecroft",
    "Quickfoot", "Redfern", "Shadowclaw", "Stormblade", "Thornwood",
    "Underhill", "Valerius", "Wolfsbane", "Stormwind", "Fireheart",
    "Winterbourne", "Summerfield", "Rosewood", "Hawthorne", "Ravenscroft",
)
NOBLE_SUFFIXES = ("ton", "burg", "shire", "hold", "wick", "stead")

REGIONAL_PREFIXES = {
    "plains": ("Green", "Fair", "Golden", "Wheat", "Barley", "Corn", "Hay", "Meadow"),
    "forest": ("Oak", "Pine", "Elder", "Willow", "Ash", "Birch", "Cedar", "Maple"),
    "mountain": ("Stone", "Iron", "High", "Peak", "Snow", "Granite", "Cliff", "Summit"),
    "water": ("River", "Lake", "Bay", "Harbor", "Tide", "Wave", "Stream", "Current"),
}

MOUNTAIN_PREFIXES = (
    "Iron", "Stone", "Thunder", "Storm", "Frost", "Fire", "Shadow", "Crystal",
    "Silver", "Gold", "Granite", "Obsidian", "Amber", "Crimson", "Azure",
    "White", "Black", "Grey", "Red", "Bone", "Cinder", "Ash", "Dusk", "Dawn",
    "Dragon", "Eagle", "Wolf", "Serpent", "Giant", "Titan", "Ancient", "Broken",
    "Jagged", "Shattered", "Frozen", "Burning", "Howling", "Silent", "Lonely",
)
MOUNTAIN_SUFFIXES = (
    "Mountains", "Peaks", "Ridge", "Range", "Heights", "Spires", "Crags",
    "Pinnacles", "Summits", "Teeth", "Spine", "Crown", "Horns", "Cliffs",
)


def town_name(size: str, region: str, rng: random.Random) -> str:
    """Generate a town name suited to its size and surrounding region.

    Cities sometimes get a grand two-word name, and towns or cities may be
    named after a noble house. Otherwise the name is a regional (or generic)
    prefix joined to a suffix chosen by settlement size.
    """
    if size == "city" and rng.random() < 0.3:
        return f"{rng.choice(NAME_PREFIXES)} {rng.choice(CITY_TITLES)}"

    if size in ("town", "city") and rng.random() < 0.2:
        return f"{rng.choice(NOBLE_HOUSES)}{rng.choice(NOBLE_SUFFIXES)}"

    regional = REGIONAL_PREFIXES.get(region)
    prefixes = regional if regional and rng.random() < 0.7 else NAME_PREFIXES
    suffixes = SIZE_SUFFIXES.get(size, SIZE_SUFFIXES["village"])
    return f"{rng.choice(prefixes)}{rng.choice(suffixes)}"


def mountain_name(rng: random.Random) -> str:
    return f"{rng.choice(MOUNTAIN_PREFIXES)} {rng.choice(MOUNTAIN_SUFFIXES)}"


def unique_names(
    generate: Callable[[], str],
    count: int,
    taken: set[str] | None = None,
    max_attempts_per_name: int = 10,
) -> list[str]:
    """Call ``generate()`` until ``count`` distinct unused names are found.

    Gives up after ``count * max_attempts_per_name`` attempts, so the
    result may be shorter than requested.
    """
    taken = set(taken or ())
    names: list[str] = []
    for _ in range(count * max_attempts_per_name):
        if len(names) >= count:
            break
        name = generate()
        if name not in taken:
            taken.add(name)
            names.append(name)
    return names

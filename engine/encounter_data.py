"""Built-in encounter tables and templates."""

from models.encounters import (
    Difficulty,
    EncounterCategory,
    EncounterTableEntry,
    EncounterTables,
    EncounterTemplate,
    OutcomeTier,
)

HOSTILE = EncounterCategory.HOSTILE
SOCIAL = EncounterCategory.SOCIAL
ENVIRONMENTAL = EncounterCategory.ENVIRONMENTAL
OTHER = EncounterCategory.OTHER


def _table(*rows: tuple) -> tuple[EncounterTableEntry, ...]:
    """Build a table from (template, weight[, hostile]) rows."""
    return tuple(
        EncounterTableEntry(template=row[0], weight=row[1], hostile=row[2] if len(row) > 2 else None)
        for row in rows
    )


GROVE_TABLE = _table(
    ("forest_beast", 10, True),
    ("sacred_grove", 20, False),
    ("dryad_encounter", 15, False),
    ("fairy_ring", 12, False),
    ("none", 43),
)

PEAK_TABLE = _table(
    ("mountain_dragon", 5, True),
    ("mountain_pass", 20, False),
    ("mountain_hermit_cave", 18, False),
    ("mountain_eagle_nest", 15, False),
    ("none", 42),
)

DEFAULT_TABLES = EncounterTables(
    biome_tables={
        "plains": _table(
            ("goblin_ambush", 12, True),
            ("wolf_pack", 10, True),
            ("bandit_roadblock", 10, True),
            ("traveling_merchant", 12, False),
            ("wandering_minstrel", 8, False),
            ("lost_child", 7, False),
            ("herb_gathering", 7, False),
            ("abandoned_campsite", 8, False),
            ("mysterious_stranger", 8, False),
            ("wounded_traveler", 7, False),
            ("distant_smoke", 6, False),
            ("none", 5),
        ),
        "forest": _table(
            ("giant_spiders", 15, True),
            ("bear_encounter", 10, True),
            ("wolf_pack", 8, True),
            ("elf_patrol", 10, False),
            ("mysterious_shrine", 7, False),
            ("herb_gathering", 10, False),
            ("abandoned_campsite", 7, False),
            ("hidden_treasure", 6, False),
            ("distant_smoke", 5, False),
            ("none", 22),
        ),
        "mountain": _table(
            ("rockslide", 15, True),
            ("bandit_roadblock", 12, True),
            ("bear_encounter", 8, True),
            ("mountain_hermit", 12, False),
            ("mysterious_shrine", 8, False),
            ("abandoned_campsite", 7, False),
            ("hidden_treasure", 7, False),
            ("distant_smoke", 6, False),
            ("none", 25),
        ),
        "town": _table(
            ("tavern_brawl", 8, False),
            ("town_market", 20, False),
            ("town_quest_board", 18, False),
            ("town_healer", 15, False),
            ("suspicious_stranger", 12, False),
            ("wandering_minstrel", 8, False),
            ("mysterious_stranger", 10, False),
            ("none", 9),
        ),
        "beach": _table(
            ("bandit_roadblock", 8, True),
            ("traveling_merchant", 12, False),
            ("abandoned_campsite", 12, False),
            ("lost_child", 8, False),
            ("hidden_treasure", 10, False),
            ("none", 50),
        ),
    },
    poi_tables={
        "cave": _table(
            ("cave_bats", 15, False),
            ("cave_spider_nest", 12, True),
            ("cave_treasure_guardian", 5, True),
            ("cave_entrance", 20, False),
            ("cave_underground_lake", 15, False),
            ("none", 33),
        ),
        "ruins": _table(
            ("ruin_ghost", 12, True),
            ("ruin_cultists", 8, True),
            ("ruin_entrance", 20, False),
            ("ruin_treasure_vault", 12, False),
            ("ruin_ancient_library", 15, False),
            ("none", 33),
        ),
        "grove": GROVE_TABLE,
        "forest": GROVE_TABLE,
        "mountain": PEAK_TABLE,
        "peak": PEAK_TABLE,
    },
    environmental_table=_table(
        ("sudden_storm", 15, False),
        ("earthquake", 5, False),
        ("thick_fog", 20, False),
        ("heat_wave", 12, False),
        ("strange_lights", 15, False),
        ("none", 33),
    ),
    biome_chance={
        "plains": 0.3,
        "forest": 0.35,
        "mountain": 0.3,
        "town": 0.4,
        "beach": 0.15,
        "water": 0.0,
    },
    revisit_multiplier={
        "plains": 0.3,
        "forest": 0.4,
        "mountain": 0.35,
        "town": 0.5,
        "beach": 0.2,
        "water": 0.0,
    },
    environmental_chance={
        "plains": 0.15,
        "forest": 0.1,
        "mountain": 0.2,
        "beach": 0.12,
        "desert": 0.25,
        "swamp": 0.18,
        "town": 0.05,
        "water": 0.1,
    },
    poi_chance={
        "cave": 0.5,
        "ruins": 0.45,
        "grove": 0.35,
        "forest": 0.35,
        "mountain": 0.4,
        "peak": 0.35,
    },
)


def _template(name, difficulty, category, xp, gold="0", items=(), healing_by_tier=None):
    return EncounterTemplate(
        name=name,
        difficulty=difficulty,
        category=category,
        xp=xp,
        gold=gold,
        items=tuple(items),
        healing_by_tier=healing_by_tier or {},
    )


D = Difficulty

DEFAULT_TEMPLATES: dict[str, EncounterTemplate] = {
    # Overland
    "goblin_ambush": _template("Goblin Ambush", D.EASY, HOSTILE, 50, "2d10", ["rusty_dagger:30%", "healing_potion:20%"]),
    "wolf_pack": _template("Wolf Pack", D.MEDIUM, HOSTILE, 75, "1d6", ["wolf_pelt:60%", "wolf_fang:40%"]),
    "bandit_roadblock": _template("Bandit Roadblock", D.MEDIUM, HOSTILE, 100, "3d10", ["shortsword:25%", "leather_armor:15%", "healing_potion:30%"]),
    "traveling_merchant": _template("Traveling Merchant", D.EASY, SOCIAL, 25, "1d10", ["healing_potion:50%", "rations:70%", "map_fragment:20%"]),
    "wandering_minstrel": _template("Wandering Minstrel", D.EASY, SOCIAL, 30, "0", ["inspiration:40%", "quest_clue:30%"]),
    "giant_spiders": _template("Giant Spider Nest", D.MEDIUM, HOSTILE, 90, "2d8", ["spider_silk:70%", "venom_sac:40%", "healing_potion:25%"]),
    "bear_encounter": _template("Angry Bear", D.HARD, HOSTILE, 120, "1d4", ["bear_pelt:80%", "bear_claw:60%"]),
    "mysterious_shrine": _template("Mysterious Shrine", D.MEDIUM, ENVIRONMENTAL, 80, "0", ["divine_blessing:50%", "ancient_knowledge:30%", "cursed_item:10%"]),
    "rockslide": _template("Rockslide", D.MEDIUM, HOSTILE, 60, "0", ["gemstone:30%", "rare_ore:20%"]),
    "lost_child": _template("Lost Child", D.EASY, SOCIAL, 40, "1d20", ["family_heirloom:25%", "healing_potion:40%"]),
    "herb_gathering": _template("Medicinal Herbs", D.EASY, OTHER, 15, "0", ["healing_herbs:80%", "rare_ingredient:30%", "healing_potion:20%"]),
    "abandoned_campsite": _template("Abandoned Campsite", D.EASY, OTHER, 20, "1d8", ["rations:60%", "rope:40%", "journal_page:25%"]),
    "mountain_hermit": _template("Mountain Hermit", D.EASY, SOCIAL, 35, "0", ["ancient_knowledge:50%", "quest_clue:40%", "rare_herb:30%"]),
    "elf_patrol": _template("Elven Patrol", D.MEDIUM, SOCIAL, 50, "0", ["elven_rations:50%", "forest_map:30%", "elven_blessing:20%"]),
    "mysterious_stranger": _template("Mysterious Stranger", D.MEDIUM, SOCIAL, 40, "1d12", ["quest_clue:60%", "mysterious_letter:30%", "enchanted_trinket:15%"]),
    "wounded_traveler": _template("Wounded Traveler", D.EASY, SOCIAL, 30, "2d8", ["healing_potion:40%", "traveler_map:35%", "family_heirloom:20%"]),
    "hidden_treasure": _template("Hidden Cache", D.EASY, OTHER, 25, "3d10", ["gemstone:50%", "gold_coins:60%", "magic_item:15%", "cursed_item:10%"]),
    "distant_smoke": _template("Distant Smoke", D.MEDIUM, OTHER, 45, "2d10", ["quest_clue:50%", "survivor_reward:30%", "salvaged_goods:40%"]),
    # Town
    "tavern_brawl": _template("Tavern Brawl", D.EASY, SOCIAL, 30, "1d8", ["ale_mug:50%", "bar_stool_leg:20%"]),
    "town_market": _template("Bustling Market", D.EASY, SOCIAL, 20, "2d6", ["rations:60%", "healing_potion:30%", "map_fragment:15%"]),
    "town_quest_board": _template("Quest Board", D.EASY, OTHER, 25, "0", ["quest_clue:60%", "map_fragment:30%"]),
    "town_healer": _template(
        "Traveling Healer", D.EASY, SOCIAL, 15, "0",
        ["healing_potion:70%", "antidote:40%", "herbal_remedy:50%"],
        healing_by_tier={
            OutcomeTier.CRITICAL_SUCCESS: "full",
            OutcomeTier.SUCCESS: "2d8+4",
            OutcomeTier.FAILURE: "1d4",
            OutcomeTier.CRITICAL_FAILURE: "1d4",
        },
    ),
    "suspicious_stranger": _template("Suspicious Stranger", D.MEDIUM, SOCIAL, 40, "1d10", ["quest_clue:50%", "stolen_goods:20%", "poisoned_dagger:10%"]),
    # Caves
    "cave_entrance": _template("Mysterious Cave", D.MEDIUM, OTHER, 50, "3d12", ["cave_mushrooms:60%", "raw_gems:40%", "ancient_artifact:15%"]),
    "cave_bats": _template("Bat Swarm", D.EASY, ENVIRONMENTAL, 20, "0", ["bat_guano:70%", "cave_map:20%"]),
    "cave_spider_nest": _template("Spider Nest", D.HARD, HOSTILE, 80, "2d10", ["spider_silk:80%", "poison_vial:40%", "wrapped_corpse_loot:50%"]),
    "cave_underground_lake": _template("Underground Lake", D.MEDIUM, OTHER, 40, "1d20", ["glowing_fungi:70%", "cave_fish:60%", "pearl:25%", "drowned_treasure:20%"]),
    "cave_treasure_guardian": _template("Treasure Guardian", D.DEADLY, HOSTILE, 150, "10d20", ["rare_gem:70%", "magic_weapon:40%", "ancient_artifact:30%", "dragon_scale:20%"]),
    # Ruins
    "ruin_entrance": _template("Ancient Ruins", D.MEDIUM, OTHER, 55, "2d20", ["ancient_scroll:40%", "old_coins:60%", "artifact_fragment:30%"]),
    "ruin_ghost": _template("Restless Spirit", D.HARD, HOSTILE, 70, "3d10", ["ectoplasm:50%", "ghostly_trinket:35%", "spirit_essence:20%"]),
    "ruin_treasure_vault": _template("Hidden Vault", D.HARD, OTHER, 90, "5d20", ["ancient_gold:80%", "magic_scroll:50%", "legendary_weapon:15%"]),
    "ruin_cultists": _template("Dark Ritual", D.HARD, HOSTILE, 100, "4d12", ["ritual_dagger:60%", "dark_tome:40%", "cult_treasure:50%", "cursed_item:30%"]),
    "ruin_ancient_library": _template("Forgotten Library", D.EASY, OTHER, 45, "1d10", ["spell_scroll:50%", "history_tome:60%", "treasure_map:25%", "forbidden_knowledge:15%"]),
    # Groves
    "sacred_grove": _template("Sacred Grove", D.EASY, OTHER, 35, "0", ["healing_herbs:70%", "nature_blessing:40%", "druid_token:25%", "rare_flower:35%"]),
    "dryad_encounter": _template("Dryad Guardian", D.MEDIUM, SOCIAL, 50, "0", ["dryad_blessing:50%", "enchanted_seed:40%", "forest_map:60%", "nature_charm:30%"]),
    "forest_beast": _template("Awakened Beast", D.HARD, HOSTILE, 75, "0", ["beast_hide:70%", "enchanted_tusk:40%", "primal_essence:25%"]),
    "fairy_ring": _template("Fairy Ring", D.MEDIUM, OTHER, 60, "2d20", ["fairy_dust:60%", "fey_charm:40%", "enchanted_mushroom:50%", "pixie_gold:30%"]),
    # Peaks
    "mountain_pass": _template("Treacherous Pass", D.MEDIUM, ENVIRONMENTAL, 45, "0", ["mountain_crystal:50%", "eagle_feather:30%", "rare_ore:25%"]),
    "mountain_dragon": _template("Dragon's Lair", D.DEADLY, HOSTILE, 200, "20d20", ["dragon_scale:80%", "dragon_gold:90%", "legendary_artifact:25%", "dragon_egg:5%"]),
    "mountain_hermit_cave": _template("Mountain Cave Hermit", D.EASY, SOCIAL, 40, "1d10", ["hermit_wisdom:60%", "mountain_herbs:50%", "old_map:35%", "enchanted_staff:15%"]),
    "mountain_eagle_nest": _template("Giant Eagle Nest", D.MEDIUM, OTHER, 55, "0", ["giant_feather:80%", "eagle_blessing:30%", "mountain_view:50%", "eagle_ally:20%"]),
    # Weather and ambient events
    "sudden_storm": _template("Sudden Storm", D.MEDIUM, ENVIRONMENTAL, 30, "0", ["rainwater:70%", "storm_crystal:20%"]),
    "thick_fog": _template("Unnatural Fog", D.EASY, ENVIRONMENTAL, 25, "0", ["fog_essence:40%", "hidden_path:30%"]),
    "earthquake": _template("Earthquake", D.HARD, ENVIRONMENTAL, 50, "0", ["exposed_minerals:50%", "uncovered_ruins:25%", "fallen_treasure:30%"]),
    "heat_wave": _template("Scorching Heat", D.MEDIUM, ENVIRONMENTAL, 30, "0", ["survival_experience:60%", "desert_flower:30%"]),
    "strange_lights": _template("Strange Lights", D.EASY, ENVIRONMENTAL, 35, "1d20", ["wisp_essence:40%", "magical_discovery:50%", "traveler_contact:30%"]),
}

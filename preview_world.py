"""CLI tool for previewing generated worlds and encounter tables.

Usage:
    python preview_world.py map --seed 42 --width 40 --height 20
    python preview_world.py encounters --seed 42 --moves 200
    python preview_world.py check-tables --file my_tables.json

Environment variables:
    LOG_LEVEL              Logging level (default: INFO)
    ENCOUNTER_TABLES_FILE  Encounter tables JSON used instead of the built-ins
"""

import argparse
import random
import sys
from collections import Counter

from config import WORLD_HEIGHT, WORLD_WIDTH, configure_logging
from engine.encounters import (
    EncounterConfigError,
    EncounterResolver,
    configured_tables,
    load_encounter_tables,
)
from engine.terrain import WorldOptions, generate_world
from models.encounters import EncounterSettings, Grimness
from models.world import Biome, WorldMap

BIOME_GLYPHS = {
    Biome.DEEP_WATER: "~",
    Biome.WATER: "-",
    Biome.BEACH: ".",
    Biome.PLAINS: ",",
    Biome.MOUNTAIN: "^",
}
POI_GLYPHS = {"forest": "T", "mountain": "A", "town": "#"}


def render_map(world: WorldMap) -> str:
    """Render a world as one glyph per tile. POIs take precedence over biomes."""
    lines = []
    for row in world.tiles:
        line = ""
        for tile in row:
            if tile.is_starting_town:
                line += "@"
            else:
                line += POI_GLYPHS.get(tile.poi, BIOME_GLYPHS[tile.biome])
        lines.append(line)
    return "\n".join(lines)


def _options(args: argparse.Namespace) -> WorldOptions:
    return WorldOptions(
        mountain_threshold=args.mountain_threshold,
        forest_threshold=args.forest_threshold,
        hill_density=args.hill_density,
        water_level=args.water_level,
    )


def show_map(args: argparse.Namespace) -> None:
    """Print an ASCII map, the legend and the towns of a world."""
    world = generate_world(args.width, args.height, args.seed, _options(args))
    print(render_map(world))
    print()
    print("~ deep water  - water  . beach  , plains  ^ mountain")
    print("T forest  A peak  # town  @ starting town")
    print()
    counts = Counter(tile.biome.value for tile in world.iter_tiles())
    for biome in Biome:
        print(f"{biome.value:<12} {counts.get(biome.value, 0):>5}")
    print()
    for town in world.find_tiles(lambda t: t.is_town):
        marker = " (start)" if town.is_starting_town else ""
        print(f"{town.town_name:<24} {town.town_size:<8} at ({town.x}, {town.y}){marker}")


def simulate_encounters(args: argparse.Namespace) -> None:
    """Random-walk a party across a world and tally encounter rolls."""
    world = generate_world(args.width, args.height, args.seed, _options(args), fog_of_war=True)
    rng = random.Random(args.seed)
    resolver = EncounterResolver(configured_tables(), rng=rng)
    settings = EncounterSettings(grimness=Grimness(args.grimness))

    land = world.find_tiles(lambda t: not t.is_water)
    if not land:
        print("Error: world has no land tiles", file=sys.stderr)
        sys.exit(1)
    tile = land[0]
    world.mark_explored(tile.x, tile.y)

    tally: Counter[str] = Counter()
    quiet_moves = 0
    for _ in range(args.moves):
        neighbours = [
            world.tiles[ny][nx]
            for nx, ny in ((tile.x + 1, tile.y), (tile.x - 1, tile.y),
                           (tile.x, tile.y + 1), (tile.x, tile.y - 1))
            if world.in_bounds(nx, ny) and not world.tiles[ny][nx].is_water
        ]
        if not neighbours:
            break
        tile = rng.choice(neighbours)
        first_visit = world.mark_explored(tile.x, tile.y)
        quiet_moves += 1
        encounter = resolver.resolve(tile, first_visit, settings, quiet_moves)
        if encounter is None:
            tally["(none)"] += 1
        else:
            tally[f"{encounter.source.value}:{encounter.template}"] += 1
            quiet_moves = 0

    print(f"{'ENCOUNTER':<40} {'COUNT':>6}")
    print("-" * 47)
    for name, count in tally.most_common():
        print(f"{name:<40} {count:>6}")


def check_tables(args: argparse.Namespace) -> None:
    """Validate an encounter tables file and report problems."""
    try:
        tables = load_encounter_tables(args.file)
        EncounterResolver(tables)
    except EncounterConfigError as exc:
        print(f"Invalid: {args.file}", file=sys.stderr)
        for problem in exc.problems:
            print(f"  - {problem}", file=sys.stderr)
        sys.exit(1)
    print(f"OK: {args.file}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Preview RPG World Core worlds and encounters",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    world_parents = argparse.ArgumentParser(add_help=False)
    world_parents.add_argument("--seed", type=int, default=42, help="World seed")
    world_parents.add_argument("--width", type=int, default=WORLD_WIDTH, help="Width in tiles")
    world_parents.add_argument("--height", type=int, default=WORLD_HEIGHT, help="Height in tiles")
    defaults = WorldOptions()
    world_parents.add_argument("--mountain-threshold", type=float, default=defaults.mountain_threshold)
    world_parents.add_argument("--forest-threshold", type=float, default=defaults.forest_threshold)
    world_parents.add_argument("--hill-density", type=float, default=defaults.hill_density)
    world_parents.add_argument("--water-level", type=float, default=defaults.water_level)

    subparsers.add_parser("map", parents=[world_parents], help="Print an ASCII world map")

    encounters_parser = subparsers.add_parser(
        "encounters", parents=[world_parents], help="Tally encounters over a random walk",
    )
    encounters_parser.add_argument("--moves", type=int, default=100, help="Number of moves")
    encounters_parser.add_argument(
        "--grimness",
        choices=[g.value for g in Grimness],
        default=Grimness.GRITTY.value,
        help="Campaign grimness",
    )

    check_parser = subparsers.add_parser("check-tables", help="Validate an encounter tables file")
    check_parser.add_argument("--file", required=True, help="Path to the tables JSON")

    args = parser.parse_args()
    configure_logging(args.log_level)

    if args.command == "map":
        show_map(args)
    elif args.command == "encounters":
        simulate_encounters(args)
    elif args.command == "check-tables":
        check_tables(args)


if __name__ == "__main__":
    main()

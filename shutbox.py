#!/usr/bin/env python3
"""
Command-line advisor for Shut the Box.

Usage:
    python shutbox.py --roll 3 4                       # Standard 1-12 board
    python shutbox.py --tiles 1 2 5 9 --roll 6 3       # Custom open tiles
    python shutbox.py --tiles 1 2 3 --probability      # Odds of shutting the box
    python shutbox.py --tiles 2 4 7 --rigged --single  # Best roll to ask for
    python shutbox.py --serve --port 8080              # Run the JSON API
"""
import argparse
import logging
import sys

from ai import best_move, rigged_roll
from game_engine import (
    MAX_TILE_VALUE, NO_ROLL, OneDieRule, Roll, Tile,
    available_combinations, initial_tiles, legal_tile_ids, remaining_score,
)
from probability import ProbabilityCalculator
from settings import load_settings, resolve_rule, save_settings

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments.

    Args:
        argv: Optional list of args (for testing). None uses sys.argv.

    Returns:
        Parsed argparse.Namespace.
    """
    parser = argparse.ArgumentParser(description="Shut the Box move advisor")
    parser.add_argument("--tiles", nargs="+", type=int, metavar="VALUE",
                        help="Open tile values (default: the full board from settings)")
    parser.add_argument("--roll", nargs="+", type=int, metavar="FACE",
                        help="One or two die faces")
    parser.add_argument("--rule", choices=[r.value for r in OneDieRule],
                        help="One-die rule (default: from settings). "
                             + " ".join(f"{r.value}: {r.help_text}" for r in OneDieRule))
    parser.add_argument("--max-tile", type=int, metavar="N",
                        help=f"Highest tile on the default board, 1-{MAX_TILE_VALUE} (default: from settings)")
    parser.add_argument("--probability", action="store_true",
                        help="Show the chance of shutting the box under optimal play")
    parser.add_argument("--rigged", action="store_true",
                        help="Show the roll that enables the biggest move")
    parser.add_argument("--single", action="store_true",
                        help="Prefer a single-die rigged roll (with --rigged)")
    parser.add_argument("--settings", metavar="PATH",
                        help="Settings file (default: ~/.shutbox_settings.json)")
    parser.add_argument("--save-settings", action="store_true",
                        help="Store --rule and --max-tile in the settings file and exit")
    parser.add_argument("--serve", action="store_true", help="Run the web API instead")
    parser.add_argument("--port", type=int, default=5000, help="Web API port (default: 5000)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    if args.roll is not None:
        if len(args.roll) > 2:
            parser.error("--roll takes one or two faces")
        if not all(1 <= face <= 6 for face in args.roll):
            parser.error("die faces must be between 1 and 6")
    if args.tiles is not None:
        if not all(0 < v <= MAX_TILE_VALUE for v in args.tiles):
            parser.error(f"tile values must be between 1 and {MAX_TILE_VALUE}")
        if len(set(args.tiles)) != len(args.tiles):
            parser.error("tile values must be distinct")
    if args.max_tile is not None and not 0 < args.max_tile <= MAX_TILE_VALUE:
        parser.error(f"--max-tile must be between 1 and {MAX_TILE_VALUE}")
    return args


def apply_overrides(args, settings):
    """Settings with the --rule and --max-tile overrides applied."""
    updated = dict(settings)
    if args.rule is not None:
        updated["one_die_rule"] = args.rule
    if args.max_tile is not None:
        updated["max_tile"] = args.max_tile
    return updated


def advise(args, settings, out=None):
    """Print the advice requested by args. Returns the process exit status."""
    if out is None:
        out = sys.stdout
    settings = apply_overrides(args, settings)
    if args.tiles is not None:
        tiles = tuple(Tile(id=v, value=v) for v in args.tiles)
    else:
        tiles = initial_tiles(settings["max_tile"])
    roll = Roll(*args.roll) if args.roll else NO_ROLL
    rule = resolve_rule(settings)

    print(f"Board: {' '.join(str(t.value) for t in tiles)} (remainder {remaining_score(tiles)})", file=out)

    if roll.total > 0:
        combos = available_combinations(roll, tiles)
        print(f"Roll: {roll.describe()}", file=out)
        if not combos:
            print("No available moves — bust", file=out)
        else:
            for combo in combos:
                print(f"  {' + '.join(str(t.value) for t in combo)}", file=out)
            hinted = sorted(legal_tile_ids(roll, tiles))
            print(f"Hinted tiles: {', '.join(str(i) for i in hinted)}", file=out)
            move = best_move(roll, tiles)
            print(f"Best move: {', '.join(str(t.value) for t in move)}", file=out)

    if args.rigged:
        rigged = rigged_roll(tiles, prefers_single_die=args.single)
        print(f"Rigged roll: {rigged.describe() if rigged is not None else 'none'}", file=out)

    if args.probability:
        limit = settings["probability_tile_limit"]
        if len(tiles) > limit:
            print(f"Too many open tiles for an exact probability ({len(tiles)} > {limit})", file=sys.stderr)
            return 1
        p = ProbabilityCalculator(rule).evaluate(tiles)
        print(f"Chance to shut the box ({rule.title}): {p:.2%}", file=out)

    return 0


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    settings = apply_overrides(args, load_settings(args.settings))

    if args.save_settings:
        save_settings(settings, args.settings)
        print(f"Saved settings ({resolve_rule(settings).title}, tiles 1-{settings['max_tile']})")
        return 0

    if args.serve:
        from web import app
        app.config["SHUTBOX_SETTINGS"] = settings
        logger.info("Serving on port %d", args.port)
        app.run(port=args.port)
        return 0

    return advise(args, settings)


if __name__ == "__main__":
    sys.exit(main())

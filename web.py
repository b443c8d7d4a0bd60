#!/usr/bin/env python3
"""
Shut the Box Web — Flask JSON API over the move engine.

Every request carries its own board snapshot, so the server keeps no game
state. Request bodies look like:

    {"tiles": [1, 2, 3, 4], "roll": [3, 4], "rule": "never"}

where "tiles" is either a list of open tile values (id == value) or a list of
{"id", "value", "is_shut"} objects, and "roll" holds zero, one, or two faces.
"""
import logging
import sys

logger = logging.getLogger(__name__)

from flask import Flask, jsonify, request

from ai import best_move, rigged_roll
from game_engine import (
    MAX_TILE_VALUE, NO_ROLL, OneDieRule, Roll, Tile,
    available_combinations, is_tile_selectable, legal_tile_ids,
    open_tiles, validate_selection,
)
from probability import ProbabilityCalculator
from settings import load_settings, resolve_rule

app = Flask(__name__)


class RequestError(ValueError):
    """A request body that cannot be turned into a board snapshot."""


@app.errorhandler(RequestError)
def _bad_request(error):
    logger.warning("Rejected request to %s: %s", request.path, error)
    return jsonify({"error": str(error)}), 400


@app.route("/api/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/api/combinations", methods=["POST"])
def api_combinations():
    """All legal combinations for the roll, plus the hinted tile ids."""
    data = _payload()
    tiles = _parse_tiles(data)
    roll = _parse_roll(data)
    combos = available_combinations(roll, tiles)
    return jsonify({
        "combinations": [_ids(combo) for combo in combos],
        "hinted": sorted(legal_tile_ids(roll, tiles)),
    })


@app.route("/api/best-move", methods=["POST"])
def api_best_move():
    """Recommended combination; an empty list with bust=true when nothing fits."""
    data = _payload()
    tiles = _parse_tiles(data)
    roll = _parse_roll(data)
    move = best_move(roll, tiles)
    return jsonify({"best_move": _ids(move), "bust": roll.total > 0 and not move})


@app.route("/api/selectable", methods=["POST"])
def api_selectable():
    """Whether a tile may be toggled, and whether the toggled selection matches the roll."""
    data = _payload()
    tiles = _parse_tiles(data)
    roll = _parse_roll(data)
    by_id = {t.id: t for t in tiles}

    raw_selection = data.get("selection", [])
    if not isinstance(raw_selection, list):
        raise RequestError("'selection' must be a list of tile ids")
    selection = [_tile_by_id(by_id, tile_id) for tile_id in raw_selection]
    tile = _tile_by_id(by_id, data.get("tile"))

    selectable = is_tile_selectable(tile, selection, tiles, roll)
    if not selectable:
        updated = selection
    elif tile.id in {t.id for t in selection}:
        updated = [t for t in selection if t.id != tile.id]
    else:
        updated = selection + [tile]
    return jsonify({
        "selectable": selectable,
        "selection": _ids(updated),
        "complete": validate_selection(updated, roll),
    })


@app.route("/api/rigged-roll", methods=["POST"])
def api_rigged_roll():
    """A roll that enables the biggest move, or null."""
    data = _payload()
    tiles = _parse_tiles(data)
    roll = rigged_roll(open_tiles(tiles), bool(data.get("prefers_single_die", False)))
    return jsonify({"roll": list(roll.values) if roll is not None else None})


@app.route("/api/probability", methods=["POST"])
def api_probability():
    """Chance of clearing the board under optimal play."""
    data = _payload()
    tiles = _parse_tiles(data)
    rule = _parse_rule(data)
    limit = _settings()["probability_tile_limit"]
    board = open_tiles(tiles)
    if len({t.value for t in board}) != len(board):
        raise RequestError("open tiles must have distinct values for a probability")
    if len(board) > limit:
        logger.warning("Refusing probability for %d open tiles (limit %d)", len(board), limit)
        return jsonify({"error": f"too many open tiles ({len(board)} > {limit})"}), 422
    return jsonify({"probability": ProbabilityCalculator(rule).evaluate(board)})


# ── Request parsing ──────────────────────────────────────────────────────────

def _settings():
    """Engine settings; tests and embedders can override via app.config."""
    settings = app.config.get("SHUTBOX_SETTINGS")
    if settings is None:
        settings = load_settings()
        app.config["SHUTBOX_SETTINGS"] = settings
    return settings


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestError("request body must be a JSON object")
    return data


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_tiles(data):
    """Build the tile tuple from either plain values or tile objects."""
    raw = data.get("tiles")
    if not isinstance(raw, list):
        raise RequestError("'tiles' must be a list")

    tiles = []
    for item in raw:
        if _is_int(item):
            tiles.append(Tile(id=item, value=item))
        elif isinstance(item, dict) and _is_int(item.get("id")) and _is_int(item.get("value")):
            tiles.append(Tile(id=item["id"], value=item["value"],
                              is_shut=bool(item.get("is_shut", False))))
        else:
            raise RequestError(f"invalid tile: {item!r}")
        if not 0 < tiles[-1].value <= MAX_TILE_VALUE:
            raise RequestError(f"tile values must be between 1 and {MAX_TILE_VALUE}: {item!r}")

    if len({t.id for t in tiles}) != len(tiles):
        raise RequestError("tile ids must be unique")
    return tuple(tiles)


def _parse_roll(data):
    raw = data.get("roll")
    if raw is None:
        return NO_ROLL
    if not isinstance(raw, list) or len(raw) > 2:
        raise RequestError("'roll' must be a list of at most two faces")
    if not all(_is_int(face) and 1 <= face <= 6 for face in raw):
        raise RequestError("die faces must be integers 1-6")
    return Roll(*raw)


def _parse_rule(data):
    name = data.get("rule")
    if name is None:
        return resolve_rule(_settings())
    rule = _rule_by_name(name)
    if rule is None:
        raise RequestError(f"unknown one-die rule: {name!r}")
    return rule


def _rule_by_name(name):
    """Look up a OneDieRule by its stored name."""
    for rule in OneDieRule:
        if rule.value == name:
            return rule
    return None


def _tile_by_id(by_id, tile_id):
    if not _is_int(tile_id) or tile_id not in by_id:
        raise RequestError(f"unknown tile id: {tile_id!r}")
    return by_id[tile_id]


def _ids(combo):
    return [t.id for t in combo]


def main(argv=None):
    """Entry point for the web server."""
    import argparse
    parser = argparse.ArgumentParser(description="Shut the Box Web API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, stream=sys.stderr)
    print(f"Starting Shut the Box API at http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()

"""
Shut the Box Game Engine - Pure tile and combination logic without UI dependencies

This module contains the core rules of Shut the Box: tiles, dice rolls, the
one-die rule, and the subset-sum search that decides which tiles a roll can
close. Everything here uses immutable data structures and pure functions so it
can be unit tested without any front end.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence, Tuple
from enum import Enum

# Largest tile value supported by the board presets (the "madness" board).
# Open masks are plain ints, so this bounds the bit width rather than a word size.
MAX_TILE_VALUE = 56
STANDARD_MAX_TILE = 12


class OneDieRule(Enum):
    """When a single die may be rolled instead of two"""
    AFTER_TOP_TILES_SHUT = "afterTopTilesShut"
    WHEN_REMAINDER_LESS_THAN_SIX = "whenRemainderLessThanSix"
    NEVER = "never"

    @property
    def title(self):
        return _RULE_TITLES[self]

    @property
    def help_text(self):
        return _RULE_HELP[self]


_RULE_TITLES = {
    OneDieRule.AFTER_TOP_TILES_SHUT: "After Top Tiles Shut",
    OneDieRule.WHEN_REMAINDER_LESS_THAN_SIX: "When Remainder < 6",
    OneDieRule.NEVER: "Never",
}

_RULE_HELP = {
    OneDieRule.AFTER_TOP_TILES_SHUT:
        "A single die becomes available once every tile above 6 is closed.",
    OneDieRule.WHEN_REMAINDER_LESS_THAN_SIX:
        "A single die becomes available when the sum of open tiles is under six.",
    OneDieRule.NEVER: "Always roll two dice.",
}


class DiceMode(Enum):
    """How many dice the next roll uses"""
    SINGLE = "single"
    DOUBLE = "double"


@dataclass(frozen=True)
class Tile:
    """A numbered tile on the board - immutable"""
    id: int
    value: int
    is_shut: bool = False

    @property
    def is_open(self) -> bool:
        return not self.is_shut

    def shut(self) -> 'Tile':
        """Return new Tile with is_shut set"""
        return replace(self, is_shut=True)


@dataclass(frozen=True)
class Roll:
    """One or two die faces. No faces at all means nothing has been rolled yet."""
    first: Optional[int] = None
    second: Optional[int] = None

    @staticmethod
    def single(face: int) -> 'Roll':
        return Roll(first=face)

    @staticmethod
    def double(first: int, second: int) -> 'Roll':
        return Roll(first=first, second=second)

    @property
    def values(self) -> Tuple[int, ...]:
        return tuple(v for v in (self.first, self.second) if v is not None)

    @property
    def total(self) -> int:
        return sum(self.values)

    @property
    def is_single(self) -> bool:
        return len(self.values) == 1

    def describe(self) -> str:
        """Short display form: "3 + 4 = 7", "5", or "-" before any roll."""
        values = self.values
        if not values:
            return "-"
        if len(values) == 1:
            return str(values[0])
        return f"{values[0]} + {values[1]} = {self.total}"


NO_ROLL = Roll()


# ── Board helpers ────────────────────────────────────────────────────────────

def initial_tiles(max_tile: int = STANDARD_MAX_TILE) -> Tuple[Tile, ...]:
    """Create a fresh board of tiles 1..max_tile, all open, with id == value."""
    return tuple(Tile(id=v, value=v) for v in range(1, max_tile + 1))


def open_tiles(tiles: Iterable[Tile]) -> Tuple[Tile, ...]:
    """Return only the tiles that are still open, in their original order."""
    return tuple(t for t in tiles if t.is_open)


def remaining_score(tiles: Iterable[Tile]) -> int:
    """Sum of open tile values (what a player scores on a bust)."""
    return sum(t.value for t in tiles if t.is_open)


def is_box_shut(tiles: Iterable[Tile]) -> bool:
    """True when every tile is shut."""
    return all(t.is_shut for t in tiles)


def close_tiles(tiles: Sequence[Tile], selection: Iterable[Tile]) -> Tuple[Tile, ...]:
    """
    Shut the selected tiles.

    Tiles are matched by id. Tiles that are already shut stay shut; nothing is
    ever reopened.

    Args:
        tiles: Current board
        selection: Tiles to close

    Returns:
        New tuple of tiles with the selection shut
    """
    ids = {t.id for t in selection}
    return tuple(t.shut() if t.id in ids and t.is_open else t for t in tiles)


# ── Open masks ───────────────────────────────────────────────────────────────

def open_mask(tiles: Iterable[Tile]) -> int:
    """
    Encode the open tile values as a bitmask.

    Bit (v - 1) is set iff a tile of value v is open. Shut tiles and
    non-positive values contribute nothing.

    Args:
        tiles: Board tiles

    Returns:
        Integer bitmask
    """
    mask = 0
    for tile in tiles:
        if tile.is_open and tile.value > 0:
            mask |= 1 << (tile.value - 1)
    return mask


def open_values(mask: int) -> Tuple[int, ...]:
    """Decode a bitmask back into ascending open tile values."""
    values = []
    bit = 0
    while mask:
        if mask & 1:
            values.append(bit + 1)
        mask >>= 1
        bit += 1
    return tuple(values)


def should_use_one_die(rule: OneDieRule, values: Iterable) -> bool:
    """
    Check whether the one-die rule allows a single die right now.

    Evaluated against the open set passed in, never a cached board.

    Args:
        rule: OneDieRule in force
        values: Open tile values, or Tile objects (shut tiles are ignored)

    Returns:
        True if a single die may be rolled
    """
    open_vals = [v.value if isinstance(v, Tile) else v
                 for v in values
                 if not (isinstance(v, Tile) and v.is_shut)]
    if not open_vals:
        return False
    if rule == OneDieRule.AFTER_TOP_TILES_SHUT:
        return max(open_vals) <= 6
    elif rule == OneDieRule.WHEN_REMAINDER_LESS_THAN_SIX:
        return sum(open_vals) < 6
    return False


# ── Combinations ─────────────────────────────────────────────────────────────

def combinations(target: int, tiles: Iterable[Tile]) -> list:
    """
    Enumerate every set of open tiles whose values add up to target.

    Open tiles are sorted ascending by value (stable, so equal values keep
    their input order) and searched depth first from each start index, so
    each subset is produced exactly once. Output order is ascending value,
    increasing start index; best_move() relies on it for tie-breaking.

    Args:
        target: Sum to reach (usually the roll total)
        tiles: Board tiles; shut tiles are ignored

    Returns:
        List of tuples of Tile, each summing exactly to target
    """
    if target <= 0:
        return []
    ordered = sorted(open_tiles(tiles), key=lambda t: t.value)
    result = []
    _search(ordered, 0, target, (), result)
    return result


def _search(ordered, start, remaining, chosen, result):
    if remaining == 0:
        result.append(chosen)
        return
    for index in range(start, len(ordered)):
        tile = ordered[index]
        # Sorted ascending: once one tile overshoots, every later one does too
        if tile.value > remaining:
            break
        _search(ordered, index + 1, remaining - tile.value, chosen + (tile,), result)


def available_combinations(roll: Roll, tiles: Iterable[Tile]) -> list:
    """All legal moves for a roll; empty before anything is rolled."""
    if roll.total <= 0:
        return []
    return combinations(roll.total, tiles)


def legal_tile_ids(roll: Roll, tiles: Iterable[Tile]) -> set:
    """Ids of every tile that belongs to at least one legal combination (hints)."""
    return {t.id for combo in available_combinations(roll, tiles) for t in combo}


# ── Selection ────────────────────────────────────────────────────────────────

def validate_selection(selected: Iterable[Tile], roll: Roll) -> bool:
    """
    Check whether the selected tiles exactly match the roll.

    Args:
        selected: Tiles the player has picked
        roll: Committed roll

    Returns:
        True if roll.total > 0 and the selected values sum to it
    """
    if roll.total <= 0:
        return False
    return sum(t.value for t in selected) == roll.total


def is_tile_selectable(tile: Tile, current_selection: Sequence[Tile],
                       tiles: Iterable[Tile], roll: Roll) -> bool:
    """
    Check whether a tile may be toggled into (or out of) the selection.

    A tile already in the selection is always selectable so it can be
    deselected. Otherwise the tile must be open, a roll must be pending, the
    new selection must not overshoot the roll, and it must still be part of
    at least one full combination for the roll, so a player can never build
    a dead-end partial selection.

    Args:
        tile: Tile being toggled
        current_selection: Tiles already selected
        tiles: Board tiles
        roll: Committed roll

    Returns:
        True if toggling the tile is allowed
    """
    selected_ids = {t.id for t in current_selection}
    if tile.id in selected_ids:
        return True
    if tile.is_shut or roll.total <= 0:
        return False

    updated_total = sum(t.value for t in current_selection) + tile.value
    if updated_total > roll.total:
        return False

    wanted = selected_ids | {tile.id}
    return any(wanted <= {t.id for t in combo}
               for combo in combinations(roll.total, tiles))

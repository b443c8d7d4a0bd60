"""
Shut the Box AI — Move heuristic, roll synthesis, strategy interface, and turn loop.

Contains:
- best_move() one-ply heuristic and its score_combination() ranking
- rigged_roll() / generate_roll() dice synthesis (including the "full" cheat)
- MoveStrategy abstract base class
- BestMoveStrategy, FirstComboStrategy, RandomStrategy
- play_turn() auto-play loop returning a TurnResult
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import random

from dice_tables import roll_for_total
from game_engine import (
    DiceMode, OneDieRule, Roll, Tile,
    available_combinations, close_tiles, combinations,
    is_box_shut, open_tiles, remaining_score, should_use_one_die,
)


# ── Best Move Heuristic ─────────────────────────────────────────────────────

def score_combination(combo: Sequence[Tile], tiles: Sequence[Tile]) -> int:
    """Rank a combination: higher is better.

    Heavily rewards closing high values (cuts the worst-case remainder
    fastest), penalizes the open remainder left behind, and gives a small
    bonus per distinct value closed.

    Args:
        combo: Candidate combination
        tiles: Board tiles (shut tiles are ignored)

    Returns:
        sum(combo) * 100 - sum(other open tiles) * 10 + distinct values in combo
    """
    combo_ids = {t.id for t in combo}
    combo_sum = sum(t.value for t in combo)
    remainder = sum(t.value for t in tiles if t.is_open and t.id not in combo_ids)
    diversity = len({t.value for t in combo})
    return combo_sum * 100 - remainder * 10 + diversity


def best_move(roll: Roll, tiles: Sequence[Tile]) -> Tuple[Tile, ...]:
    """Pick the recommended combination for a roll.

    Ties keep the first maximum in combinations() order, so the result is
    deterministic.

    Returns:
        Best combination, or () when no combination exists (a bust)
    """
    candidates = available_combinations(roll, tiles)
    best = ()
    best_score = None
    for combo in candidates:
        score = score_combination(combo, tiles)
        if best_score is None or score > best_score:
            best = combo
            best_score = score
    return best


# ── Roll Synthesis ──────────────────────────────────────────────────────────

def rigged_roll(tiles: Sequence[Tile], prefers_single_die: bool) -> Optional[Roll]:
    """Find a roll that lets the player make the biggest possible move.

    Totals are tried from 12 down to 1; the first total with any combination
    wins. A single-die roll is used when preferred and the total fits on one
    die; otherwise the roll is built for the total of the combination that
    closes the most tiles.

    Args:
        tiles: Board tiles (shut tiles are ignored)
        prefers_single_die: Whether the player is rolling one die

    Returns:
        Roll, or None for an empty board or one no total can touch
    """
    if not tiles:
        return None
    board = open_tiles(tiles)

    for total in range(12, 0, -1):
        combos = combinations(total, board)
        if not combos:
            continue
        if prefers_single_die and total <= 6:
            return Roll.single(total)
        biggest = max(combos, key=len)
        roll = roll_for_total(sum(t.value for t in biggest))
        if roll is not None:
            return roll
    return None


def generate_roll(tiles: Sequence[Tile], rule: OneDieRule,
                  mode: DiceMode = DiceMode.DOUBLE, rng=None,
                  rigged: bool = False, preferred: Optional[Roll] = None) -> Roll:
    """Roll the dice for the next decision point.

    Args:
        tiles: Board tiles
        rule: One-die rule; a SINGLE request is downgraded to DOUBLE unless it allows one die
        mode: Requested dice mode
        rng: Random source with randint() (defaults to the random module)
        rigged: Steer the roll toward a big move (the "full" cheat)
        preferred: Pre-armed roll (the double-six cheat), returned unchanged

    Returns:
        The rolled Roll
    """
    if preferred is not None:
        return preferred
    if rng is None:
        rng = random

    resolved = mode if should_use_one_die(rule, tiles) else DiceMode.DOUBLE

    if rigged:
        roll = rigged_roll(open_tiles(tiles), prefers_single_die=resolved == DiceMode.SINGLE)
        if roll is not None:
            return roll

    if resolved == DiceMode.SINGLE:
        return Roll.single(rng.randint(1, 6))
    return Roll.double(rng.randint(1, 6), rng.randint(1, 6))


# ── Strategy Interface ──────────────────────────────────────────────────────

class MoveStrategy(ABC):
    """Abstract base class for auto-play strategies."""

    @abstractmethod
    def choose_move(self, roll: Roll, tiles: Sequence[Tile]) -> Tuple[Tile, ...]:
        """Given a roll with at least one legal combination, pick the tiles to close.

        Args:
            roll: Committed roll
            tiles: Board tiles

        Returns:
            One of available_combinations(roll, tiles)
        """
        ...


class BestMoveStrategy(MoveStrategy):
    """Plays the best_move() heuristic."""

    def choose_move(self, roll, tiles):
        return best_move(roll, tiles)


class FirstComboStrategy(MoveStrategy):
    """Plays the first legal combination (lowest values first)."""

    def choose_move(self, roll, tiles):
        combos = available_combinations(roll, tiles)
        return combos[0] if combos else ()


class RandomStrategy(MoveStrategy):
    """Baseline: a uniformly random legal combination."""

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random

    def choose_move(self, roll, tiles):
        combos = available_combinations(roll, tiles)
        return self.rng.choice(combos) if combos else ()


# ── Turn Loop ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TurnResult:
    """Outcome of one auto-played turn."""
    final_tiles: Tuple[Tile, ...]
    rolls: Tuple[Roll, ...]
    score: int      # open remainder; 0 when the box is shut
    shut: bool


def play_turn(tiles: Sequence[Tile], strategy: MoveStrategy,
              rule: OneDieRule = OneDieRule.AFTER_TOP_TILES_SHUT,
              rng=None, prefer_single_die: bool = True,
              rigged: bool = False) -> TurnResult:
    """Play one turn: roll and close tiles until a bust or a shut box.

    Args:
        tiles: Board at the start of the turn
        strategy: Strategy that picks each move
        rule: One-die rule in force
        rng: Random source (defaults to the random module)
        prefer_single_die: Roll one die whenever the rule allows it
        rigged: Use rigged rolls

    Returns:
        TurnResult with the final board and every roll made
    """
    board = tuple(tiles)
    rolls = []
    mode = DiceMode.SINGLE if prefer_single_die else DiceMode.DOUBLE

    while not is_box_shut(board):
        roll = generate_roll(board, rule, mode=mode, rng=rng, rigged=rigged)
        rolls.append(roll)
        if not available_combinations(roll, board):
            break
        move = strategy.choose_move(roll, board)
        board = close_tiles(board, move)

    shut = is_box_shut(board)
    return TurnResult(
        final_tiles=board,
        rolls=tuple(rolls),
        score=0 if shut else remaining_score(board),
        shut=shut,
    )

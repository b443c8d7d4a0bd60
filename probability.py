"""
Clearing probability — exact odds of shutting the box under optimal play.

The board is encoded as an open mask (bit v-1 set iff tile v is open) and
evaluated by memoized recursion:

    P(0)    = 1
    P(mask) = max over eligible dice modes of
              sum over outcomes o of Pr(o) * max over combo masks c of P(mask & ~c)

A single die is eligible only when the one-die rule allows it for the open
values of *that* mask; two dice are always eligible. An outcome with no
matching combination contributes 0 (bust).

Two caches keep this tractable, P by mask and combination masks by
(mask, total). Both live for one evaluate() call only. A 12-tile board has at
most 4096 states; boards with dozens of tiles are out of reach, so callers
should gate evaluation on board size (see settings.probability_tile_limit).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from dice_tables import outcomes_for
from game_engine import (
    DiceMode,
    OneDieRule,
    Tile,
    open_mask,
    open_values,
    should_use_one_die,
)

logger = logging.getLogger(__name__)


def combination_masks(mask: int, total: int) -> list[int]:
    """Every subset of the open values in mask that adds up to total, as masks.

    Same depth-first search as game_engine.combinations(), over values instead
    of tiles.
    """
    if total <= 0:
        return []
    values = open_values(mask)
    results: list[int] = []
    _search_masks(values, 0, total, 0, results)
    return results


def _search_masks(values, start, remaining, chosen, results):
    if remaining == 0:
        results.append(chosen)
        return
    for index in range(start, len(values)):
        value = values[index]
        if value > remaining:
            break
        _search_masks(values, index + 1, remaining - value, chosen | (1 << (value - 1)), results)


@dataclass
class _EvaluationCache:
    """Memo tables for a single evaluate() call."""
    probabilities: dict[int, float] = field(default_factory=dict)
    combos: dict[tuple[int, int], list[int]] = field(default_factory=dict)


class ProbabilityCalculator:
    """Evaluates the chance of clearing a board under a given one-die rule.

    The instance holds only the rule, so calls are independent and safe to
    repeat.
    """

    def __init__(self, rule: OneDieRule = OneDieRule.AFTER_TOP_TILES_SHUT) -> None:
        self.rule = rule

    def evaluate(self, tiles: Iterable[Tile]) -> float:
        """Probability in [0, 1] of shutting every open tile."""
        return self.evaluate_mask(open_mask(tiles))

    def evaluate_mask(self, mask: int) -> float:
        """Probability of clearing the board encoded by mask."""
        cache = _EvaluationCache()
        result = self._probability(mask, cache)
        logger.debug(
            "Evaluated mask %#x: p=%.6f over %d states, %d combination subproblems",
            mask, result, len(cache.probabilities), len(cache.combos),
        )
        return result

    def allows_single_die(self, mask: int) -> bool:
        """One-die rule evaluated against the open values of mask."""
        return should_use_one_die(self.rule, open_values(mask))

    def _probability(self, mask: int, cache: _EvaluationCache) -> float:
        if mask == 0:
            return 1.0
        cached = cache.probabilities.get(mask)
        if cached is not None:
            return cached

        best = self._mode_probability(DiceMode.DOUBLE, mask, cache)
        if self.allows_single_die(mask):
            best = max(best, self._mode_probability(DiceMode.SINGLE, mask, cache))

        cache.probabilities[mask] = best
        return best

    def _mode_probability(self, mode: DiceMode, mask: int, cache: _EvaluationCache) -> float:
        total_probability = 0.0
        for outcome in outcomes_for(mode):
            combos = self._combination_masks(mask, outcome.total, cache)
            if not combos:
                continue
            best_for_roll = max(self._probability(mask & ~combo, cache) for combo in combos)
            total_probability += outcome.probability * best_for_roll
        return total_probability

    def _combination_masks(self, mask: int, total: int, cache: _EvaluationCache) -> list[int]:
        key = (mask, total)
        cached = cache.combos.get(key)
        if cached is None:
            cached = combination_masks(mask, total)
            cache.combos[key] = cached
        return cached


def winning_probability(tiles: Iterable[Tile], rule: OneDieRule = OneDieRule.AFTER_TOP_TILES_SHUT) -> float:
    """Convenience wrapper: ProbabilityCalculator(rule).evaluate(tiles)."""
    return ProbabilityCalculator(rule).evaluate(tiles)

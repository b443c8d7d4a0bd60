"""
Dice Tables — Precomputed outcome distributions for Shut the Box probability calculations.

All constants are computed at import time. No randomness involved.

Constants:
    SINGLE_DIE_OUTCOMES  — 6 outcomes, totals 1-6, each 1/6
    DOUBLE_DICE_OUTCOMES — 11 outcomes, totals 2-12, weighted by ways/36
    TOTAL_WAYS           — Dict: two-dice total → number of ordered face pairs

Functions:
    outcomes_for(mode)   — Outcome table for a DiceMode
    roll_for_total(t)    — A concrete Roll whose faces add up to t
"""
import itertools
from collections import Counter
from dataclasses import dataclass

from game_engine import DiceMode, Roll


@dataclass(frozen=True)
class RollOutcome:
    """A roll total and its probability."""
    total: int
    probability: float


# ── SINGLE_DIE_OUTCOMES: one fair die ────────────────────────────────────────

SINGLE_DIE_OUTCOMES = tuple(RollOutcome(total=v, probability=1.0 / 6.0) for v in range(1, 7))


# ── DOUBLE_DICE_OUTCOMES: sum of two fair dice ───────────────────────────────

def _count_total_ways():
    """Count ordered face pairs for each two-dice total (1,2,3,4,5,6,5,4,3,2,1)."""
    counts = Counter(a + b for a, b in itertools.product(range(1, 7), repeat=2))
    return dict(sorted(counts.items()))

TOTAL_WAYS = _count_total_ways()

DOUBLE_DICE_OUTCOMES = tuple(
    RollOutcome(total=total, probability=ways / 36.0)
    for total, ways in TOTAL_WAYS.items()
)


def outcomes_for(mode):
    """Return the outcome table for a DiceMode."""
    if mode == DiceMode.SINGLE:
        return SINGLE_DIE_OUTCOMES
    return DOUBLE_DICE_OUTCOMES


def roll_for_total(total):
    """Build a Roll that shows the given total.

    Totals up to 6 use a single face. Larger totals use two faces, with the
    first face as high as possible: first runs from min(6, total - 1) down to
    1 and the first pair whose second face is at most 6 wins.

    Args:
        total: Desired roll total

    Returns:
        Roll, or None if total is not positive or exceeds 12
    """
    if total <= 0:
        return None
    if total <= 6:
        return Roll(first=total)
    for first in range(min(6, total - 1), 0, -1):
        second = total - first
        if second <= 6:
            return Roll(first=first, second=second)
    return None

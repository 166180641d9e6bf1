"""Credits-saved estimation.

The advisor shows users how many tokens ("credits") a turn saved compared to a
hypothetical unguided chat. The number is a heuristic, not an accounting
figure: vaguer (shorter) questions are assumed to cost a naive chat more
back-and-forth, so they are credited with a larger multiplier.
"""

import math
from enum import Enum
from typing import Dict


class Mode(str, Enum):
    QUICK = "quick"
    DEEP = "deep"


# =============================================================================
# Constants
# =============================================================================

VAGUE_THRESHOLD = 50       # input at or below this length is "vague"
CONCISE_THRESHOLD = 200    # input at or above this length is "concise"
FLOOR_SAVED = 10           # minimum reward for a successful turn

MULTIPLIERS: Dict[Mode, Dict[str, float]] = {
    Mode.QUICK: {"max": 1.5, "min": 0.7},
    Mode.DEEP: {"max": 3.0, "min": 1.2},
}

# Awarded instead of an estimate when the advisor returned nothing
PITY_CREDITS: Dict[Mode, int] = {
    Mode.QUICK: 10,
    Mode.DEEP: 20,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clarity_fraction(input_length: int) -> float:
    """0.0 for vague input, 1.0 for concise input, linear in between."""
    f = (input_length - VAGUE_THRESHOLD) / (CONCISE_THRESHOLD - VAGUE_THRESHOLD)
    return max(0.0, min(1.0, f))


def multiplier(input_length: int, mode: Mode) -> float:
    bounds = MULTIPLIERS[Mode(mode)]
    return bounds["max"] - clarity_fraction(input_length) * (bounds["max"] - bounds["min"])


def estimate_credits_saved(raw_cost: int, input_length: int, mode: Mode) -> int:
    """
    Estimate credits saved for one successful advisor turn.

    Args:
        raw_cost: Tokens actually used by the advisor for this turn
        input_length: Character count of the user's submitted text
        mode: quick or deep; deep is always credited more generously

    Returns:
        round(max(FLOOR_SAVED, raw_cost * M - raw_cost)), rounded half-up
    """
    estimated_standard_cost = max(0, raw_cost) * multiplier(input_length, mode)
    return _round_half_up(max(FLOOR_SAVED, estimated_standard_cost - max(0, raw_cost)))


def pity_credits(mode: Mode) -> int:
    return PITY_CREDITS[Mode(mode)]

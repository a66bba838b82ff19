# prizebot/services/draw.py
from __future__ import annotations

import random
from typing import Iterable, Protocol, Sequence, TypeVar

from prizebot.services.errors import InvalidGameDefinition

# weights are percentage points
TOTAL_WEIGHT = 100.0
_EPSILON = 1e-6

_system_rng = random.SystemRandom()


class Weighted(Protocol):
    weight: float


T = TypeVar("T", bound=Weighted)


def validate_weights(weights: Iterable[float]) -> float:
    """
    Every weight >= 0 and the total <= 100. Returns the total.
    """
    total = 0.0
    for w in weights:
        w = float(w)
        if w < 0:
            raise InvalidGameDefinition(f"negative weight: {w}")
        total += w
    if total > TOTAL_WEIGHT + _EPSILON:
        raise InvalidGameDefinition(f"weights sum to {total:g}, must be <= {TOTAL_WEIGHT:g}")
    return total


def draw(outcomes: Sequence[T], rng: random.Random | None = None) -> T:
    """
    Weighted pick over percentage-point weights.

    r is uniform in [0, 100); the first outcome whose running total reaches r
    wins. Zero-weight outcomes are never picked, not even when r is exactly 0
    and a plain cumulative scan would return the leading zero-weight entry.
    When the weights sum to less
    than 100 and r lands in the gap, outcomes[0] is returned: callers order
    their outcomes knowing that the first one absorbs the remainder.
    """
    if not outcomes:
        raise ValueError("draw() needs at least one outcome")

    r = (rng or _system_rng).random() * TOTAL_WEIGHT
    cumulative = 0.0
    for outcome in outcomes:
        weight = float(outcome.weight)
        if weight <= 0:
            continue
        cumulative += weight
        if cumulative >= r:
            return outcome

    return outcomes[0]

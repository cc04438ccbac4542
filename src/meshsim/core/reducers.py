"""
Reducers: compress a batch's per-member counts into one value.

When several carried messages are folded into a single batch, the batch
needs ONE hop count and ONE replication count for budget accounting.
A reducer picks that representative value:

- "max": optimistic about the remaining budget
- "mean": averaged
- "min": pessimistic about the remaining budget

The names describe the budget LEFT, not the counts already consumed.
A hop count measures the consumed part of a path, so "max" (most budget
left) folds the counts with min, and "min" folds them with max.
"""

from __future__ import annotations
import math
from typing import Callable, Literal, Sequence

import numpy as np


ReducerName = Literal["min", "mean", "max"]
Reducer = Callable[[Sequence[float]], float]


def fold_min(values: Sequence[float]) -> float:
    """Smallest value."""
    return np.min(values).item()


def fold_max(values: Sequence[float]) -> float:
    """Largest value."""
    return np.max(values).item()


def fold_mean(values: Sequence[float]) -> float:
    """Arithmetic mean."""
    return np.mean(values).item()


# Swapped on purpose: counts are consumed budget (see module docstring)
REDUCERS: dict[str, Reducer] = {
    "max": fold_min,
    "mean": fold_mean,
    "min": fold_max,
}


def get_reducer(name: str) -> Reducer:
    """
    Look up a reducer by name.

    Raises:
        ValueError: if name is not one of "min", "mean", "max"
    """
    try:
        return REDUCERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown reducer: {name!r} (expected one of {sorted(REDUCERS)})"
        ) from None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)

"""Tier-ordering invariants and the finishing pass that enforces them."""

import logging
from decimal import Decimal
from typing import List, Sequence

from models.category import AllocationMode
from models.tiers import ONE, ZERO, to_decimal

logger = logging.getLogger(__name__)


def is_non_increasing(row: Sequence) -> bool:
    values = [to_decimal(v) for v in row]
    return all(values[i] <= values[i - 1] for i in range(1, len(values)))


def is_smooth(row: Sequence) -> bool:
    """Non-increasing with every adjacent drop at most 1."""
    values = [to_decimal(v) for v in row]
    for i in range(1, len(values)):
        if values[i] > values[i - 1] or values[i - 1] - values[i] > ONE:
            return False
    return True


def satisfies(matrix: Sequence[Sequence], mode: AllocationMode) -> bool:
    check = is_smooth if mode is AllocationMode.SMOOTH else is_non_increasing
    return all(check(row) for row in matrix)


def enforce_row(row: Sequence, mode: AllocationMode) -> List[Decimal]:
    result = [max(to_decimal(v), ZERO) for v in row]
    for i in range(1, len(result)):
        if result[i] > result[i - 1]:
            result[i] = result[i - 1]
        if mode is AllocationMode.SMOOTH and result[i - 1] - result[i] > ONE:
            # smooth mode may raise a cell, not only lower it
            result[i] = result[i - 1] - ONE
    return result


def enforce(matrix: Sequence[Sequence], mode: AllocationMode) -> List[List[Decimal]]:
    """Return a new matrix whose rows satisfy the ordering invariant for mode.

    Single left-to-right pass per row; applying it twice is a no-op.
    """
    result = []
    adjusted = 0
    for row in matrix:
        fixed = enforce_row(row, mode)
        adjusted += sum(1 for a, b in zip(row, fixed) if to_decimal(a) != b)
        result.append(fixed)
    if adjusted:
        logger.debug("Constraint pass (%s) adjusted %d cells", mode.value, adjusted)
    return result

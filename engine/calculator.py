"""Weighted-total reduction and error reporting for allocation matrices."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from config.defaults import ERROR_PCT_SCALE, TIER_COUNT
from engine.errors import InvariantViolation
from models.tiers import ZERO, to_decimal


def _check_shape(allocation: Sequence[Sequence], customer_counts: Sequence[Sequence]):
    if len(allocation) != len(customer_counts):
        raise InvariantViolation(
            f"Allocation has {len(allocation)} rows but customer counts have {len(customer_counts)}"
        )
    for i, (a_row, c_row) in enumerate(zip(allocation, customer_counts)):
        if len(a_row) != TIER_COUNT or len(c_row) != TIER_COUNT:
            raise InvariantViolation(
                f"Row {i} has width {len(a_row)}/{len(c_row)}, expected {TIER_COUNT}"
            )


def row_amount(allocation_row: Sequence, customer_row: Sequence) -> Decimal:
    """Dot product of one allocation row with its customer-count row."""
    total = ZERO
    for a, c in zip(allocation_row, customer_row):
        if a is None or c is None:
            continue
        total += to_decimal(a) * to_decimal(c)
    return total


def actual_amount(allocation: Sequence[Sequence], customer_counts: Sequence[Sequence]) -> Decimal:
    """Weighted total of allocation x customer count over every cell."""
    _check_shape(allocation, customer_counts)
    total = ZERO
    for a_row, c_row in zip(allocation, customer_counts):
        total += row_amount(a_row, c_row)
    if total < ZERO:
        raise InvariantViolation(f"Actual amount is negative: {total}")
    return total


def per_target_amounts(
    targets: Sequence[str],
    allocation: Sequence[Sequence],
    customer_counts: Sequence[Sequence],
) -> Dict[str, Decimal]:
    """Actual delivered amount per target."""
    _check_shape(allocation, customer_counts)
    if len(targets) != len(allocation):
        raise InvariantViolation(
            f"{len(targets)} targets but {len(allocation)} allocation rows"
        )
    amounts = {}
    for target, a_row, c_row in zip(targets, allocation, customer_counts):
        amount = row_amount(a_row, c_row)
        if amount < ZERO:
            raise InvariantViolation(f"Actual amount for '{target}' is negative: {amount}")
        amounts[target] = amount
    return amounts


def absolute_error(actual: Decimal, total: Decimal) -> Decimal:
    return abs(actual - total)


def error_percentage(actual: Decimal, total: Decimal, scale: Optional[int] = None) -> Decimal:
    """|actual - total| / total as a percentage, rounded half-up."""
    places = ERROR_PCT_SCALE if scale is None else scale
    quantum = Decimal(1).scaleb(-places)
    if total == ZERO:
        # nothing requested: 0% if nothing delivered, otherwise 100%
        pct = ZERO if actual == ZERO else Decimal(100)
    else:
        pct = abs(actual - total) / total * Decimal(100)
    return pct.quantize(quantum, rounding=ROUND_HALF_UP)


def column_costs(customer_counts: Sequence[Sequence]) -> List[Decimal]:
    """Sum of customer counts per tier across all targets."""
    costs = [ZERO] * TIER_COUNT
    for row in customer_counts:
        for k, c in enumerate(row):
            if c is not None:
                costs[k] += to_decimal(c)
    return costs

"""PuLP integer-programming allocation optimizer.

Finds the tier matrix whose weighted total is closest to the requested total
under the same ordering constraints the heuristic engine honors. Used to
benchmark the heuristic, not on the request path.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Sequence

import pulp

from config.defaults import OPTIMIZER_MAX_CELL_VALUE, OPTIMIZER_TIME_LIMIT, TIER_COUNT
from engine.calculator import actual_amount
from engine.errors import InvalidInputError
from models.category import AllocationMode
from models.tiers import ZERO, normalize_row, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    status: str  # "Optimal", "Infeasible", "Not Solved", ...
    matrix: List[List[Decimal]] = field(default_factory=list)
    actual_amount: Decimal = ZERO
    error: Decimal = ZERO
    message: str = ""


def optimize_allocation(
    targets: Sequence[str],
    customer_counts: Sequence[Sequence],
    total,
    mode: AllocationMode,
    time_limit: int = OPTIMIZER_TIME_LIMIT,
    max_cell_value: int = OPTIMIZER_MAX_CELL_VALUE,
) -> OptimizationResult:
    """
    Solve for the allocation minimising |sum(x * c) - total|.

    Constraints:
    - x[t][k] integer in [0, max_cell_value]
    - x[t][k] <= x[t][k-1] (non-increasing rows)
    - x[t][k-1] - x[t][k] <= 1 in smooth mode
    """
    if not targets or len(customer_counts) != len(targets):
        raise InvalidInputError("Optimizer needs one customer-count row per target")
    rows = [normalize_row(r, label=f"customer counts for '{t}'") for t, r in zip(targets, customer_counts)]
    total = to_decimal(total)

    prob = pulp.LpProblem("TierAllocation", pulp.LpMinimize)

    # Decision variables: x[target][tier] = allocation per customer
    x = {}
    for t in range(len(targets)):
        for k in range(TIER_COUNT):
            x[(t, k)] = pulp.LpVariable(
                f"x_{t}_{k}", lowBound=0, upBound=max_cell_value, cat="Integer",
            )

    dev = pulp.LpVariable("dev", lowBound=0)
    # PuLP coefficients are floats; the reported amount is recomputed in Decimal
    weighted = pulp.lpSum(
        x[(t, k)] * float(rows[t][k])
        for t in range(len(targets)) for k in range(TIER_COUNT)
    )
    prob += dev, "deviation"
    prob += dev >= weighted - float(total), "over"
    prob += dev >= float(total) - weighted, "under"

    # --- Ordering constraints ---
    for t in range(len(targets)):
        for k in range(1, TIER_COUNT):
            prob += x[(t, k)] <= x[(t, k - 1)], f"order_{t}_{k}"
            if mode is AllocationMode.SMOOTH:
                prob += x[(t, k - 1)] - x[(t, k)] <= 1, f"smooth_{t}_{k}"

    # --- Solve ---
    prob.solve(pulp.PULP_CBC_CMD(msg=0, timeLimit=time_limit))
    status = pulp.LpStatus[prob.status]

    if status != "Optimal":
        logger.warning("Optimizer finished without an optimal solution: %s", status)
        return OptimizationResult(
            status=status,
            message=f"Optimization could not find a solution. Status: {status}",
        )

    # --- Extract results ---
    matrix = [
        [Decimal(int(round(x[(t, k)].varValue or 0))) for k in range(TIER_COUNT)]
        for t in range(len(targets))
    ]
    actual = actual_amount(matrix, rows)
    error = abs(actual - total)
    logger.debug("Optimizer: actual %s, error %s", actual, error)

    return OptimizationResult(
        status=status,
        matrix=matrix,
        actual_amount=actual,
        error=error,
        message=f"Optimization complete ({mode.value}). Actual amount {actual}, error {error}.",
    )

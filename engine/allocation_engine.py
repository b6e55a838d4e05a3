"""Tiered allocation logic — the core business engine.

A coarse whole-column fill is refined either by picking the best of three
plateau candidates or by a leveled smooth fill followed by a hill climb.
Every result is passed through the constraint enforcer before it is returned.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from config.defaults import (
    MAX_REFINEMENT_ITERATIONS, MAX_SMOOTH_LEVEL, NEARBY_TIER_RADIUS, TIER_COUNT,
)
from engine.calculator import actual_amount, column_costs
from engine.constraints import enforce
from engine.errors import InvalidInputError
from models.category import AllocationMode
from models.tiers import ONE, ZERO, copy_matrix, normalize_row, tier_label, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class CoarseFill:
    matrix: List[List[Decimal]]
    running_total: Decimal
    last_full_tier: int  # -1 when not even the first column fits
    zero_cost_tiers: List[int] = field(default_factory=list)


@dataclass
class AllocationResult:
    """Final matrix plus the trail the explainer reports on."""
    matrix: List[List[Decimal]]
    mode: AllocationMode
    coarse: CoarseFill
    refinement: str
    candidate_errors: dict = field(default_factory=dict)
    climb_moves: int = 0


def _validate(targets: Sequence[str], customer_counts: Sequence[Sequence], total) -> tuple:
    if not targets:
        raise InvalidInputError("At least one target is required")
    if customer_counts is None or len(customer_counts) != len(targets):
        raise InvalidInputError(
            f"Expected {len(targets)} customer-count rows, got "
            f"{0 if customer_counts is None else len(customer_counts)}"
        )
    rows = []
    for target, row in zip(targets, customer_counts):
        normalized = normalize_row(row, label=f"customer counts for '{target}'")
        if any(c < ZERO for c in normalized):
            raise InvalidInputError(f"Negative customer count for '{target}'")
        rows.append(normalized)
    if total is None:
        raise InvalidInputError("Total is required")
    total = to_decimal(total)
    if total < ZERO:
        raise InvalidInputError(f"Total must be non-negative, got {total}")
    return rows, total


def coarse_fill(customer_counts: Sequence[Sequence], total: Decimal) -> CoarseFill:
    """Set whole columns to 1 from the highest tier down while the total allows.

    Stops at the first column that would overflow, or as soon as the running
    total reaches the requested total. Columns with no customers cost nothing
    and are filled like any other column.
    """
    n = len(customer_counts)
    matrix = [[ZERO] * TIER_COUNT for _ in range(n)]
    costs = column_costs(customer_counts)
    running = ZERO
    last_full = -1
    zero_cost = []

    for k in range(TIER_COUNT):
        if running == total:
            break
        if running + costs[k] > total:
            break
        for row in matrix:
            row[k] = ONE
        running += costs[k]
        last_full = k
        if costs[k] == ZERO:
            zero_cost.append(k)

    if zero_cost:
        logger.debug(
            "Coarse fill set zero-cost tiers to 1: %s",
            ", ".join(tier_label(k) for k in zero_cost),
        )
    logger.debug(
        "Coarse fill stopped after %s, running=%s total=%s",
        tier_label(last_full) if last_full >= 0 else "no tier", running, total,
    )
    return CoarseFill(matrix=matrix, running_total=running, last_full_tier=last_full,
                      zero_cost_tiers=zero_cost)


# ---------------------------------------------------------------------------
# Plateau refinement
# ---------------------------------------------------------------------------

def _can_raise_plateau(row: List[Decimal], k: int) -> bool:
    return k == 0 or row[k] + ONE <= row[k - 1]


def _raise_per_target(matrix, customer_counts, tiers, running: Decimal, total: Decimal) -> Decimal:
    """Per-target +1 on each tier in order while ordering and total allow."""
    for k in tiers:
        for t, row in enumerate(matrix):
            if running >= total:
                return running
            cost = customer_counts[t][k]
            if _can_raise_plateau(row, k) and running + cost <= total:
                row[k] += ONE
                running += cost
    return running


def _plateau_candidate_increments(coarse: CoarseFill, customer_counts, total: Decimal):
    matrix = copy_matrix(coarse.matrix)
    _raise_per_target(
        matrix, customer_counts, range(coarse.last_full_tier + 1, TIER_COUNT),
        coarse.running_total, total,
    )
    return matrix


def _plateau_candidate_second_pass(coarse: CoarseFill, customer_counts, total: Decimal, radius: int):
    matrix = copy_matrix(coarse.matrix)
    costs = column_costs(customer_counts)
    running = coarse.running_total
    for k in range(TIER_COUNT):
        if running >= total:
            break
        if running + costs[k] > total:
            nearby = range(max(0, k - radius), min(TIER_COUNT - 1, k + radius) + 1)
            _raise_per_target(matrix, customer_counts, nearby, running, total)
            break
        for row in matrix:
            row[k] += ONE
        running += costs[k]
    return matrix


def _refine_plateau(coarse: CoarseFill, customer_counts, total: Decimal, cfg: dict):
    radius = cfg.get("nearby_tier_radius", NEARBY_TIER_RADIUS)
    candidates = [
        ("coarse", copy_matrix(coarse.matrix)),
        ("lower-tier increments", _plateau_candidate_increments(coarse, customer_counts, total)),
        ("second column pass", _plateau_candidate_second_pass(coarse, customer_counts, total, radius)),
    ]

    errors = {}
    best_name, best_matrix, best_error = None, None, None
    for name, matrix in candidates:
        error = abs(actual_amount(matrix, customer_counts) - total)
        errors[name] = error
        # strict comparison keeps the earlier candidate on ties
        if best_error is None or error < best_error:
            best_name, best_matrix, best_error = name, matrix, error

    logger.debug("Plateau candidate errors: %s -> %s", errors, best_name)
    return best_name, best_matrix, errors


# ---------------------------------------------------------------------------
# Smooth refinement
# ---------------------------------------------------------------------------

def smooth_level_bound(customer_counts, total: Decimal, cap: int) -> int:
    positive = [c for row in customer_counts for c in row if c > ZERO]
    if not positive:
        return 1
    bound = int(total // min(positive)) + 1
    return min(bound, cap)


def _can_raise_smooth(row: List[Decimal], k: int, level: Decimal) -> bool:
    if row[k] != level:
        return False
    if any(v < level for v in row[k + 1:]):
        return False
    new = level + ONE
    if k > 0 and new > row[k - 1]:
        return False
    if k < TIER_COUNT - 1 and new > row[k + 1] + ONE:
        return False
    return True


def _leveled_fill(coarse: CoarseFill, customer_counts, total: Decimal, max_level: int):
    matrix = copy_matrix(coarse.matrix)
    running = coarse.running_total
    bound = smooth_level_bound(customer_counts, total, max_level)
    # targets without customers add nothing to the total and keep their coarse row
    live = [t for t, row in enumerate(customer_counts) if any(c > ZERO for c in row)]

    # start at the lowest value present; coarse fill may have lifted every cell
    level = int(min(min(row) for row in matrix))
    while level < bound and running < total:
        level_value = Decimal(level)
        raised_in_level = 0
        while True:
            raised = 0
            for k in range(TIER_COUNT):
                for t in live:
                    row = matrix[t]
                    cost = customer_counts[t][k]
                    if running + cost > total or not _can_raise_smooth(row, k, level_value):
                        continue
                    row[k] += ONE
                    running += cost
                    raised += 1
            raised_in_level += raised
            if not raised or running >= total:
                break
        logger.debug("Smooth level %d raised %d cells, running=%s", level, raised_in_level, running)
        if not raised_in_level:
            break
        level += 1

    return matrix, running


def _smooth_after_move(row: List[Decimal], k: int) -> bool:
    if row[k] < ZERO:
        return False
    if k > 0 and not (ZERO <= row[k - 1] - row[k] <= ONE):
        return False
    if k < TIER_COUNT - 1 and not (ZERO <= row[k] - row[k + 1] <= ONE):
        return False
    return True


def _hill_climb(matrix, customer_counts, running: Decimal, total: Decimal, max_iterations: int) -> int:
    """Apply the single-cell +/-1 move that most reduces the error, repeatedly."""
    moves = 0
    for _ in range(max_iterations):
        current_error = abs(running - total)
        if current_error == ZERO:
            break
        best = None
        for t, row in enumerate(matrix):
            for k in range(TIER_COUNT):
                cost = customer_counts[t][k]
                if cost == ZERO:
                    continue
                for step in (ONE, -ONE):
                    row[k] += step
                    legal = _smooth_after_move(row, k)
                    row[k] -= step
                    if not legal:
                        continue
                    error = abs(running + step * cost - total)
                    if error < current_error and (best is None or error < best[0]):
                        best = (error, t, k, step)
        if best is None:
            break
        error, t, k, step = best
        matrix[t][k] += step
        running += step * customer_counts[t][k]
        moves += 1
        logger.debug("Hill climb move %s %s%+d -> error %s", t, tier_label(k), int(step), error)
    return moves


def _refine_smooth(coarse: CoarseFill, customer_counts, total: Decimal, cfg: dict):
    max_level = cfg.get("max_smooth_level", MAX_SMOOTH_LEVEL)
    max_iterations = cfg.get("max_refinement_iterations", MAX_REFINEMENT_ITERATIONS)
    matrix, running = _leveled_fill(coarse, customer_counts, total, max_level)
    moves = _hill_climb(matrix, customer_counts, running, total, max_iterations)
    return matrix, moves


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def run_allocation(
    targets: Sequence[str],
    customer_counts: Sequence[Sequence],
    total,
    mode: AllocationMode,
    rule_config: Optional[dict] = None,
) -> AllocationResult:
    """Allocate total across targets x tiers and keep the intermediate trail."""
    cfg = rule_config or {}
    if not isinstance(mode, AllocationMode):
        raise InvalidInputError(f"Unknown allocation mode: {mode!r}")
    rows, total = _validate(targets, customer_counts, total)

    coarse = coarse_fill(rows, total)
    candidate_errors = {}
    moves = 0
    if mode is AllocationMode.PLATEAU:
        refinement, matrix, candidate_errors = _refine_plateau(coarse, rows, total, cfg)
    else:
        matrix, moves = _refine_smooth(coarse, rows, total, cfg)
        refinement = "leveled fill + hill climb"

    final = enforce(matrix, mode)
    return AllocationResult(
        matrix=final,
        mode=mode,
        coarse=coarse,
        refinement=refinement,
        candidate_errors=candidate_errors,
        climb_moves=moves,
    )


def allocate(
    targets: Sequence[str],
    customer_counts: Sequence[Sequence],
    total,
    mode: AllocationMode,
    rule_config: Optional[dict] = None,
) -> List[List[Decimal]]:
    """Final allocation matrix, one row per target in the given order."""
    return run_allocation(targets, customer_counts, total, mode, rule_config).matrix

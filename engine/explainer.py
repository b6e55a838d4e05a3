"""Generates human-readable explanations for allocation plans."""

from decimal import Decimal
from typing import List, Sequence, Tuple

from models.tiers import tier_label


def explain_plan(
    descriptor: str,
    targets: Sequence[str],
    mode_name: str,
    segments: Sequence[Tuple[str, Decimal, object]],
    total: Decimal,
    actual: Decimal,
    error: Decimal,
    error_pct: Decimal,
    expression_count: int,
) -> List[str]:
    """Produce step-by-step explanation for a distribution plan.

    ``segments`` holds ``(label, segment_total, AllocationResult)`` for each
    independent sub-allocation; a plain request has exactly one.
    """
    steps = []

    steps.append(
        f"Step 1 - Targets: '{descriptor}' resolved to {len(targets)} target(s): "
        f"{', '.join(targets)}"
    )

    steps.append(f"Step 2 - Mode: {mode_name} ordering over 30 tiers (D30 highest, D1 lowest)")

    step = 3
    for label, segment_total, result in segments:
        prefix = f"[{label}] " if len(segments) > 1 else ""
        coarse = result.coarse
        if coarse.last_full_tier >= 0:
            stop = f"filled D30..{tier_label(coarse.last_full_tier)} with 1"
        else:
            stop = "could not fill even D30"
        steps.append(
            f"Step {step} - {prefix}Coarse fill: {stop}, "
            f"running total {coarse.running_total} of {segment_total}"
        )
        if coarse.zero_cost_tiers:
            steps.append(
                f"Note: {prefix}tiers with no customers were filled at no cost: "
                f"{', '.join(tier_label(k) for k in coarse.zero_cost_tiers)}"
            )
        step += 1

        if result.candidate_errors:
            errors = ", ".join(f"{name} {err}" for name, err in result.candidate_errors.items())
            steps.append(
                f"Step {step} - {prefix}Refinement: candidate errors {errors} "
                f"=> chose '{result.refinement}'"
            )
        else:
            steps.append(
                f"Step {step} - {prefix}Refinement: {result.refinement}, "
                f"{result.climb_moves} hill-climb move(s)"
            )
        step += 1

    steps.append(
        f"Step {step} - Constraint pass: every row re-checked for {mode_name} ordering"
    )
    step += 1

    steps.append(
        f"Step {step} - Result: actual {actual} vs requested {total} "
        f"=> error {error} ({error_pct}%)"
    )
    step += 1

    steps.append(f"Step {step} - Encoding: {expression_count} expression(s) after grouping equal rows")

    return steps

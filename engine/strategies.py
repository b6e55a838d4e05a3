"""Category dispatch: one parameterized engine, five categories as data."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from config.code_tables import RURAL_MARKET, URBAN_MARKET
from config.defaults import (
    CATEGORY_MODES, DEFAULT_RURAL_RATIO, DEFAULT_URBAN_RATIO, ERROR_WARN_THRESHOLD,
    OPTIMIZER_TIME_LIMIT,
)
from engine.allocation_engine import AllocationResult, run_allocation
from engine.calculator import absolute_error, actual_amount, error_percentage, per_target_amounts
from engine.codec import encode, encode_by_target
from engine.errors import InvalidInputError, NoMatchError
from engine.explainer import explain_plan
from engine.optimizer import OptimizationResult, optimize_allocation
from engine.resolver import resolve
from models.allocation import AllocationPlan
from models.catalog import CatalogSnapshot
from models.category import AllocationMode, Category
from models.request import DistributionRequest
from models.tiers import ONE, ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategorySpec:
    category: Category
    mode: AllocationMode
    method: str                     # delivery method name for the codec
    delivery_type: Optional[str]    # extended delivery type, None for uniform delivery
    split_market: bool = False


CATEGORY_SPECS: Dict[Category, CategorySpec] = {
    Category.CITY: CategorySpec(
        Category.CITY, AllocationMode(CATEGORY_MODES["city"]), "按档位统一投放", None,
    ),
    Category.COUNTY: CategorySpec(
        Category.COUNTY, AllocationMode(CATEGORY_MODES["county"]), "按档位扩展投放", "档位+区县",
    ),
    Category.MARKET: CategorySpec(
        Category.MARKET, AllocationMode(CATEGORY_MODES["market"]), "按档位扩展投放", "档位+市场类型",
        split_market=True,
    ),
    Category.URBAN_RURAL: CategorySpec(
        Category.URBAN_RURAL, AllocationMode(CATEGORY_MODES["urban_rural"]),
        "按档位扩展投放", "档位+城乡分类代码",
    ),
    Category.BUSINESS_FORMAT: CategorySpec(
        Category.BUSINESS_FORMAT, AllocationMode(CATEGORY_MODES["business_format"]),
        "按档位扩展投放", "档位+业态",
    ),
}


def spec_for(category: Category) -> CategorySpec:
    try:
        return CATEGORY_SPECS[category]
    except KeyError:
        raise InvalidInputError(f"Unknown category: {category!r}") from None


def _ratio(value, default: Decimal, name: str) -> Decimal:
    ratio = default if value is None else to_decimal(value)
    if ratio < ZERO:
        raise InvalidInputError(f"{name} must be non-negative, got {ratio}")
    return ratio


def split_market_total(
    total: Decimal,
    targets: Sequence[str],
    urban_ratio=None,
    rural_ratio=None,
) -> Dict[str, Decimal]:
    """Share of the total per market side present in targets.

    With both sides present the ratios (defaults 0.4 / 0.6) must sum to 1.
    With one side present it receives the full total.
    """
    unknown = [t for t in targets if t not in (URBAN_MARKET, RURAL_MARKET)]
    if unknown:
        raise InvalidInputError(f"Not a market segment: {unknown}")

    has_urban = URBAN_MARKET in targets
    has_rural = RURAL_MARKET in targets
    if has_urban and has_rural:
        urban = _ratio(urban_ratio, DEFAULT_URBAN_RATIO, "urban_ratio")
        rural = _ratio(rural_ratio, DEFAULT_RURAL_RATIO, "rural_ratio")
        if urban + rural != ONE:
            raise InvalidInputError(
                f"Urban and rural ratios must sum to 1, got {urban} + {rural}",
                {"urban_ratio": str(urban), "rural_ratio": str(rural)},
            )
        urban_total = total * urban
        return {URBAN_MARKET: urban_total, RURAL_MARKET: total - urban_total}

    if urban_ratio is not None or rural_ratio is not None:
        logger.warning(
            "Only %s present, ignoring supplied urban/rural ratios",
            URBAN_MARKET if has_urban else RURAL_MARKET,
        )
    side = URBAN_MARKET if has_urban else RURAL_MARKET
    return {side: total}


def _allocate_market(
    targets: List[str],
    counts: List[List[Decimal]],
    total: Decimal,
    mode: AllocationMode,
    request: DistributionRequest,
    cfg: dict,
) -> Tuple[List[List[Decimal]], List[Tuple[str, Decimal, AllocationResult]]]:
    shares = split_market_total(total, targets, request.urban_ratio, request.rural_ratio)
    matrix: List[Optional[List[Decimal]]] = [None] * len(targets)
    segments = []
    for side, share in shares.items():
        indices = [i for i, t in enumerate(targets) if t == side]
        result = run_allocation(
            [targets[i] for i in indices], [counts[i] for i in indices], share, mode, cfg,
        )
        for i, row in zip(indices, result.matrix):
            matrix[i] = row
        segments.append((side, share, result))
    return matrix, segments


def plan_distribution(
    request: DistributionRequest,
    snapshot: CatalogSnapshot,
    rule_config: Optional[dict] = None,
) -> AllocationPlan:
    """Resolve, allocate, report and encode one distribution request.

    Raises NoMatchError when the descriptor names no catalog target.
    """
    cfg = rule_config or {}
    spec = spec_for(request.category)
    if request.total is None:
        raise InvalidInputError(f"{request.product_code}: total is required")
    total = to_decimal(request.total)
    if total < ZERO:
        raise InvalidInputError(f"{request.product_code}: total must be non-negative, got {total}")

    entry = snapshot.entry(request.category, request.bi_weekly_float)
    targets = resolve(request.descriptor, entry.catalog.targets)
    if not targets:
        raise NoMatchError(
            f"{request.product_code}: '{request.descriptor}' matches no {spec.category.label} target",
            {"descriptor": request.descriptor, "category": spec.category.value},
        )
    logger.info("%s: resolved %d target(s): %s", request.product_code, len(targets), targets)

    mode = AllocationMode(cfg.get("mode", spec.mode.value))
    counts = entry.customer_rows(targets)

    if spec.split_market:
        matrix, segments = _allocate_market(targets, counts, total, mode, request, cfg)
    else:
        result = run_allocation(targets, counts, total, mode, cfg)
        matrix = result.matrix
        segments = [(spec.category.label, total, result)]

    actual = actual_amount(matrix, counts)
    error = absolute_error(actual, total)
    error_pct = error_percentage(actual, total)
    logger.info(
        "%s: actual %s vs total %s, error %s (%s%%)",
        request.product_code, actual, total, error, error_pct,
    )
    if error > cfg.get("error_warn_threshold", ERROR_WARN_THRESHOLD):
        logger.warning("%s: large allocation error %s", request.product_code, error)

    expressions = encode(spec.method, spec.delivery_type, targets, matrix)
    target_expressions = encode_by_target(spec.method, spec.delivery_type, targets, matrix)
    explanation = explain_plan(
        descriptor=request.descriptor,
        targets=targets,
        mode_name=mode.value,
        segments=segments,
        total=total,
        actual=actual,
        error=error,
        error_pct=error_pct,
        expression_count=len(expressions),
    )

    return AllocationPlan(
        request=request,
        targets=targets,
        matrix=matrix,
        mode=mode,
        actual_amount=actual,
        per_target_amounts=per_target_amounts(targets, matrix, counts),
        error=error,
        error_pct=error_pct,
        expressions=expressions,
        target_expressions=target_expressions,
        explanation_steps=explanation,
    )


def optimize_plan(
    plan: AllocationPlan,
    snapshot: CatalogSnapshot,
    time_limit: int = OPTIMIZER_TIME_LIMIT,
) -> OptimizationResult:
    """Exact optimum for a plan's targets, segmented the same way as the heuristic.

    Market plans solve each side against its share of the total, so the result
    compares like for like with the split heuristic allocation.
    """
    request = plan.request
    spec = spec_for(request.category)
    total = to_decimal(request.total)
    counts = snapshot.entry(request.category, request.bi_weekly_float).customer_rows(plan.targets)

    if spec.split_market:
        shares = split_market_total(total, plan.targets, request.urban_ratio, request.rural_ratio)
    else:
        shares = {None: total}

    matrix: List[Optional[List[Decimal]]] = [None] * len(plan.targets)
    for side, share in shares.items():
        indices = [i for i, t in enumerate(plan.targets) if side is None or t == side]
        result = optimize_allocation(
            [plan.targets[i] for i in indices], [counts[i] for i in indices], share, plan.mode,
            time_limit=time_limit,
        )
        if result.status != "Optimal":
            return result
        for i, row in zip(indices, result.matrix):
            matrix[i] = row

    actual = actual_amount(matrix, counts)
    error = absolute_error(actual, total)
    return OptimizationResult(
        status="Optimal",
        matrix=matrix,
        actual_amount=actual,
        error=error,
        message=(
            f"Optimization complete ({plan.mode.value}, {len(shares)} segment(s)). "
            f"Actual amount {actual}, error {error}."
        ),
    )

"""Tier row helpers shared by models and engine."""

from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence

from config.defaults import TIER_COUNT, TIER_LABELS
from engine.errors import InvalidInputError

ZERO = Decimal(0)
ONE = Decimal(1)


def to_decimal(value) -> Decimal:
    """Convert a cell value to Decimal; None counts as 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidInputError(f"Boolean is not a valid tier value: {value!r}")
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(f"Not a decimal value: {value!r}") from None
    if not result.is_finite():
        raise InvalidInputError(f"Tier values must be finite: {value!r}")
    return result


def zero_row() -> List[Decimal]:
    return [ZERO] * TIER_COUNT


def normalize_row(row: Optional[Sequence], label: str = "row") -> List[Decimal]:
    """Validate width and convert every cell to Decimal."""
    if row is None:
        raise InvalidInputError(f"{label}: missing tier row")
    if len(row) != TIER_COUNT:
        raise InvalidInputError(
            f"{label}: expected {TIER_COUNT} tiers, got {len(row)}",
            {"width": len(row)},
        )
    return [to_decimal(v) for v in row]


def copy_matrix(matrix: Iterable[Sequence[Decimal]]) -> List[List[Decimal]]:
    return [list(row) for row in matrix]


def tier_label(index: int) -> str:
    """Tier index 0 -> 'D30', 29 -> 'D1'."""
    return TIER_LABELS[index]

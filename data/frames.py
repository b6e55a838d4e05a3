"""Convert between pandas DataFrames and catalog / plan models."""

from typing import List, Sequence

import pandas as pd

from config.defaults import ACTUAL_COLUMN, TARGET_COLUMN, TIER_LABELS
from data.validator import validate_customer_counts
from engine.errors import InvalidInputError
from models.allocation import AllocationPlan
from models.catalog import CatalogEntry, CustomerCountMatrix, TargetCatalog
from models.category import Category
from models.tiers import ZERO, to_decimal


def _cell(value):
    if value is None or pd.isna(value):
        return ZERO
    if hasattr(value, "item"):
        value = value.item()  # numpy scalar -> Python number
    return to_decimal(value)


def matrix_from_frame(df: pd.DataFrame, target_column: str = TARGET_COLUMN) -> CustomerCountMatrix:
    """Customer-count matrix from a frame with a target column and D30..D1 columns."""
    result = validate_customer_counts(df, target_column)
    if not result.is_valid:
        raise InvalidInputError("; ".join(result.errors))

    targets = [str(t).strip() for t in df[target_column]]
    rows = [[_cell(v) for v in row] for row in df[TIER_LABELS].itertuples(index=False)]
    return CustomerCountMatrix.from_rows(targets, rows)


def catalog_from_frame(
    df: pd.DataFrame,
    category: Category,
    bi_weekly_float: bool = False,
    target_column: str = TARGET_COLUMN,
) -> CatalogEntry:
    """Catalog entry whose target order is the frame's row order."""
    counts = matrix_from_frame(df, target_column)
    catalog = TargetCatalog(category=category, bi_weekly_float=bi_weekly_float, targets=counts.targets)
    return CatalogEntry(catalog=catalog, customer_counts=counts)


def load_counts_file(uploaded_file) -> pd.DataFrame:
    """Load an uploaded customer-count table (CSV or XLSX) into a DataFrame."""
    name = uploaded_file.name.lower()
    if name.endswith(".csv"):
        return pd.read_csv(uploaded_file)
    elif name.endswith(".xlsx"):
        return pd.read_excel(uploaded_file, engine="openpyxl")
    else:
        raise InvalidInputError(f"Unsupported file format: {name}. Use CSV or XLSX.")


def _display_value(value):
    d = to_decimal(value)
    return int(d) if d == d.to_integral_value() else float(d)


def matrix_to_frame(targets: Sequence[str], matrix: Sequence[Sequence]) -> pd.DataFrame:
    rows = []
    for target, row in zip(targets, matrix):
        record = {TARGET_COLUMN: target}
        record.update({label: _display_value(v) for label, v in zip(TIER_LABELS, row)})
        rows.append(record)
    return pd.DataFrame(rows, columns=[TARGET_COLUMN] + TIER_LABELS)


def counts_to_frame(counts: CustomerCountMatrix) -> pd.DataFrame:
    return matrix_to_frame(counts.targets, counts.rows)


def plan_to_frame(plan: AllocationPlan) -> pd.DataFrame:
    """One row per target, ready for the persistence writer."""
    df = matrix_to_frame(plan.targets, plan.matrix)
    df.insert(0, "Product Code", plan.request.product_code)
    df.insert(1, "Product Name", plan.request.product_name)
    df[ACTUAL_COLUMN] = [float(plan.per_target_amounts[t]) for t in plan.targets]
    df["Expression"] = [plan.target_expressions[t] for t in plan.targets]
    return df


def plans_summary_frame(plans: List[AllocationPlan]) -> pd.DataFrame:
    rows = []
    for plan in plans:
        rows.append({
            "Product Code": plan.request.product_code,
            "Product Name": plan.request.product_name,
            "Category": plan.request.category.label,
            "Targets": len(plan.targets),
            "Requested": float(plan.request.total),
            ACTUAL_COLUMN: float(plan.actual_amount),
            "Error": float(plan.error),
            "Error %": float(plan.error_pct),
            "Expressions": len(plan.expressions),
        })
    return pd.DataFrame(rows)

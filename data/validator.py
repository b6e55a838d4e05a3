"""Schema validation for customer-count tables."""

from dataclasses import dataclass, field
from typing import List
import pandas as pd

from config.defaults import TARGET_COLUMN, TIER_LABELS
from models.catalog import TargetCatalog


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: Table contains no data rows.")
    return result


def validate_customer_counts(
    df: pd.DataFrame,
    target_column: str = TARGET_COLUMN,
    file_label: str = "Customer Counts",
) -> ValidationResult:
    result = _check_required_columns(df, [target_column] + TIER_LABELS, file_label)
    if not result.is_valid:
        return result

    tiers = df[TIER_LABELS].apply(pd.to_numeric, errors="coerce")
    bad = tiers.isna() & df[TIER_LABELS].notna()
    if bad.any().any():
        result.is_valid = False
        cols = [c for c in TIER_LABELS if bad[c].any()]
        result.errors.append(f"{file_label}: Non-numeric customer counts in {', '.join(cols)}.")
        return result

    if (tiers < 0).any().any():
        result.is_valid = False
        result.errors.append(f"{file_label}: Customer counts cannot be negative.")

    if df[target_column].isna().any():
        result.is_valid = False
        result.errors.append(f"{file_label}: Every row needs a target name.")

    dupes = df.duplicated(subset=[target_column], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(
            f"{file_label}: Duplicate targets: {df[dupes][target_column].unique().tolist()}"
        )

    if tiers.isna().any().any():
        result.warnings.append(f"{file_label}: Empty cells will be treated as 0 customers.")

    return result


def validate_catalog_coverage(
    catalog: TargetCatalog,
    df: pd.DataFrame,
    target_column: str = TARGET_COLUMN,
) -> ValidationResult:
    """Check that catalog targets and customer-count rows line up."""
    result = ValidationResult()
    catalog_names = set(catalog.targets)
    count_names = set(df[target_column].astype(str).str.strip()) if target_column in df.columns else set()

    missing_counts = [t for t in catalog.targets if t not in count_names]
    unknown = sorted(count_names - catalog_names)

    if missing_counts:
        result.warnings.append(
            f"Catalog targets without customer counts: {', '.join(missing_counts)}. "
            "They will be allocated against zero customers."
        )
    if unknown:
        result.warnings.append(
            f"Customer counts for targets not in the catalog: {', '.join(unknown)}. "
            "These will be ignored."
        )
    return result

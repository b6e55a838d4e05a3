"""Tests for customer-count validation, frame adapters and sample data."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import io
from decimal import Decimal

import pandas as pd
import pytest

from config.defaults import ACTUAL_COLUMN, TARGET_COLUMN, TIER_LABELS
from data.frames import (
    catalog_from_frame, load_counts_file, matrix_from_frame, matrix_to_frame, plan_to_frame,
)
from data.sample_data import CATALOG_TARGETS, build_sample_snapshot, generate_customer_counts_df
from data.validator import validate_catalog_coverage, validate_customer_counts
from engine.codec import encode, encode_by_target
from engine.errors import InvalidInputError
from engine.strategies import plan_distribution
from models.allocation import AllocationPlan
from models.catalog import CatalogSnapshot, TargetCatalog
from models.category import AllocationMode, Category
from models.request import DistributionRequest


def make_counts_df(targets=("丹江", "房县"), value=2):
    rows = []
    for t in targets:
        row = {TARGET_COLUMN: t}
        row.update({label: value for label in TIER_LABELS})
        rows.append(row)
    return pd.DataFrame(rows)


class TestValidateCustomerCounts:
    def test_valid(self):
        result = validate_customer_counts(make_counts_df())
        assert result.is_valid
        assert not result.errors

    def test_missing_tier_column(self):
        df = make_counts_df().drop(columns=["D7"])
        result = validate_customer_counts(df)
        assert not result.is_valid
        assert "D7" in result.errors[0]

    def test_empty(self):
        result = validate_customer_counts(pd.DataFrame(columns=[TARGET_COLUMN] + TIER_LABELS))
        assert not result.is_valid

    def test_negative(self):
        df = make_counts_df()
        df.loc[0, "D30"] = -1
        assert not validate_customer_counts(df).is_valid

    def test_duplicate_targets(self):
        result = validate_customer_counts(make_counts_df(targets=("丹江", "丹江")))
        assert not result.is_valid
        assert "丹江" in result.errors[0]

    def test_non_numeric(self):
        df = make_counts_df().astype({"D1": object})
        df.loc[1, "D1"] = "many"
        assert not validate_customer_counts(df).is_valid

    def test_coverage_warnings(self):
        catalog = TargetCatalog(Category.COUNTY, False, ("丹江", "房县", "郧西"))
        df = make_counts_df(targets=("丹江", "房县", "武汉"))
        result = validate_catalog_coverage(catalog, df)

        assert result.is_valid
        assert any("郧西" in w for w in result.warnings)
        assert any("武汉" in w for w in result.warnings)


class TestFrames:
    def test_matrix_from_frame(self):
        counts = matrix_from_frame(make_counts_df(value=3))
        assert counts.targets == ("丹江", "房县")
        assert counts.row("房县") == tuple([Decimal(3)] * 30)

    def test_invalid_frame_raises(self):
        with pytest.raises(InvalidInputError):
            matrix_from_frame(make_counts_df(targets=("丹江", "丹江")))

    def test_catalog_from_frame_keeps_row_order(self):
        entry = catalog_from_frame(make_counts_df(targets=("郧西", "丹江")), Category.COUNTY)
        assert entry.catalog.targets == ("郧西", "丹江")
        assert entry.key == (Category.COUNTY, False)

    def test_matrix_to_frame(self):
        df = matrix_to_frame(["X"], [[Decimal("1.5")] + [Decimal(0)] * 29])
        assert list(df.columns) == [TARGET_COLUMN] + TIER_LABELS
        assert df.loc[0, "D30"] == 1.5
        assert df.loc[0, "D1"] == 0

    def test_plan_to_frame(self):
        snapshot = CatalogSnapshot.build([catalog_from_frame(make_counts_df(), Category.COUNTY)])
        request = DistributionRequest("P9", "Test", Decimal(8), "丹江房县", Category.COUNTY)
        df = plan_to_frame(plan_distribution(request, snapshot))

        assert list(df["Product Code"]) == ["P9", "P9"]
        assert list(df[ACTUAL_COLUMN]) == [4.0, 4.0]
        assert df.loc[0, "Expression"] == "B1(2+3)(2×1+28×0)"

    def test_plan_to_frame_expression_per_group(self):
        targets = ["丹江", "郧西"]
        matrix = [
            [Decimal(1)] + [Decimal(0)] * 29,
            [Decimal(2), Decimal(1)] + [Decimal(0)] * 28,
        ]
        request = DistributionRequest("P9", "Test", Decimal(4), "丹江郧西", Category.COUNTY)
        plan = AllocationPlan(
            request=request,
            targets=targets,
            matrix=matrix,
            mode=AllocationMode.PLATEAU,
            actual_amount=Decimal(4),
            per_target_amounts={"丹江": Decimal(1), "郧西": Decimal(3)},
            error=Decimal(0),
            error_pct=Decimal(0),
            expressions=encode("按档位扩展投放", "档位+区县", targets, matrix),
            target_expressions=encode_by_target("按档位扩展投放", "档位+区县", targets, matrix),
        )
        df = plan_to_frame(plan)

        assert list(df["Expression"]) == ["B1(2)(1×1+29×0)", "B1(4)(1×2+1×1+28×0)"]


class TestSampleData:
    def test_every_variant_present(self):
        snapshot = build_sample_snapshot()
        for category in Category:
            for bi_weekly in (False, True):
                assert snapshot.catalog(category, bi_weekly).targets == tuple(CATALOG_TARGETS[category])

    def test_deterministic(self):
        a = generate_customer_counts_df(Category.COUNTY)
        b = generate_customer_counts_df(Category.COUNTY)
        pd.testing.assert_frame_equal(a, b)

    def test_sample_counts_validate(self):
        for category in Category:
            assert validate_customer_counts(generate_customer_counts_df(category, True)).is_valid


class NamedBuffer(io.BytesIO):
    def __init__(self, data: bytes, name: str):
        super().__init__(data)
        self.name = name


class TestLoadCountsFile:
    def test_csv(self):
        data = make_counts_df().to_csv(index=False).encode("utf-8")
        df = load_counts_file(NamedBuffer(data, "counts.csv"))
        assert list(df[TARGET_COLUMN]) == ["丹江", "房县"]

    def test_xlsx(self):
        buffer = io.BytesIO()
        make_counts_df().to_excel(buffer, index=False, engine="openpyxl")
        df = load_counts_file(NamedBuffer(buffer.getvalue(), "counts.XLSX"))
        assert validate_customer_counts(df).is_valid

    def test_unsupported(self):
        with pytest.raises(InvalidInputError):
            load_counts_file(NamedBuffer(b"", "counts.json"))

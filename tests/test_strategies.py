"""Tests for category dispatch and the market split."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
from decimal import Decimal

import pytest

from engine.calculator import per_target_amounts
from engine.codec import decode_many, expand
from engine.constraints import satisfies
from engine.errors import InvalidInputError, NoMatchError
from engine.strategies import CATEGORY_SPECS, optimize_plan, plan_distribution, split_market_total
from models.catalog import CatalogEntry, CatalogSnapshot, CustomerCountMatrix, TargetCatalog
from models.category import AllocationMode, Category
from models.request import DistributionRequest


def make_row(*head, fill=0):
    return [Decimal(v) for v in head] + [Decimal(fill)] * (30 - len(head))


def make_entry(category, targets, rows, bi_weekly=False):
    return CatalogEntry(
        catalog=TargetCatalog(category, bi_weekly, tuple(targets)),
        customer_counts=CustomerCountMatrix.from_rows(targets, rows),
    )


def make_snapshot():
    return CatalogSnapshot.build([
        make_entry(Category.CITY, ["全市"], [make_row(5, fill=2)]),
        make_entry(
            Category.COUNTY,
            ["丹江", "房县", "郧西", "郧阳"],
            [make_row(5), make_row(5), make_flat_row(1), make_flat_row(2)],
        ),
        make_entry(Category.MARKET, ["城网", "农网"], [make_flat_row(1), make_flat_row(2)]),
    ])


def make_flat_row(value):
    return [Decimal(value)] * 30


def make_request(descriptor="房县,丹江", total="10", category=Category.COUNTY, **kwargs):
    return DistributionRequest("P1", "Test", Decimal(total), descriptor, category, **kwargs)


class TestCategorySpecs:
    def test_every_category_has_a_spec(self):
        assert set(CATEGORY_SPECS) == set(Category)

    def test_market_is_smooth_and_split(self):
        spec = CATEGORY_SPECS[Category.MARKET]
        assert spec.mode is AllocationMode.SMOOTH
        assert spec.split_market

    def test_others_are_plateau(self):
        for category, spec in CATEGORY_SPECS.items():
            if category is not Category.MARKET:
                assert spec.mode is AllocationMode.PLATEAU


class TestSplitMarketTotal:
    def test_default_ratios(self):
        shares = split_market_total(Decimal(100), ["城网", "农网"])
        assert shares == {"城网": Decimal(40), "农网": Decimal(60)}

    def test_custom_ratios(self):
        shares = split_market_total(Decimal(90), ["城网", "农网"], Decimal("0.5"), Decimal("0.5"))
        assert shares == {"城网": Decimal(45), "农网": Decimal(45)}

    def test_ratios_must_sum_to_one(self):
        with pytest.raises(InvalidInputError):
            split_market_total(Decimal(100), ["城网", "农网"], Decimal("0.5"), Decimal("0.6"))

    def test_negative_ratio(self):
        with pytest.raises(InvalidInputError):
            split_market_total(Decimal(100), ["城网", "农网"], Decimal("-0.2"), Decimal("1.2"))

    def test_single_side_gets_full_total(self, caplog):
        with caplog.at_level(logging.WARNING, logger="engine.strategies"):
            shares = split_market_total(Decimal(100), ["农网"], Decimal("0.3"), Decimal("0.7"))
        assert shares == {"农网": Decimal(100)}
        assert "ignoring" in caplog.text

    def test_unknown_segment(self):
        with pytest.raises(InvalidInputError):
            split_market_total(Decimal(100), ["城网", "郊网"])


class TestPlanDistribution:
    def test_county_plan(self):
        plan = plan_distribution(make_request(), make_snapshot())

        assert plan.targets == ["丹江", "房县"]
        assert plan.matrix == [make_row(1), make_row(1)]
        assert plan.actual_amount == Decimal(10)
        assert plan.error == 0
        assert plan.error_pct == Decimal("0.00")
        assert plan.per_target_amounts == {"丹江": Decimal(5), "房县": Decimal(5)}
        assert plan.expressions == ["B1(2+3)(1×1+29×0)"]
        assert plan.explanation_steps

    def test_expressions_decode_to_matrix(self):
        plan = plan_distribution(make_request("郧西 郧阳", total="75"), make_snapshot())
        targets, matrix = expand(decode_many("; ".join(plan.expressions)))

        assert dict(zip(targets, matrix)) == dict(zip(plan.targets, plan.matrix))

    def test_city_plan(self):
        plan = plan_distribution(make_request("全市", total="9", category=Category.CITY), make_snapshot())

        assert plan.targets == ["全市"]
        assert plan.matrix == [make_row(1, 1, 1)]
        assert plan.expressions == ["A(3×1+27×0)"]

    def test_market_split(self):
        plan = plan_distribution(make_request("城网+农网", total="100", category=Category.MARKET), make_snapshot())

        assert plan.mode is AllocationMode.SMOOTH
        assert plan.per_target_amounts == {"城网": Decimal(40), "农网": Decimal(60)}
        assert plan.matrix[0] == [Decimal(2)] * 10 + [Decimal(1)] * 20
        assert plan.matrix[1] == make_flat_row(1)

    def test_market_invalid_ratios(self):
        request = make_request(
            "城网农网", total="100", category=Category.MARKET,
            urban_ratio=Decimal("0.9"), rural_ratio=Decimal("0.9"),
        )
        with pytest.raises(InvalidInputError):
            plan_distribution(request, make_snapshot())

    def test_no_match(self):
        with pytest.raises(NoMatchError):
            plan_distribution(make_request("武汉"), make_snapshot())

    def test_negative_total(self):
        with pytest.raises(InvalidInputError):
            plan_distribution(make_request(total="-5"), make_snapshot())

    def test_missing_catalog(self):
        with pytest.raises(InvalidInputError):
            plan_distribution(make_request("便利店", category=Category.BUSINESS_FORMAT), make_snapshot())

    def test_mode_override(self):
        plan = plan_distribution(make_request(), make_snapshot(), {"mode": "smooth"})
        assert plan.mode is AllocationMode.SMOOTH


class TestOptimizePlan:
    def test_market_sides_solved_against_their_shares(self):
        snapshot = make_snapshot()
        plan = plan_distribution(make_request("城网农网", total="100", category=Category.MARKET), snapshot)
        result = optimize_plan(plan, snapshot, time_limit=10)

        counts = snapshot.entry(Category.MARKET).customer_rows(plan.targets)
        assert result.status == "Optimal"
        assert result.error == 0
        assert per_target_amounts(plan.targets, result.matrix, counts) == {
            "城网": Decimal(40), "农网": Decimal(60),
        }
        assert satisfies(result.matrix, AllocationMode.SMOOTH)

    def test_county_plan_solved_as_one_segment(self):
        snapshot = make_snapshot()
        plan = plan_distribution(make_request("郧西郧阳", total="100"), snapshot)
        result = optimize_plan(plan, snapshot, time_limit=10)

        assert result.status == "Optimal"
        assert len(result.matrix) == 2
        assert result.error <= plan.error

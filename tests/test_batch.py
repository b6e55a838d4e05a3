"""Tests for the batch runner."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
from decimal import Decimal

import pytest

from data.sample_data import build_sample_snapshot, generate_sample_requests
from engine.batch import run_batch, run_one
from engine.errors import InvariantViolation
from engine.strategies import plan_distribution
from models.catalog import CatalogEntry, CatalogSnapshot, CustomerCountMatrix, TargetCatalog
from models.category import Category
from models.outcome import OutcomeStatus
from models.request import DistributionRequest


def make_snapshot():
    targets = ["丹江", "房县", "郧西"]
    rows = [[Decimal(2)] * 30, [Decimal(3)] * 30, [Decimal(1)] * 30]
    return CatalogSnapshot.build([
        CatalogEntry(
            catalog=TargetCatalog(Category.COUNTY, False, tuple(targets)),
            customer_counts=CustomerCountMatrix.from_rows(targets, rows),
        ),
    ])


def make_request(code, descriptor="丹江,房县", total="50"):
    return DistributionRequest(code, code, Decimal(total), descriptor, Category.COUNTY)


def make_requests():
    return [
        make_request("OK1"),
        make_request("SKIP", descriptor="武汉"),
        make_request("BAD", total="-1"),
        make_request("OK2", descriptor="郧西", total="7"),
    ]


class TestRunOne:
    def test_ok(self):
        outcome = run_one(make_request("P"), make_snapshot())
        assert outcome.ok
        assert outcome.plan.actual_amount == Decimal(50)

    def test_missing_catalog_is_invalid(self):
        request = DistributionRequest("P", "P", Decimal(5), "城网", Category.MARKET)
        outcome = run_one(request, make_snapshot())
        assert outcome.status is OutcomeStatus.INVALID
        assert outcome.plan is None


class TestRunBatch:
    def test_sequential_statuses_in_order(self):
        outcomes = run_batch(make_requests(), make_snapshot())

        assert [o.product_code for o in outcomes] == ["OK1", "SKIP", "BAD", "OK2"]
        assert [o.status for o in outcomes] == [
            OutcomeStatus.OK, OutcomeStatus.SKIPPED, OutcomeStatus.INVALID, OutcomeStatus.OK,
        ]

    def test_thread_pool_preserves_order(self):
        sequential = run_batch(make_requests(), make_snapshot())
        pooled = run_batch(make_requests(), make_snapshot(), max_workers=3)

        assert [o.product_code for o in pooled] == [o.product_code for o in sequential]
        assert [o.status for o in pooled] == [o.status for o in sequential]
        assert pooled[0].plan.matrix == sequential[0].plan.matrix

    def test_cancelled_before_start(self):
        event = threading.Event()
        event.set()
        for workers in (None, 2):
            outcomes = run_batch(make_requests(), make_snapshot(), max_workers=workers, cancel_event=event)
            assert all(o.status is OutcomeStatus.CANCELLED for o in outcomes)

    def test_cancel_midway(self):
        event = threading.Event()
        requests = [make_request(f"P{i}") for i in range(12)]

        # first progress report comes after 10 requests
        outcomes = run_batch(
            requests, make_snapshot(), cancel_event=event,
            progress_callback=lambda done, total: event.set(),
        )

        assert [o.status for o in outcomes[:10]] == [OutcomeStatus.OK] * 10
        assert [o.status for o in outcomes[10:]] == [OutcomeStatus.CANCELLED] * 2

    def test_progress_reports_completion(self):
        calls = []
        run_batch(make_requests(), make_snapshot(), progress_callback=lambda d, t: calls.append((d, t)))
        assert calls[-1] == (4, 4)

    def test_empty_batch(self):
        assert run_batch([], make_snapshot()) == []

    def test_sample_requests(self):
        outcomes = run_batch(generate_sample_requests(), build_sample_snapshot(), max_workers=4)
        by_code = {o.product_code: o for o in outcomes}

        assert by_code["P1010"].status is OutcomeStatus.SKIPPED
        for code, outcome in by_code.items():
            if code != "P1010":
                assert outcome.ok, outcome.message
                assert outcome.plan.expressions


def make_breaking_planner(broken_code):
    def planner(request, snapshot, rule_config=None):
        if request.product_code == broken_code:
            raise InvariantViolation("Actual amount is negative: -1")
        return plan_distribution(request, snapshot, rule_config)
    return planner


class TestInvariantViolations:
    def test_run_one_raises(self, monkeypatch):
        monkeypatch.setattr("engine.batch.plan_distribution", make_breaking_planner("P"))
        with pytest.raises(InvariantViolation):
            run_one(make_request("P"), make_snapshot())

    def test_sequential_batch_raises(self, monkeypatch):
        monkeypatch.setattr("engine.batch.plan_distribution", make_breaking_planner("BROKEN"))
        requests = [make_request("OK1"), make_request("BROKEN"), make_request("OK2")]
        with pytest.raises(InvariantViolation):
            run_batch(requests, make_snapshot())

    def test_thread_pool_batch_raises(self, monkeypatch):
        monkeypatch.setattr("engine.batch.plan_distribution", make_breaking_planner("BROKEN"))
        requests = [make_request(f"P{i}") for i in range(5)] + [make_request("BROKEN")]
        with pytest.raises(InvariantViolation):
            run_batch(requests, make_snapshot(), max_workers=3)

"""Tests for the PuLP optimizer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from decimal import Decimal

from engine.allocation_engine import allocate
from engine.calculator import actual_amount
from engine.constraints import satisfies
from engine.optimizer import optimize_allocation
from models.category import AllocationMode


def make_row(*head, fill=0):
    return [Decimal(v) for v in head] + [Decimal(fill)] * (30 - len(head))


def make_flat(value):
    return [Decimal(value)] * 30


class TestOptimizer:
    def test_exact_total_reached(self):
        counts = [make_row(5), make_row(5)]
        result = optimize_allocation(["X", "Y"], counts, Decimal(10), AllocationMode.PLATEAU, time_limit=10)

        assert result.status == "Optimal"
        assert result.error == 0
        assert result.actual_amount == Decimal(10)

    def test_respects_ordering(self):
        counts = [make_flat(1), make_flat(2)]
        for mode in AllocationMode:
            result = optimize_allocation(["X", "Y"], counts, Decimal(37), mode, time_limit=10)
            assert result.status == "Optimal"
            assert satisfies(result.matrix, mode)
            assert actual_amount(result.matrix, counts) == result.actual_amount

    def test_never_worse_than_heuristic(self):
        cases = [
            ([make_flat(3)], Decimal(100), AllocationMode.SMOOTH),
            ([make_flat(1), make_flat(2)], Decimal(10), AllocationMode.PLATEAU),
            ([make_row(4, 3, 7, fill=2), make_row(1, 1, fill=5)], Decimal(123), AllocationMode.PLATEAU),
        ]
        for counts, total, mode in cases:
            targets = [f"T{i}" for i in range(len(counts))]
            heuristic = allocate(targets, counts, total, mode)
            heuristic_error = abs(actual_amount(heuristic, counts) - total)

            result = optimize_allocation(targets, counts, total, mode, time_limit=10)
            assert result.status == "Optimal"
            assert result.error <= heuristic_error

    def test_unreachable_total_reports_residual(self):
        result = optimize_allocation(["X"], [make_flat(3)], Decimal(100), AllocationMode.SMOOTH, time_limit=10)
        assert result.error == Decimal(1)

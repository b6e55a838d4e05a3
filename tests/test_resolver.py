"""Tests for KMP target resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.resolver import build_failure_table, kmp_search, resolve

COUNTIES = ["丹江", "房县", "郧西", "郧阳"]


class TestKmp:
    def test_failure_table(self):
        assert build_failure_table("ababaca") == [0, 0, 1, 2, 3, 0, 1]
        assert build_failure_table("aaaa") == [0, 1, 2, 3]

    def test_search_with_backtracking(self):
        assert kmp_search("aabaabaaa", "aabaaa")
        assert not kmp_search("aabaabaab", "aabaaa")

    def test_empty_inputs(self):
        assert not kmp_search("", "a")
        assert not kmp_search("abc", "")


class TestResolve:
    def test_catalog_order_not_text_order(self):
        assert resolve("房县,郧西", COUNTIES) == ["房县", "郧西"]
        assert resolve("郧西,房县", COUNTIES) == ["房县", "郧西"]

    def test_no_delimiters_needed(self):
        assert resolve("投放郧阳丹江两地", COUNTIES) == ["丹江", "郧阳"]

    def test_present_names_always_found(self):
        descriptor = "丹江 / 郧阳"
        result = resolve(descriptor, COUNTIES)
        for name in COUNTIES:
            assert (name in result) == (name in descriptor)

    def test_nested_names_match_independently(self):
        assert resolve("主城区", ["城区", "主城区"]) == ["城区", "主城区"]

    def test_catalog_duplicates_emitted_once(self):
        assert resolve("房县", ["房县", "房县"]) == ["房县"]

    def test_no_match_is_empty(self):
        assert resolve("武汉", COUNTIES) == []
        assert resolve("", COUNTIES) == []
        assert resolve(None, COUNTIES) == []
        assert resolve("房县", []) == []

    def test_empty_candidate_skipped(self):
        assert resolve("房县", ["", "房县"]) == ["房县"]

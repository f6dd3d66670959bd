"""
Unit tests for the historical accuracy index.

Tests construction from store rows, dirty-input tolerance and lookup misses.
"""

import logging

import pandas as pd
import pytest

from wagerlab.edges.accuracy_index import (
    AccuracyBucketRow,
    AccuracyIndex,
    AccuracyStat,
    build_index,
    lookup,
)
from wagerlab.edges.buckets import EdgeType, spread_bucket


class TestBuildIndex:
    """Tests for index construction."""

    def test_builds_from_mappings(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)

        assert len(index) == len(sample_bucket_rows)
        stat = index.lookup(EdgeType.SPREAD_EDGE, 1.5)
        assert stat == AccuracyStat(games=40, correct=25, accuracy_pct=62.5)

    def test_builds_from_row_objects(self):
        rows = [AccuracyBucketRow("OU_EDGE", -1.5, 12, 7, 58.3)]
        index = AccuracyIndex.build(rows)

        assert index.lookup("OU_EDGE", -1.5).games == 12

    def test_duplicate_keys_last_write_wins(self, caplog):
        rows = [
            {"edge_type": "SPREAD_EDGE", "bucket": 2.0, "games": 10, "correct": 5, "accuracy_pct": 50.0},
            {"edge_type": "SPREAD_EDGE", "bucket": 2.0, "games": 20, "correct": 14, "accuracy_pct": 70.0},
        ]
        with caplog.at_level(logging.WARNING):
            index = build_index(rows)

        assert len(index) == 1
        assert index.lookup(EdgeType.SPREAD_EDGE, 2.0).accuracy_pct == 70.0
        assert "duplicate" in caplog.text

    def test_unknown_edge_type_skipped(self):
        rows = [
            {"edge_type": "TEASER_EDGE", "bucket": 1.0, "games": 9, "correct": 4, "accuracy_pct": 44.4},
            {"edge_type": "OU_EDGE", "bucket": 1.0, "games": 9, "correct": 5, "accuracy_pct": 55.6},
        ]
        index = build_index(rows)

        assert len(index) == 1
        assert index.lookup("TEASER_EDGE", 1.0) is None

    def test_missing_bucket_skipped(self):
        rows = [{"edge_type": "OU_EDGE", "bucket": None, "games": 3, "correct": 1, "accuracy_pct": 33.3}]
        assert len(build_index(rows)) == 0

    def test_accuracy_derived_from_counts(self):
        rows = [{"edge_type": "OU_EDGE", "bucket": 0.5, "games": 8, "correct": 6, "accuracy_pct": None}]
        index = build_index(rows)

        assert index.lookup(EdgeType.OU_EDGE, 0.5).accuracy_pct == 75.0

    def test_string_buckets_from_store(self):
        """Numeric columns may arrive as strings ("0.60")."""
        rows = [{"edge_type": "MONEYLINE_PROB", "bucket": "0.60", "games": "10", "correct": "6", "accuracy_pct": "60"}]
        index = build_index(rows)

        assert index.lookup(EdgeType.MONEYLINE_PROB, 0.6) == AccuracyStat(10, 6, 60.0)

    def test_from_frame(self, sample_bucket_rows):
        df = pd.DataFrame(sample_bucket_rows)
        index = AccuracyIndex.from_frame(df)

        assert len(index) == len(sample_bucket_rows)
        assert index.lookup(EdgeType.MONEYLINE_PROB, 0.75).games == 52

    def test_from_empty_frame(self):
        assert len(AccuracyIndex.from_frame(pd.DataFrame())) == 0


class TestLookup:
    """Tests for lookups and misses."""

    def test_lookup_miss_returns_none(self, sample_bucket_rows):
        """A valid key with no row is a miss, not a zero-accuracy stat."""
        index = build_index(sample_bucket_rows)

        assert lookup(index, EdgeType.SPREAD_EDGE, 12.5) is None

    def test_null_key_returns_none(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)

        assert lookup(index, EdgeType.SPREAD_EDGE, None) is None

    def test_edge_types_are_separate(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)

        assert index.lookup(EdgeType.OU_EDGE, 1.5) is None
        assert index.lookup(EdgeType.OU_EDGE, -2.0).accuracy_pct == 58.1

    def test_derived_key_matches_stored_bucket(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)
        key = spread_bucket(-2.0, -3.5)

        assert index.lookup(EdgeType.SPREAD_EDGE, key).accuracy_pct == 62.5

    def test_key_from_other_rounding_misses(self, sample_bucket_rows):
        """A key not on the 0.5 grid never silently matches a neighbour."""
        index = build_index(sample_bucket_rows)

        assert index.lookup(EdgeType.SPREAD_EDGE, 1.4) is None


class TestImmutability:
    """The index is rebuilt on refresh, never patched."""

    def test_no_item_assignment(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)

        with pytest.raises(TypeError):
            index[(EdgeType.SPREAD_EDGE, 9.0)] = AccuracyStat(1, 1, 100.0)

    def test_source_rows_do_not_leak(self, sample_bucket_rows):
        index = build_index(sample_bucket_rows)
        sample_bucket_rows[0]["accuracy_pct"] = 0.0

        assert index.lookup(EdgeType.SPREAD_EDGE, 1.5).accuracy_pct == 62.5

    def test_stat_is_frozen(self, sample_bucket_rows):
        stat = build_index(sample_bucket_rows).lookup(EdgeType.SPREAD_EDGE, 1.5)

        with pytest.raises(Exception):
            stat.accuracy_pct = 99.0

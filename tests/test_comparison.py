# tests/test_comparison.py

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from data.catalog_source import load_reference_catalog
from data.models import ProfilePoint, ProfileSeries
from explorer.comparison import compose, comparison_statistics, profile_summary
from explorer.selection import SelectionSet


def series(float_id, rows):
    return ProfileSeries(float_id, tuple(ProfilePoint(d, values) for d, values in rows))


@pytest.fixture
def profiles():
    return {
        "X": series("X", [(0, {"temperature": 20.0}), (10, {"temperature": 18.0})]),
        "Y": series("Y", [(25, {"temperature": 15.0}), (0, {"temperature": 21.0})]),
    }


class TestComposer:
    """Test cases for depth-aligned comparison series"""

    def test_union_of_depths_with_absent_slots(self, profiles):
        result = compose(["X", "Y"], "temperature", profiles.get)

        assert result.depths == [0, 10, 25]
        row0, row10, row25 = result.rows
        assert (row0.get(1), row0.get(2)) == (20.0, 21.0)
        assert row10.get(1) == 18.0
        assert not row10.has(2)
        assert row10.get(2) is None
        assert not row25.has(1)
        assert row25.get(2) == 15.0

    def test_records_omit_absent_slots(self, profiles):
        records = compose(["X", "Y"], "temperature", profiles.get).as_records()
        assert records == [
            {"depth": 0.0, "float1": 20.0, "float2": 21.0},
            {"depth": 10.0, "float1": 18.0},
            {"depth": 25.0, "float2": 15.0},
        ]

    def test_slots_follow_selection_order(self, profiles):
        result = compose(SelectionSet(("Y", "X")), "temperature", profiles.get)
        assert result.float_ids == ("Y", "X")
        assert result.slot_of("X") == 2
        assert result.rows[0].get(1) == 21.0
        assert result.slot_of("nope") is None

    def test_empty_selection(self, profiles):
        result = compose([], "temperature", profiles.get)
        assert result.is_empty
        assert result.as_records() == []

    def test_missing_parameter_is_absent_not_zero(self):
        catalog = load_reference_catalog()
        result = compose(["5904471", "5904892"], "oxygen", catalog)
        assert all(not row.has(2) for row in result.rows)
        assert result.rows[0].get(1) == 220.0
        assert len(result.slot_values(2)) == 0

    def test_unknown_float_yields_no_values(self):
        catalog = load_reference_catalog()
        result = compose(["5904471", "0000000"], "temperature", catalog)
        assert result.float_ids == ("5904471", "0000000")
        assert all(not row.has(2) for row in result.rows)

    def test_deterministic(self):
        catalog = load_reference_catalog()
        ids = ["5906123", "5905334", "5904471"]
        assert compose(ids, "salinity", catalog) == compose(ids, "salinity", catalog)

    def test_reference_catalog_depth_union(self):
        catalog = load_reference_catalog()
        result = compose(["5906123", "5905334"], "temperature", catalog)
        assert result.depths == [0, 10, 25, 30, 50, 100, 200, 250, 500, 1000]
        row30 = result.rows[3]
        assert row30.get(2) == 7.6
        assert not row30.has(1)


class TestComparisonStatistics:
    """Test cases for comparison summary numbers"""

    def test_pairwise_difference_and_correlation(self, profiles):
        stats = comparison_statistics(compose(["X", "Y"], "temperature", profiles.get))
        # Only depth 0 overlaps
        assert stats.average_difference == pytest.approx(1.0)
        assert stats.correlation is None
        assert stats.max_depth == 25

    def test_reference_floats_strongly_correlated(self):
        catalog = load_reference_catalog()
        stats = comparison_statistics(compose(["5904471", "5906542"], "temperature", catalog))
        assert stats.average_difference == pytest.approx(0.5125)
        assert stats.correlation > 0.99
        assert stats.max_depth == 2000

    def test_single_float_has_no_pairs(self, profiles):
        stats = comparison_statistics(compose(["X"], "temperature", profiles.get))
        assert stats.average_difference is None
        assert stats.correlation is None
        assert stats.max_depth == 10

    def test_empty_series(self, profiles):
        stats = comparison_statistics(compose([], "temperature", profiles.get))
        assert (stats.average_difference, stats.correlation, stats.max_depth) == (None, None, None)


class TestProfileSummary:

    def test_summary_of_reference_profile(self):
        catalog = load_reference_catalog()
        summary = profile_summary(catalog.get_profile("5904471"), "temperature")
        assert summary.surface_value == 18.5
        assert summary.deepest_value == 2.1
        assert summary.max_depth == 2000
        assert summary.point_count == 9

    def test_summary_without_parameter(self):
        catalog = load_reference_catalog()
        summary = profile_summary(catalog.get_profile("5904892"), "oxygen")
        assert summary.surface_value is None
        assert summary.deepest_value is None
        assert summary.max_depth == 1000
        assert summary.point_count == 0

# tests/test_filters.py

import pytest
from pathlib import Path
import sys
from datetime import date

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from data.catalog_source import load_reference_catalog
from data.models import Catalog, FloatRecord, FloatStatus
from explorer.filters import FilterCriteria, apply_filters, available_regions, summarize


def make_float(float_id, region, status="active"):
    return FloatRecord(float_id, 0.0, 0.0, FloatStatus(status), region, date(2024, 1, 15))


class TestFacetFilters:
    """Test cases for region / status / search filtering"""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.catalog = load_reference_catalog()

    def test_region_filter_north_south(self):
        """Only floats in the chosen region are returned"""
        catalog = Catalog([make_float("A", "North"), make_float("B", "South", "inactive")])
        result = apply_filters(catalog, FilterCriteria(region="North", status="all", search_text=""))
        assert [f.id for f in result] == ["A"]

    def test_default_criteria_return_everything_in_order(self):
        result = apply_filters(self.catalog, FilterCriteria())
        assert [f.id for f in result] == [f.id for f in self.catalog.floats]

    def test_status_filter(self):
        inactive = apply_filters(self.catalog, FilterCriteria(status="inactive"))
        assert [f.id for f in inactive] == ["5904892"]

        active = apply_filters(self.catalog, FilterCriteria(status="active"))
        assert len(active) == 4
        assert all(f.is_active for f in active)

    def test_search_matches_id_substring(self):
        result = apply_filters(self.catalog, FilterCriteria(search_text="6542"))
        assert [f.id for f in result] == ["5906542"]

    def test_search_matches_region_case_insensitively(self):
        result = apply_filters(self.catalog, FilterCriteria(search_text="nORDIC"))
        assert [f.id for f in result] == ["5905334"]

    def test_search_is_case_insensitive_on_ids(self):
        catalog = Catalog([make_float("WMO-ABC", "Arctic"), make_float("xyz", "Arctic")])
        result = apply_filters(catalog, FilterCriteria(search_text="abc"))
        assert [f.id for f in result] == ["WMO-ABC"]

    def test_facets_combine_with_and(self):
        criteria = FilterCriteria(region="North Atlantic", status="active", search_text="5904")
        result = apply_filters(self.catalog, criteria)
        assert [f.id for f in result] == ["5904471"]

    def test_region_match_is_exact(self):
        assert apply_filters(self.catalog, FilterCriteria(region="Atlantic")) == []

    def test_no_match_returns_empty_list(self):
        assert apply_filters(self.catalog, FilterCriteria(search_text="pacific")) == []

    def test_filtering_is_idempotent(self):
        for criteria in [
            FilterCriteria(),
            FilterCriteria(region="North Atlantic"),
            FilterCriteria(status="inactive"),
            FilterCriteria(search_text="atlantic"),
            FilterCriteria(region="Gulf of Mexico", status="inactive"),
        ]:
            once = apply_filters(self.catalog, criteria)
            assert apply_filters(once, criteria) == once

    def test_filtering_does_not_change_catalog(self):
        before = self.catalog.floats
        apply_filters(self.catalog, FilterCriteria(region="Nordic Seas"))
        assert self.catalog.floats == before

    def test_criteria_transitions(self):
        criteria = FilterCriteria().with_region("Nordic Seas").with_status("active").with_search_text("53")
        assert criteria == FilterCriteria("Nordic Seas", "active", "53")

        with pytest.raises(ValueError):
            FilterCriteria().with_status("retired")

    def test_available_regions_first_seen_order(self):
        assert available_regions(self.catalog) == [
            "North Atlantic", "South Atlantic", "Gulf of Mexico", "Nordic Seas"
        ]

    def test_summary_counts(self):
        summary = summarize(apply_filters(self.catalog, FilterCriteria(search_text="atlantic")))
        assert summary.total == 3
        assert summary.active == 2
        assert summary.regions == 2

        empty = summarize([])
        assert (empty.total, empty.active, empty.regions) == (0, 0, 0)

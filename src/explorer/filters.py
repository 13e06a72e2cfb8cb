# src/explorer/filters.py
"""Faceted filtering of the float catalog by region, status and search text."""
from dataclasses import dataclass, replace
from typing import Iterable, List

from data.models import FloatRecord

ALL = "all"
STATUS_CHOICES = (ALL, "active", "inactive")


@dataclass(frozen=True)
class FilterCriteria:
    region: str = ALL
    status: str = ALL
    search_text: str = ""

    def with_region(self, region: str) -> "FilterCriteria":
        return replace(self, region=region)

    def with_status(self, status: str) -> "FilterCriteria":
        if status not in STATUS_CHOICES:
            raise ValueError(f"Unknown status filter: {status}")
        return replace(self, status=status)

    def with_search_text(self, search_text: str) -> "FilterCriteria":
        return replace(self, search_text=search_text)


@dataclass(frozen=True)
class FilterSummary:
    total: int
    active: int
    regions: int


def matches_region(record: FloatRecord, region: str) -> bool:
    return region == ALL or record.region == region


def matches_status(record: FloatRecord, status: str) -> bool:
    return status == ALL or record.status.value == status


def matches_search(record: FloatRecord, search_text: str) -> bool:
    needle = search_text.lower()
    if not needle:
        return True
    return needle in record.id.lower() or needle in record.region.lower()


def apply_filters(floats: Iterable[FloatRecord], criteria: FilterCriteria) -> List[FloatRecord]:
    """Floats matching every facet, in catalog order"""
    return [
        record for record in floats
        if matches_region(record, criteria.region)
        and matches_status(record, criteria.status)
        and matches_search(record, criteria.search_text)
    ]


def available_regions(floats: Iterable[FloatRecord]) -> List[str]:
    """Distinct regions in first-seen order, for the region facet choices"""
    regions = []
    for record in floats:
        if record.region not in regions:
            regions.append(record.region)
    return regions


def summarize(floats: Iterable[FloatRecord]) -> FilterSummary:
    records = list(floats)
    return FilterSummary(
        total=len(records),
        active=sum(1 for r in records if r.is_active),
        regions=len({r.region for r in records}),
    )

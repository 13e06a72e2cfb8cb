# src/explorer/comparison.py
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from data.models import ProfileSeries

logger = logging.getLogger(__name__)

ProfileSource = Union[Callable[[str], ProfileSeries], Any]


@dataclass(frozen=True)
class ComparisonRow:
    depth: float
    # 1-based selection slot -> value; missing slots mean "no reading"
    values: Mapping[int, float] = field(default_factory=dict)

    def get(self, slot: int) -> Optional[float]:
        return self.values.get(slot)

    def has(self, slot: int) -> bool:
        return slot in self.values


@dataclass(frozen=True)
class ComparisonSeries:
    parameter: str
    float_ids: Tuple[str, ...] = ()
    rows: Tuple[ComparisonRow, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def depths(self) -> List[float]:
        return [row.depth for row in self.rows]

    def slot_of(self, float_id: str) -> Optional[int]:
        if float_id not in self.float_ids:
            return None
        return self.float_ids.index(float_id) + 1

    def as_records(self) -> List[Dict[str, float]]:
        """Chart-ready rows: ``depth`` plus ``float1``..``floatN`` for present values only"""
        records = []
        for row in self.rows:
            record = {'depth': row.depth}
            for slot, value in sorted(row.values.items()):
                record[f'float{slot}'] = value
            records.append(record)
        return records

    def slot_values(self, slot: int) -> List[Tuple[float, float]]:
        return [(row.depth, row.values[slot]) for row in self.rows if slot in row.values]


@dataclass(frozen=True)
class ComparisonStatistics:
    average_difference: Optional[float]
    correlation: Optional[float]
    max_depth: Optional[float]


@dataclass(frozen=True)
class ProfileSummary:
    surface_value: Optional[float]
    max_depth: Optional[float]
    deepest_value: Optional[float]
    point_count: int


def _profile_fetcher(profile_source: ProfileSource) -> Callable[[str], ProfileSeries]:
    """Accept either a catalog-like object or a plain lookup function"""
    return getattr(profile_source, 'get_profile', profile_source)


def compose(selection: Iterable[str], parameter: str, profile_source: ProfileSource) -> ComparisonSeries:
    """Align the selected floats' profiles on the union of their depths"""
    float_ids = tuple(selection)
    if not float_ids:
        return ComparisonSeries(parameter)

    fetch = _profile_fetcher(profile_source)
    depths = set()
    columns = {}
    for slot, float_id in enumerate(float_ids, start=1):
        profile = fetch(float_id)
        depths.update(profile.depths)
        columns[slot] = pd.Series(dict(profile.values(parameter)), dtype=float)
        if profile.is_empty:
            logger.warning(f"No profile data for float {float_id}")

    frame = pd.DataFrame(columns, index=sorted(depths), dtype=float)

    rows = []
    for depth, values in frame.iterrows():
        present = {int(slot): float(v) for slot, v in values.items() if not pd.isna(v)}
        rows.append(ComparisonRow(depth=float(depth), values=present))

    return ComparisonSeries(parameter, float_ids, tuple(rows))


def comparison_statistics(series: ComparisonSeries) -> ComparisonStatistics:
    """Pairwise summary over depths where both floats have a reading"""
    max_depth = max((row.depth for row in series.rows if row.values), default=None)
    slots = range(1, len(series.float_ids) + 1)

    differences = []
    correlations = []
    for a, b in combinations(slots, 2):
        paired = np.array([(row.values[a], row.values[b]) for row in series.rows
                           if a in row.values and b in row.values])
        if len(paired) == 0:
            continue
        differences.extend(np.abs(paired[:, 0] - paired[:, 1]))
        # Correlation is undefined for fewer than two points or a flat profile
        if len(paired) > 1 and paired[:, 0].std() > 0 and paired[:, 1].std() > 0:
            correlations.append(np.corrcoef(paired[:, 0], paired[:, 1])[0, 1])

    return ComparisonStatistics(
        average_difference=float(np.mean(differences)) if differences else None,
        correlation=float(np.mean(correlations)) if correlations else None,
        max_depth=max_depth,
    )


def profile_summary(profile: ProfileSeries, parameter: str) -> ProfileSummary:
    values = profile.values(parameter)
    return ProfileSummary(
        surface_value=values[0][1] if values else None,
        max_depth=max(profile.depths) if not profile.is_empty else None,
        deepest_value=values[-1][1] if values else None,
        point_count=len(values),
    )

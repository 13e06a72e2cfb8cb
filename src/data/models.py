# src/data/models.py
"""Catalog entities: floats, their depth profiles and the parameter registry."""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import enum


class FloatStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class FloatRecord:
    id: str
    lat: float
    lon: float
    status: FloatStatus
    region: str
    last_update: date

    @property
    def is_active(self) -> bool:
        return self.status is FloatStatus.ACTIVE


@dataclass(frozen=True)
class ProfilePoint:
    depth: float
    parameters: Mapping[str, float] = field(default_factory=dict)

    def value(self, parameter: str) -> Optional[float]:
        return self.parameters.get(parameter)


@dataclass(frozen=True)
class ProfileSeries:
    """Depth-ordered readings of one float"""
    float_id: str
    points: Tuple[ProfilePoint, ...] = ()

    def __post_init__(self):
        # Points are always kept in ascending depth order
        ordered = tuple(sorted(self.points, key=lambda p: p.depth))
        object.__setattr__(self, 'points', ordered)

    @property
    def depths(self) -> List[float]:
        return [p.depth for p in self.points]

    @property
    def is_empty(self) -> bool:
        return not self.points

    def parameter_names(self) -> List[str]:
        names = set()
        for point in self.points:
            names.update(point.parameters)
        return sorted(names)

    def values(self, parameter: str) -> List[Tuple[float, float]]:
        """(depth, value) pairs for the points that carry the parameter"""
        return [(p.depth, p.parameters[parameter]) for p in self.points if parameter in p.parameters]


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    label: str
    unit: str


PARAMETERS: Dict[str, ParameterInfo] = {
    'temperature': ParameterInfo('temperature', 'Temperature', '°C'),
    'salinity': ParameterInfo('salinity', 'Salinity', 'PSU'),
    'oxygen': ParameterInfo('oxygen', 'Dissolved Oxygen', 'μmol/kg'),
    'pressure': ParameterInfo('pressure', 'Pressure', 'dbar'),
    'conductivity': ParameterInfo('conductivity', 'Conductivity', 'S/m'),
}


def parameter_info(name: str) -> ParameterInfo:
    """Registry lookup; unknown parameters get a title-cased label and no unit"""
    return PARAMETERS.get(name, ParameterInfo(name, name.replace('_', ' ').title(), ''))


class Catalog:
    """Read-only snapshot of floats and their profiles"""

    def __init__(self, floats: Iterable[FloatRecord], profiles: Optional[Mapping[str, ProfileSeries]] = None):
        self._floats = tuple(floats)
        self._by_id = {f.id: f for f in self._floats}
        if len(self._by_id) != len(self._floats):
            raise ValueError("Catalog float ids must be unique")
        self._profiles = dict(profiles or {})

    @property
    def floats(self) -> Tuple[FloatRecord, ...]:
        return self._floats

    def __len__(self):
        return len(self._floats)

    def __iter__(self):
        return iter(self._floats)

    def __contains__(self, float_id):
        return float_id in self._by_id

    def get_float(self, float_id: str) -> Optional[FloatRecord]:
        return self._by_id.get(float_id)

    def get_profile(self, float_id: str) -> ProfileSeries:
        return self._profiles.get(float_id, ProfileSeries(float_id))

    def parameters(self) -> List[str]:
        names = set()
        for profile in self._profiles.values():
            names.update(profile.parameter_names())
        return sorted(names)

# src/explorer/state.py
"""Immutable per-session explorer state and its pure transition function.

The presentation layer dispatches small action objects and re-renders from the
returned snapshot; nothing here touches the catalog or performs I/O.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Dict, Type

from config import config
from explorer.export import ExportConfig
from explorer.filters import FilterCriteria
from explorer.selection import SelectionSet


@dataclass(frozen=True)
class ExplorerState:
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    selection: SelectionSet = field(default_factory=SelectionSet)
    parameter: str = "temperature"
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def initial(cls, seeded: bool = True) -> "ExplorerState":
        """Starting state; ``seeded`` applies the preselections from the settings"""
        selection = SelectionSet.from_config()
        if not seeded:
            return cls(selection=selection)

        # Duplicates and ids beyond capacity are dropped
        for float_id in dict.fromkeys(config.get('explorer.preselected_floats') or ()):
            selection = selection.toggle(str(float_id))
        export = ExportConfig(
            floats=[str(f) for f in config.get('export.preselected_floats') or ()],
            parameters=config.get('export.preselected_parameters') or (),
        )
        return cls(selection=selection, export=export)


# Actions

@dataclass(frozen=True)
class SetRegion:
    region: str


@dataclass(frozen=True)
class SetStatus:
    status: str


@dataclass(frozen=True)
class SetSearchText:
    search_text: str


@dataclass(frozen=True)
class ToggleFloat:
    float_id: str


@dataclass(frozen=True)
class RemoveFloat:
    float_id: str


@dataclass(frozen=True)
class SelectParameter:
    parameter: str


@dataclass(frozen=True)
class SetExportFormat:
    format: str


@dataclass(frozen=True)
class ToggleExportFloat:
    float_id: str


@dataclass(frozen=True)
class ToggleExportParameter:
    parameter: str


@dataclass(frozen=True)
class SetDateRange:
    start: date
    end: date


@dataclass(frozen=True)
class SetIncludeMetadata:
    include_metadata: bool


_REDUCERS: Dict[Type, Callable[[ExplorerState, object], ExplorerState]] = {
    SetRegion: lambda s, a: replace(s, criteria=s.criteria.with_region(a.region)),
    SetStatus: lambda s, a: replace(s, criteria=s.criteria.with_status(a.status)),
    SetSearchText: lambda s, a: replace(s, criteria=s.criteria.with_search_text(a.search_text)),
    ToggleFloat: lambda s, a: replace(s, selection=s.selection.toggle(a.float_id)),
    RemoveFloat: lambda s, a: replace(s, selection=s.selection.remove(a.float_id)),
    SelectParameter: lambda s, a: replace(s, parameter=a.parameter),
    SetExportFormat: lambda s, a: replace(s, export=s.export.with_format(a.format)),
    ToggleExportFloat: lambda s, a: replace(s, export=s.export.toggle_float(a.float_id)),
    ToggleExportParameter: lambda s, a: replace(s, export=s.export.toggle_parameter(a.parameter)),
    SetDateRange: lambda s, a: replace(s, export=s.export.with_date_range(a.start, a.end)),
    SetIncludeMetadata: lambda s, a: replace(s, export=s.export.with_metadata(a.include_metadata)),
}


def reduce(state: ExplorerState, action) -> ExplorerState:
    """Return the state after applying one action"""
    try:
        reducer = _REDUCERS[type(action)]
    except KeyError:
        raise TypeError(f"Unsupported explorer action: {type(action).__name__}") from None
    return reducer(state, action)

# src/explorer/export.py
"""Export configuration, validation, size estimation and export intents.

The engine never writes files. A validated configuration becomes an
``ExportIntent`` that is handed to whatever actually produces the file.
"""
import enum
import math
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

import pandas as pd

from config import config
from data.models import Catalog
from utils.errors import ExportValidationError
from utils.helpers import FileHandler

logger = logging.getLogger(__name__)

DEFAULT_RECORDS_PER_FLOAT = 50
DEFAULT_BYTES_PER_RECORD_FACTOR = 0.1
DEFAULT_FILENAME_PREFIX = "argo_export"


class ExportFormat(enum.Enum):
    CSV = "csv"
    NETCDF = "netcdf"
    JSON = "json"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return {'csv': 'CSV', 'netcdf': 'NetCDF', 'json': 'JSON'}[self.value]

    @property
    def description(self) -> str:
        return {
            'csv': 'Comma-separated values',
            'netcdf': 'Network Common Data Form',
            'json': 'JavaScript Object Notation',
        }[self.value]


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def is_ordered(self) -> bool:
        return self.start <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class ExportConfig:
    format: ExportFormat = ExportFormat.CSV
    floats: FrozenSet[str] = frozenset()
    parameters: FrozenSet[str] = frozenset()
    date_range: DateRange = field(default_factory=lambda: DateRange(date(2024, 1, 1), date(2024, 1, 31)))
    include_metadata: bool = True

    def __post_init__(self):
        if not isinstance(self.format, ExportFormat):
            object.__setattr__(self, 'format', ExportFormat(self.format))
        object.__setattr__(self, 'floats', frozenset(self.floats))
        object.__setattr__(self, 'parameters', frozenset(self.parameters))

    def with_format(self, export_format) -> "ExportConfig":
        return replace(self, format=ExportFormat(export_format))

    def toggle_float(self, float_id: str) -> "ExportConfig":
        return replace(self, floats=self.floats ^ {float_id})

    def toggle_parameter(self, parameter: str) -> "ExportConfig":
        return replace(self, parameters=self.parameters ^ {parameter})

    def with_date_range(self, start: date, end: date) -> "ExportConfig":
        return replace(self, date_range=DateRange(start, end))

    def with_metadata(self, include_metadata: bool) -> "ExportConfig":
        return replace(self, include_metadata=bool(include_metadata))


def validation_errors(export_config: ExportConfig) -> List[str]:
    errors = []
    if not export_config.floats:
        errors.append("no floats selected")
    if not export_config.parameters:
        errors.append("no parameters selected")
    if not export_config.date_range.is_ordered:
        errors.append("date range ends before it starts")
    return errors


def validate(export_config: ExportConfig) -> bool:
    """Whether the export action may be invoked"""
    return not validation_errors(export_config)


@dataclass(frozen=True)
class ExportIntent:
    filename: str
    format: ExportFormat
    floats: tuple
    parameters: tuple
    date_range: DateRange
    include_metadata: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'format': self.format.value,
            'floats': list(self.floats),
            'parameters': list(self.parameters),
            'date_range': {
                'from': self.date_range.start.isoformat(),
                'to': self.date_range.end.isoformat(),
            },
            'include_metadata': self.include_metadata,
        }

    def to_json(self) -> str:
        return FileHandler.safe_json_serialize(self.to_dict())


class ExportEstimator:
    """Record and size estimates for an export.

    ``records_per_float`` matches the per-float profile-row density of the
    reference dataset; a real backend would report the actual row count.
    """

    def __init__(self, records_per_float: int = DEFAULT_RECORDS_PER_FLOAT,
                 bytes_per_record_factor: float = DEFAULT_BYTES_PER_RECORD_FACTOR,
                 filename_prefix: str = DEFAULT_FILENAME_PREFIX):
        self.records_per_float = records_per_float
        self.bytes_per_record_factor = bytes_per_record_factor
        self.filename_prefix = filename_prefix

    @classmethod
    def from_config(cls) -> "ExportEstimator":
        return cls(
            records_per_float=int(config.get('export.records_per_float', DEFAULT_RECORDS_PER_FLOAT)),
            bytes_per_record_factor=float(config.get('export.bytes_per_record_factor',
                                                     DEFAULT_BYTES_PER_RECORD_FACTOR)),
            filename_prefix=config.get('export.filename_prefix', DEFAULT_FILENAME_PREFIX),
        )

    def estimate_records(self, export_config: ExportConfig) -> int:
        return len(export_config.floats) * self.records_per_float

    def estimate_size_kb(self, export_config: ExportConfig) -> int:
        # Halves round up
        return math.floor(self.estimate_records(export_config) * self.bytes_per_record_factor + 0.5)

    def filename_for(self, export_format: ExportFormat, requested_on: date) -> str:
        return f"{self.filename_prefix}_{requested_on.isoformat()}.{export_format.extension}"

    def build_export_intent(self, export_config: ExportConfig, requested_on: Optional[date] = None) -> ExportIntent:
        errors = validation_errors(export_config)
        if errors:
            raise ExportValidationError(errors)

        requested_on = requested_on or datetime.now(timezone.utc).date()
        return ExportIntent(
            filename=self.filename_for(export_config.format, requested_on),
            format=export_config.format,
            floats=tuple(sorted(export_config.floats)),
            parameters=tuple(sorted(export_config.parameters)),
            date_range=export_config.date_range,
            include_metadata=export_config.include_metadata,
        )


# Module-level shortcuts using the configured constants

def estimate_records(export_config: ExportConfig) -> int:
    return ExportEstimator.from_config().estimate_records(export_config)


def estimate_size_kb(export_config: ExportConfig) -> int:
    return ExportEstimator.from_config().estimate_size_kb(export_config)


def build_export_intent(export_config: ExportConfig, requested_on: Optional[date] = None) -> ExportIntent:
    return ExportEstimator.from_config().build_export_intent(export_config, requested_on)


def preview_rows(export_config: ExportConfig, catalog: Catalog, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """First profile rows the export would contain, restricted to the chosen parameters"""
    if limit is None:
        limit = int(config.get('export.preview_rows', 5))

    parameters = sorted(export_config.parameters)
    records = []
    for record in catalog:
        if record.id not in export_config.floats:
            continue
        if not export_config.date_range.contains(record.last_update):
            continue
        for point in catalog.get_profile(record.id).points:
            row = {'float_id': record.id, 'date': record.last_update, 'depth': point.depth}
            for parameter in parameters:
                row[parameter] = point.parameters.get(parameter)
            records.append(row)

    if not records:
        return []

    frame = pd.DataFrame(records, columns=['float_id', 'date', 'depth'] + parameters)
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.head(limit).to_dict(orient='records')


class ExportDispatcher:
    """Receives export intents; subclasses hand them to a real exporter"""

    def dispatch(self, intent: ExportIntent):
        raise NotImplementedError


class LoggingExportDispatcher(ExportDispatcher):
    """Records intents and logs them instead of producing files"""

    def __init__(self):
        self.dispatched: List[ExportIntent] = []

    def dispatch(self, intent: ExportIntent):
        self.dispatched.append(intent)
        logger.info(f"Export started: {intent.filename} {intent.to_json()}")


def request_export(export_config: ExportConfig, dispatcher: ExportDispatcher,
                   estimator: Optional[ExportEstimator] = None,
                   requested_on: Optional[date] = None) -> Optional[ExportIntent]:
    """Dispatch an intent when the config validates; a disabled action does nothing"""
    if not validate(export_config):
        logger.info(f"Export not started: {', '.join(validation_errors(export_config))}")
        return None
    estimator = estimator or ExportEstimator.from_config()
    intent = estimator.build_export_intent(export_config, requested_on)
    dispatcher.dispatch(intent)
    return intent

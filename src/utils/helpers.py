# src/utils/helpers.py
import numpy as np
import json
import enum
from datetime import date, datetime
from typing import Any, Optional, Union
from pathlib import Path


class ArgoHelpers:
    """Helper functions for ARGO catalog values"""

    @staticmethod
    def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
        """Parse an ISO date string (or date/datetime) into a date"""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
        except ValueError:
            return None

    @staticmethod
    def format_coordinates(lat: float, lon: float) -> str:
        """Format a position the way float lists show it"""
        lat_hemi = "N" if lat >= 0 else "S"
        lon_hemi = "E" if lon >= 0 else "W"
        return f"{abs(lat):.1f}°{lat_hemi}, {abs(lon):.1f}°{lon_hemi}"


class FileHandler:
    """Serialization utilities"""

    @staticmethod
    def safe_json_serialize(data: Any, **kwargs) -> str:
        """Safely serialize data to JSON handling numpy, date and enum types"""
        def default_serializer(obj):
            if isinstance(obj, np.integer):
                return int(obj)
            elif isinstance(obj, np.floating):
                return float(obj)
            elif isinstance(obj, np.ndarray):
                return obj.tolist()
            elif isinstance(obj, (datetime, date)):
                return obj.isoformat()
            elif isinstance(obj, enum.Enum):
                return obj.value
            elif isinstance(obj, (set, frozenset)):
                return sorted(obj)
            elif isinstance(obj, Path):
                return str(obj)
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(data, default=default_serializer, **kwargs)

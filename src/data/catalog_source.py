# src/data/catalog_source.py
"""Catalog sources: a YAML fixture in memory, or the catalog tables in a database."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from data.models import Catalog, FloatRecord, FloatStatus, ProfilePoint, ProfileSeries
from utils.errors import CatalogError
from utils.helpers import ArgoHelpers

logger = logging.getLogger(__name__)

REFERENCE_CATALOG_PATH = Path(__file__).parent / "reference_catalog.yaml"


def _parse_last_update(item: Dict[str, Any]):
    last_update = ArgoHelpers.parse_date(item['last_update'])
    if last_update is None:
        raise ValueError(f"float {item.get('id')} has an invalid last_update {item['last_update']!r}")
    return last_update


def catalog_from_dict(raw: Dict[str, Any]) -> Catalog:
    """Build a Catalog from the ``floats`` / ``profiles`` mapping layout"""
    try:
        floats = [
            FloatRecord(
                id=str(item['id']),
                lat=float(item['lat']),
                lon=float(item['lon']),
                status=FloatStatus(str(item.get('status', 'active')).lower()),
                region=str(item['region']),
                last_update=_parse_last_update(item),
            )
            for item in raw.get('floats') or []
        ]

        profiles = {}
        for float_id, rows in (raw.get('profiles') or {}).items():
            points = []
            for row in rows:
                values = {k: float(v) for k, v in row.items() if k != 'depth' and v is not None}
                points.append(ProfilePoint(depth=float(row['depth']), parameters=values))
            profiles[str(float_id)] = ProfileSeries(str(float_id), tuple(points))

        return Catalog(floats, profiles)
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Malformed catalog data: {e}") from e


def load_reference_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Load the reference catalog fixture (or another file in the same layout)"""
    path = Path(path) if path else REFERENCE_CATALOG_PATH
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e

    catalog = catalog_from_dict(raw)
    logger.info(f"Loaded catalog with {len(catalog)} floats from {path}")
    return catalog


class InMemoryCatalogSource:
    """Serves an already loaded catalog"""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def load_catalog(self) -> Catalog:
        return self.catalog


class DatabaseCatalogSource:
    """Reads and writes the catalog through the SQLAlchemy models"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def load_catalog(self) -> Catalog:
        from database.models import ArgoFloat, ArgoProfile

        with self.db_manager.get_session() as session:
            float_rows = session.query(ArgoFloat).order_by(ArgoFloat.id).all()
            profile_rows = session.query(ArgoProfile).order_by(ArgoProfile.float_id, ArgoProfile.depth).all()

            floats = [
                FloatRecord(
                    id=row.float_id,
                    lat=row.last_latitude,
                    lon=row.last_longitude,
                    status=FloatStatus(row.status),
                    region=row.region,
                    last_update=row.last_update,
                )
                for row in float_rows
            ]

            points: Dict[str, list] = {}
            for row in profile_rows:
                points.setdefault(row.float_id, []).append(
                    ProfilePoint(depth=row.depth, parameters=dict(row.parameters or {}))
                )

        profiles = {fid: ProfileSeries(fid, tuple(pts)) for fid, pts in points.items()}
        logger.info(f"Loaded catalog with {len(floats)} floats from database")
        return Catalog(floats, profiles)

    def store_catalog(self, catalog: Catalog) -> int:
        """Insert every float and profile level; returns the number of profile rows written"""
        from database.models import ArgoFloat, ArgoProfile

        written = 0
        with self.db_manager.get_session() as session:
            for record in catalog:
                session.add(ArgoFloat(
                    float_id=record.id,
                    region=record.region,
                    status=record.status.value,
                    last_latitude=record.lat,
                    last_longitude=record.lon,
                    last_update=record.last_update,
                ))
            # Profiles reference floats by float_id
            session.flush()
            for record in catalog:
                for point in catalog.get_profile(record.id).points:
                    session.add(ArgoProfile(
                        float_id=record.id,
                        depth=point.depth,
                        parameters=dict(point.parameters),
                    ))
                    written += 1

        logger.info(f"Stored {len(catalog)} floats and {written} profile levels")
        return written

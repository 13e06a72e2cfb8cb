# tests/test_database.py

import pytest
import tempfile
from pathlib import Path
import sys
from datetime import date

import sqlalchemy as sa

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from database.database_manager import db_manager
from database.models import ArgoFloat, ArgoProfile
from data.catalog_source import DatabaseCatalogSource, load_reference_catalog
from explorer.comparison import compose
from explorer.filters import FilterCriteria, apply_filters


class TestDatabaseManager:
    """Test cases for database manager"""

    @pytest.fixture(autouse=True)
    def setup_db(self):
        """Setup temporary database for testing"""
        self.temp_db = tempfile.NamedTemporaryFile(suffix='.db', delete=False)
        self.db_url = f"sqlite:///{self.temp_db.name}"

        assert db_manager.initialize_database(self.db_url, echo=False)
        db_manager.create_tables()

        yield

        # Cleanup
        db_manager.close_connections()
        self.temp_db.close()
        Path(self.temp_db.name).unlink()

    def test_database_initialization(self):
        """Test database initialization"""
        assert db_manager.engine is not None
        assert db_manager.SessionLocal is not None

        with db_manager.get_session() as session:
            assert session.execute(sa.text("SELECT 1")).scalar() == 1

    def test_table_creation(self):
        """Test that tables are created correctly"""
        table_names = sa.inspect(db_manager.engine).get_table_names()
        for table in ['argo_floats', 'argo_profiles']:
            assert table in table_names

    def test_argo_float_operations(self):
        """Test ArgoFloat model operations"""
        with db_manager.get_session() as session:
            session.add(ArgoFloat(
                float_id="test_float_001",
                region="Arabian Sea",
                status="active",
                last_latitude=15.5,
                last_longitude=65.3,
                last_update=date(2024, 1, 12),
            ))

        with db_manager.get_session() as session:
            stored = session.query(ArgoFloat).filter_by(float_id="test_float_001").one()
            assert stored.region == "Arabian Sea"
            assert stored.last_update == date(2024, 1, 12)
            assert stored.date_updated is not None

    def test_profile_parameters_json(self):
        """Test that profile parameter maps survive storage"""
        with db_manager.get_session() as session:
            session.add(ArgoFloat(float_id="f1", region="Test", status="active",
                                  last_latitude=0.0, last_longitude=0.0, last_update=date(2024, 1, 1)))
            session.flush()
            session.add(ArgoProfile(float_id="f1", depth=10.0, parameters={"temperature": 12.5}))

        with db_manager.get_session() as session:
            profile = session.query(ArgoProfile).one()
            assert profile.parameters == {"temperature": 12.5}

    def test_failed_session_rolls_back(self):
        """Errors inside a session discard its changes"""
        with pytest.raises(RuntimeError):
            with db_manager.get_session() as session:
                session.add(ArgoFloat(float_id="f2", region="Test", status="active",
                                      last_latitude=0.0, last_longitude=0.0, last_update=date(2024, 1, 1)))
                session.flush()
                raise RuntimeError("abort")

        assert db_manager.get_database_stats()['argo_floats_count'] == 0

    def test_database_stats(self):
        """Test database statistics"""
        stats = db_manager.get_database_stats()
        assert stats['argo_floats_count'] == 0
        assert stats['argo_profiles_count'] == 0


class TestDatabaseCatalogSource:
    """Test cases for storing and loading a catalog through the database"""

    @pytest.fixture(autouse=True)
    def setup_db(self):
        assert db_manager.initialize_database("sqlite://")
        db_manager.create_tables()
        self.reference = load_reference_catalog()
        self.source = DatabaseCatalogSource(db_manager)
        yield
        db_manager.close_connections()

    def test_store_catalog(self):
        written = self.source.store_catalog(self.reference)
        expected = sum(len(self.reference.get_profile(f.id).points) for f in self.reference)
        assert written == expected

        stats = db_manager.get_database_stats()
        assert stats['argo_floats_count'] == 5
        assert stats['argo_profiles_count'] == expected
        assert str(stats['last_update']).startswith("2024-01-15")

    def test_round_trip_preserves_catalog(self):
        self.source.store_catalog(self.reference)
        loaded = self.source.load_catalog()

        assert loaded.floats == self.reference.floats
        for record in self.reference:
            assert loaded.get_profile(record.id) == self.reference.get_profile(record.id)

    def test_loaded_catalog_drives_explorer(self):
        self.source.store_catalog(self.reference)
        loaded = self.source.load_catalog()

        active = apply_filters(loaded, FilterCriteria(status="active"))
        assert len(active) == 4

        ids = ["5904471", "5906542"]
        assert compose(ids, "temperature", loaded) == compose(ids, "temperature", self.reference)

    def test_duplicate_store_rejected(self):
        self.source.store_catalog(self.reference)
        with pytest.raises(sa.exc.IntegrityError):
            self.source.store_catalog(self.reference)


class TestInitializeDatabaseScript:
    """Test cases for the catalog loading script"""

    @pytest.fixture(autouse=True)
    def setup_script(self, tmp_path):
        sys.path.insert(0, str(Path(__file__).parent.parent / 'scripts'))
        self.db_url = f"sqlite:///{tmp_path / 'catalog.db'}"
        yield
        db_manager.close_connections()

    def test_loads_reference_catalog_once(self):
        from initialize_database import initialize_database

        assert initialize_database(self.db_url)
        # Second run leaves the existing catalog alone
        assert initialize_database(self.db_url)

        assert db_manager.initialize_database(self.db_url)
        assert db_manager.get_database_stats()['argo_floats_count'] == 5

    def test_force_reloads(self):
        from initialize_database import initialize_database

        assert initialize_database(self.db_url)
        assert initialize_database(self.db_url, force_recreate=True)

        assert db_manager.initialize_database(self.db_url)
        assert db_manager.get_database_stats()['argo_floats_count'] == 5

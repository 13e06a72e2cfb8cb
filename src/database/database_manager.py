# src/database/database_manager.py

import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
import logging
from typing import Optional, Dict, Any
import threading

from .models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super(DatabaseManager, cls).__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if not self._initialized:
            self.engine = None
            self.SessionLocal = None
            self._initialized = True

    def initialize_database(self, database_url: Optional[str] = None, echo: bool = False) -> bool:
        """Initialize database connection"""
        try:
            if database_url is None:
                database_url = "sqlite:///floatchat.db"

            engine_kwargs: Dict[str, Any] = {'echo': echo, 'pool_pre_ping': True}
            if database_url.startswith('sqlite'):
                engine_kwargs['connect_args'] = {'check_same_thread': False}
                # In-memory databases must share one connection
                if ':memory:' in database_url or database_url == 'sqlite://':
                    engine_kwargs['poolclass'] = StaticPool

            self.engine = create_engine(database_url, **engine_kwargs)

            self.SessionLocal = scoped_session(
                sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    bind=self.engine,
                    expire_on_commit=False
                )
            )

            # Test connection
            with self.engine.connect() as conn:
                conn.execute(sa.text("SELECT 1"))

            logger.info(f"Database initialized successfully: {database_url}")
            return True

        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            return False

    @contextmanager
    def get_session(self):
        """Get database session with error handling"""
        if self.SessionLocal is None:
            raise RuntimeError("Database not initialized. Call initialize_database() first.")

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create all tables with proper error handling"""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Error creating tables: {e}")
            raise

    def drop_tables(self):
        """Drop all catalog tables"""
        Base.metadata.drop_all(bind=self.engine)
        logger.info("Database tables dropped")

    def get_database_stats(self) -> Dict[str, Any]:
        """Get row counts for the catalog tables"""
        try:
            with self.engine.connect() as conn:
                stats = {}
                for table in ['argo_floats', 'argo_profiles']:
                    result = conn.execute(sa.text(f"SELECT COUNT(*) FROM {table}"))
                    stats[f'{table}_count'] = result.scalar()

                result = conn.execute(sa.text("SELECT MAX(last_update) FROM argo_floats"))
                stats['last_update'] = result.scalar()
                return stats

        except Exception as e:
            logger.error(f"Error getting database stats: {e}")
            return {}

    def close_connections(self):
        """Close all database connections"""
        try:
            if self.SessionLocal:
                self.SessionLocal.remove()
            if self.engine:
                self.engine.dispose()
            logger.info("Database connections closed")
        except Exception as e:
            logger.error(f"Error closing database connections: {e}")


# Global database manager instance
db_manager = DatabaseManager()

#!/usr/bin/env python3
# scripts/initialize_database.py

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent / 'src'))

from database.database_manager import db_manager
from data.catalog_source import DatabaseCatalogSource, load_reference_catalog
from config import config
import logging
import argparse


def setup_logging():
    """Setup logging for the script"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def initialize_database(database_url: str, catalog_path: str = None, force_recreate: bool = False) -> bool:
    """Create the catalog tables and load a catalog file into them"""
    logger = logging.getLogger(__name__)

    try:
        logger.info("Starting database initialization...")

        if not db_manager.initialize_database(database_url):
            logger.error("Database connection initialization failed")
            return False

        if force_recreate:
            db_manager.drop_tables()
        db_manager.create_tables()

        stats = db_manager.get_database_stats()
        if stats.get('argo_floats_count'):
            logger.info(f"Catalog already loaded ({stats['argo_floats_count']} floats); use --force to reload")
            return True

        catalog = load_reference_catalog(catalog_path)
        DatabaseCatalogSource(db_manager).store_catalog(catalog)

        logger.info(f"Database statistics: {db_manager.get_database_stats()}")
        logger.info("Database initialization completed successfully")
        return True

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        return False
    finally:
        db_manager.close_connections()


def main(argv=None):
    """Main function for database initialization script"""
    parser = argparse.ArgumentParser(description='Load an ARGO float catalog into the database')
    parser.add_argument('--force', action='store_true',
                        help='Drop and recreate the catalog tables')
    parser.add_argument('--catalog', help='Catalog YAML file (defaults to the reference catalog)')
    parser.add_argument('--database-url', help='Database URL (defaults to database.url setting)')
    parser.add_argument('--config', help='Path to configuration file')

    args = parser.parse_args(argv)

    setup_logging()

    if args.config:
        config.load_config(args.config)

    database_url = args.database_url or config.get_database_url()
    return 0 if initialize_database(database_url, args.catalog, args.force) else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Standalone database initialization script
Creates the schema and records the initial migration in schema_migrations.
Safe to run repeatedly.
"""

import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("newsplatform.init_db")


def init_schema() -> bool:
    """Create tables and record migration history"""
    logger.info("=" * 60)
    logger.info("Initializing database...")
    logger.info("=" * 60)

    try:
        from domain.models.database import init_database, engine
        from sqlalchemy import inspect

        init_database()

        tables = inspect(engine).get_table_names()
        logger.info(f"✓ {len(tables)} tables present: {', '.join(sorted(tables))}")
        return True
    except Exception as e:
        logger.exception(f"✗ Failed to initialize database: {e}")
        return False


def main() -> int:
    return 0 if init_schema() else 1


if __name__ == "__main__":
    sys.exit(main())

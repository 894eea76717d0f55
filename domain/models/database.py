"""
Database configuration and session management.
"""

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings

logger = logging.getLogger("newsplatform.database")

# Create SQLAlchemy Base
Base = declarative_base()

INITIAL_MIGRATION = "001_create_initial_tables"


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # Single shared connection so an in-memory database survives across sessions
        return create_engine(
            url,
            echo=settings.db_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url, echo=settings.db_echo, pool_size=settings.db_pool_size, pool_pre_ping=True
    )


# Create engine
engine = _build_engine(settings.database_url)

if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create session factory
SessionLocal = sessionmaker(bind=engine, future=True)


def init_database():
    """Create the schema and record the initial migration in the history table"""
    # Import models so every table is registered on Base.metadata
    from domain.models.migration import SchemaMigration

    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn)
        logger.info("Database tables created successfully")

    with SessionLocal() as db:
        already_ran = (
            db.query(SchemaMigration)
            .filter(SchemaMigration.name == INITIAL_MIGRATION)
            .first()
        )
        if already_ran:
            logger.info(f"migration_skipped name={INITIAL_MIGRATION}")
            return
        db.add(SchemaMigration(name=INITIAL_MIGRATION))
        db.commit()
        logger.info(f"migration_recorded name={INITIAL_MIGRATION}")


def get_db_session():
    """Get database session (for FastAPI dependency injection)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""
Schema migration history model.
"""

from sqlalchemy import Column, Integer, String, TIMESTAMP
from sqlalchemy.sql import func

from domain.models.database import Base


class SchemaMigration(Base):
    """Append-only record of schema migrations that have been applied"""

    __tablename__ = "schema_migrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    executed_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

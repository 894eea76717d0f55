"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.user import AppUser
from domain.models.preferences import UserPreferences, ContentFilters
from domain.models.migration import SchemaMigration

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # User models
    "AppUser",
    # Preference models
    "UserPreferences",
    "ContentFilters",
    # Migration history
    "SchemaMigration",
]

"""
API dependencies for dependency injection
"""

from functools import lru_cache
from typing import Generator
from sqlalchemy.orm import Session
from domain.models import get_db_session
from services import UserPreferencesService, build_session_store


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


@lru_cache(maxsize=1)
def get_preferences_service() -> UserPreferencesService:
    """
    Process-wide preference service.

    Cached so every request sees the same session overlay store. Tests
    swap it through ``app.dependency_overrides``.
    """
    return UserPreferencesService(build_session_store())

"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.preferences_repository import (
    PreferencesRepository,
    PREFERENCE_COLUMNS,
)

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PreferencesRepository",
    "PREFERENCE_COLUMNS",
]

"""Services package - Business logic layer"""

from services.session_store import (
    SessionPreferenceStore,
    InMemorySessionPreferenceStore,
    RedisSessionPreferenceStore,
    build_session_store,
)
from services.preferences_service import UserPreferencesService
from services.preference_migration_service import PreferenceMigrationService

__all__ = [
    "SessionPreferenceStore",
    "InMemorySessionPreferenceStore",
    "RedisSessionPreferenceStore",
    "build_session_store",
    "UserPreferencesService",
    "PreferenceMigrationService",
]

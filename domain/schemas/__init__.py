"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.result_schemas import (
    FieldError,
    ServiceSuccess,
    ServiceFailure,
    ServiceResult,
)
from domain.schemas.preference_schemas import (
    PreferencesUpdate,
    ContentFiltersUpdate,
    PreferencesRequest,
    ContentFiltersRequest,
    CreatePreferencesRequest,
    SessionPreferencesRequest,
    PerspectiveRequest,
    ToneRequest,
    LanguageRequest,
    AIModelRequest,
)
from domain.schemas.migration_schemas import (
    DEFAULT_BATCH_SIZE,
    MigrationOptions,
    MigrationResult,
    MigrationReport,
)

__all__ = [
    # Result envelope
    "FieldError",
    "ServiceSuccess",
    "ServiceFailure",
    "ServiceResult",
    # Preference schemas
    "PreferencesUpdate",
    "ContentFiltersUpdate",
    "PreferencesRequest",
    "ContentFiltersRequest",
    "CreatePreferencesRequest",
    "SessionPreferencesRequest",
    "PerspectiveRequest",
    "ToneRequest",
    "LanguageRequest",
    "AIModelRequest",
    # Migration schemas
    "DEFAULT_BATCH_SIZE",
    "MigrationOptions",
    "MigrationResult",
    "MigrationReport",
]

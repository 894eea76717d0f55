"""
Domain mappers package.
Handles transformation between ORM models and DTOs (Data Transfer Objects).
"""

from domain.mappers.preference_mapper import (
    PreferenceMapper,
    PREFERENCE_FIELDS,
    CONTENT_FILTER_FIELDS,
    CONTENT_FILTERS_KEY,
    to_internal,
    to_external,
    normalize_keys,
    empty_content_filters,
    plain_value,
)

__all__ = [
    "PreferenceMapper",
    "PREFERENCE_FIELDS",
    "CONTENT_FILTER_FIELDS",
    "CONTENT_FILTERS_KEY",
    "to_internal",
    "to_external",
    "normalize_keys",
    "empty_content_filters",
    "plain_value",
]

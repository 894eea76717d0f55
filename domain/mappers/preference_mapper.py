"""
Preference domain mappers.
Translates between store column names (``ai_model``) and the external
field names returned to clients (``aiModel``).
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from domain.models import ContentFilters, UserPreferences

# external name -> internal column
PREFERENCE_FIELDS: Dict[str, str] = {
    "perspective": "perspective",
    "tone": "tone",
    "language": "language",
    "aiModel": "ai_model",
    "factCheckingEnabled": "fact_checking_enabled",
    "propagandaDetectionEnabled": "propaganda_detection_enabled",
    "propagandaSensitivity": "propaganda_sensitivity",
}

CONTENT_FILTER_FIELDS: Dict[str, str] = {
    "includedTopics": "included_topics",
    "excludedTopics": "excluded_topics",
    "includedPeople": "included_people",
    "excludedPeople": "excluded_people",
    "includedOrganizations": "included_organizations",
    "excludedOrganizations": "excluded_organizations",
}

CONTENT_FILTERS_KEY = "contentFilters"


def _reverse(field_map: Mapping[str, str]) -> Dict[str, str]:
    return {internal: external for external, internal in field_map.items()}


def plain_value(value: Any) -> Any:
    """Enum members to their values, sequences to lists; anything else as is"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


def to_internal(data: Mapping[str, Any], field_map: Mapping[str, str]) -> Dict[str, Any]:
    """External names -> internal names. Unknown keys are kept unchanged."""
    return {field_map.get(key, key): value for key, value in data.items()}


def to_external(data: Mapping[str, Any], field_map: Mapping[str, str]) -> Dict[str, Any]:
    """Internal names -> external names. Unknown keys are kept unchanged."""
    reverse = _reverse(field_map)
    return {reverse.get(key, key): value for key, value in data.items()}


def normalize_keys(data: Mapping[str, Any], field_map: Mapping[str, str]) -> Dict[str, Any]:
    """Accept either naming style and return external names."""
    reverse = _reverse(field_map)
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        normalized[reverse.get(key, key)] = value
    return normalized


def empty_content_filters() -> Dict[str, list]:
    return {external: [] for external in CONTENT_FILTER_FIELDS}


class PreferenceMapper:
    """Mapper for preference ORM rows -> external response dicts."""

    @staticmethod
    def preferences_to_dict(preferences: UserPreferences) -> Dict[str, Any]:
        return {
            external: plain_value(getattr(preferences, internal))
            for external, internal in PREFERENCE_FIELDS.items()
        }

    @staticmethod
    def content_filters_to_dict(filters: Optional[ContentFilters]) -> Dict[str, list]:
        if filters is None:
            return empty_content_filters()
        return {
            external: list(getattr(filters, internal) or [])
            for external, internal in CONTENT_FILTER_FIELDS.items()
        }

    @staticmethod
    def to_response(
        preferences: Optional[UserPreferences], filters: Optional[ContentFilters]
    ) -> Optional[Dict[str, Any]]:
        """
        Convert a preference row and its filter row to the external shape.

        Returns None when there is no preference row. A missing filter row
        is reported as six empty lists.
        """
        if preferences is None:
            return None
        data = PreferenceMapper.preferences_to_dict(preferences)
        data[CONTENT_FILTERS_KEY] = PreferenceMapper.content_filters_to_dict(filters)
        return data

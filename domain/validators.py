"""
Validation rules for preference and content filter input.

Every function here is pure: it inspects a candidate value or a partial
update mapping and reports problems. Nothing raises for bad input; an
empty error list means the input is valid. Mappings are expected to use
external field names (see ``domain.mappers.normalize_keys``).
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Type

from domain.enums import (
    AIModel,
    Language,
    PoliticalPerspective,
    PropagandaSensitivity,
    WritingTone,
)
from domain.mappers.preference_mapper import CONTENT_FILTER_FIELDS, PREFERENCE_FIELDS
from domain.schemas.result_schemas import FieldError


def _is_member(enum_cls: Type[Enum], value: Any) -> bool:
    if isinstance(value, enum_cls):
        return True
    # bool is never a valid enum value even though it is not a str either
    if not isinstance(value, str):
        return False
    return value in {member.value for member in enum_cls}


def is_valid_perspective(value: Any) -> bool:
    return _is_member(PoliticalPerspective, value)


def is_valid_tone(value: Any) -> bool:
    return _is_member(WritingTone, value)


def is_valid_language(value: Any) -> bool:
    return _is_member(Language, value)


def is_valid_ai_model(value: Any) -> bool:
    return _is_member(AIModel, value)


def is_valid_propaganda_sensitivity(value: Any) -> bool:
    return _is_member(PropagandaSensitivity, value)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


_PREFERENCE_RULES: Dict[str, tuple[Callable[[Any], bool], str]] = {
    "perspective": (is_valid_perspective, "Invalid political perspective"),
    "tone": (is_valid_tone, "Invalid writing tone"),
    "language": (is_valid_language, "Invalid language"),
    "aiModel": (is_valid_ai_model, "Invalid AI model"),
    "propagandaSensitivity": (
        is_valid_propaganda_sensitivity,
        "Invalid propaganda sensitivity level",
    ),
    "factCheckingEnabled": (is_boolean, "factCheckingEnabled must be a boolean"),
    "propagandaDetectionEnabled": (
        is_boolean,
        "propagandaDetectionEnabled must be a boolean",
    ),
}


def validate_user_preferences(updates: Mapping[str, Any]) -> List[FieldError]:
    """Check a partial preference update. Keys set to None are ignored."""
    errors: List[FieldError] = []
    for field, value in updates.items():
        if value is None:
            continue
        if field not in PREFERENCE_FIELDS:
            errors.append(
                FieldError(field=field, message="Unknown preference field", value=value)
            )
            continue
        check, message = _PREFERENCE_RULES[field]
        if not check(value):
            errors.append(FieldError(field=field, message=message, value=value))
    return errors


def validate_content_filters(updates: Mapping[str, Any]) -> List[FieldError]:
    """Check a partial content filter update: each field a list of strings."""
    errors: List[FieldError] = []
    for field, value in updates.items():
        if value is None:
            continue
        if field not in CONTENT_FILTER_FIELDS:
            errors.append(
                FieldError(
                    field=field, message="Unknown content filter field", value=value
                )
            )
        elif not isinstance(value, list):
            errors.append(
                FieldError(field=field, message=f"{field} must be an array", value=value)
            )
        elif not is_string_list(value):
            errors.append(
                FieldError(
                    field=field,
                    message=f"{field} must be an array of strings",
                    value=value,
                )
            )
    return errors

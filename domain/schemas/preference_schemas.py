from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List

from domain.enums import (
    AIModel,
    Language,
    PoliticalPerspective,
    PropagandaSensitivity,
    WritingTone,
)


# ---------------------------------------------------------------------------
# Store-facing partial updates (internal column names)
# ---------------------------------------------------------------------------


class PreferencesUpdate(BaseModel):
    """Partial preference update; only explicitly set fields are written."""

    perspective: Optional[PoliticalPerspective] = None
    tone: Optional[WritingTone] = None
    language: Optional[Language] = None
    ai_model: Optional[AIModel] = None
    fact_checking_enabled: Optional[bool] = None
    propaganda_detection_enabled: Optional[bool] = None
    propaganda_sensitivity: Optional[PropagandaSensitivity] = None

    model_config = ConfigDict(extra="forbid")

    def defined_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ContentFiltersUpdate(BaseModel):
    """Partial content filter update; only explicitly set lists are written."""

    included_topics: Optional[List[str]] = None
    excluded_topics: Optional[List[str]] = None
    included_people: Optional[List[str]] = None
    excluded_people: Optional[List[str]] = None
    included_organizations: Optional[List[str]] = None
    excluded_organizations: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")

    def defined_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


# ---------------------------------------------------------------------------
# HTTP request bodies (external camelCase names)
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    def to_external(self) -> dict:
        """Only the fields the client actually sent, keyed by external name"""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=True, exclude_none=True
        )


class ContentFiltersRequest(_CamelModel):
    included_topics: Optional[List[str]] = None
    excluded_topics: Optional[List[str]] = None
    included_people: Optional[List[str]] = None
    excluded_people: Optional[List[str]] = None
    included_organizations: Optional[List[str]] = None
    excluded_organizations: Optional[List[str]] = None


class PreferencesRequest(_CamelModel):
    perspective: Optional[PoliticalPerspective] = None
    tone: Optional[WritingTone] = None
    language: Optional[Language] = None
    ai_model: Optional[AIModel] = None
    fact_checking_enabled: Optional[bool] = None
    propaganda_detection_enabled: Optional[bool] = None
    propaganda_sensitivity: Optional[PropagandaSensitivity] = None


class CreatePreferencesRequest(PreferencesRequest):
    content_filters: Optional[ContentFiltersRequest] = None

    def preference_fields(self) -> dict:
        data = self.to_external()
        data.pop("contentFilters", None)
        return data

    def filter_fields(self) -> Optional[dict]:
        if self.content_filters is None:
            return None
        return self.content_filters.to_external()


class SessionPreferencesRequest(CreatePreferencesRequest):
    """Same shape as a create body; stored as a transient overlay."""

    def to_overlay(self) -> dict:
        data = self.preference_fields()
        filters = self.filter_fields()
        if filters:
            data["contentFilters"] = filters
        return data


class PerspectiveRequest(BaseModel):
    perspective: PoliticalPerspective


class ToneRequest(BaseModel):
    tone: WritingTone


class LanguageRequest(BaseModel):
    language: Language


class AIModelRequest(_CamelModel):
    ai_model: AIModel = Field(...)

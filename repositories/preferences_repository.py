"""
Preferences Repository - Data access layer for user preferences and content filters
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import UserPreferences, ContentFilters
from domain.schemas.preference_schemas import PreferencesUpdate, ContentFiltersUpdate
from app.exceptions import ConflictError, ServiceValidationError

logger = logging.getLogger("newsplatform.repository.preferences")

PREFERENCE_COLUMNS = frozenset(
    {
        "perspective",
        "tone",
        "language",
        "ai_model",
        "fact_checking_enabled",
        "propaganda_detection_enabled",
        "propaganda_sensitivity",
    }
)


class PreferencesRepository(BaseRepository[UserPreferences]):
    """Repository for the preference + content filter pair of each user"""

    def __init__(self, db: Session):
        super().__init__(db, UserPreferences)

    def get_by_id(self, user_id: str) -> Optional[UserPreferences]:
        return self.get_by_user_id(user_id)

    def get_by_user_id(self, user_id: str) -> Optional[UserPreferences]:
        """Get the preference row for a user, or None"""
        return (
            self.db.query(UserPreferences)
            .filter(UserPreferences.user_id == user_id)
            .first()
        )

    def get_content_filters(self, user_id: str) -> Optional[ContentFilters]:
        """Get the content filter row for a user, or None"""
        return (
            self.db.query(ContentFilters)
            .filter(ContentFilters.user_id == user_id)
            .first()
        )

    def get_complete(
        self, user_id: str
    ) -> Tuple[Optional[UserPreferences], Optional[ContentFilters]]:
        """
        Read preferences and filters as one unit.

        A single joined SELECT so both halves come from the same snapshot.
        """
        preferences = (
            self.db.query(UserPreferences)
            .options(joinedload(UserPreferences.content_filters))
            .filter(UserPreferences.user_id == user_id)
            .first()
        )
        if preferences is None:
            return None, None
        return preferences, preferences.content_filters

    def create_complete(
        self,
        user_id: str,
        preferences: Optional[PreferencesUpdate] = None,
        content_filters: Optional[ContentFiltersUpdate] = None,
    ) -> Tuple[UserPreferences, ContentFilters]:
        """
        Create the preference row and its filter row in one transaction.

        Fields not supplied take the column defaults. If the per-user unique
        constraint rejects the insert, the transaction is rolled back and
        ConflictError is raised. Any other failure is rolled back and
        re-raised, so the session stays usable for the next call.
        """
        pref_fields = preferences.defined_fields() if preferences else {}
        filter_fields = content_filters.defined_fields() if content_filters else {}

        pref_row = UserPreferences(user_id=user_id, **pref_fields)
        filter_row = ContentFilters(user_id=user_id, **filter_fields)
        pref_row.content_filters = filter_row

        try:
            self.db.add(pref_row)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.get_by_user_id(user_id) is not None:
                logger.warning(f"preferences_create_conflict user_id={user_id}")
                raise ConflictError(
                    "User preferences already exist", code="preferences_exist"
                )
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(pref_row)
        self.db.refresh(filter_row)
        return pref_row, filter_row

    def update_preferences(
        self, user_id: str, updates: PreferencesUpdate
    ) -> Optional[UserPreferences]:
        """Apply the supplied fields only; no fields degenerates to a read"""
        row = self.get_by_user_id(user_id)
        if row is None:
            return None
        fields = updates.defined_fields()
        if not fields:
            return row
        for key, value in fields.items():
            setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return row

    def update_content_filters(
        self, user_id: str, updates: ContentFiltersUpdate
    ) -> Optional[ContentFilters]:
        """Replace only the supplied lists; no fields degenerates to a read"""
        row = self.get_content_filters(user_id)
        if row is None:
            return None
        fields = updates.defined_fields()
        if not fields:
            return row
        for key, value in fields.items():
            setattr(row, key, list(value))
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete_by_user_id(self, user_id: str) -> bool:
        """Delete the preference row; filters go with it. True if a row was removed"""
        row = self.get_by_user_id(user_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def exists(self, user_id: str) -> bool:
        return (
            self.db.query(UserPreferences.id)
            .filter(UserPreferences.user_id == user_id)
            .first()
            is not None
        )

    def get_users_by_preference(self, field: str, value: Any) -> List[UserPreferences]:
        """All preference rows whose ``field`` column equals ``value``"""
        if field not in PREFERENCE_COLUMNS:
            raise ServiceValidationError(f"Unknown preference column: {field}")
        column = getattr(UserPreferences, field)
        return (
            self.db.query(UserPreferences)
            .filter(column == value)
            .order_by(UserPreferences.user_id)
            .all()
        )

    def get_by_user_ids(self, user_ids: Iterable[str]) -> List[UserPreferences]:
        """Preference rows for an explicit list of users"""
        ids = list(user_ids)
        if not ids:
            return []
        return (
            self.db.query(UserPreferences)
            .filter(UserPreferences.user_id.in_(ids))
            .order_by(UserPreferences.user_id)
            .all()
        )

    def bulk_update_preferences(
        self, updates: Iterable[Tuple[str, Mapping[str, Any]]]
    ) -> List[UserPreferences]:
        """
        Apply a list of ``(user_id, fields)`` updates in one transaction.

        Users without a preference row are skipped. On any failure the whole
        call is rolled back and the error propagates.
        """
        updated: List[UserPreferences] = []
        try:
            for user_id, fields in updates:
                values = PreferencesUpdate(**fields).defined_fields()
                if not values:
                    continue
                row = self.get_by_user_id(user_id)
                if row is None:
                    continue
                for key, value in values.items():
                    setattr(row, key, value)
                updated.append(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return updated

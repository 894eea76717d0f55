from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple
from sqlalchemy.orm import Session
import logging

from domain.mappers.preference_mapper import (
    PreferenceMapper,
    PREFERENCE_FIELDS,
    CONTENT_FILTER_FIELDS,
    CONTENT_FILTERS_KEY,
    normalize_keys,
    plain_value,
    to_internal,
)
from domain.schemas.preference_schemas import PreferencesUpdate, ContentFiltersUpdate
from domain.schemas.result_schemas import (
    FieldError,
    ServiceFailure,
    ServiceResult,
    ServiceSuccess,
    failure,
)
from domain.validators import validate_user_preferences, validate_content_filters
from repositories import PreferencesRepository
from services.session_store import SessionPreferenceStore
from app.exceptions import ConflictError

logger = logging.getLogger("newsplatform.preferences")

SESSION_TIMESTAMP_KEY = "timestamp"


def _invalid_user_id(user_id: Any) -> Optional[ServiceFailure]:
    if not isinstance(user_id, str) or not user_id.strip():
        return failure("userId", "Valid user ID is required")
    return None


class UserPreferencesService:
    """
    Business logic for user preferences, content filters and session overlays.

    Every public operation returns a ``ServiceSuccess`` or ``ServiceFailure``;
    expected problems (bad input, missing rows, duplicates) never raise.
    Unexpected store errors are logged with their traceback and reported as
    a single opaque ``system`` error.
    """

    def __init__(self, session_store: SessionPreferenceStore):
        self.session_store = session_store

    # ------------------------------------------------------------------
    # Input preparation
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare_preferences(
        raw: Optional[Mapping[str, Any]],
    ) -> Tuple[List[FieldError], Optional[PreferencesUpdate]]:
        """Normalize, validate and wrap a partial preference mapping"""
        external = normalize_keys(raw or {}, PREFERENCE_FIELDS)
        errors = validate_user_preferences(external)
        if errors:
            return errors, None
        supplied = {k: plain_value(v) for k, v in external.items() if v is not None}
        return [], PreferencesUpdate(**to_internal(supplied, PREFERENCE_FIELDS))

    @staticmethod
    def _prepare_content_filters(
        raw: Optional[Mapping[str, Any]],
    ) -> Tuple[List[FieldError], Optional[ContentFiltersUpdate]]:
        """Normalize, validate and wrap a partial content filter mapping"""
        external = normalize_keys(raw or {}, CONTENT_FILTER_FIELDS)
        errors = validate_content_filters(external)
        if errors:
            return errors, None
        supplied = {k: v for k, v in external.items() if v is not None}
        return [], ContentFiltersUpdate(**to_internal(supplied, CONTENT_FILTER_FIELDS))

    @staticmethod
    def _system_failure(db: Session, event: str, user_id: Any, message: str):
        logger.exception(f"{event} user_id={user_id}")
        try:
            db.rollback()
        except Exception:
            logger.exception(f"rollback_failed user_id={user_id}")
        return failure("system", message)

    # ------------------------------------------------------------------
    # Persisted preferences
    # ------------------------------------------------------------------

    def get_preferences(self, db: Session, user_id: str) -> ServiceResult:
        """Read preferences and filters together; no record is not an error"""
        invalid = _invalid_user_id(user_id)
        if invalid:
            return invalid

        try:
            preferences, filters = PreferencesRepository(db).get_complete(user_id)
            data = PreferenceMapper.to_response(preferences, filters)
        except Exception:
            return self._system_failure(
                db, "preferences_fetch_failed", user_id,
                "Failed to retrieve user preferences",
            )

        if data is None:
            logger.info(f"preferences_not_found user_id={user_id}")
            return ServiceSuccess(data=None, message="No preferences found for user")

        logger.info(f"preferences_fetched user_id={user_id}")
        return ServiceSuccess(
            data=data, message="User preferences retrieved successfully"
        )

    def create_preferences(
        self,
        db: Session,
        user_id: str,
        preferences: Optional[Mapping[str, Any]] = None,
        content_filters: Optional[Mapping[str, Any]] = None,
    ) -> ServiceResult:
        """
        Create the preference + filter pair for a user.

        Fails with a ``userId`` error if the user already has preferences.
        Both inputs are validated and their errors aggregated before
        anything is written.
        """
        invalid = _invalid_user_id(user_id)
        if invalid:
            return invalid

        try:
            repo = PreferencesRepository(db)
            if repo.exists(user_id):
                logger.warning(f"preferences_already_exist user_id={user_id}")
                return failure("userId", "User preferences already exist")

            pref_errors, pref_update = self._prepare_preferences(preferences)
            filter_errors, filter_update = self._prepare_content_filters(
                content_filters
            )
            errors = pref_errors + filter_errors
            if errors:
                logger.info(
                    f"preferences_create_rejected user_id={user_id} errors={len(errors)}"
                )
                return ServiceFailure(errors=errors, message="Validation failed")

            try:
                created, filters = repo.create_complete(
                    user_id, pref_update, filter_update
                )
            except ConflictError:
                return failure("userId", "User preferences already exist")

            data = PreferenceMapper.to_response(created, filters)
        except Exception:
            return self._system_failure(
                db, "preferences_create_failed", user_id,
                "Failed to create user preferences",
            )

        logger.info(f"preferences_created user_id={user_id}")
        return ServiceSuccess(data=data, message="User preferences created successfully")

    def update_preferences(
        self, db: Session, user_id: str, updates: Optional[Mapping[str, Any]]
    ) -> ServiceResult:
        """Partial update; only the supplied fields change"""
        invalid = _invalid_user_id(user_id)
        if invalid:
            return invalid

        errors, update = self._prepare_preferences(updates)
        if errors:
            logger.info(
                f"preferences_update_rejected user_id={user_id} errors={len(errors)}"
            )
            return ServiceFailure(errors=errors, message="Validation failed")

        try:
            repo = PreferencesRepository(db)
            row = repo.update_preferences(user_id, update)
            if row is None:
                return failure("userId", "User preferences not found")
            data = PreferenceMapper.to_response(row, repo.get_content_filters(user_id))
        except Exception:
            return self._system_failure(
                db, "preferences_update_failed", user_id,
                "Failed to update user preferences",
            )

        logger.info(
            f"preferences_updated user_id={user_id} "
            f"fields={sorted(update.defined_fields())}"
        )
        return ServiceSuccess(data=data, message="User preferences updated successfully")

    def update_content_filters(
        self, db: Session, user_id: str, updates: Optional[Mapping[str, Any]]
    ) -> ServiceResult:
        """Partial update of the include/exclude lists"""
        invalid = _invalid_user_id(user_id)
        if invalid:
            return invalid

        errors, update = self._prepare_content_filters(updates)
        if errors:
            return ServiceFailure(errors=errors, message="Validation failed")

        try:
            repo = PreferencesRepository(db)
            filters = repo.update_content_filters(user_id, update)
            if filters is None:
                return failure("userId", "User content filters not found")
            data = PreferenceMapper.to_response(repo.get_by_user_id(user_id), filters)
        except Exception:
            return self._system_failure(
                db, "content_filters_update_failed", user_id,
                "Failed to update user content filters",
            )

        logger.info(
            f"content_filters_updated user_id={user_id} "
            f"fields={sorted(update.defined_fields())}"
        )
        return ServiceSuccess(
            data=data, message="User content filters updated successfully"
        )

    def update_perspective(self, db: Session, user_id: str, perspective) -> ServiceResult:
        return self.update_preferences(db, user_id, {"perspective": perspective})

    def update_tone(self, db: Session, user_id: str, tone) -> ServiceResult:
        return self.update_preferences(db, user_id, {"tone": tone})

    def update_language(self, db: Session, user_id: str, language) -> ServiceResult:
        return self.update_preferences(db, user_id, {"language": language})

    def update_ai_model(self, db: Session, user_id: str, ai_model) -> ServiceResult:
        return self.update_preferences(db, user_id, {"aiModel": ai_model})

    def delete_preferences(self, db: Session, user_id: str) -> ServiceResult:
        """Delete preferences (filters cascade). Deleting nothing is still a success"""
        invalid = _invalid_user_id(user_id)
        if invalid:
            return invalid

        try:
            deleted = PreferencesRepository(db).delete_by_user_id(user_id)
        except Exception:
            return self._system_failure(
                db, "preferences_delete_failed", user_id,
                "Failed to delete user preferences",
            )

        logger.info(f"preferences_deleted user_id={user_id} deleted={deleted}")
        return ServiceSuccess(
            data=deleted,
            message=(
                "User preferences deleted successfully"
                if deleted
                else "No preferences found to delete"
            ),
        )

    def get_or_create_preferences(self, db: Session, user_id: str) -> ServiceResult:
        """Return the stored record, creating one with defaults when absent"""
        try:
            existing = self.get_preferences(db, user_id)
            if not existing.success or existing.data is not None:
                return existing
            logger.info(f"preferences_default_create user_id={user_id}")
            return self.create_preferences(db, user_id)
        except Exception:
            return self._system_failure(
                db, "preferences_get_or_create_failed", user_id,
                "Failed to get or create user preferences",
            )

    # ------------------------------------------------------------------
    # Session overlays
    # ------------------------------------------------------------------

    def store_session_preferences(
        self, session_id: str, preferences: Mapping[str, Any]
    ) -> ServiceResult:
        """Keep a transient preference overlay for a session; never persisted"""
        if not isinstance(session_id, str) or not session_id.strip():
            return failure("sessionId", "Valid session ID is required")

        overlay: Dict[str, Any] = {}
        for key, value in normalize_keys(preferences or {}, PREFERENCE_FIELDS).items():
            if key in (CONTENT_FILTERS_KEY, "content_filters"):
                if value is None:
                    continue
                if not isinstance(value, Mapping):
                    logger.warning(
                        f"session_overlay_rejected session_id={session_id} "
                        f"reason=content_filters_not_object"
                    )
                    return failure(
                        CONTENT_FILTERS_KEY, "contentFilters must be an object", value
                    )
                overlay[CONTENT_FILTERS_KEY] = normalize_keys(
                    value, CONTENT_FILTER_FIELDS
                )
            else:
                overlay[key] = plain_value(value)
        overlay[SESSION_TIMESTAMP_KEY] = datetime.now(timezone.utc).isoformat()

        try:
            self.session_store.set(session_id, overlay)
        except Exception:
            logger.exception(f"session_overlay_store_failed session_id={session_id}")
            return failure("system", "Failed to store session preferences")

        logger.info(
            f"session_overlay_stored session_id={session_id} fields={len(overlay) - 1}"
        )
        return ServiceSuccess(
            data={"sessionId": session_id, "stored": True},
            message="Session preferences stored successfully",
        )

    def get_session_preferences(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Overlay for a session, or None when absent or expired"""
        if not session_id:
            return None
        return self.session_store.get(session_id)

    def get_merged_preferences(
        self, db: Session, user_id: str, session_id: Optional[str] = None
    ) -> ServiceResult:
        """
        Persisted preferences with the session overlay applied on top.

        Top-level overlay fields replace stored ones; ``contentFilters`` is
        merged list by list so an overlay that sets one filter keeps the
        other five. The merge result is never written back.
        """
        try:
            base = self.get_or_create_preferences(db, user_id)
            if not base.success:
                return base

            merged = dict(base.data)
            overlay = self.get_session_preferences(session_id) if session_id else None
            if overlay:
                session_filters = overlay.get(CONTENT_FILTERS_KEY) or {}
                for key, value in overlay.items():
                    if key in (SESSION_TIMESTAMP_KEY, CONTENT_FILTERS_KEY):
                        continue
                    merged[key] = value
                merged[CONTENT_FILTERS_KEY] = {
                    **merged[CONTENT_FILTERS_KEY],
                    **session_filters,
                }
                logger.info(
                    f"session_overlay_applied user_id={user_id} session_id={session_id}"
                )
        except Exception:
            return self._system_failure(
                db, "preferences_merge_failed", user_id, "Failed to merge preferences"
            )

        return ServiceSuccess(
            data=merged, message="Preferences retrieved and merged successfully"
        )

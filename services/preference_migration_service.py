"""
Administrative bulk operations over stored preferences.

These run outside the request path and trust their enum-typed inputs, so
they talk to the repository directly instead of going through
``UserPreferencesService`` validation. Live runs are split into batches;
each batch commits on its own and a failing batch is recorded without
stopping the ones after it.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from app.config import settings
from app.exceptions import MigrationError
from domain.enums import DEFAULT_PREFERENCES, AIModel, PoliticalPerspective, WritingTone
from domain.mappers.preference_mapper import plain_value
from domain.models import AppUser, UserPreferences
from domain.schemas.migration_schemas import (
    MigrationOptions,
    MigrationResult,
    MigrationReport,
)
from repositories import PreferencesRepository, UserRepository

logger = logging.getLogger("newsplatform.migration")


def _resolve_options(options: Optional[MigrationOptions]) -> MigrationOptions:
    if options is None:
        return MigrationOptions(batch_size=settings.migration_batch_size)
    return options


def _batches(items: Sequence, batch_size: int) -> Iterator[Tuple[int, Sequence]]:
    """Yield (1-based batch number, slice) pairs"""
    for start in range(0, len(items), batch_size):
        yield start // batch_size + 1, items[start : start + batch_size]


class PreferenceMigrationService:
    """Bulk preference migrations and adoption reporting"""

    @staticmethod
    def _migrate_field(
        db: Session,
        field: str,
        detail_name: str,
        candidates: List[Tuple[str, Any]],
        new_value: Any,
        options: MigrationOptions,
    ) -> MigrationResult:
        """
        Set ``field`` to ``new_value`` for every ``(user_id, current)`` candidate.

        Dry runs only describe the change. Live runs call
        ``bulk_update_preferences`` once per batch.
        """
        if options.dry_run:
            logger.info(
                f"migration_dry_run field={field} affected={len(candidates)}"
            )
            return MigrationResult(
                success=True,
                affected_users=len(candidates),
                details=[
                    {
                        "user_id": user_id,
                        f"current_{detail_name}": plain_value(current),
                        f"new_{detail_name}": plain_value(new_value),
                    }
                    for user_id, current in candidates
                ],
            )

        repo = PreferencesRepository(db)
        errors: List[str] = []
        migrated = 0
        for number, batch in _batches(candidates, options.batch_size):
            updates = [(user_id, {field: new_value}) for user_id, _ in batch]
            try:
                repo.bulk_update_preferences(updates)
                migrated += len(batch)
            except Exception as e:
                db.rollback()
                logger.error(
                    f"migration_batch_failed field={field} batch={number} error={e}"
                )
                errors.append(f"Failed to migrate batch {number}: {e}")

        logger.info(
            f"migration_completed field={field} migrated={migrated} "
            f"failed_batches={len(errors)}"
        )
        return MigrationResult(
            success=not errors, affected_users=migrated, errors=errors
        )

    @staticmethod
    def _lookup_failed(db: Session, error: Exception) -> MigrationResult:
        logger.exception("migration_lookup_failed")
        db.rollback()
        return MigrationResult(
            success=False, affected_users=0, errors=[f"Migration failed: {error}"]
        )

    @staticmethod
    def _migrate_enum_field(
        db: Session,
        field: str,
        from_value: Enum,
        to_value: Enum,
        options: Optional[MigrationOptions],
    ) -> MigrationResult:
        options = _resolve_options(options)
        try:
            rows = PreferencesRepository(db).get_users_by_preference(field, from_value)
            candidates = [(row.user_id, getattr(row, field)) for row in rows]
        except Exception as e:
            return PreferenceMigrationService._lookup_failed(db, e)
        return PreferenceMigrationService._migrate_field(
            db, field, field, candidates, to_value, options
        )

    @staticmethod
    def migrate_perspective(
        db: Session,
        from_perspective: PoliticalPerspective,
        to_perspective: PoliticalPerspective,
        options: Optional[MigrationOptions] = None,
    ) -> MigrationResult:
        """Move every user at ``from_perspective`` to ``to_perspective``"""
        return PreferenceMigrationService._migrate_enum_field(
            db, "perspective", from_perspective, to_perspective, options
        )

    @staticmethod
    def migrate_tone(
        db: Session,
        from_tone: WritingTone,
        to_tone: WritingTone,
        options: Optional[MigrationOptions] = None,
    ) -> MigrationResult:
        return PreferenceMigrationService._migrate_enum_field(
            db, "tone", from_tone, to_tone, options
        )

    @staticmethod
    def migrate_ai_model(
        db: Session,
        from_model: AIModel,
        to_model: AIModel,
        options: Optional[MigrationOptions] = None,
    ) -> MigrationResult:
        return PreferenceMigrationService._migrate_enum_field(
            db, "ai_model", from_model, to_model, options
        )

    @staticmethod
    def migrate_fact_checking(
        db: Session, enabled: bool, options: Optional[MigrationOptions] = None
    ) -> MigrationResult:
        """
        Switch fact checking on or off.

        With ``options.target_users`` only those users are touched, whatever
        their current value. Otherwise every user currently set to the
        opposite value is migrated.
        """
        options = _resolve_options(options)
        try:
            repo = PreferencesRepository(db)
            if options.target_users:
                rows = repo.get_by_user_ids(options.target_users)
            else:
                rows = repo.get_users_by_preference(
                    "fact_checking_enabled", not enabled
                )
            candidates = [(row.user_id, row.fact_checking_enabled) for row in rows]
        except Exception as e:
            return PreferenceMigrationService._lookup_failed(db, e)
        return PreferenceMigrationService._migrate_field(
            db, "fact_checking_enabled", "fact_checking", candidates, enabled, options
        )

    @staticmethod
    def reset_to_defaults(
        db: Session, user_ids: List[str], options: Optional[MigrationOptions] = None
    ) -> MigrationResult:
        """
        Put every preference field back to its default for the given users.

        A dry run previews the defaults without checking that the users exist.
        """
        options = _resolve_options(options)
        defaults = {key: plain_value(value) for key, value in DEFAULT_PREFERENCES.items()}
        user_ids = list(user_ids or [])

        if options.dry_run:
            return MigrationResult(
                success=True,
                affected_users=len(user_ids),
                details=[
                    {"user_id": user_id, "new_preferences": dict(defaults)}
                    for user_id in user_ids
                ],
            )

        repo = PreferencesRepository(db)
        errors: List[str] = []
        reset = 0
        for number, batch in _batches(user_ids, options.batch_size):
            try:
                repo.bulk_update_preferences(
                    [(user_id, dict(DEFAULT_PREFERENCES)) for user_id in batch]
                )
                reset += len(batch)
            except Exception as e:
                db.rollback()
                logger.error(f"reset_batch_failed batch={number} error={e}")
                errors.append(f"Failed to reset batch {number}: {e}")

        logger.info(f"reset_completed reset={reset} failed_batches={len(errors)}")
        return MigrationResult(success=not errors, affected_users=reset, errors=errors)

    @staticmethod
    def find_users_without_preferences(db: Session) -> List[str]:
        """Ids of users with no preference row (users LEFT JOIN preferences)"""
        rows = (
            db.query(AppUser.id)
            .outerjoin(UserPreferences, UserPreferences.user_id == AppUser.id)
            .filter(UserPreferences.id.is_(None))
            .order_by(AppUser.id)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def create_missing_preferences(
        db: Session, options: Optional[MigrationOptions] = None
    ) -> MigrationResult:
        """
        Give every user without preferences a default preference + filter pair.

        Users are created one at a time inside each batch; the first failure
        abandons the rest of that batch only.
        """
        options = _resolve_options(options)
        try:
            missing = PreferenceMigrationService.find_users_without_preferences(db)
        except Exception as e:
            return PreferenceMigrationService._lookup_failed(db, e)

        if options.dry_run:
            return MigrationResult(
                success=True,
                affected_users=len(missing),
                details=[
                    {"user_id": user_id, "action": "create_default_preferences"}
                    for user_id in missing
                ],
            )

        repo = PreferencesRepository(db)
        errors: List[str] = []
        created = 0
        for number, batch in _batches(missing, options.batch_size):
            try:
                for user_id in batch:
                    repo.create_complete(user_id)
                    created += 1
            except Exception as e:
                db.rollback()
                logger.error(f"create_missing_batch_failed batch={number} error={e}")
                errors.append(f"Failed to create preferences for batch {number}: {e}")

        logger.info(
            f"create_missing_completed created={created} failed_batches={len(errors)}"
        )
        return MigrationResult(
            success=not errors, affected_users=created, errors=errors
        )

    @staticmethod
    def _distribution(db: Session, column) -> Dict[str, int]:
        rows = db.query(column, func.count()).group_by(column).all()
        return {plain_value(value): count for value, count in rows}

    @staticmethod
    def _enabled_count(db: Session, column) -> int:
        return (
            db.query(func.count())
            .select_from(UserPreferences)
            .filter(column.is_(True))
            .scalar()
            or 0
        )

    @staticmethod
    def generate_migration_report(db: Session) -> MigrationReport:
        """
        Snapshot of preference adoption and value distributions.

        Raises MigrationError if any query fails; there is no partial report.
        """
        try:
            total_users = UserRepository(db).count()
            with_preferences = PreferencesRepository(db).count()
            report = MigrationReport(
                total_users=total_users,
                users_with_preferences=with_preferences,
                users_without_preferences=total_users - with_preferences,
                perspective_distribution=PreferenceMigrationService._distribution(
                    db, UserPreferences.perspective
                ),
                tone_distribution=PreferenceMigrationService._distribution(
                    db, UserPreferences.tone
                ),
                language_distribution=PreferenceMigrationService._distribution(
                    db, UserPreferences.language
                ),
                ai_model_distribution=PreferenceMigrationService._distribution(
                    db, UserPreferences.ai_model
                ),
                fact_checking_enabled=PreferenceMigrationService._enabled_count(
                    db, UserPreferences.fact_checking_enabled
                ),
                propaganda_detection_enabled=PreferenceMigrationService._enabled_count(
                    db, UserPreferences.propaganda_detection_enabled
                ),
            )
        except Exception as e:
            logger.exception("migration_report_failed")
            raise MigrationError(f"Failed to generate migration report: {e}") from e

        logger.info(
            f"migration_report_generated total_users={report.total_users} "
            f"with_preferences={report.users_with_preferences}"
        )
        return report

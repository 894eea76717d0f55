"""
Preference migration tests.

This suite verifies the batch engine and report:
- Dry runs describe changes and never call the bulk update
- Live runs call the bulk update once per batch (ceil(N/B) calls)
- A failing batch is recorded and does not stop later batches
- Lookup failures produce a single "Migration failed" error
- Fact checking, reset and create-missing specifics
- Report aggregation and error wrapping
"""

import math

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from unittest.mock import patch

from app.exceptions import MigrationError
from domain.enums import AIModel, PoliticalPerspective, WritingTone
from domain.models import UserPreferences
from domain.schemas.migration_schemas import MigrationOptions
from repositories import PreferencesRepository, UserRepository
from services import PreferenceMigrationService
from test_fixtures import make_user, make_user_with_preferences


def _seed(db: Session, count: int, **fields):
    return [make_user_with_preferences(db, **fields) for _ in range(count)]


# =============================================================================
# FIELD MIGRATIONS
# =============================================================================


def test_dry_run_never_calls_bulk_update(db_session: Session):
    users = _seed(db_session, 3, perspective="liberal")

    with patch.object(PreferencesRepository, "bulk_update_preferences") as bulk:
        result = PreferenceMigrationService.migrate_perspective(
            db_session,
            PoliticalPerspective.LIBERAL,
            PoliticalPerspective.PROGRESSIVE,
            MigrationOptions(dry_run=True),
        )

    bulk.assert_not_called()
    assert result.success
    assert result.affected_users == 3
    assert {d["user_id"] for d in result.details} == {u.id for u in users}
    assert result.details[0]["current_perspective"] == "liberal"
    assert result.details[0]["new_perspective"] == "progressive"


@pytest.mark.parametrize("count, batch_size", [(5, 2), (4, 2), (1, 100), (7, 3)])
def test_live_run_calls_bulk_update_once_per_batch(
    db_session: Session, count, batch_size
):
    _seed(db_session, count, tone="casual")

    with patch.object(PreferencesRepository, "bulk_update_preferences") as bulk:
        result = PreferenceMigrationService.migrate_tone(
            db_session,
            WritingTone.CASUAL,
            WritingTone.FORMAL,
            MigrationOptions(batch_size=batch_size),
        )

    assert bulk.call_count == math.ceil(count / batch_size)
    assert result.success
    assert result.affected_users == count


def test_live_run_updates_store(db_session: Session):
    _seed(db_session, 3, ai_model="google")
    _seed(db_session, 1)

    result = PreferenceMigrationService.migrate_ai_model(
        db_session, AIModel.GOOGLE, AIModel.ANTHROPIC, MigrationOptions(batch_size=2)
    )

    assert result.success
    assert result.affected_users == 3
    assert result.errors == []
    counts = {
        model.value: db_session.query(UserPreferences)
        .filter(UserPreferences.ai_model == model)
        .count()
        for model in (AIModel.GOOGLE, AIModel.ANTHROPIC, AIModel.OPENAI)
    }
    assert counts == {"google": 0, "anthropic": 3, "openai": 1}


def test_failed_batch_is_isolated(db_session: Session):
    """
    Verifies:
    - Batch 2 of 3 raising does not stop batch 3
    - affected_users counts batches 1 and 3 only
    - Exactly one error string, naming batch 2
    """
    _seed(db_session, 5, perspective="conservative")

    with patch.object(
        PreferencesRepository,
        "bulk_update_preferences",
        side_effect=[[], RuntimeError("deadlock detected"), []],
    ) as bulk:
        result = PreferenceMigrationService.migrate_perspective(
            db_session,
            PoliticalPerspective.CONSERVATIVE,
            PoliticalPerspective.NEUTRAL,
            MigrationOptions(batch_size=2),
        )

    assert bulk.call_count == 3
    assert result.success is False
    assert result.affected_users == 3
    assert result.errors == ["Failed to migrate batch 2: deadlock detected"]


def test_lookup_failure_reports_migration_failed(db_session: Session):
    with patch.object(
        PreferencesRepository,
        "get_users_by_preference",
        side_effect=RuntimeError("db down"),
    ):
        result = PreferenceMigrationService.migrate_perspective(
            db_session, PoliticalPerspective.LIBERAL, PoliticalPerspective.NEUTRAL
        )

    assert result.success is False
    assert result.affected_users == 0
    assert result.errors == ["Migration failed: db down"]


# =============================================================================
# FACT CHECKING
# =============================================================================


def test_fact_checking_targets_opposite_value(db_session: Session):
    off = _seed(db_session, 2, fact_checking_enabled=False)
    _seed(db_session, 3)

    result = PreferenceMigrationService.migrate_fact_checking(
        db_session, True, MigrationOptions(dry_run=True)
    )

    assert result.affected_users == 2
    assert {d["user_id"] for d in result.details} == {u.id for u in off}
    assert all(d["current_fact_checking"] is False for d in result.details)
    assert all(d["new_fact_checking"] is True for d in result.details)


def test_fact_checking_explicit_targets(db_session: Session):
    users = _seed(db_session, 3)

    with patch.object(PreferencesRepository, "get_users_by_preference") as by_field:
        result = PreferenceMigrationService.migrate_fact_checking(
            db_session, False, MigrationOptions(target_users=[users[0].id, users[2].id])
        )

    by_field.assert_not_called()
    assert result.success
    assert result.affected_users == 2
    repo = PreferencesRepository(db_session)
    assert repo.get_by_user_id(users[0].id).fact_checking_enabled is False
    assert repo.get_by_user_id(users[1].id).fact_checking_enabled is True


# =============================================================================
# RESET / CREATE MISSING
# =============================================================================


def test_reset_dry_run_does_not_need_existing_users(db_session: Session):
    result = PreferenceMigrationService.reset_to_defaults(
        db_session, ["ghost-1", "ghost-2"], MigrationOptions(dry_run=True)
    )

    assert result.affected_users == 2
    assert result.details[0] == {
        "user_id": "ghost-1",
        "new_preferences": {
            "perspective": "neutral",
            "tone": "professional",
            "language": "en",
            "ai_model": "openai",
            "fact_checking_enabled": True,
            "propaganda_detection_enabled": True,
            "propaganda_sensitivity": "medium",
        },
    }


def test_reset_restores_defaults(db_session: Session):
    user = make_user_with_preferences(
        db_session, tone="casual", language="fr", propaganda_sensitivity="high"
    )

    result = PreferenceMigrationService.reset_to_defaults(db_session, [user.id])

    assert result.success
    row = PreferencesRepository(db_session).get_by_user_id(user.id)
    assert row.tone == WritingTone.PROFESSIONAL
    assert row.language.value == "en"
    assert row.propaganda_sensitivity.value == "medium"


def test_reset_batch_error_message(db_session: Session):
    with patch.object(
        PreferencesRepository, "bulk_update_preferences", side_effect=RuntimeError("x")
    ):
        result = PreferenceMigrationService.reset_to_defaults(
            db_session, ["a", "b", "c"], MigrationOptions(batch_size=2)
        )

    assert result.affected_users == 0
    assert result.errors == ["Failed to reset batch 1: x", "Failed to reset batch 2: x"]


def test_create_missing_preferences(db_session: Session):
    """
    Verifies:
    - Only users without preferences are listed in a dry run
    - A live run creates the full preference + filter pair for each
    """
    make_user_with_preferences(db_session)
    missing = [make_user(db_session) for _ in range(3)]

    preview = PreferenceMigrationService.create_missing_preferences(
        db_session, MigrationOptions(dry_run=True)
    )
    assert preview.affected_users == 3
    assert {d["user_id"] for d in preview.details} == {u.id for u in missing}
    assert all(d["action"] == "create_default_preferences" for d in preview.details)

    result = PreferenceMigrationService.create_missing_preferences(
        db_session, MigrationOptions(batch_size=2)
    )
    assert result.success
    assert result.affected_users == 3
    repo = PreferencesRepository(db_session)
    assert all(repo.get_content_filters(u.id) is not None for u in missing)
    assert PreferenceMigrationService.find_users_without_preferences(db_session) == []


def test_create_missing_failure_stops_only_its_batch(db_session: Session):
    for _ in range(4):
        make_user(db_session)
    real_create = PreferencesRepository.create_complete
    calls = {"n": 0}

    def flaky_create(self, user_id, *args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("disk full")
        return real_create(self, user_id, *args, **kwargs)

    with patch.object(PreferencesRepository, "create_complete", flaky_create):
        result = PreferenceMigrationService.create_missing_preferences(
            db_session, MigrationOptions(batch_size=2)
        )

    # first user of batch 1 fails, second user of batch 1 is skipped
    assert result.affected_users == 2
    assert result.errors == ["Failed to create preferences for batch 1: disk full"]
    assert len(PreferenceMigrationService.find_users_without_preferences(db_session)) == 2


# =============================================================================
# REPORT
# =============================================================================


def test_generate_migration_report(db_session: Session):
    _seed(db_session, 2, perspective="liberal", language="es")
    _seed(db_session, 1, tone="casual", fact_checking_enabled=False)
    make_user(db_session)

    report = PreferenceMigrationService.generate_migration_report(db_session)

    assert report.total_users == 4
    assert report.users_with_preferences == 3
    assert report.users_without_preferences == 1
    assert report.perspective_distribution == {"liberal": 2, "neutral": 1}
    assert report.tone_distribution == {"professional": 2, "casual": 1}
    assert report.language_distribution == {"es": 2, "en": 1}
    assert report.ai_model_distribution == {"openai": 3}
    assert report.fact_checking_enabled == 2
    assert report.propaganda_detection_enabled == 3


def test_report_failure_is_wrapped(db_session: Session):
    cause = RuntimeError("relation does not exist")

    with patch.object(UserRepository, "count", side_effect=cause):
        with pytest.raises(MigrationError) as exc_info:
            PreferenceMigrationService.generate_migration_report(db_session)

    assert str(exc_info.value) == (
        "Failed to generate migration report: relation does not exist"
    )
    assert exc_info.value.__cause__ is cause


# =============================================================================
# COMMAND LINE
# =============================================================================


def test_cli_dry_run_perspective(db_session: Session):
    from scripts.migrate_preferences import build_parser, run

    _seed(db_session, 2, perspective="progressive")
    args = build_parser().parse_args(
        ["perspective", "progressive", "liberal", "--dry-run", "--batch-size", "1"]
    )

    output = run(args, db_session)

    assert output["success"] is True
    assert output["affected_users"] == 2
    assert output["details"][0]["new_perspective"] == "liberal"


def test_cli_rejects_unknown_enum_value():
    from scripts.migrate_preferences import build_parser

    with pytest.raises(SystemExit):
        build_parser().parse_args(["tone", "casual", "shouty"])


def test_cli_fact_checking_off_for_listed_users(db_session: Session):
    from scripts.migrate_preferences import build_parser, run

    users = _seed(db_session, 2)
    args = build_parser().parse_args(["fact-checking", "off", "--users", users[0].id])

    output = run(args, db_session)

    assert output["affected_users"] == 1
    repo = PreferencesRepository(db_session)
    assert repo.get_by_user_id(users[0].id).fact_checking_enabled is False
    assert repo.get_by_user_id(users[1].id).fact_checking_enabled is True


def test_create_missing_flush_failure_does_not_poison_later_batches(
    db_session: Session,
):
    """
    Verifies:
    - A database error raised during the flush of batch 1 is rolled back
    - Batch 2 still creates its preferences on the same session
    """
    missing = sorted(make_user(db_session).id for _ in range(4))

    def fail_first_user(mapper, connection, target):
        if target.user_id == missing[0]:
            raise OperationalError("INSERT INTO user_preferences", {}, Exception("locked"))

    event.listen(UserPreferences, "before_insert", fail_first_user)
    try:
        result = PreferenceMigrationService.create_missing_preferences(
            db_session, MigrationOptions(batch_size=2)
        )
    finally:
        event.remove(UserPreferences, "before_insert", fail_first_user)

    assert result.affected_users == 2
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Failed to create preferences for batch 1:")
    assert PreferenceMigrationService.find_users_without_preferences(db_session) == (
        missing[:2]
    )

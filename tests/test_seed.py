"""
Seeder tests.

Verifies:
- The demo reader gets exactly one preference pair, however often the seed runs
- Test readers carry their perspective and tone
- Test readers are skipped in production
- Users created elsewhere only get their missing preferences filled in
"""

from sqlalchemy.orm import Session
from unittest.mock import patch

from app.config import Environment, settings
from domain.enums import PoliticalPerspective, WritingTone
from domain.models import AppUser, ContentFilters, UserPreferences
from repositories import PreferencesRepository, UserRepository
from scripts.seed import DEMO_USER, run_seeds, seed_reader


def test_seed_twice_leaves_one_pair(db_session: Session):
    first = run_seeds(db_session, include_test_users=False)
    second = run_seeds(db_session, include_test_users=False)

    assert first == {"users_created": 1, "preferences_created": 1}
    assert second == {"users_created": 0, "preferences_created": 0}
    assert db_session.query(AppUser).count() == 1
    assert db_session.query(UserPreferences).count() == 1
    assert db_session.query(ContentFilters).count() == 1


def test_seed_test_users(db_session: Session):
    totals = run_seeds(db_session)

    assert totals == {"users_created": 4, "preferences_created": 4}
    user = UserRepository(db_session).get_by_email("liberal@test.com")
    prefs = PreferencesRepository(db_session).get_by_user_id(user.id)
    assert prefs.perspective == PoliticalPerspective.LIBERAL
    assert prefs.tone == WritingTone.CASUAL


def test_seed_skips_test_users_in_production(db_session: Session):
    with patch.object(settings, "environment", Environment.PRODUCTION):
        totals = run_seeds(db_session)

    assert totals == {"users_created": 1, "preferences_created": 1}
    assert UserRepository(db_session).get_by_email("liberal@test.com") is None


def test_seed_fills_in_missing_preferences(db_session: Session):
    user = UserRepository(db_session).create_user(
        email=DEMO_USER["email"], username=DEMO_USER["username"]
    )

    outcome = seed_reader(db_session, DEMO_USER["email"], DEMO_USER["username"])

    assert outcome == {"user_created": False, "preferences_created": True}
    assert PreferencesRepository(db_session).exists(user.id)

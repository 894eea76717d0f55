#!/usr/bin/env python3
"""Idempotent seeder for demo readers and their preferences.

Usage examples:
  python scripts/seed.py
  python scripts/seed.py --skip-test-users

Each reader is looked up by email first; existing users and existing
preference pairs are left alone, so the script can be run repeatedly.
Test readers are never seeded in production.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List

from sqlalchemy.orm import Session

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from domain.models import SessionLocal
from domain.schemas.preference_schemas import PreferencesUpdate
from repositories import PreferencesRepository, UserRepository

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
logger = logging.getLogger("newsplatform.seed")

DEMO_USER = {"email": "demo@example.com", "username": "demo_user"}

TEST_USERS: List[Dict] = [
    {
        "email": "conservative@test.com",
        "username": "conservative_user",
        "preferences": {"perspective": "conservative", "tone": "formal"},
    },
    {
        "email": "liberal@test.com",
        "username": "liberal_user",
        "preferences": {"perspective": "liberal", "tone": "casual"},
    },
    {
        "email": "progressive@test.com",
        "username": "progressive_user",
        "preferences": {"perspective": "progressive", "tone": "analytical"},
    },
]


def seed_reader(db: Session, email: str, username: str, preferences=None) -> Dict[str, bool]:
    """Ensure one user and its preference pair exist; report what was created"""
    users = UserRepository(db)
    prefs = PreferencesRepository(db)

    user = users.get_by_email(email)
    user_created = user is None
    if user_created:
        user = users.create_user(email=email, username=username)

    prefs_created = not prefs.exists(user.id)
    if prefs_created:
        prefs.create_complete(user.id, PreferencesUpdate(**(preferences or {})))

    logger.info(
        f"seed_reader email={email} user_created={user_created} "
        f"preferences_created={prefs_created}"
    )
    return {"user_created": user_created, "preferences_created": prefs_created}


def run_seeds(db: Session, include_test_users: bool = True) -> Dict[str, int]:
    """Seed the demo reader and, outside production, the test readers"""
    readers = [dict(DEMO_USER)]
    if include_test_users and settings.is_production():
        logger.info("Skipping test users seed in production environment")
    elif include_test_users:
        readers.extend(TEST_USERS)

    totals = {"users_created": 0, "preferences_created": 0}
    for reader in readers:
        outcome = seed_reader(
            db, reader["email"], reader["username"], reader.get("preferences")
        )
        totals["users_created"] += int(outcome["user_created"])
        totals["preferences_created"] += int(outcome["preferences_created"])
    return totals


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed demo readers and preferences")
    parser.add_argument(
        "--skip-test-users", action="store_true", help="Only seed the demo reader"
    )
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        try:
            totals = run_seeds(db, include_test_users=not args.skip_test_users)
        except Exception:
            logger.exception("Seeding failed")
            return 1

    logger.info(
        f"seed_completed users_created={totals['users_created']} "
        f"preferences_created={totals['preferences_created']}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

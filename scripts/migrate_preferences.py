#!/usr/bin/env python3
"""
Command line front end for the preference migration utilities.

Examples:
    python scripts/migrate_preferences.py report
    python scripts/migrate_preferences.py perspective liberal neutral --dry-run
    python scripts/migrate_preferences.py fact-checking on --users u1 u2
    python scripts/migrate_preferences.py create-missing --batch-size 50
"""

import argparse
import json
import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.exceptions import MigrationError
from domain.enums import AIModel, PoliticalPerspective, WritingTone
from domain.models import SessionLocal
from domain.schemas.migration_schemas import MigrationOptions
from services import PreferenceMigrationService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
logger = logging.getLogger("newsplatform.migrate_preferences")

ENUM_COMMANDS = {
    "perspective": (PoliticalPerspective, PreferenceMigrationService.migrate_perspective),
    "tone": (WritingTone, PreferenceMigrationService.migrate_tone),
    "ai-model": (AIModel, PreferenceMigrationService.migrate_ai_model),
}


def _add_batch_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would change without writing"
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.migration_batch_size,
        help="Users per batch (default: %(default)s)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bulk preference migrations")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, (enum_cls, _) in ENUM_COMMANDS.items():
        choices = [member.value for member in enum_cls]
        cmd = sub.add_parser(name, help=f"Move users from one {name} to another")
        cmd.add_argument("from_value", choices=choices)
        cmd.add_argument("to_value", choices=choices)
        _add_batch_options(cmd)

    fact = sub.add_parser("fact-checking", help="Turn fact checking on or off")
    fact.add_argument("state", choices=["on", "off"])
    fact.add_argument("--users", nargs="+", help="Only touch these user ids")
    _add_batch_options(fact)

    reset = sub.add_parser("reset", help="Reset users to default preferences")
    reset.add_argument("user_ids", nargs="+")
    _add_batch_options(reset)

    missing = sub.add_parser(
        "create-missing", help="Create default preferences for users without any"
    )
    _add_batch_options(missing)

    sub.add_parser("report", help="Print preference adoption and distributions")
    return parser


def run(args: argparse.Namespace, db) -> dict:
    if args.command == "report":
        return PreferenceMigrationService.generate_migration_report(db).model_dump()

    options = MigrationOptions(
        dry_run=args.dry_run,
        batch_size=args.batch_size,
        target_users=getattr(args, "users", None),
    )

    if args.command in ENUM_COMMANDS:
        enum_cls, migrate = ENUM_COMMANDS[args.command]
        result = migrate(db, enum_cls(args.from_value), enum_cls(args.to_value), options)
    elif args.command == "fact-checking":
        result = PreferenceMigrationService.migrate_fact_checking(
            db, args.state == "on", options
        )
    elif args.command == "reset":
        result = PreferenceMigrationService.reset_to_defaults(db, args.user_ids, options)
    else:
        result = PreferenceMigrationService.create_missing_preferences(db, options)
    return result.model_dump()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    with SessionLocal() as db:
        try:
            output = run(args, db)
        except MigrationError as e:
            logger.error(f"migration_command_failed command={args.command} error={e}")
            return 1

    print(json.dumps(output, indent=2, default=str))
    if args.command != "report" and not output["success"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command-line maintenance entry point.

Usage:
    python -m eduhub init-db
    python -m eduhub reconcile-roles
    python -m eduhub stats
"""

import argparse
import json
import logging
from typing import List, Optional

from eduhub import __version__
from eduhub.core import database
from eduhub.core.logging_config import setup_logging
from eduhub.utils.role_transition import RoleTransitionEngine
from eduhub.utils.stats_manager import StatsManager

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> int:
    database.init_db()
    print(f"Database ready: {database.engine.url.render_as_string(hide_password=True)}")
    return 0


def cmd_reconcile_roles(args: argparse.Namespace) -> int:
    """Promote every STUDENT whose enrollments have all passed."""
    db = database.SessionLocal()
    try:
        promoted = RoleTransitionEngine(db).reconcile_all()
    finally:
        db.close()
    for user_id in promoted:
        print(f"promoted {user_id}")
    print(f"{len(promoted)} account(s) promoted")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    db = database.SessionLocal()
    try:
        stats = StatsManager(db).get_stats()
    finally:
        db.close()
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eduhub",
        description="EduHub enrollment core maintenance commands.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL for this run (e.g. DEBUG).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create missing tables.")
    init_parser.set_defaults(func=cmd_init_db)

    reconcile_parser = subparsers.add_parser(
        "reconcile-roles",
        help="Backfill OLD_STUDENT promotions from stored enrollments.",
    )
    reconcile_parser.set_defaults(func=cmd_reconcile_roles)

    stats_parser = subparsers.add_parser("stats", help="Print admin statistics as JSON.")
    stats_parser.set_defaults(func=cmd_stats)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        setup_logging(args.log_level.upper())
    else:
        setup_logging()
    logger.debug("Running command %s", args.command)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

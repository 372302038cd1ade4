"""
Active — Command-line entry point for the development seed.

    python main.py seed [--base-only] [--habits N] [--days N]
    python main.py erase
    python main.py count
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from active.config import settings
from active.core.seeder import DevelopmentSeeder, Seeder
from active.data.db import SQLiteStore

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="active", description="Seed or erase the local Active database",
    )
    parser.add_argument(
        "--db", default=None,
        help=f"SQLite database path (default: {settings.DATABASE_PATH})",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    seed = commands.add_parser("seed", help="Insert dummy entities")
    seed.add_argument(
        "--base-only", action="store_true",
        help="Only run the base steps (the user)",
    )
    seed.add_argument(
        "--habits", type=_positive_int, default=None, help="Number of habits",
    )
    seed.add_argument(
        "--days", type=_positive_int, default=None, help="Days per sequence",
    )

    commands.add_parser("erase", help="Remove previously seeded entities")
    commands.add_parser("count", help="Print the number of entities per type")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    store = SQLiteStore(db_path=args.db)

    if args.command == "seed":
        if args.base_only:
            seeder: Seeder = Seeder(store)
        else:
            seeder = DevelopmentSeeder(
                store, habit_count=args.habits, sequence_length=args.days,
            )
        report = asyncio.run(seeder.seed())
        print(report.summary())
        return 0 if report.ok else 1

    seeder = Seeder(store)
    if args.command == "erase":
        seeder.erase()
        return 0

    counts = seeder.count_entities()
    for name, count in counts.items():
        print(f"{name}: {count}")
    return 0

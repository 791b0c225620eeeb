#!/usr/bin/env python3
"""
Import projects from a CSV export into the joinery database.

    python scripts/import_projects.py projects.csv
    python scripts/import_projects.py projects.csv --db-url sqlite+aiosqlite:///./joinery.db --create-tables
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Allow running from a checkout without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


async def run(csv_path: Path, create_tables: bool) -> int:
    from joinery.db.base import init_db
    from joinery.db.session import AsyncSessionLocal
    from joinery.services.project_import import import_csv

    if create_tables:
        await init_db()

    with csv_path.open(newline="", encoding="utf-8-sig") as fh:
        async with AsyncSessionLocal() as db:
            report = await import_csv(db, fh)

    print(f"Created: {report.created}  Updated: {report.updated}  Rejected: {len(report.errors)}")
    for err in report.errors:
        print(f"  {err}")
    return 1 if report.errors else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Import joinery projects from CSV")
    parser.add_argument("csv_file", type=Path, help="CSV with a header row of project column names")
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (overrides DATABASE_URL / POSTGRES_* settings)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before importing",
    )
    args = parser.parse_args()

    if args.db_url:
        # must be set before joinery.core.config is imported
        os.environ["DATABASE_URL"] = args.db_url

    if not args.csv_file.exists():
        parser.error(f"{args.csv_file} not found")

    return asyncio.run(run(args.csv_file, args.create_tables))


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Recalculate every student's cached points total.

Usage:
    python scripts/recalculate_points.py [--dry-run]

Reads DATABASE_PATH / DATABASE_URL (and ADMIN_SECRET) from the environment or
the .env file. Run this once after changing point values so existing cached
totals match the new values.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from writing_tracker.config import settings
from writing_tracker.db.database import close_db, connect
from writing_tracker.db.tracking_store import TrackingStore
from writing_tracker.models.points import RecalculationReport
from writing_tracker.services.reconciler import recalculate_all_student_points


def print_report(report: RecalculationReport, dry_run: bool) -> None:
    changed = [r for r in report.results if r.error is None and r.old_points != r.new_points]
    failed = [r for r in report.results if r.error is not None]

    print()
    print(f"{'student_id':<40} {'old':>6} {'new':>6}")
    print("-" * 54)
    for r in changed:
        print(f"{r.student_id:<40} {r.old_points:>6} {r.new_points:>6}")
    for r in failed:
        print(f"{r.student_id:<40} {'ERROR':>6}  {r.error}")
    print()
    verb = "would change" if dry_run else "changed"
    print(f"{report.success} successful, {report.errors} errors, {len(changed)} {verb}")


async def run(dry_run: bool) -> RecalculationReport:
    try:
        async with connect() as db:
            return await recalculate_all_student_points(TrackingStore(db), dry_run=dry_run)
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(
        description="Recalculate cached student points from tracking data"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report differences without writing corrected totals",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)-5s [%(name)s] %(message)s",
    )

    report = asyncio.run(run(args.dry_run))
    print_report(report, args.dry_run)
    sys.exit(1 if report.errors else 0)


if __name__ == "__main__":
    main()

"""
reconciler.py - Recompute cached point totals from tracking facts

Provides:
- recalculate_and_update_points(store, student_id) - correct one student's cached total
- get_student_points(store, student_id) - authoritative points for display
- recalculate_all_student_points(store) - correct every stored record and report
"""

import logging

from writing_tracker.models.points import RecalculationReport, RecalculationResult
from writing_tracker.models.tracking import StudentTrackingRecord
from writing_tracker.services.points import calculate_points_from_tracking
from writing_tracker.services.student_locks import student_lock

logger = logging.getLogger(__name__)


async def recalculate_and_update_points(store, student_id: str, dry_run: bool = False) -> int:
    """Return the calculated total, writing it back only when the cache differs.

    Store errors propagate to the caller. Holds the student's lock so a
    recorder running at the same time cannot have its fact overwritten.
    """
    async with student_lock(student_id):
        record = await store.fetch_one(student_id)
        if record is None:
            return 0

        calculated = calculate_points_from_tracking(record)
        if record.points.total != calculated:
            logger.info(
                "Correcting points for student %s: %s -> %d",
                student_id, record.points.total, calculated,
            )
            if not dry_run:
                record.points.total = calculated
                await store.upsert(student_id, record)
    return calculated


async def get_student_points(store, student_id: str) -> int:
    """Points to show on profiles and leaderboards; never raises."""
    try:
        return await recalculate_and_update_points(store, student_id)
    except Exception as exc:
        logger.error("Error reconciling points for student %s: %s", student_id, exc)

    try:
        record = await store.fetch_one(student_id)
    except Exception as exc:
        logger.error("Error fetching tracking data for student %s: %s", student_id, exc)
        return 0
    if record is None:
        return 0
    if record.points.total is not None:
        return record.points.total
    return calculate_points_from_tracking(record)


async def recalculate_all_student_points(store, dry_run: bool = False) -> RecalculationReport:
    """Reconcile every stored record. One student's failure does not stop the rest."""
    report = RecalculationReport()

    try:
        rows = await store.fetch_all()
    except Exception as exc:
        logger.error("Error fetching student tracking data: %s", exc)
        return report

    if not rows:
        logger.info("No student tracking records found")
        return report

    logger.info("Recalculating points for %d students...", len(rows))

    for row in rows:
        record = row.record if row.record is not None else StudentTrackingRecord()
        old_points = record.cached_total
        try:
            new_points = await recalculate_and_update_points(store, row.student_id, dry_run=dry_run)
        except Exception as exc:
            report.errors += 1
            report.results.append(RecalculationResult(
                student_id=row.student_id,
                old_points=old_points,
                new_points=old_points,
                error=str(exc) or type(exc).__name__,
            ))
            logger.error("Error recalculating points for student %s: %s", row.student_id, exc)
            continue

        report.success += 1
        report.results.append(RecalculationResult(
            student_id=row.student_id,
            old_points=old_points,
            new_points=new_points,
        ))
        if old_points != new_points:
            logger.info("Student %s: %d -> %d points", row.student_id, old_points, new_points)

    logger.info("Recalculation complete: %d successful, %d errors", report.success, report.errors)
    return report
